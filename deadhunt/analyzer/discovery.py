"""Source file discovery for the two analysis passes."""
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Pattern, Tuple


@lru_cache(maxsize=None)
def _compile_glob(pattern: str) -> Pattern[str]:
    """Translate a `**`-style glob into a regex over POSIX paths.

    `*` and `?` stay inside one path segment; `**/` spans zero or more
    directories and a trailing `**` matches everything below.
    """
    parts = []
    i = 0
    while i < len(pattern):
        if pattern.startswith('**/', i):
            parts.append('(?:.*/)?')
            i += 3
        elif pattern.startswith('**', i):
            parts.append('.*')
            i += 2
        elif pattern[i] == '*':
            parts.append('[^/]*')
            i += 1
        elif pattern[i] == '?':
            parts.append('[^/]')
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile(''.join(parts))


def glob_match(rel_path: str, pattern: str) -> bool:
    """Match a root-relative POSIX path against a `**`-style glob.

    A leading `**/` also matches at the root, so `**/dist/**` excludes
    both `dist/a.js` and `packages/ui/dist/a.js`, while `src/*.js` only
    covers files directly inside `src/`.
    """
    return _compile_glob(pattern).fullmatch(rel_path) is not None


def is_hidden(rel_path: str) -> bool:
    """True if any segment of the path is a dotfile or dot-directory."""
    return any(part.startswith('.') for part in rel_path.split('/'))


@dataclass(frozen=True)
class FileFilter:
    """Which files a pass looks at: recognized extensions minus ignore globs.

    The export pass and the usage pass each get their own filter; by default
    declaration files (`*.d.ts`) are only scanned for usages.
    """
    extensions: Tuple[str, ...]
    ignore: Tuple[str, ...] = field(default=())

    def accepts(self, rel_path: str) -> bool:
        # Dot-directories (.next, .storybook) hold build output and tooling
        if is_hidden(rel_path) or not rel_path.endswith(self.extensions):
            return False
        return not any(glob_match(rel_path, pattern) for pattern in self.ignore)

    def with_ignore(self, *patterns: str) -> 'FileFilter':
        """Copy of this filter with extra ignore globs."""
        return FileFilter(self.extensions, self.ignore + tuple(patterns))


def discover_files(root: str | Path, file_filter: FileFilter) -> List[str]:
    """List files under root accepted by the filter.

    Args:
        root: Directory to scan
        file_filter: Extension and ignore policy for this pass

    Returns:
        File paths (root-joined strings), sorted by their relative path so
        both passes see files in the same deterministic order
    """
    root = Path(root)
    candidates = set()
    for extension in file_filter.extensions:
        candidates.update(root.glob(f"**/*{extension}"))

    accepted = []
    for file_path in candidates:
        rel_path = file_path.relative_to(root).as_posix()
        if file_path.is_file() and file_filter.accepts(rel_path):
            accepted.append((rel_path, file_path))

    return [str(file_path) for _, file_path in sorted(accepted)]
