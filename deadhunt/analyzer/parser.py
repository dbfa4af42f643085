"""Tree-sitter parser for JavaScript/TypeScript sources."""
import logging
from pathlib import Path
from typing import Dict, Optional
from tree_sitter import Language, Parser, Tree
import tree_sitter_typescript as tstypescript

logger = logging.getLogger(__name__)


class LanguageParser:
    """Grammar-specific parser using the tree-sitter v0.22+ API.

    The TSX grammar is a superset of plain JavaScript and JSX, so every
    extension except `.ts` goes through it. Plain `.ts` keeps the
    TypeScript grammar so angle-bracket casts (`<T>value`) still parse; a
    `.ts` file that fails there is retried with TSX, which covers JSX
    written in plain `.ts` files.
    """

    SUPPORTED_LANGUAGES = {
        '.js': 'tsx',
        '.jsx': 'tsx',
        '.ts': 'typescript',
        '.tsx': 'tsx',
    }

    # Grammar to retry with when a file does not parse cleanly
    FALLBACK_LANGUAGES = {
        'typescript': 'tsx',
    }

    _instances: Dict[str, 'LanguageParser'] = {}

    def __init__(self, language: str):
        """Initialize parser for given grammar.

        Args:
            language: One of 'typescript', 'tsx'

        Raises:
            ValueError: If language is not supported
        """
        self.language = language
        self.parser = self._create_parser()

    def _create_parser(self) -> Parser:
        if self.language == 'typescript':
            lang = Language(tstypescript.language_typescript())
        elif self.language == 'tsx':
            lang = Language(tstypescript.language_tsx())
        else:
            raise ValueError(f"Unsupported language: {self.language}")

        return Parser(lang)

    def parse_source(self, source_code: bytes) -> Optional[Tree]:
        """Parse raw source bytes.

        tree-sitter never raises on bad input; it recovers with ERROR and
        MISSING nodes instead. A tree carrying any of those is treated as a
        failed parse so the caller skips the file.

        Args:
            source_code: Source code bytes

        Returns:
            Parsed Tree, or None if the source does not parse cleanly
        """
        tree = self.parser.parse(source_code)
        if tree.root_node.has_error:
            return None
        return tree

    def parse_file(self, file_path: str | Path) -> Optional[Tree]:
        """Read and parse a file.

        Args:
            file_path: Path to source file to parse

        Returns:
            Parsed Tree object, or None if reading or parsing failed
        """
        try:
            with open(file_path, 'rb') as f:
                source_code = f.read()
        except OSError as e:
            logger.debug("Skipping unreadable file %s: %s", file_path, e)
            return None

        tree = self.parse_source(source_code)
        fallback = self.FALLBACK_LANGUAGES.get(self.language)
        if tree is None and fallback:
            logger.debug("Retrying %s with the %s grammar", file_path, fallback)
            tree = self.get(fallback).parse_source(source_code)
        if tree is None:
            logger.debug("Skipping unparseable file %s", file_path)
        return tree

    @classmethod
    def for_file(cls, file_path: str | Path) -> Optional['LanguageParser']:
        """Return the shared parser for a file's extension.

        Args:
            file_path: Path to determine the grammar from

        Returns:
            LanguageParser instance, or None if extension not supported
        """
        extension = Path(file_path).suffix.lower()
        language = cls.SUPPORTED_LANGUAGES.get(extension)
        if not language:
            return None

        return cls.get(language)

    @classmethod
    def get(cls, language: str) -> 'LanguageParser':
        """Return the shared parser for a grammar, creating it on first use."""
        if language not in cls._instances:
            cls._instances[language] = cls(language)
        return cls._instances[language]


def parse_path(file_path: str | Path) -> Optional[Tree]:
    """Parse a file with the grammar matching its extension."""
    parser = LanguageParser.for_file(file_path)
    if parser is None:
        logger.debug("Skipping unsupported file %s", file_path)
        return None
    return parser.parse_file(file_path)
