"""Logging setup and terminal-safe text for Dead Hunt.

Diagnostics go through the standard `logging` module, rendered by rich on
stderr. Icons in user-facing text are swapped for ASCII on terminals that
cannot encode them (legacy Windows consoles, redirected cp1252 output).
"""
import locale
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler


# Unicode to ASCII icon mapping for non-UTF-8 terminals
ICON_MAP = {
    '\U0001f480': '(x)',   # skull
    '\u2728': '*',         # sparkles
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding.

    Returns:
        str: Terminal encoding ('utf-8', 'cp1252', 'ascii', etc.)
    """
    if getattr(sys.stdout, 'encoding', None):
        return sys.stdout.encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except Exception:
        return 'ascii'


def is_utf8_capable() -> bool:
    return detect_terminal_encoding().replace('_', '-') in ('utf-8', 'utf8')


def sanitize_for_terminal(text: str) -> str:
    """Replace Unicode icons with ASCII equivalents if the terminal needs it."""
    if is_utf8_capable():
        return text

    for unicode_char, ascii_replacement in ICON_MAP.items():
        text = text.replace(unicode_char, ascii_replacement)
    return text


def setup_logging(verbose: bool = False) -> None:
    """Route `deadhunt.*` loggers to a rich handler on stderr.

    Args:
        verbose: Log DEBUG messages (skipped files) instead of WARNING and up
    """
    logger = logging.getLogger("deadhunt")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    # Re-running the CLI in one process (tests) must not stack handlers
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
