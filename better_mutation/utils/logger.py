"""Terminal-safe output and debug tracing.

Detects whether the terminal can render Unicode and swaps the icons used in
lint reports for ASCII otherwise. Debug traces are namespaced and only
written when BETTER_MUTATION_DEBUG is set.
"""
import locale
import os
import sys
from typing import Callable


# Unicode to ASCII icon mapping for non-UTF-8 terminals
ICON_MAP = {
    '✓': '[OK]',
    '✗': '[FAIL]',
    '⚠': '[WARN]',
    '→': '->',
    '•': '*',
    '…': '...',
    '│': '|',
    '─': '-',
}

DEBUG_ENV = 'BETTER_MUTATION_DEBUG'


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding ('utf-8', 'cp1252', 'ascii', ...)."""
    if hasattr(sys.stdout, 'encoding') and sys.stdout.encoding:
        return sys.stdout.encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except (LookupError, ValueError):
        return 'ascii'


def is_utf8_capable() -> bool:
    return detect_terminal_encoding().replace('-', '_') in {'utf_8', 'utf8'}


def sanitize_for_terminal(text: str) -> str:
    """Replace Unicode icons with ASCII equivalents if the terminal needs it."""
    if is_utf8_capable():
        return text

    for unicode_char, ascii_replacement in ICON_MAP.items():
        text = text.replace(unicode_char, ascii_replacement)
    return text


def debug_enabled() -> bool:
    return os.getenv(DEBUG_ENV, '').lower() in {'1', 'true', 'yes', 'on'}


def debug(namespace: str) -> Callable[..., None]:
    """Create a trace function for ``namespace``.

    The environment is checked on every call so tests and the CLI can switch
    tracing on after import.
    """
    prefix = f"better-mutation:{namespace}"

    def trace(message: str, *args) -> None:
        if not debug_enabled():
            return
        text = message % args if args else message
        print(sanitize_for_terminal(f"{prefix} {text}"), file=sys.stderr)

    return trace
