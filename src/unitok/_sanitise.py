"""
Utilities for rendering vocabulary pieces as displayable strings.
"""

import unicodedata

from .types import Piece


def _escape_ctrl_chars(s: str) -> str:
    """Replace all Unicode control characters with their escape sequences."""
    cleaned = []
    for c in s:
        # control category codes vary: Cc, Cf, Cn etc.
        # so check via first character
        if unicodedata.category(c)[0] != "C":
            cleaned.append(c)
        else:
            cleaned.append(f"\\u{ord(c):04x}")
    return "".join(cleaned)


def render_piece(piece: Piece) -> str:
    """
    Make a vocabulary piece safe to print on one line.

    Control characters are escaped so that pieces such as a raw newline do not
    break the one-entry-per-line layout of a ``.vocab`` listing.
    """
    return _escape_ctrl_chars(piece)
