"""
Rendering of tokens for the human-readable .vocab file.
"""

import unicodedata


def render_token(token: str) -> str:
    """Escape Unicode control characters (category C*) so a token fits on one line."""
    return "".join(
        f"\\u{ord(c):04x}" if unicodedata.category(c)[0] == "C" else c for c in token
    )
