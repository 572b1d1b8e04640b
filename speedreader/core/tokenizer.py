"""Split source text into the words shown during playback.

RULES:
- Split on any run of whitespace
- Keep only alphanumeric characters of each chunk
- A chunk of pure punctuation ("--") becomes an empty token and is kept,
  so the token count always equals the whitespace-delimited chunk count
- All-whitespace input yields an empty tuple
"""

from __future__ import annotations


def tokenize_text(text: str) -> tuple[str, ...]:
    """Return the display tokens of ``text`` in reading order."""
    return tuple(
        "".join(c for c in chunk if c.isalnum())
        for chunk in text.split()
    )
