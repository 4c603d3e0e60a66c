"""Text normalization helpers for chat message import."""

from __future__ import annotations

import re
import unicodedata

_LINE_SEPARATOR_PATTERN = re.compile(r"[\u2028\u2029]")
_NARROW_SPACE_PATTERN = re.compile(r"[\u00a0\u2009\u2006\u2007\u202f]")
_INVISIBLE_PATTERN = re.compile(r"[\u200b-\u200d\ufeff]")
_DASH_PATTERN = re.compile(r"[\u2013\u2014]")
# Leading list markers: whitespace, quote ">", "*", bullets, dashes,
# check marks (with their emoji variation selector), digits, ")" and ".".
_LINE_JUNK_PATTERN = re.compile(
    r"^[\s>*\u2022\u00b7\-\u2013\u2014\u2705\u2611\u2714\ufe0f0-9).]+"
)


def normalize_text(text: str) -> str:
    """Canonicalize Unicode noise typical for messenger input.

    Applies NFKC, drops carriage returns, turns Unicode line/paragraph
    separators into newlines, unifies exotic spaces, removes zero-width
    characters and BOM, and maps the fullwidth comma and long dashes to
    their ASCII forms.
    """
    if not text:
        return text

    normalized = unicodedata.normalize("NFKC", text)
    normalized = normalized.replace("\r", "")
    normalized = _LINE_SEPARATOR_PATTERN.sub("\n", normalized)
    normalized = _NARROW_SPACE_PATTERN.sub(" ", normalized)
    normalized = _INVISIBLE_PATTERN.sub("", normalized)
    normalized = normalized.replace("\uff0c", ",")
    normalized = _DASH_PATTERN.sub("-", normalized)
    return normalized.strip()


def sanitize_line(line: str) -> str:
    """Strip list markers like "1)", "2.", "•", "- " or "✅" from line start."""
    return _LINE_JUNK_PATTERN.sub("", line.strip(), count=1).strip()
