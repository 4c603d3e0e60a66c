"""Canonical ``DD.MM`` form for day.month tokens."""

from __future__ import annotations


def normalize_date_token(token: str) -> str:
    """Zero-pad a ``D.M`` token to ``DD.MM``.

    Tokens that do not split into exactly two non-empty parts on ``.`` are
    returned unchanged, e.g. a bare day number ``"16"``. Day and month
    ranges are not validated.
    """
    if not token:
        return token

    parts = [part.strip() for part in token.split(".")]
    if len(parts) != 2:
        return token

    day, month = parts
    if not day or not month:
        return token

    return f"{day.rjust(2, '0')}.{month.rjust(2, '0')}"
