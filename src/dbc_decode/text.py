"""Whitespace and delimiter tokenizing helpers."""

from __future__ import annotations

from typing import Optional


def trim(text: Optional[str]) -> str:
    """Strip surrounding whitespace, treating None as an empty string."""
    if not text:
        return ""
    return text.strip()


def trim_and_split(text: Optional[str], delimiter: Optional[str] = None) -> list[str]:
    """Split text into trimmed, non-empty tokens.

    With no delimiter the text is split on runs of whitespace. Empty or
    whitespace-only input yields an empty list.
    """
    if not text or not text.strip():
        return []

    if delimiter is None:
        return text.split()

    return [part.strip() for part in text.split(delimiter) if part.strip()]
