from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class NormalizedAnswer:
    """Trimmed, lower-cased answer text with its word and character views."""

    text: str
    words: tuple[str, ...]
    chars: str

    def __bool__(self) -> bool:
        return bool(self.text)


def normalize(text: str | NormalizedAnswer | None) -> NormalizedAnswer:
    """Canonicalize an answer before comparison. Never raises."""
    if isinstance(text, NormalizedAnswer):
        text = text.text
    if text is None:
        text = ""
    cleaned = str(text).strip().lower()
    words = tuple(cleaned.split())
    return NormalizedAnswer(text=cleaned, words=words, chars="".join(words))
