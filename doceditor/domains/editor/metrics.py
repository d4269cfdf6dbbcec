from typing import Optional

from doceditor.domains.editor.entities import DocumentMetrics


def count_words(text: str) -> int:
    """Количество непустых последовательностей между пробельными символами"""
    return len(text.split())


def compute_metrics(plain_text: Optional[str]) -> DocumentMetrics:
    if plain_text is None:
        return DocumentMetrics(word_count=0, character_count=0)
    return DocumentMetrics(word_count=count_words(plain_text), character_count=len(plain_text))
