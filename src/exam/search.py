"""
EduGen - Question Search
Bellek içi alt dize filtresi (pregunta + tema).
"""
from typing import List, Optional, Sequence

from .models import Question


def matches(question: Question, term: str) -> bool:
    """Case-insensitive substring match on pregunta and, when present, tema."""
    needle = term.casefold()
    if needle in question.pregunta.casefold():
        return True
    return bool(question.tema) and needle in question.tema.casefold()


def filter_questions(bank: Sequence[Question], term: Optional[str]) -> List[Question]:
    """
    Bankayı arama terimine göre filtreler; orijinal sıra korunur.

    Args:
        bank: Soru listesi
        term: Arama terimi, olduğu gibi kullanılır (None veya "" ise tüm banka döner)

    Returns:
        Eşleşen sorular
    """
    if not term:
        return list(bank)
    return [q for q in bank if matches(q, term)]
