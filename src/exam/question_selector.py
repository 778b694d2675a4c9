"""
EduGen - Question Selector
Sınav için soru seçimi: rastgele (Fisher-Yates) veya manuel (id kümesi).
"""
import logging
import random
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Sequence, Union

from .errors import EmptySelectionError, InsufficientPoolError
from .models import Question
from .search import filter_questions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RandomSelection:
    """Havuzdan `count` kadar rastgele soru"""
    count: int

    def __post_init__(self):
        if self.count < 0:
            raise ValueError(f"count must be >= 0, got {self.count}")


@dataclass(frozen=True)
class ManualSelection:
    """Öğretmenin elle işaretlediği soru id'leri"""
    ids: FrozenSet[str]

    @classmethod
    def of(cls, ids: Iterable[str]) -> "ManualSelection":
        return cls(ids=frozenset(ids))


SelectionMode = Union[RandomSelection, ManualSelection]


class QuestionSelector:
    """Deterministik olarak test edilebilir soru seçici."""

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: Rastgele sayı üreteci (testlerde seed'li verilir)
        """
        self.rng = rng or random.Random()

    def _random_select(self, pool: Sequence[Question], count: int) -> List[Question]:
        """
        Tekrarsız düzgün örnekleme.

        Tüm havuz karıştırılır (random.Random.shuffle, Fisher-Yates) ve ilk
        `count` eleman alınır; çıktı sırası da rastgeledir.
        """
        if count == 0:
            return []
        if not pool:
            raise InsufficientPoolError()

        actual_count = min(count, len(pool))
        if actual_count < count:
            logger.warning(
                f"İstenen soru sayısı ({count}) mevcut sayıdan ({len(pool)}) fazla. "
                f"{actual_count} soru seçilecek."
            )

        shuffled = list(pool)
        self.rng.shuffle(shuffled)
        return shuffled[:actual_count]

    def _manual_select(self, pool: Sequence[Question], ids: FrozenSet[str]) -> List[Question]:
        selected = [q for q in pool if q.id in ids]
        if not selected:
            raise EmptySelectionError()

        unknown = len(ids) - len(selected)
        if unknown > 0:
            logger.warning(f"{unknown} seçili id havuzda bulunamadı, atlandı")
        return selected

    def select(self, pool: Sequence[Question], mode: SelectionMode) -> List[Question]:
        """
        Verilen havuzdan soru seçer.

        Args:
            pool: Aday sorular
            mode: RandomSelection veya ManualSelection

        Returns:
            Sınav sırasıyla seçilen sorular

        Raises:
            InsufficientPoolError: Havuz boş ve sıfırdan farklı sayı istendi
            EmptySelectionError: Manuel id kümesi hiçbir soruyla eşleşmedi
        """
        if isinstance(mode, RandomSelection):
            return self._random_select(pool, mode.count)
        if isinstance(mode, ManualSelection):
            return self._manual_select(pool, mode.ids)
        raise TypeError(f"Unknown selection mode: {mode!r}")

    def select_for_exam(
        self,
        bank: Sequence[Question],
        term: Optional[str],
        mode: SelectionMode
    ) -> List[Question]:
        """
        Filtre + seçim.

        Rastgele modda filtre hiç soru bırakmazsa tüm bankadan seçilir.
        Manuel modda id'ler tüm bankaya karşı çözülür.
        """
        if isinstance(mode, ManualSelection):
            return self.select(bank, mode)

        pool = filter_questions(bank, term)
        if not pool and bank:
            logger.info(f"'{term}' filtresi için soru yok, tüm bankadan seçiliyor")
            pool = list(bank)

        return self.select(pool, mode)
