"""
EduGen - Question Bank Store
Oturuma ait soru bankası, değişiklik günlüğü ve tek slotlu işlem koruyucusu.

Banka her değişiklikte yeni bir tuple ile değiştirilir (copy-on-write);
okuyucular ellerindeki anlık görüntünün sonradan değişmediğinden emin olabilir.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import InvalidQuestionError, OperationInProgressError, QuestionNotFoundError
from .models import Question

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MutationRecord:
    """Uygulanan bir değişiklik"""
    kind: str  # ingest, edit, rewrite, delete, clear
    question_id: Optional[str] = None
    detail: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class QuestionBank:
    """
    Bellek içi soru bankası.

    Sorular id ile adreslenir; id'ler ingestion sırasında atanır ve
    düzenleme / yeniden yazma sırasında korunur.
    """

    def __init__(self, questions: Iterable[Question] = ()):
        self._questions: Tuple[Question, ...] = tuple(questions)
        self._history: List[MutationRecord] = []

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    @property
    def questions(self) -> Tuple[Question, ...]:
        """Current immutable snapshot."""
        return self._questions

    @property
    def history(self) -> Tuple[MutationRecord, ...]:
        return tuple(self._history)

    def _record(self, kind: str, question_id: Optional[str] = None, detail: Optional[str] = None):
        self._history.append(MutationRecord(kind=kind, question_id=question_id, detail=detail))

    def get(self, question_id: str) -> Optional[Question]:
        return next((q for q in self._questions if q.id == question_id), None)

    def require(self, question_id: str) -> Question:
        question = self.get(question_id)
        if question is None:
            raise QuestionNotFoundError(question_id)
        return question

    def replace(self, questions: Iterable[Question]) -> None:
        """Tüm bankayı değiştirir (yükleme her zaman birleştirme değil, değiştirme yapar)."""
        self._questions = tuple(questions)
        self._record("ingest", detail=f"{len(self._questions)} preguntas")
        logger.info(f"Banka değiştirildi: {len(self._questions)} soru")

    def update(self, question: Question, kind: str = "edit") -> bool:
        """Aynı id'li kaydı verilen kayıtla değiştirir; id yoksa False."""
        for index, current in enumerate(self._questions):
            if current.id == question.id:
                self._questions = self._questions[:index] + (question,) + self._questions[index + 1:]
                self._record(kind, question.id)
                return True
        return False

    def edit(self, question_id: str, pregunta: str, respuesta: str) -> Optional[Question]:
        """
        Soru ve cevap metnini değiştirir; id, tema ve dificultad korunur.

        Returns:
            Güncellenen soru, id bulunamazsa None (hata değil)

        Raises:
            InvalidQuestionError: Soru mevcut ve yeni metin boşsa
        """
        current = self.get(question_id)
        if current is None:
            logger.info(f"Düzenlenecek soru bulunamadı: {question_id}")
            return None

        pregunta = (pregunta or "").strip()
        if not pregunta:
            raise InvalidQuestionError("La pregunta no puede quedar vacía.")

        updated = current.with_text(pregunta, (respuesta or "").strip())
        self.update(updated, kind="edit")
        return updated

    def delete(self, question_id: str) -> bool:
        """Soruyu siler; zaten yoksa sessizce False döner."""
        remaining = tuple(q for q in self._questions if q.id != question_id)
        if len(remaining) == len(self._questions):
            return False
        self._questions = remaining
        self._record("delete", question_id)
        return True

    def delete_many(self, question_ids: Iterable[str]) -> int:
        ids = set(question_ids)
        remaining = tuple(q for q in self._questions if q.id not in ids)
        removed = len(self._questions) - len(remaining)
        if removed:
            self._questions = remaining
            for question_id in sorted(ids):
                self._record("delete", question_id)
        return removed

    def clear(self) -> None:
        """Bankayı boşaltır."""
        self._questions = ()
        self._record("clear")


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Pending:
    key: str


class InFlightGuard:
    """
    Tek slotlu işlem koruyucusu: Idle | Pending(key).

    Bir işlem beklerken gelen ikinci istek kuyruğa alınmaz, reddedilir.
    """

    def __init__(self, operation: str):
        self.operation = operation
        self.state = Idle()

    @property
    def busy(self) -> bool:
        return isinstance(self.state, Pending)

    @property
    def pending_key(self) -> Optional[str]:
        return self.state.key if isinstance(self.state, Pending) else None

    def acquire(self, key: str) -> None:
        if isinstance(self.state, Pending):
            raise OperationInProgressError(self.operation, self.state.key)
        self.state = Pending(key)

    def release(self) -> None:
        self.state = Idle()

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        self.acquire(key)
        try:
            yield
        finally:
            self.release()
