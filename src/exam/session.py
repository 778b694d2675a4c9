"""
EduGen - Exam Session Service
Yükleme → filtre → seçim → PDF akışını tek oturumda birleştirir.
API katmanı tarafından kullanılır.
"""
import asyncio
import logging
from dataclasses import fields
from datetime import date
from functools import lru_cache
from typing import Callable, List, Optional

from config.settings import get_settings
from .bank import InFlightGuard, QuestionBank
from .errors import InsufficientPoolError, UnsupportedFileError
from .models import ExamConfig, GeneratedExam, Question, RewriteMode
from .normalizer import IngestionDiagnostics, normalize
from .pdf_generator import ExamPDFGenerator, RenderedExam, format_exam_date
from .question_selector import QuestionSelector, RandomSelection, SelectionMode
from .rewriter import QuestionRewriter
from .search import filter_questions
from .tabular import parse_tabular

logger = logging.getLogger(__name__)
settings = get_settings()


def default_config() -> ExamConfig:
    return ExamConfig(
        asignatura=settings.exam_default_subject,
        curso=settings.exam_default_course,
        cantidad_preguntas=settings.exam_default_question_count
    )


class ExamSession:
    """
    Tek kullanıcılı oturum: banka, yapılandırma ve dış servisler.

    Yeniden yazma ve yükleme için ayrı tek slotlu koruyucular vardır;
    bekleyen bir işlem varken ikinci istek OperationInProgressError alır.
    """

    def __init__(
        self,
        bank: Optional[QuestionBank] = None,
        config: Optional[ExamConfig] = None,
        selector: Optional[QuestionSelector] = None,
        generator: Optional[ExamPDFGenerator] = None,
        rewriter: Optional[QuestionRewriter] = None,
        today: Callable[[], date] = date.today
    ):
        self.bank = bank if bank is not None else QuestionBank()
        self.config = config or default_config()
        self.selector = selector or QuestionSelector()
        self._generator = generator
        self.rewriter = rewriter or QuestionRewriter()
        self.today = today
        self.ingestion_guard = InFlightGuard("ingest")
        self.rewrite_guard = InFlightGuard("rewrite")

    @property
    def generator(self) -> ExamPDFGenerator:
        if self._generator is None:
            self._generator = ExamPDFGenerator()
        return self._generator

    # ================== BANK ==================

    async def ingest(self, data: bytes, filename: str) -> IngestionDiagnostics:
        """
        Dosyayı çözümler ve bankayı değiştirir.

        Hata durumunda mevcut banka olduğu gibi kalır.

        Returns:
            IngestionDiagnostics
        """
        if len(data) > settings.bank_max_upload_bytes:
            raise UnsupportedFileError(
                f"El archivo supera el tamaño máximo ({settings.bank_max_upload_bytes} bytes)."
            )

        with self.ingestion_guard.hold(filename):
            document = await asyncio.to_thread(parse_tabular, data, filename)
            result = normalize(document.rows)

        result.diagnostics.separator = document.separator
        result.diagnostics.source_format = document.source_format
        self.bank.replace(result.questions)

        logger.info(
            f"Dosya yüklendi: {filename} ({document.source_format}), "
            f"{result.diagnostics.accepted_rows} soru",
            extra={"operation": "ingest", "upload_name": filename}
        )
        return result.diagnostics

    def filtered(self, term: Optional[str] = None) -> List[Question]:
        """Aktif konu filtresine (ya da verilen terime) göre banka."""
        return filter_questions(self.bank.questions, self.config.tema if term is None else term)

    def edit(self, question_id: str, pregunta: str, respuesta: str) -> Optional[Question]:
        return self.bank.edit(question_id, pregunta, respuesta)

    def delete(self, question_id: str) -> bool:
        return self.bank.delete(question_id)

    def clear(self) -> None:
        self.bank.clear()

    async def rewrite(self, question_id: str, mode: RewriteMode) -> Question:
        """
        Sorunun metnini yapay zeka ile yeniden yazar; yalnızca pregunta değişir.

        Raises:
            QuestionNotFoundError: id yoksa
            OperationInProgressError: Başka bir yeniden yazma bekliyorsa
            RewriteServiceError: Servis başarısızsa (banka değişmez)
        """
        with self.rewrite_guard.hold(question_id):
            original = self.bank.require(question_id)
            new_text = await self.rewriter.rewrite(original.pregunta, mode)

            # Bekleme sırasında soru silinmiş olabilir
            current = self.bank.get(question_id)
            if current is None:
                logger.info(
                    f"Yeniden yazılan soru artık bankada yok: {question_id}",
                    extra={"operation": "rewrite", "question_id": question_id}
                )
                return original.with_text(new_text)

            updated = current.with_text(new_text)
            self.bank.update(updated, kind="rewrite")
            return updated

    # ================== CONFIG ==================

    def update_config(self, **changes) -> ExamConfig:
        """Bilinen alanları günceller; None değerler yok sayılır."""
        known = {f.name for f in fields(ExamConfig)}
        for name, value in changes.items():
            if name in known and value is not None:
                setattr(self.config, name, value)
        return self.config

    # ================== EXAM ==================

    def build_exam(self, mode: Optional[SelectionMode] = None) -> GeneratedExam:
        """
        Seçim yapar ve tek kullanımlık sınav paketini oluşturur.

        Args:
            mode: None ise yapılandırmadaki soru sayısıyla rastgele seçim
        """
        if not len(self.bank):
            raise InsufficientPoolError()

        mode = mode or RandomSelection(self.config.cantidad_preguntas)
        selected = self.selector.select_for_exam(self.bank.questions, self.config.tema, mode)

        return GeneratedExam(
            config=self.config.snapshot(),
            questions=tuple(selected),
            date=format_exam_date(self.today())
        )

    def export(self, mode: Optional[SelectionMode] = None) -> RenderedExam:
        """Sınavı oluşturur ve PDF'e dönüştürür."""
        exam = self.build_exam(mode)
        return self.generator.render(exam)


@lru_cache()
def get_session() -> ExamSession:
    """Process-wide single session"""
    return ExamSession()
