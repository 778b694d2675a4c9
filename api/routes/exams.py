"""
EduGen - Exam Routes
Sınav yapılandırması ve PDF oluşturma endpoint'leri
"""
import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from api.limiter import GENERATE_LIMIT, limiter
from api.models import ExamConfigOut, ExamConfigUpdate, ExamGenerateRequest
from src.exam.question_selector import ManualSelection, RandomSelection, SelectionMode
from src.exam.session import ExamSession, get_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Exams"])


@router.get("/config", response_model=ExamConfigOut)
async def get_config(session: ExamSession = Depends(get_session)):
    """Aktif sınav yapılandırması"""
    return ExamConfigOut.from_config(session.config)


@router.put("/config", response_model=ExamConfigOut)
async def update_config(
    body: ExamConfigUpdate,
    session: ExamSession = Depends(get_session)
):
    """Yapılandırmayı kısmen günceller (gönderilmeyen alanlar aynen kalır)."""
    config = session.update_config(**body.model_dump(exclude_unset=True))
    return ExamConfigOut.from_config(config)


def _selection_mode(body: ExamGenerateRequest) -> Optional[SelectionMode]:
    if body.question_ids is not None:
        return ManualSelection.of(body.question_ids)
    if body.question_count is not None:
        return RandomSelection(body.question_count)
    return None


@router.post("/exams/generate")
@limiter.limit(GENERATE_LIMIT)
async def generate_exam(
    request: Request,
    body: ExamGenerateRequest,
    session: ExamSession = Depends(get_session)
):
    """
    Sınav + cevap anahtarı PDF'i oluşturur.

    `question_ids` verilirse manuel seçim, yoksa rastgele seçim yapılır
    (konu filtresi boş sonuç verirse tüm bankadan).

    Returns:
        PDF dosyası
    """
    rendered = session.export(_selection_mode(body))
    logger.info(
        f"Sınav indirildi: {rendered.filename}, {rendered.page_count} sayfa",
        extra={"operation": "export", "exam_filename": rendered.filename}
    )

    return Response(
        content=rendered.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(rendered.filename)}",
            "X-Exam-Pages": str(rendered.page_count),
            "X-Exam-Questions": str(rendered.question_count)
        }
    )
