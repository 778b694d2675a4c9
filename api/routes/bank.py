"""
EduGen - Question Bank Routes
Soru bankası yükleme, listeleme, düzenleme ve silme endpoint'leri
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from api.limiter import REWRITE_LIMIT, limiter
from api.models import (
    DeleteResponse,
    MutationOut,
    QuestionEditRequest,
    QuestionListResponse,
    QuestionOut,
    RewriteRequest,
    UploadResponse
)
from config.settings import get_settings
from src.exam.errors import QuestionNotFoundError
from src.exam.session import ExamSession, get_session

settings = get_settings()

router = APIRouter(prefix="/bank", tags=["Question Bank"])


@router.post("/upload", response_model=UploadResponse)
async def upload_bank(
    file: UploadFile = File(...),
    session: ExamSession = Depends(get_session)
):
    """
    CSV veya Excel dosyasından soru bankası yükler.

    Mevcut banka tamamen değiştirilir. Gerekli sütunlar: pregunta, respuesta;
    opsiyonel: tema, dificultad.
    """
    # Sınırın bir bayt fazlası okunur; büyük dosya belleğe tamamen alınmaz
    data = await file.read(settings.bank_max_upload_bytes + 1)
    filename = file.filename or "banco.csv"
    diagnostics = await session.ingest(data, filename)

    return UploadResponse(
        filename=filename,
        loaded=diagnostics.accepted_rows,
        dropped_empty_rows=diagnostics.dropped_empty_rows,
        detected_headers=diagnostics.detected_headers,
        column_mapping=diagnostics.column_mapping,
        positional_fallback=diagnostics.positional_fallback,
        separator=diagnostics.separator,
        source_format=diagnostics.source_format,
        message=f"Se han cargado {diagnostics.accepted_rows} preguntas correctamente."
    )


@router.get("", response_model=QuestionListResponse)
async def list_questions(
    term: Optional[str] = None,
    session: ExamSession = Depends(get_session)
):
    """
    Bankayı listeler.

    `term` verilmezse yapılandırmadaki konu filtresi uygulanır.
    """
    items = session.filtered(term)
    return QuestionListResponse(
        items=[QuestionOut.from_question(q) for q in items],
        total=len(items),
        bank_size=len(session.bank),
        term=session.config.tema if term is None else term
    )


@router.delete("", response_model=DeleteResponse)
async def clear_bank(session: ExamSession = Depends(get_session)):
    """Bankayı boşaltır."""
    session.clear()
    return DeleteResponse(deleted=True, bank_size=0)


@router.get("/history", response_model=List[MutationOut])
async def bank_history(session: ExamSession = Depends(get_session)):
    """Oturumdaki değişiklik günlüğü"""
    return [
        MutationOut(
            kind=record.kind,
            question_id=record.question_id,
            detail=record.detail,
            timestamp=record.timestamp
        )
        for record in session.bank.history
    ]


@router.put("/{question_id}", response_model=QuestionOut)
async def edit_question(
    question_id: str,
    body: QuestionEditRequest,
    session: ExamSession = Depends(get_session)
):
    """Soru ve cevap metnini değiştirir; id ve tema korunur."""
    updated = session.edit(question_id, body.pregunta, body.respuesta)
    if updated is None:
        raise QuestionNotFoundError(question_id)
    return QuestionOut.from_question(updated)


@router.delete("/{question_id}", response_model=DeleteResponse)
async def delete_question(
    question_id: str,
    session: ExamSession = Depends(get_session)
):
    """Soruyu siler (idempotent)."""
    deleted = session.delete(question_id)
    return DeleteResponse(id=question_id, deleted=deleted, bank_size=len(session.bank))


@router.post("/{question_id}/rewrite", response_model=QuestionOut)
@limiter.limit(REWRITE_LIMIT)
async def rewrite_question(
    request: Request,
    question_id: str,
    body: RewriteRequest,
    session: ExamSession = Depends(get_session)
):
    """
    Soru metnini yapay zeka ile düzeltir veya yeniden ifade eder.

    Aynı anda yalnızca bir yeniden yazma çalışabilir (409).
    """
    updated = await session.rewrite(question_id, body.mode)
    return QuestionOut.from_question(updated)
