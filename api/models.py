"""
EduGen - API Models
Request/Response models for FastAPI endpoints
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime, timezone

from src.exam.models import ExamConfig, Question, RewriteMode


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ================== REQUEST MODELS ==================

class QuestionEditRequest(BaseModel):
    """Request for editing a question's text"""
    pregunta: str = Field(..., max_length=5_000, description="New question text")
    respuesta: str = Field("", max_length=5_000, description="New answer text")


class RewriteRequest(BaseModel):
    """Request for AI-assisted rewriting"""
    mode: RewriteMode = Field(RewriteMode.FIX, description="fix: ortografía/gramática, paraphrase: versión alternativa")


class ExamConfigUpdate(BaseModel):
    """Partial update of the exam configuration"""
    asignatura: Optional[str] = Field(None, max_length=200)
    curso: Optional[str] = Field(None, max_length=100)
    tema: Optional[str] = Field(None, max_length=200, description="Filtro por tema/palabra clave")
    cantidad_preguntas: Optional[int] = Field(None, ge=1, le=50)
    nombre_profesor: Optional[str] = Field(None, max_length=200)
    nombre_institucion: Optional[str] = Field(None, max_length=200)

    model_config = {
        "json_schema_extra": {
            "example": {
                "asignatura": "Geografía",
                "curso": "2º ESO",
                "tema": "Europa",
                "cantidad_preguntas": 10,
                "nombre_profesor": "Ana Pérez",
                "nombre_institucion": "Colegio San José"
            }
        }
    }


class ExamGenerateRequest(BaseModel):
    """Request for exam generation"""
    question_count: Optional[int] = Field(
        None, ge=1, le=50,
        description="Random mode count (None = configured cantidad_preguntas)"
    )
    question_ids: Optional[List[str]] = Field(
        None,
        description="Manual mode: exact question ids, kept in bank order"
    )


# ================== RESPONSE MODELS ==================

class QuestionOut(BaseModel):
    """A question bank entry"""
    id: str
    pregunta: str
    respuesta: str
    tema: Optional[str] = None
    dificultad: Optional[str] = None

    @classmethod
    def from_question(cls, question: Question) -> "QuestionOut":
        return cls(
            id=question.id,
            pregunta=question.pregunta,
            respuesta=question.respuesta,
            tema=question.tema,
            dificultad=question.dificultad
        )


class QuestionListResponse(BaseModel):
    """Filtered bank listing"""
    items: List[QuestionOut] = Field(default_factory=list)
    total: int = 0
    bank_size: int = 0
    term: str = ""


class UploadResponse(BaseModel):
    """Result of a bank upload"""
    filename: str
    loaded: int
    dropped_empty_rows: int = 0
    detected_headers: List[str] = Field(default_factory=list)
    column_mapping: Dict[str, str] = Field(default_factory=dict)
    positional_fallback: bool = False
    separator: Optional[str] = None
    source_format: Optional[str] = None
    message: str = ""


class DeleteResponse(BaseModel):
    id: Optional[str] = None
    deleted: bool
    bank_size: int


class MutationOut(BaseModel):
    kind: str
    question_id: Optional[str] = None
    detail: Optional[str] = None
    timestamp: datetime


class ExamConfigOut(BaseModel):
    asignatura: str
    curso: str
    tema: str
    cantidad_preguntas: int
    nombre_profesor: str
    nombre_institucion: str

    @classmethod
    def from_config(cls, config: ExamConfig) -> "ExamConfigOut":
        return cls(
            asignatura=config.asignatura,
            curso=config.curso,
            tema=config.tema,
            cantidad_preguntas=config.cantidad_preguntas,
            nombre_profesor=config.nombre_profesor,
            nombre_institucion=config.nombre_institucion
        )


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = "healthy"
    version: str = "1.0.0"
    timestamp: datetime = Field(default_factory=_utcnow)
    services: dict = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response"""
    error: str
    detail: Optional[str] = None
    status_code: int = 500
