"""
EduGen - Exam Data Models
Question bank records, exam configuration and the one-shot exam bundle.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple


class RewriteMode(str, Enum):
    """AI rewrite modes."""
    FIX = "fix"                # spelling / grammar / punctuation only
    PARAPHRASE = "paraphrase"  # same meaning and difficulty, new wording


@dataclass(frozen=True)
class Question:
    """Question bank record. `id` is assigned at ingestion and never recomputed."""
    id: str
    pregunta: str
    respuesta: str
    tema: Optional[str] = None
    dificultad: Optional[str] = None

    def with_text(self, pregunta: str, respuesta: Optional[str] = None) -> "Question":
        """Return a copy with new text, keeping id, tema and dificultad."""
        if respuesta is None:
            return replace(self, pregunta=pregunta)
        return replace(self, pregunta=pregunta, respuesta=respuesta)


@dataclass
class ExamConfig:
    """Session-owned exam metadata and topic filter."""
    asignatura: str = ""
    curso: str = ""
    tema: str = ""
    cantidad_preguntas: int = 5
    nombre_profesor: str = ""
    nombre_institucion: str = ""

    def snapshot(self) -> "ExamConfig":
        return replace(self)


@dataclass(frozen=True)
class GeneratedExam:
    """Ephemeral bundle consumed once by the renderer."""
    config: ExamConfig
    questions: Tuple[Question, ...] = field(default_factory=tuple)
    date: str = ""
