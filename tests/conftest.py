"""
EduGen - Pytest Configuration and Fixtures
Shared fixtures for all test modules
"""
import io
import random
from datetime import date
from typing import List
from unittest.mock import AsyncMock, MagicMock

import pytest
from openpyxl import Workbook

from src.exam.bank import QuestionBank
from src.exam.models import ExamConfig, Question
from src.exam.pdf_generator import ExamPDFGenerator
from src.exam.question_selector import QuestionSelector
from src.exam.rewriter import QuestionRewriter
from src.exam.session import ExamSession


FIXED_DATE = date(2026, 10, 18)


# ================== Sample Data ==================

@pytest.fixture
def sample_csv() -> bytes:
    """Comma separated bank with a topic column."""
    return (
        "pregunta,respuesta,tema\n"
        "¿Cuál es la capital de Francia?,París,Geografía\n"
        "¿Cuánto es 2+2?,4,Aritmética\n"
        "¿Qué río pasa por Sevilla?,Guadalquivir,Geografía\n"
        "Resuelve x + 3 = 5,x = 2,Álgebra\n"
    ).encode("utf-8")


@pytest.fixture
def semicolon_csv() -> bytes:
    """Semicolon separated bank with a BOM and CRLF line endings."""
    return (
        "\ufeffpregunta;respuesta;tema\r\n"
        "Nombra dos colores primarios;rojo, azul;Arte\r\n"
        "\r\n"
        "¿Quién escribió el Quijote?;Cervantes;Literatura\r\n"
    ).encode("utf-8")


@pytest.fixture
def sample_xlsx() -> bytes:
    """First-sheet workbook with a numeric answer and a blank row."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["Pregunta", "Respuesta", "Tema"])
    sheet.append(["¿Cuánto es 3x3?", 9, "Aritmética"])
    sheet.append([None, None, None])
    sheet.append(["Define fotosíntesis", "Proceso de las plantas", None])
    extra = workbook.create_sheet("Ignorada")
    extra.append(["pregunta", "respuesta"])
    extra.append(["No debe leerse", "x"])

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_questions():
    """Factory: `count` questions with predictable ids."""
    def _make(count: int, tema: str = "General") -> List[Question]:
        return [
            Question(
                id=f"t-{i}",
                pregunta=f"Pregunta número {i}",
                respuesta=f"Respuesta {i}",
                tema=tema
            )
            for i in range(1, count + 1)
        ]
    return _make


@pytest.fixture
def questions() -> List[Question]:
    return [
        Question(id="a", pregunta="¿Capital de Francia?", respuesta="París", tema="Geografía"),
        Question(id="b", pregunta="¿2+2?", respuesta="4", tema="Aritmética"),
        Question(id="c", pregunta="Ecuación de primer grado", respuesta="x = 2", tema=None),
        Question(id="d", pregunta="¿Río de Sevilla?", respuesta="Guadalquivir", tema="geografía física"),
    ]


@pytest.fixture
def bank(questions) -> QuestionBank:
    return QuestionBank(questions)


@pytest.fixture
def exam_config() -> ExamConfig:
    return ExamConfig(
        asignatura="Geografía",
        curso="2º ESO",
        tema="",
        cantidad_preguntas=3,
        nombre_profesor="Ana Pérez",
        nombre_institucion="Colegio San José"
    )


# ================== Mock Collaborators ==================

@pytest.fixture
def mock_rewriter():
    """Rewrite collaborator that always succeeds."""
    rewriter = MagicMock(spec=QuestionRewriter)
    rewriter.rewrite = AsyncMock(return_value="Texto mejorado")
    return rewriter


@pytest.fixture
def pdf_generator(tmp_path) -> ExamPDFGenerator:
    return ExamPDFGenerator(output_dir=str(tmp_path))


@pytest.fixture
def exam_session(bank, exam_config, mock_rewriter, pdf_generator) -> ExamSession:
    """Session with a seeded selector and a fixed date."""
    return ExamSession(
        bank=bank,
        config=exam_config,
        selector=QuestionSelector(rng=random.Random(42)),
        generator=pdf_generator,
        rewriter=mock_rewriter,
        today=lambda: FIXED_DATE
    )


# ================== FastAPI Test Client Fixtures ==================

@pytest.fixture
def test_client(exam_session):
    """
    FastAPI TestClient bound to an isolated session.
    Rate limits are reset for every test.
    """
    from fastapi.testclient import TestClient
    from api.limiter import limiter
    from api.main import app
    from src.exam.session import get_session

    limiter.reset()
    app.dependency_overrides[get_session] = lambda: exam_session

    yield TestClient(app)

    app.dependency_overrides.clear()
