"""
EduGen - FastAPI Application
Main application with CORS, rate limiting, and routes
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from api.limiter import HEALTH_LIMIT, limiter
from api.models import HealthResponse, ErrorResponse
from api.routes.bank import router as bank_router
from api.routes.exams import router as exams_router
from config.logging import configure_logging
from config.settings import get_settings
from src.exam.errors import ExamError
from src.exam.pdf_generator import register_fonts
from src.exam.session import ExamSession, get_session

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown"""
    configure_logging()
    logger.info("EduGen API başlatılıyor...")

    # Fontlar ilk PDF isteğinden önce kaydedilsin
    try:
        register_fonts()
        get_session()
        logger.info("PDF fontları hazır")
    except Exception as e:
        logger.warning(f"Font hatası: {e}")

    yield

    logger.info("EduGen API kapatılıyor...")


# Create app
app = FastAPI(
    title="EduGen API",
    description="""
    Generador de Evaluaciones Académicas

    Banco de preguntas en CSV/Excel → examen imprimible en PDF con clave de respuestas.

    ## Funciones
    - Carga de CSV (`,` o `;`) y hojas de cálculo
    - Filtro por tema / palabra clave
    - Selección aleatoria o manual
    - Corrección y paráfrasis con IA
    """,
    version="1.0.0",
    lifespan=lifespan
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Exam-Pages", "X-Exam-Questions"],
)


# ================== MIDDLEWARE ==================

@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add X-Process-Time header to all responses"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


# ================== ERROR HANDLERS ==================

@app.exception_handler(ExamError)
async def exam_error_handler(request: Request, exc: ExamError):
    """User-facing errors: the session stays usable"""
    logger.info(f"{exc.error}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.error,
            detail=exc.message,
            status_code=exc.status_code
        ).model_dump()
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    settings = get_settings()
    logger.error(f"Beklenmeyen hata: {exc}", exc_info=True)

    error_detail = str(exc) if settings.debug else "Se produjo un error inesperado"

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal Server Error",
            detail=error_detail,
            status_code=500
        ).model_dump()
    )


# ================== ROUTES ==================

app.include_router(bank_router)
app.include_router(exams_router)


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint"""
    return {
        "message": "EduGen API",
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health", response_model=HealthResponse, tags=["Health"])
@limiter.limit(HEALTH_LIMIT)
async def health_check(request: Request, session: ExamSession = Depends(get_session)):
    """
    Health check endpoint.

    Returns system health status.
    """
    settings = get_settings()

    services = {
        "question_bank": f"{len(session.bank)} preguntas",
        "azure_openai": "configured"
        if settings.azure_openai_endpoint and settings.azure_openai_api_key
        else "not_configured"
    }

    return HealthResponse(
        status="healthy",
        version="1.0.0",
        services=services
    )


# ================== RUN ==================

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
