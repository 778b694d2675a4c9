# API module
from api.models import (
    QuestionEditRequest,
    RewriteRequest,
    ExamConfigUpdate,
    ExamGenerateRequest,
    QuestionOut,
    QuestionListResponse,
    UploadResponse,
    HealthResponse,
    ErrorResponse
)
from api.main import app

__all__ = [
    "app",
    "QuestionEditRequest",
    "RewriteRequest",
    "ExamConfigUpdate",
    "ExamGenerateRequest",
    "QuestionOut",
    "QuestionListResponse",
    "UploadResponse",
    "HealthResponse",
    "ErrorResponse",
]
