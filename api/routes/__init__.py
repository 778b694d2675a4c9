# API Routes
from api.routes.bank import router as bank_router
from api.routes.exams import router as exams_router

__all__ = [
    "bank_router",
    "exams_router",
]
