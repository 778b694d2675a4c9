"""
EduGen - Exam Generator Module
Soru bankası yükleme, seçim ve PDF sınav oluşturma modülü
"""
from .models import Question, ExamConfig, GeneratedExam, RewriteMode
from .normalizer import clean_value, normalize
from .tabular import parse_tabular
from .search import filter_questions
from .question_selector import QuestionSelector, RandomSelection, ManualSelection
from .pdf_generator import ExamPDFGenerator
from .bank import QuestionBank, InFlightGuard
from .rewriter import QuestionRewriter
from .session import ExamSession, get_session

__all__ = [
    "Question",
    "ExamConfig",
    "GeneratedExam",
    "RewriteMode",
    "clean_value",
    "normalize",
    "parse_tabular",
    "filter_questions",
    "QuestionSelector",
    "RandomSelection",
    "ManualSelection",
    "ExamPDFGenerator",
    "QuestionBank",
    "InFlightGuard",
    "QuestionRewriter",
    "ExamSession",
    "get_session"
]
