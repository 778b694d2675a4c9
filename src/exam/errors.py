"""
EduGen - Exam Errors
Error taxonomy for question bank ingestion and exam generation.

None of these are fatal to the session: the HTTP layer returns them to
the user as a dismissable message.
"""
from typing import List, Optional


class ExamError(Exception):
    """Base class for every user-facing error."""

    status_code: int = 400
    error: str = "exam_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MissingColumnsError(ExamError):
    """Required columns (pregunta/respuesta) could not be resolved."""

    error = "missing_columns"

    def __init__(self, detected_headers: List[str], missing: Optional[List[str]] = None):
        self.detected_headers = list(detected_headers)
        self.missing = list(missing or ["pregunta", "respuesta"])
        detected = ", ".join(self.detected_headers) or "(ninguna)"
        super().__init__(
            'El archivo debe contener al menos las columnas "pregunta" y "respuesta". '
            f"Columnas detectadas: {detected}"
        )


class EmptyDocumentError(ExamError):
    """No header row or no data rows."""

    error = "empty_document"

    def __init__(self, message: str = "El archivo no contiene preguntas."):
        super().__init__(message)


class UnsupportedFileError(ExamError):
    """File type is not supported or cannot be decoded."""

    status_code = 415
    error = "unsupported_file"


class InsufficientPoolError(ExamError):
    """Random selection requested from an empty pool."""

    error = "insufficient_pool"

    def __init__(self, message: str = "Carga un banco de preguntas primero."):
        super().__init__(message)


class EmptySelectionError(ExamError):
    """Manual selection matched no question."""

    error = "empty_selection"

    def __init__(self, message: str = "No hay preguntas seleccionadas."):
        super().__init__(message)


class InvalidQuestionError(ExamError):
    """An edit would leave the question text empty."""

    status_code = 422
    error = "invalid_question"


class QuestionNotFoundError(ExamError):
    """No question with the given id in the bank."""

    status_code = 404
    error = "question_not_found"

    def __init__(self, question_id: str):
        self.question_id = question_id
        super().__init__(f"La pregunta {question_id} no existe.")


class RewriteServiceError(ExamError):
    """The AI rewrite call failed; the original text is kept."""

    status_code = 502
    error = "rewrite_failed"

    def __init__(self, message: str = "No se pudo mejorar la pregunta. Se conserva el texto original."):
        super().__init__(message)


class OperationInProgressError(ExamError):
    """Rejected because another rewrite or ingestion is still pending."""

    status_code = 409
    error = "operation_in_progress"

    def __init__(self, operation: str, pending_key: Optional[str] = None):
        self.operation = operation
        self.pending_key = pending_key
        super().__init__(f"Ya hay una operación '{operation}' en curso. Espera a que termine.")
