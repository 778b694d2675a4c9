"""
EduGen - Merkezi Konfigürasyon Modülü
Pydantic V2 uyumlu
"""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ===== Azure OpenAI (rewrite collaborator) =====
    azure_openai_endpoint: str = ""
    azure_openai_api_key: str = ""
    azure_openai_api_version: str = "2024-12-01-preview"
    azure_openai_chat_deployment: str = "gpt-4o-mini"

    # ===== Rewrite Settings =====
    rewrite_temperature: float = 0.3
    rewrite_max_tokens: int = 800

    # ===== Question Bank Ingestion =====
    bank_strict_headers: bool = False  # False: positional fallback for unnamed columns
    bank_max_upload_bytes: int = 5 * 1024 * 1024

    # ===== Exam Settings =====
    exam_default_question_count: int = 5
    exam_max_question_count: int = 50
    exam_default_subject: str = "Matemáticas"
    exam_default_course: str = "1º ESO"
    exam_default_institution: str = "INSTITUCIÓN EDUCATIVA"
    exam_default_topic: str = "General"
    exam_output_dir: str = "data/generated_exams"

    # ===== Retry Settings =====
    retry_max_attempts: int = 2
    retry_base_delay: float = 1.0
    retry_max_delay: float = 10.0
    retry_exponential_base: float = 2.0

    # ===== Application =====
    debug: bool = False
    log_level: str = "INFO"
    cors_allow_origins: List[str] = ["*"]

    # Pydantic V2 Modern Config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"  # Don't error on extra env vars
    )


@lru_cache()
def get_settings() -> Settings:
    """Singleton settings instance"""
    return Settings()
