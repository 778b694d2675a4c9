"""
Configuration tests for EduGen
"""
import json
import logging

from config.logging import JSONFormatter, configure_logging, resolve_level
from config.settings import get_settings, Settings


def test_settings_instance():
    """Test that settings can be instantiated"""
    settings = get_settings()
    assert isinstance(settings, Settings)


def test_settings_singleton():
    """Test that get_settings returns the same instance (cached)"""
    settings1 = get_settings()
    settings2 = get_settings()
    assert settings1 is settings2


def test_default_values():
    """Test that default values are set correctly"""
    settings = Settings(_env_file=None)

    assert settings.bank_strict_headers is False
    assert settings.exam_default_question_count == 5
    assert settings.exam_max_question_count == 50
    assert settings.exam_default_topic == "General"
    assert settings.azure_openai_chat_deployment == "gpt-4o-mini"
    assert settings.retry_max_attempts == 2


def test_env_override(monkeypatch):
    """Environment variables override defaults"""
    monkeypatch.setenv("BANK_STRICT_HEADERS", "true")
    monkeypatch.setenv("EXAM_DEFAULT_QUESTION_COUNT", "12")

    settings = Settings(_env_file=None)
    assert settings.bank_strict_headers is True
    assert settings.exam_default_question_count == 12


def test_json_formatter():
    """One JSON object per record, context and extra_data merged in"""
    record = logging.LogRecord(
        name="src.exam.session",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="Banka değiştirildi: %d soru",
        args=(4,),
        exc_info=None
    )
    record.operation = "ingest"
    record.upload_name = "banco.csv"
    record.extra_data = {"rows": 4}

    payload = json.loads(JSONFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["message"] == "Banka değiştirildi: 4 soru"
    assert payload["logger"] == "src.exam.session"
    assert payload["service"] == "edugen-api"
    assert payload["operation"] == "ingest"
    assert payload["upload_name"] == "banco.csv"
    assert payload["rows"] == 4
    assert "question_id" not in payload
    assert payload["timestamp"].endswith("+00:00")


def test_resolve_level():
    assert resolve_level(True, "ERROR") == logging.DEBUG
    assert resolve_level(False, "warning") == logging.WARNING
    assert resolve_level(False, "nonsense") == logging.INFO


def test_configure_logging_single_handler():
    """Repeated configuration does not duplicate handlers"""
    root = logging.getLogger()
    previous = root.handlers[:]
    previous_level = root.level
    try:
        configure_logging()
        configure_logging()
        assert len(root.handlers) == 1
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers = previous
        root.setLevel(previous_level)
