"""
EduGen - Question Bank Tests
Tests for bank mutations, history and the in-flight guard
"""
import pytest

from src.exam.bank import Idle, InFlightGuard, Pending, QuestionBank
from src.exam.errors import InvalidQuestionError, OperationInProgressError, QuestionNotFoundError


class TestQuestionBank:
    """Tests for QuestionBank mutations."""

    @pytest.mark.unit
    def test_replace_discards_previous_bank(self, bank, make_questions):
        bank.replace(make_questions(2))

        assert [q.id for q in bank] == ["t-1", "t-2"]
        assert bank.history[-1].kind == "ingest"
        assert bank.history[-1].detail == "2 preguntas"

    @pytest.mark.unit
    def test_edit_keeps_id_and_tema(self, bank):
        updated = bank.edit("a", "  ¿Capital de Italia? ", "Roma")

        assert updated.id == "a"
        assert updated.pregunta == "¿Capital de Italia?"
        assert updated.respuesta == "Roma"
        assert updated.tema == "Geografía"
        assert bank.get("a") == updated
        assert [q.id for q in bank] == ["a", "b", "c", "d"]

    @pytest.mark.unit
    def test_edit_empty_pregunta(self, bank):
        with pytest.raises(InvalidQuestionError):
            bank.edit("a", "   ", "París")
        assert bank.get("a").pregunta == "¿Capital de Francia?"

    @pytest.mark.unit
    def test_edit_missing_id_is_noop(self, bank):
        before = bank.questions
        assert bank.edit("zzz", "Nueva", "x") is None
        assert bank.questions == before
        assert bank.history == ()

    @pytest.mark.unit
    def test_edit_missing_id_ignores_empty_text(self, bank):
        assert bank.edit("zzz", "   ", "x") is None
        assert bank.history == ()

    @pytest.mark.unit
    def test_snapshot_not_affected_by_later_edits(self, bank):
        snapshot = bank.questions
        bank.edit("b", "¿3+3?", "6")

        assert snapshot[1].pregunta == "¿2+2?"
        assert bank.questions[1].pregunta == "¿3+3?"

    @pytest.mark.unit
    def test_delete(self, bank):
        assert bank.delete("b") is True
        assert bank.delete("b") is False
        assert [q.id for q in bank] == ["a", "c", "d"]
        assert [r.kind for r in bank.history] == ["delete"]

    @pytest.mark.unit
    def test_delete_many(self, bank):
        assert bank.delete_many(["a", "d", "zzz"]) == 2
        assert [q.id for q in bank] == ["b", "c"]

    @pytest.mark.unit
    def test_clear(self, bank):
        bank.clear()
        assert len(bank) == 0
        assert bank.history[-1].kind == "clear"

    @pytest.mark.unit
    def test_require(self, bank):
        assert bank.require("c").pregunta == "Ecuación de primer grado"
        with pytest.raises(QuestionNotFoundError) as exc_info:
            bank.require("zzz")
        assert exc_info.value.status_code == 404

    @pytest.mark.unit
    def test_update_unknown(self, bank, make_questions):
        assert bank.update(make_questions(1)[0]) is False

    @pytest.mark.unit
    def test_history_order(self):
        bank = QuestionBank()
        bank.replace([])
        bank.clear()
        assert [r.kind for r in bank.history] == ["ingest", "clear"]
        assert all(r.timestamp.tzinfo is not None for r in bank.history)


class TestInFlightGuard:
    """Tests for the single-slot guard."""

    @pytest.mark.unit
    def test_starts_idle(self):
        guard = InFlightGuard("rewrite")
        assert guard.state == Idle()
        assert guard.busy is False
        assert guard.pending_key is None

    @pytest.mark.unit
    def test_second_acquire_rejected(self):
        guard = InFlightGuard("rewrite")
        guard.acquire("a")

        with pytest.raises(OperationInProgressError) as exc_info:
            guard.acquire("b")

        assert exc_info.value.pending_key == "a"
        assert exc_info.value.status_code == 409
        assert guard.state == Pending("a")

    @pytest.mark.unit
    def test_hold_releases_on_error(self):
        guard = InFlightGuard("ingest")

        with pytest.raises(RuntimeError):
            with guard.hold("banco.csv"):
                assert guard.pending_key == "banco.csv"
                raise RuntimeError("fallo")

        assert guard.busy is False
        guard.acquire("otro.csv")
        assert guard.pending_key == "otro.csv"
