"""Tests for settings, structured logging and the error taxonomy."""

import json
import logging

from autograde.core.config import Settings, get_settings
from autograde.core.errors import (
    AuthoringError,
    AutogradeError,
    ExamStructureError,
    SubmissionGradingError,
)
from autograde.core.logging import (
    StructuredFormatter,
    get_context_logger,
    get_logger,
    setup_logging,
)


class TestSettings:

    def test_defaults(self):
        settings = Settings()
        assert settings.DEFAULT_TOTAL_POINTS == 100
        assert settings.MAX_QUESTION_COUNT == 100
        assert settings.OR_SELECTION_POLICY == "any_overlap"
        assert settings.ENFORCE_SUB_QUESTION_POINTS is False
        assert settings.EXTRA_ESSAY_KEYWORDS == []

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("REGRADE_MAX_WORKERS", "8")
        assert get_settings().REGRADE_MAX_WORKERS == 8

    def test_cached(self):
        assert get_settings() is get_settings()


class TestErrors:

    def test_hierarchy(self):
        for error in (
            ExamStructureError(1, "bad"),
            SubmissionGradingError("s1", "boom"),
            AuthoringError("bad count", field="count"),
        ):
            assert isinstance(error, AutogradeError)

    def test_exam_structure_message(self):
        error = ExamStructureError(4, "no correct answer entered")
        assert str(error) == "Invalid exam structure at question 4: no correct answer entered"
        assert error.to_dict() == {
            "type": "ExamStructureError",
            "message": str(error),
            "details": {"question_number": 4, "reason": "no correct answer entered"},
        }

    def test_exam_level_message(self):
        assert str(ExamStructureError(None, "exam has no questions")) == (
            "Invalid exam structure: exam has no questions"
        )

    def test_submission_error_details(self):
        error = SubmissionGradingError("s9", "unreadable")
        assert error.submission_id == "s9"
        assert error.details == {"submission_id": "s9", "error": "unreadable"}

    def test_authoring_error_without_field(self):
        assert AuthoringError("oops").details == {}


class TestLogging:

    def _record(self, **extra):
        record = logging.LogRecord("autograde.test", logging.INFO, __file__, 10, "graded", (), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_structured_formatter(self):
        output = json.loads(StructuredFormatter().format(self._record(extra_data={"score": 80, "학생": "김"})))
        assert output["message"] == "graded"
        assert output["level"] == "INFO"
        assert output["score"] == 80
        assert output["학생"] == "김"

    def test_logger_accepts_extra_data(self, caplog):
        logger = get_logger("autograde.test")
        with caplog.at_level(logging.INFO, logger="autograde.test"):
            logger.info("Submission graded", extra_data={"score": 70})
        assert caplog.records[-1].extra_data == {"score": 70}

    def test_context_logger(self, caplog):
        logger = get_context_logger("autograde.test", exam_id="e1")
        with caplog.at_level(logging.INFO, logger="autograde.test"):
            logger.info("Regrade started", extra_data={"count": 3})
        assert caplog.records[-1].extra_data == {"exam_id": "e1", "count": 3}

    def test_setup_logging_text(self, monkeypatch, tmp_path):
        log_file = tmp_path / "logs" / "autograde.log"
        monkeypatch.setenv("LOG_FORMAT", "text")
        monkeypatch.setenv("LOG_FILE", str(log_file))
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        setup_logging()
        try:
            logging.getLogger("autograde.test").warning("written")
            assert log_file.exists()
        finally:
            for handler in root.handlers[:]:
                handler.close()
                root.removeHandler(handler)
            for handler in saved_handlers:
                root.addHandler(handler)
            root.setLevel(saved_level)
