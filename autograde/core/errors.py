"""
Library exceptions.

Defines the error taxonomy raised by authoring, validation and grading.
The classifier has no error path.
"""

from typing import Any, Dict, Optional


class AutogradeError(Exception):
    """Base exception for grading errors"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for reporting"""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ExamStructureError(AutogradeError):
    """Raised when an exam definition is structurally invalid"""

    def __init__(self, question_number: Optional[int], reason: str):
        self.question_number = question_number
        self.reason = reason
        if question_number is None:
            message = f"Invalid exam structure: {reason}"
        else:
            message = f"Invalid exam structure at question {question_number}: {reason}"
        super().__init__(
            message=message,
            details={"question_number": question_number, "reason": reason}
        )


class SubmissionGradingError(AutogradeError):
    """Raised when a single submission cannot be graded"""

    def __init__(self, submission_id: str, error: str):
        self.submission_id = submission_id
        super().__init__(
            message=f"Failed to grade submission '{submission_id}': {error}",
            details={"submission_id": submission_id, "error": error}
        )


class AuthoringError(AutogradeError):
    """Raised for invalid exam authoring requests"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, details=details)
