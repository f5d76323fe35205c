"""Error kinds raised by the service layer.

The API layer maps each kind to an HTTP status through ``status_code`` and
renders ``{"message": ..., "details": ...}``.
"""
from typing import Any, Optional


class TaskflowError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidArgument(TaskflowError):
    """Malformed identifier, missing required field or field too long."""
    status_code = 400


class NotFound(TaskflowError):
    status_code = 404


class TransactionFailure(TaskflowError):
    """The store aborted the transaction; nothing was written."""
    status_code = 500


class Unauthenticated(TaskflowError):
    """Missing, expired or unknown credentials."""
    status_code = 401
