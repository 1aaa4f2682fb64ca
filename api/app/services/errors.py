from __future__ import annotations
from typing import Any, Dict, Optional

class InferenceJobError(Exception):
    """Base class for failures that abort a run-inference batch item."""

    def __init__(self, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.payload = payload
        self.item_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"error": type(self).__name__, "message": self.message}
        if self.item_index is not None:
            detail["item_index"] = self.item_index
        if self.payload is not None:
            detail["payload"] = self.payload
        return detail

class RemoteServiceError(InferenceJobError):
    """A registry call (schema or version listing) failed."""

    def __init__(self, message: str, cause: Optional[BaseException] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.cause = cause
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        detail = super().to_dict()
        if self.status_code is not None:
            detail["status_code"] = self.status_code
        if self.cause is not None:
            detail["cause"] = str(self.cause)
        return detail

class SubmissionError(InferenceJobError):
    """The prediction could not be created or the response had no status URL."""

    def __init__(
        self,
        message: str,
        payload: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, payload)
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        detail = super().to_dict()
        if self.cause is not None:
            detail["cause"] = str(self.cause)
        return detail

class PollingTransportError(InferenceJobError):
    """Status polling failed more often than the tolerated error count."""

    def __init__(self, message: str, last_error: BaseException, attempts: int):
        super().__init__(message)
        self.last_error = last_error
        self.attempts = attempts

    def to_dict(self) -> Dict[str, Any]:
        detail = super().to_dict()
        detail["last_error"] = str(self.last_error)
        detail["attempts"] = self.attempts
        return detail

PollingError = PollingTransportError

class PollingTimeoutError(InferenceJobError):
    """The prediction did not finish within the configured wall-clock limit."""

    def __init__(self, message: str, payload: Optional[Dict[str, Any]], waited_seconds: float):
        super().__init__(message, payload)
        self.waited_seconds = waited_seconds

class PredictionFailedError(InferenceJobError):
    """The remote prediction finished with status ``failed``."""

    def __init__(self, payload: Dict[str, Any], message: str = "prediction failed"):
        super().__init__(message, payload)

class PredictionCanceledError(PredictionFailedError):
    """The remote prediction was canceled before it finished."""

    def __init__(self, payload: Dict[str, Any]):
        super().__init__(payload, message="prediction canceled")
