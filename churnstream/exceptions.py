"""
Exceptions
==========

Error hierarchy for the churn streaming engine. Every error carries a stable
``error_code`` so callers can report failures without parsing messages.
"""

from pathlib import Path
from typing import Optional, Union


class ChurnStreamError(Exception):
    """Base exception for all churn stream errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "CHURN_STREAM_ERROR",
        details: Optional[dict] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class IngestionError(ChurnStreamError):
    """Dataset could not be read or parsed."""

    def __init__(self, message: str, path: Union[str, Path], **kwargs):
        self.path = str(path)
        kwargs.setdefault("error_code", "INGESTION_ERROR")
        kwargs.setdefault("details", {"path": self.path})
        super().__init__(message, **kwargs)


class DatasetNotFoundError(IngestionError):
    """Dataset file does not exist."""

    def __init__(self, path: Union[str, Path]):
        super().__init__(
            message=f"Dataset not found: {path}",
            path=path,
            error_code="DATASET_NOT_FOUND",
        )


class MalformedDatasetError(IngestionError):
    """Dataset exists but is unreadable or has no usable header."""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(
            message=f"Malformed dataset {path}: {reason}",
            path=path,
            error_code="DATASET_MALFORMED",
            details={"path": str(path), "reason": reason},
        )


class DegenerateDatasetError(ChurnStreamError):
    """Dataset parsed to zero rows."""

    def __init__(self, path: Union[str, Path]):
        super().__init__(
            message=f"Dataset has no rows: {path}",
            error_code="DATASET_EMPTY",
            details={"path": str(path)},
        )
