"""
Progress notifications emitted while an analysis runs.

These are advisory status updates for the UI; the authoritative outcome is
the value returned (or exception raised) by the analysis call.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

from insectiscan.services.errors import AnalysisError, ErrorKind

logger = logging.getLogger(__name__)


class ProgressStage(str, Enum):
    PREPARING = "preparing"
    UPLOADING = "uploading"
    ANALYZING = "analyzing"
    PROCESSING_RESPONSE = "processing_response"
    COMPLETE = "complete"
    ERROR = "error"


class ProgressEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    stage: ProgressStage
    message: str
    percent: Optional[float] = None  # uploading only, 0.0-1.0
    error_kind: Optional[ErrorKind] = None  # error only
    retry_delay: Optional[float] = None  # set on retry notices

    @property
    def is_terminal(self) -> bool:
        return self.stage in (ProgressStage.COMPLETE, ProgressStage.ERROR)

    @classmethod
    def preparing(cls) -> "ProgressEvent":
        return cls(stage=ProgressStage.PREPARING, message="Preparing image for analysis...")

    @classmethod
    def uploading(cls, percent: float) -> "ProgressEvent":
        return cls(
            stage=ProgressStage.UPLOADING,
            percent=percent,
            message=f"Uploading image... {int(percent * 100)}%",
        )

    @classmethod
    def retrying(cls, delay: float, cause: ErrorKind) -> "ProgressEvent":
        label = "Server error" if cause == ErrorKind.SERVER_ERROR else "Connection issue"
        return cls(
            stage=ProgressStage.UPLOADING,
            percent=0.0,
            retry_delay=delay,
            message=f"{label}. Retrying in {int(delay)} seconds...",
        )

    @classmethod
    def analyzing(cls, message: str = "AI analyzing your image...") -> "ProgressEvent":
        return cls(stage=ProgressStage.ANALYZING, message=message)

    @classmethod
    def processing_response(cls) -> "ProgressEvent":
        return cls(stage=ProgressStage.PROCESSING_RESPONSE, message="Processing results...")

    @classmethod
    def complete(cls) -> "ProgressEvent":
        return cls(stage=ProgressStage.COMPLETE, message="Analysis complete!")

    @classmethod
    def error(cls, error: AnalysisError) -> "ProgressEvent":
        return cls(stage=ProgressStage.ERROR, error_kind=error.kind, message=error.user_message)


ProgressCallback = Callable[[ProgressEvent], None]


def emit_progress(on_progress: Optional[ProgressCallback], event: ProgressEvent) -> None:
    """Deliver an event; a failing callback is logged and never alters the analysis."""
    if on_progress is None:
        return
    try:
        on_progress(event)
    except Exception:
        logger.exception("Progress callback raised on %s; ignoring", event.stage.value)
