"""
InsectiScan analysis core.

Sends photos of insect bites, plants and animals to a vision model and turns
the replies into typed results, with retry, caching and offline fallback.
"""

from insectiscan.models import (
    AnalysisKind,
    AnalysisRequest,
    EnvironmentContext,
    ProgressEvent,
    ProgressStage,
    UserProfile,
)
from insectiscan.services.analysis_service import AnalysisOrchestrator
from insectiscan.services.errors import AnalysisError, ErrorKind

__all__ = [
    "AnalysisKind",
    "AnalysisRequest",
    "AnalysisOrchestrator",
    "AnalysisError",
    "EnvironmentContext",
    "ErrorKind",
    "ProgressEvent",
    "ProgressStage",
    "UserProfile",
]

__version__ = "0.1.0"
