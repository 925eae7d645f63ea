"""
Data models for the analysis core.

Requests and results are immutable pydantic models; nothing here does I/O.
"""

from insectiscan.models.analysis_request import (
    AnalysisKind,
    AnalysisRequest,
    EnvironmentContext,
    Placemark,
    UserProfile,
)
from insectiscan.models.analysis_result import (
    AnalysisResult,
    AnimalIdentification,
    BiteAnalysis,
    HealingComparison,
    PlantIdentification,
    ProductRecommendation,
)
from insectiscan.models.progress import (
    ProgressCallback,
    ProgressEvent,
    ProgressStage,
    emit_progress,
)

__all__ = [
    "AnalysisKind",
    "AnalysisRequest",
    "EnvironmentContext",
    "Placemark",
    "UserProfile",
    "AnalysisResult",
    "AnimalIdentification",
    "BiteAnalysis",
    "HealingComparison",
    "PlantIdentification",
    "ProductRecommendation",
    "ProgressCallback",
    "ProgressEvent",
    "ProgressStage",
    "emit_progress",
]
