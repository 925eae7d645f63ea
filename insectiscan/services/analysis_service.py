"""
Analysis orchestration: the single entry point for photo analyses.

AnalysisOrchestrator decides between the offline and online paths, consults
the response cache, and drives PromptBuilder -> RetryingTransport ->
response parser, emitting progress events and analytics along the way.

Per call the stages run strictly in order:

    preparing -> [offline: analyzing(local)]
               | [cache hit: processing_response]
               | [online: uploading -> analyzing -> processing_response]
               -> complete | error

Exactly one terminal event (complete or error) is emitted per call.
"""

import asyncio
import logging
from typing import Callable, Optional

from insectiscan.config import Settings, settings as default_settings
from insectiscan.models import (
    AnalysisKind,
    AnalysisRequest,
    AnalysisResult,
    BiteAnalysis,
    EnvironmentContext,
    ProgressCallback,
    ProgressEvent,
    UserProfile,
    emit_progress,
)
from insectiscan.services import local_classifier
from insectiscan.services.analytics_service import AnalyticsEvent, AnalyticsService
from insectiscan.services.connectivity import Connectivity, ConnectivityMonitor
from insectiscan.services.errors import AnalysisError, ImageTooLargeError, NoDataError
from insectiscan.services.geocoding import Geocoder, resolve_location_text
from insectiscan.services.prompt_builder import PromptBuilder
from insectiscan.services.response_cache import ResponseCache, image_digest
from insectiscan.services.response_parser import parse_response
from insectiscan.services.transport import RetryingTransport

logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """Runs analyses; safe to share across concurrent calls."""

    def __init__(
        self,
        transport: Optional[RetryingTransport] = None,
        cache: Optional[ResponseCache] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        connectivity: Optional[Connectivity] = None,
        geocoder: Optional[Geocoder] = None,
        analytics: Optional[AnalyticsService] = None,
        classifier: Optional[Callable[[AnalysisRequest], AnalysisResult]] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or default_settings
        self._owns_transport = transport is None
        self.transport = transport or RetryingTransport(settings=self.settings)
        self.cache = cache or ResponseCache(ttl_seconds=self.settings.cache_ttl_seconds)
        self.prompt_builder = prompt_builder or PromptBuilder(
            model=self.settings.vision_model,
            max_tokens=self.settings.max_output_tokens,
        )
        self.connectivity = connectivity or ConnectivityMonitor()
        self.geocoder = geocoder
        self.analytics = analytics or AnalyticsService()
        self.classifier = classifier or local_classifier.classify

    async def aclose(self) -> None:
        """Close the HTTP client of a transport this orchestrator created."""
        if self._owns_transport:
            await self.transport.aclose()

    async def __aenter__(self) -> "AnalysisOrchestrator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def max_attempts_for(self, kind: AnalysisKind) -> int:
        if kind == AnalysisKind.BITE:
            return self.settings.bite_max_attempts
        return self.settings.default_max_attempts

    @staticmethod
    def cache_key(request: AnalysisRequest) -> str:
        return f"{request.kind.value}:{image_digest(*request.images)}"

    def clear_cache(self) -> None:
        self.cache.clear()

    async def analyze_image(
        self,
        kind: AnalysisKind,
        image: bytes,
        notes: Optional[str] = None,
        profile: Optional[UserProfile] = None,
        context: Optional[EnvironmentContext] = None,
        comparison_image: Optional[bytes] = None,
        days_since: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> AnalysisResult:
        """Convenience wrapper building the AnalysisRequest for the caller."""
        request = AnalysisRequest(
            kind=kind,
            image=image,
            notes=notes,
            profile=profile or UserProfile(),
            context=context,
            comparison_image=comparison_image,
            days_since=days_since,
        )
        return await self.analyze(request, on_progress=on_progress)

    async def analyze(
        self,
        request: AnalysisRequest,
        on_progress: Optional[ProgressCallback] = None,
    ) -> AnalysisResult:
        """
        Analyze a photo (or photo pair) and return the typed result.

        Args:
            request: What to analyze and the user's context
            on_progress: Optional callback for ProgressEvents

        Returns:
            BiteAnalysis, PlantIdentification, AnimalIdentification or
            HealingComparison depending on request.kind

        Raises:
            AnalysisError: Any subclass; the kind is never remapped
        """
        self.analytics.log_event(
            AnalyticsEvent.SCAN_STARTED,
            {
                "kind": request.kind.value,
                "has_symptoms": request.has_notes,
                "has_context": request.context is not None,
            },
        )
        emit_progress(on_progress, ProgressEvent.preparing())

        try:
            result = await self._run(request, on_progress)
        except AnalysisError as e:
            logger.error("Analysis failed (%s): %s", request.kind.value, e.kind.value)
            self.analytics.log_event(
                AnalyticsEvent.ERROR_OCCURRED,
                {"kind": request.kind.value, "error_type": e.kind.value},
            )
            emit_progress(on_progress, ProgressEvent.error(e))
            raise

        self._record_success(request, result)
        emit_progress(on_progress, ProgressEvent.complete())
        return result

    async def _run(
        self, request: AnalysisRequest, on_progress: Optional[ProgressCallback]
    ) -> AnalysisResult:
        self._validate_images(request)

        if not self.connectivity.is_connected:
            logger.warning("Offline mode - using local classification")
            emit_progress(
                on_progress,
                ProgressEvent.analyzing("Offline mode - using basic analysis"),
            )
            # Pillow decoding blocks; keep it off the event loop
            result = await asyncio.to_thread(self.classifier, request)
            self.analytics.log_event(
                AnalyticsEvent.OFFLINE_FALLBACK, {"kind": request.kind.value}
            )
            return result

        key = self.cache_key(request)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info("Using cached response for %s image", request.kind.value)
            self.analytics.log_event(
                AnalyticsEvent.CACHE_HIT, {"kind": request.kind.value}
            )
            emit_progress(on_progress, ProgressEvent.processing_response())
            return parse_response(request.kind, cached)

        location_text = await resolve_location_text(
            self.geocoder,
            request.context,
            detailed=request.kind == AnalysisKind.BITE,
            timeout=self.settings.geocode_timeout,
        )
        payload = self.prompt_builder.build(request, location_text=location_text)

        logger.info("Submitting %s scan", request.kind.value)
        response_text = await self.transport.send(
            payload,
            max_attempts=self.max_attempts_for(request.kind),
            on_progress=on_progress,
        )
        self.cache.put(key, response_text)

        emit_progress(on_progress, ProgressEvent.processing_response())
        return parse_response(request.kind, response_text)

    def _validate_images(self, request: AnalysisRequest) -> None:
        for image in request.images:
            if not image:
                raise NoDataError("Empty image")
            if len(image) > self.settings.max_image_bytes:
                raise ImageTooLargeError(
                    f"{len(image)} bytes exceeds {self.settings.max_image_bytes}"
                )

    def _record_success(self, request: AnalysisRequest, result: AnalysisResult) -> None:
        metadata = {"kind": request.kind.value, "confidence": result.confidence}
        if isinstance(result, BiteAnalysis):
            metadata["danger_level"] = result.danger_level
            metadata["insect_type"] = result.insect_or_cause
        self.analytics.log_event(AnalyticsEvent.SCAN_COMPLETED, metadata)

        if (
            isinstance(result, BiteAnalysis)
            and result.danger_level >= self.settings.emergency_danger_level
        ):
            logger.warning("Emergency care advised (danger level %d)", result.danger_level)
            self.analytics.log_event(
                AnalyticsEvent.EMERGENCY_CARE_ADVISED,
                {"danger_level": result.danger_level},
            )
