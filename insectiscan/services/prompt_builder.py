"""
Builds chat-completion payloads for each analysis kind.

PromptBuilder is a pure function of the request and the injected clock: no
network, no file access. Location lookups happen before building (see
geocoding.resolve_location_text) and arrive as plain text.
"""

import base64
from datetime import datetime
from typing import Callable, Optional

from insectiscan.config import settings
from insectiscan.models import AnalysisKind, AnalysisRequest, Placemark, UserProfile
from insectiscan.services.ai_schemas import (
    ChatCompletionRequest,
    ChatMessage,
    ImagePart,
    ImageURL,
    TextPart,
)
from insectiscan.services.prompts import (
    ANIMAL_IDENTIFICATION_PROMPT,
    BITE_DIAGNOSIS_PROMPT,
    BITE_PROFILE_TEMPLATE,
    DEFAULT_SYMPTOM_TEXT,
    HEALING_COMPARISON_PROMPT,
    NONE,
    PLANT_IDENTIFICATION_PROMPT,
    UNIVERSAL_SYSTEM_INSTRUCTION,
    UNKNOWN,
)


def season_for(month: int) -> str:
    if month in (12, 1, 2):
        return "Winter"
    if month in (3, 4, 5):
        return "Spring"
    if month in (6, 7, 8):
        return "Summer"
    if month in (9, 10, 11):
        return "Fall"
    return UNKNOWN


def time_of_day_for(hour: int) -> str:
    if 5 <= hour <= 11:
        return "Morning"
    if 12 <= hour <= 17:
        return "Afternoon"
    if 18 <= hour <= 21:
        return "Evening"
    return "Night"


def format_placemark(placemark: Placemark, detailed: bool = True) -> str:
    """
    Render a placemark for a prompt.

    Detailed form (bite) is "City, State, Country" with placeholders for
    missing parts; short form (plant/animal) keeps only the parts present
    of "State, Country".
    """
    if detailed:
        return ", ".join(
            [
                placemark.locality or "Unknown City",
                placemark.administrative_area or "Unknown State",
                placemark.country or "Unknown Country",
            ]
        )
    parts = [p for p in (placemark.administrative_area, placemark.country) if p]
    return ", ".join(parts)


_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\xff\xd8\xff", "image/jpeg"),
)


def detect_media_type(image: bytes) -> str:
    """Determine media type from magic bytes, defaulting to JPEG."""
    for signature, media_type in _SIGNATURES:
        if image.startswith(signature):
            return media_type
    if image[:4] == b"RIFF" and image[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def image_data_uri(image: bytes) -> str:
    encoded = base64.standard_b64encode(image).decode("utf-8")
    return f"data:{detect_media_type(image)};base64,{encoded}"


def _join_or(values: Optional[list[str]], placeholder: str) -> str:
    cleaned = [v.strip() for v in values or [] if v and v.strip()]
    return ", ".join(cleaned) if cleaned else placeholder


def _text_or(value: Optional[str], placeholder: str) -> str:
    if value is None or not str(value).strip():
        return placeholder
    return str(value).strip()


class PromptBuilder:
    """Assembles the single user message sent for an analysis."""

    def __init__(
        self,
        system_instruction: str = UNIVERSAL_SYSTEM_INSTRUCTION,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.system_instruction = system_instruction
        self.model = model or settings.vision_model
        self.max_tokens = max_tokens or settings.max_output_tokens
        self._clock = clock

    def build(
        self, request: AnalysisRequest, location_text: Optional[str] = None
    ) -> ChatCompletionRequest:
        """
        Build the payload for a request.

        Args:
            request: The analysis request
            location_text: Resolved location, overriding request.context.location_text

        Returns:
            ChatCompletionRequest with one user message: system instruction,
            composed prompt, then the image(s) as data URIs
        """
        if location_text is None and request.context is not None:
            location_text = request.context.location_text

        prompt = self.compose_prompt(request, location_text)

        content = [
            TextPart(text=self.system_instruction),
            TextPart(text=prompt),
        ]
        for image in request.images:
            content.append(ImagePart(image_url=ImageURL(url=image_data_uri(image))))

        return ChatCompletionRequest(
            model=self.model,
            messages=[ChatMessage(role="user", content=content)],
            max_tokens=self.max_tokens,
        )

    def compose_prompt(
        self, request: AnalysisRequest, location_text: Optional[str] = None
    ) -> str:
        kind = request.kind
        if kind == AnalysisKind.BITE:
            return BITE_DIAGNOSIS_PROMPT.format(
                profile=self.profile_block(request.profile),
                environment=self.environment_block(request, location_text),
                notes=request.notes.strip() if request.has_notes else DEFAULT_SYMPTOM_TEXT,
                sentinel=kind.sentinel,
            )

        notes = request.notes.strip() if request.has_notes else ""
        if kind == AnalysisKind.HEALING_COMPARISON:
            return HEALING_COMPARISON_PROMPT.format(
                days_since=request.days_since,
                notes=notes,
                sentinel=kind.sentinel,
            )

        template = (
            PLANT_IDENTIFICATION_PROMPT
            if kind == AnalysisKind.PLANT
            else ANIMAL_IDENTIFICATION_PROMPT
        )
        location = f"Location context: {location_text}" if location_text else ""
        return template.format(notes=notes, location=location, sentinel=kind.sentinel)

    def profile_block(self, profile: UserProfile) -> str:
        return BITE_PROFILE_TEMPLATE.format(
            age=profile.age if profile.age is not None else UNKNOWN,
            gender=_text_or(profile.gender, UNKNOWN),
            skin_color=_text_or(profile.skin_color, UNKNOWN),
            allergies=_join_or(profile.allergies, NONE),
            medical_conditions=_join_or(profile.medical_conditions, NONE),
        )

    def environment_block(
        self, request: AnalysisRequest, location_text: Optional[str] = None
    ) -> str:
        now = self._clock()
        context = request.context
        lines = ["Environmental Context:"]

        if location_text:
            lines.append(f"- Location: {location_text}")
        elif context is not None and context.has_coordinates:
            lines.append(f"- Location: {UNKNOWN}")

        lines.append(f"- Season: {season_for(now.month)}")
        if context is not None and context.activity:
            lines.append(f"- Activity: {context.activity}")
        lines.append(f"- Time of Day: {time_of_day_for(now.hour)}")
        if context is not None and context.indoor_outdoor:
            lines.append(f"- Setting: {context.indoor_outdoor}")

        return "\n".join(lines)
