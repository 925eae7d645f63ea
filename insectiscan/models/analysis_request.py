"""Inputs to an analysis: kind, image, and the user's context."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AnalysisKind(str, Enum):
    BITE = "bite"
    PLANT = "plant"
    ANIMAL = "animal"
    HEALING_COMPARISON = "healing_comparison"

    @property
    def subject(self) -> str:
        """Noun used in prompts and in the 'Not a ...:' reply."""
        return _SUBJECTS[self]

    @property
    def sentinel(self) -> str:
        article = "an" if self.subject[0].lower() in "aeiou" else "a"
        return f"Not {article} {self.subject}:"


_SUBJECTS = {
    AnalysisKind.BITE: "Bug Bite",
    AnalysisKind.PLANT: "Plant",
    AnalysisKind.ANIMAL: "Animal",
    AnalysisKind.HEALING_COMPARISON: "Wound",
}


class UserProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    age: Optional[int] = Field(default=None, ge=0)
    gender: Optional[str] = None
    skin_color: Optional[str] = None
    allergies: Optional[list[str]] = None
    medical_conditions: Optional[list[str]] = None


class Placemark(BaseModel):
    """Reverse-geocoding answer."""

    model_config = ConfigDict(frozen=True)

    locality: Optional[str] = None
    administrative_area: Optional[str] = None
    country: Optional[str] = None


class EnvironmentContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    activity: Optional[str] = None
    indoor_outdoor: Optional[str] = None
    # Already-resolved location; takes precedence over a geocoder lookup
    location_text: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class AnalysisRequest(BaseModel):
    """
    One user action: a photo plus context, consumed by a single analysis.

    Healing comparisons carry a second photo (`comparison_image`, the later
    one) and the number of days between the two.
    """

    model_config = ConfigDict(frozen=True)

    kind: AnalysisKind
    image: bytes
    notes: Optional[str] = None
    profile: UserProfile = Field(default_factory=UserProfile)
    context: Optional[EnvironmentContext] = None
    comparison_image: Optional[bytes] = None
    days_since: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_comparison_fields(self):
        if self.kind == AnalysisKind.HEALING_COMPARISON:
            if self.comparison_image is None or self.days_since is None:
                raise ValueError(
                    "healing comparison requires comparison_image and days_since"
                )
        elif self.comparison_image is not None:
            raise ValueError("comparison_image is only valid for healing comparison")
        return self

    @property
    def images(self) -> tuple[bytes, ...]:
        if self.comparison_image is not None:
            return (self.image, self.comparison_image)
        return (self.image,)

    @property
    def has_notes(self) -> bool:
        return bool(self.notes and self.notes.strip())
