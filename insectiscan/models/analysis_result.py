"""Typed results produced from model replies or the offline classifier."""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

EMERGENCY_DANGER_LEVEL = 8


class ProductRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    url: Optional[str] = None


class BiteAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    insect_or_cause: str
    pattern_description: str = ""
    severity: str = ""
    recommended_care: str = ""
    recommended_products: list[ProductRecommendation] = []
    possible_risks: str = ""
    medical_attention_signs: str = ""
    danger_level: int = Field(ge=1, le=10)
    confidence: str = ""
    is_actually_bug_bite: bool = True
    raw_response: str = ""

    @property
    def requires_emergency_care(self) -> bool:
        return self.danger_level >= EMERGENCY_DANGER_LEVEL


class PlantIdentification(BaseModel):
    model_config = ConfigDict(frozen=True)

    species: str
    appearance: str = ""
    toxicity: str = ""
    common_uses: str = ""
    region_or_habitat: str = ""
    notes: str = ""
    disclaimer: str = ""
    confidence: str = ""
    sections: dict[str, str] = {}
    raw_response: str = ""


class AnimalIdentification(BaseModel):
    model_config = ConfigDict(frozen=True)

    species: str
    behavior_observed: str = ""
    typical_habitat: str = ""
    risk_to_humans: str = ""
    conservation_status: str = ""
    disclaimer: str = ""
    confidence: str = ""
    sections: dict[str, str] = {}
    raw_response: str = ""


class HealingComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    healing_status: str
    size_change: str = ""
    color_change: str = ""
    swelling_change: str = ""
    treatment_recommendation: str = ""
    when_to_seek_medical_care: str = ""
    explanation: str = ""
    confidence: str = ""
    sections: dict[str, str] = {}
    raw_response: str = ""


AnalysisResult = Union[
    BiteAnalysis, PlantIdentification, AnimalIdentification, HealingComparison
]
