"""
Parsers turning labelled free-text model replies into typed results.

The model is asked for "Label: value" sections (see prompts.py). Parsing is
pure and deterministic: each function returns a result or raises
NotTheClaimedSubjectError / ParsingError, nothing else.
"""

import logging
import re
from typing import Optional

from insectiscan.models import (
    AnalysisKind,
    AnalysisResult,
    AnimalIdentification,
    BiteAnalysis,
    HealingComparison,
    PlantIdentification,
    ProductRecommendation,
)
from insectiscan.services.errors import NotTheClaimedSubjectError, ParsingError

logger = logging.getLogger(__name__)

DEFAULT_DANGER_LEVEL = 5
MIN_DANGER_LEVEL = 1
MAX_DANGER_LEVEL = 10

PRODUCTS_KEY = "recommended products"

_DIGITS = re.compile(r"\d+")
_URL = re.compile(r"https?://[^\s)\]>]+")
_PRODUCT_SEPARATORS = (" – ", " — ", " - ")


def _normalize_key(key: str) -> str:
    """'- **Danger Level (1-10)**' -> 'danger level (1-10)'"""
    return key.strip().lstrip("-•").strip().strip("*#").strip().lower()


def check_sentinel(text: str, kind: AnalysisKind) -> None:
    """Raise NotTheClaimedSubjectError if the reply opens with 'Not a <subject>:'."""
    stripped = text.lstrip()
    if stripped.startswith(kind.sentinel):
        explanation = stripped[len(kind.sentinel):].strip()
        raise NotTheClaimedSubjectError(explanation, subject=kind.subject)


def parse_product(line: str) -> Optional[ProductRecommendation]:
    """Parse a '- Name – description' bullet. Returns None for empty bullets."""
    body = line.lstrip("-•*").strip()
    if not body:
        return None

    url = None
    url_match = _URL.search(body)
    if url_match:
        url = url_match.group(0).rstrip(".,;")
        body = (body[: url_match.start()] + body[url_match.end():]).strip()
        body = re.sub(r"\(\s*\)|\[\s*\]", "", body).strip()

    name, description = body, ""
    for separator in _PRODUCT_SEPARATORS:
        if separator in body:
            name, description = body.split(separator, 1)
            break

    name = name.strip().strip("*").strip()
    if not name:
        return None
    return ProductRecommendation(name=name, description=description.strip(), url=url)


def parse_sections(text: str) -> tuple[dict[str, str], list[ProductRecommendation]]:
    """
    Split a reply into normalized-key -> value sections plus product bullets.

    Lines without a colon outside the products list are ignored. Bulleted
    "- Key: value" lines outside it are read as ordinary sections, so nested
    layouts ("Visual Changes:" then "- Size: ...") still yield their keys.
    Later duplicates of a key overwrite earlier ones.
    """
    sections: dict[str, str] = {}
    products: list[ProductRecommendation] = []
    current_section = None

    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        if current_section == PRODUCTS_KEY and line.startswith("-"):
            product = parse_product(line)
            if product is not None:
                products.append(product)
            continue

        if ":" in line:
            key, value = line.split(":", 1)
            key = _normalize_key(key)
            if not key:
                continue
            sections[key] = value.strip().strip("*").strip()
            current_section = key

    return sections, products


def parse_danger_level(value: Optional[str]) -> int:
    """First run of digits in the value, clamped to 1-10; 5 when absent."""
    if value:
        match = _DIGITS.search(value)
        if match:
            level = int(match.group(0))
            return max(MIN_DANGER_LEVEL, min(MAX_DANGER_LEVEL, level))
    logger.warning(
        "No danger level in response, defaulting to %d", DEFAULT_DANGER_LEVEL
    )
    return DEFAULT_DANGER_LEVEL


def _require(sections: dict[str, str], key: str, label: str, text: str) -> str:
    value = sections.get(key, "")
    if not value:
        raise ParsingError(f"Could not find {label} in response", raw_response=text)
    return value


def parse_bite_analysis(text: str) -> BiteAnalysis:
    """
    Parse a bite diagnosis reply.

    Raises:
        NotTheClaimedSubjectError: Reply starts with "Not a Bug Bite:"
        ParsingError: No "Insect or Cause" value
    """
    check_sentinel(text, AnalysisKind.BITE)
    sections, products = parse_sections(text)

    insect_or_cause = _require(sections, "insect or cause", "insect or cause", text)

    return BiteAnalysis(
        insect_or_cause=insect_or_cause,
        pattern_description=sections.get("pattern description", ""),
        severity=sections.get("severity", ""),
        recommended_care=sections.get("recommended care", ""),
        recommended_products=products,
        possible_risks=sections.get("possible risks", ""),
        medical_attention_signs=sections.get("when to seek medical attention", ""),
        danger_level=parse_danger_level(sections.get("danger level (1-10)")),
        confidence=sections.get("confidence", ""),
        is_actually_bug_bite=True,
        raw_response=text,
    )


def parse_plant_identification(text: str) -> PlantIdentification:
    check_sentinel(text, AnalysisKind.PLANT)
    sections, _ = parse_sections(text)

    return PlantIdentification(
        species=_require(sections, "species", "species", text),
        appearance=sections.get("appearance", ""),
        toxicity=sections.get("toxicity", ""),
        common_uses=sections.get("common uses (if any)", sections.get("common uses", "")),
        region_or_habitat=sections.get("region or habitat", ""),
        notes=sections.get("notes", ""),
        disclaimer=sections.get("disclaimer", ""),
        confidence=sections.get("confidence", ""),
        sections=sections,
        raw_response=text,
    )


def parse_animal_identification(text: str) -> AnimalIdentification:
    check_sentinel(text, AnalysisKind.ANIMAL)
    sections, _ = parse_sections(text)

    return AnimalIdentification(
        species=_require(sections, "species", "species", text),
        behavior_observed=sections.get("behavior observed", ""),
        typical_habitat=sections.get("typical habitat", ""),
        risk_to_humans=sections.get("risk to humans", ""),
        conservation_status=sections.get("conservation status", ""),
        disclaimer=sections.get("disclaimer", ""),
        confidence=sections.get("confidence", ""),
        sections=sections,
        raw_response=text,
    )


def parse_healing_comparison(text: str) -> HealingComparison:
    check_sentinel(text, AnalysisKind.HEALING_COMPARISON)
    sections, _ = parse_sections(text)

    return HealingComparison(
        healing_status=_require(sections, "healing status", "healing status", text),
        size_change=sections.get("size", ""),
        color_change=sections.get("color", ""),
        swelling_change=sections.get("swelling", ""),
        treatment_recommendation=sections.get("treatment recommendation", ""),
        when_to_seek_medical_care=sections.get("when to seek medical care", ""),
        explanation=sections.get("explanation", ""),
        confidence=sections.get("confidence", ""),
        sections=sections,
        raw_response=text,
    )


_PARSERS = {
    AnalysisKind.BITE: parse_bite_analysis,
    AnalysisKind.PLANT: parse_plant_identification,
    AnalysisKind.ANIMAL: parse_animal_identification,
    AnalysisKind.HEALING_COMPARISON: parse_healing_comparison,
}


def parse_response(kind: AnalysisKind, text: str) -> AnalysisResult:
    if not text or not text.strip():
        raise ParsingError("Empty response text", raw_response=text)
    return _PARSERS[kind](text)
