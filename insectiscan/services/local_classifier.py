"""
Offline fallback classification from simple pixel statistics.

Used when the device has no connectivity. Results are deliberately
low-confidence and say so in their confidence label.
"""

import io
import logging

from PIL import Image, UnidentifiedImageError

from insectiscan.models import (
    AnalysisKind,
    AnalysisRequest,
    AnalysisResult,
    AnimalIdentification,
    BiteAnalysis,
    HealingComparison,
    PlantIdentification,
    ProductRecommendation,
)
from insectiscan.services.errors import ImageTooLargeError, NoDataError

logger = logging.getLogger(__name__)

OFFLINE_CONFIDENCE = "Low (offline mode)"
OFFLINE_RAW_RESPONSE = "Generated by offline mode"

SAMPLE_SIZE = 128
RED_FLOOR = 80
RED_DOMINANCE = 1.25
HEALING_DELTA = 0.05


def _load_rgb(image: bytes) -> Image.Image:
    """
    Decode to a small RGB sample.

    Raises:
        ImageTooLargeError: Pixel count exceeds Pillow's decompression-bomb limit
        NoDataError: Bytes are not a decodable image
    """
    try:
        img = Image.open(io.BytesIO(image))
        img.draft("RGB", (SAMPLE_SIZE, SAMPLE_SIZE))  # JPEG only; no-op otherwise
        img.load()
    except Image.DecompressionBombError as e:
        raise ImageTooLargeError(str(e)) from e
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise NoDataError("Image could not be decoded") from e

    img = img.convert("RGB")
    img.thumbnail((SAMPLE_SIZE, SAMPLE_SIZE))
    return img


def measure_redness(image: bytes) -> float:
    """
    Fraction of pixels whose red channel clearly dominates (0.0-1.0).

    Raises:
        ImageTooLargeError: Too many pixels to decode safely
        NoDataError: Image bytes are not a decodable image
    """
    data = _load_rgb(image).tobytes()
    total = len(data) // 3
    if not total:
        raise NoDataError("Image has no pixels")

    red = sum(
        1
        for r, g, b in zip(data[0::3], data[1::3], data[2::3])
        if r >= RED_FLOOR and r > g * RED_DOMINANCE and r > b * RED_DOMINANCE
    )
    return red / total


def classify_bite(image: bytes) -> BiteAnalysis:
    redness = measure_redness(image)

    if redness > 0.7:
        danger_level = 7
        insect_or_cause = "Possible severe reaction or fire ant"
        severity = "Significant"
    elif redness > 0.4:
        danger_level = 4
        insect_or_cause = "Mosquito or common bug bite"
        severity = "Moderate"
    else:
        danger_level = 2
        insect_or_cause = "Minor irritation or mild insect bite"
        severity = "Mild"

    logger.info("Offline bite classification: redness=%.2f tier=%s", redness, severity)

    return BiteAnalysis(
        insect_or_cause=insect_or_cause,
        pattern_description="Redness and possible swelling",
        severity=severity,
        recommended_care="Clean with soap and water. Apply ice to reduce swelling.",
        recommended_products=[
            ProductRecommendation(name="Hydrocortisone cream"),
            ProductRecommendation(name="Antihistamine"),
        ],
        possible_risks="Infection if scratched excessively",
        medical_attention_signs="Spreading redness, fever, or difficulty breathing",
        danger_level=danger_level,
        confidence=OFFLINE_CONFIDENCE,
        is_actually_bug_bite=True,
        raw_response=OFFLINE_RAW_RESPONSE,
    )


def classify_plant(image: bytes) -> PlantIdentification:
    _load_rgb(image)
    return PlantIdentification(
        species="Unidentified plant",
        toxicity="Unknown - avoid touching or eating until identified",
        notes="Species identification needs an internet connection.",
        disclaimer="This is not a scientific identification or medical recommendation.",
        confidence=OFFLINE_CONFIDENCE,
        raw_response=OFFLINE_RAW_RESPONSE,
    )


def classify_animal(image: bytes) -> AnimalIdentification:
    _load_rgb(image)
    return AnimalIdentification(
        species="Unidentified animal",
        risk_to_humans="Unknown - keep a safe distance",
        disclaimer="This is an AI-generated identification and may not be fully accurate.",
        confidence=OFFLINE_CONFIDENCE,
        raw_response=OFFLINE_RAW_RESPONSE,
    )


def compare_healing(day1_image: bytes, later_image: bytes) -> HealingComparison:
    """Compare redness between the first and the later photo."""
    delta = measure_redness(later_image) - measure_redness(day1_image)

    if delta < -HEALING_DELTA:
        status, color = "Healing", "Better"
    elif delta > HEALING_DELTA:
        status, color = "Worsening", "Worse"
    else:
        status, color = "Unchanged", "Same"

    return HealingComparison(
        healing_status=status,
        size_change="Unknown",
        color_change=color,
        swelling_change="Unknown",
        treatment_recommendation="Keep the area clean and avoid scratching.",
        when_to_seek_medical_care="Spreading redness, pus, fever, or increasing pain",
        explanation=f"Redness changed by {delta:+.0%} between the two photos.",
        confidence=OFFLINE_CONFIDENCE,
        raw_response=OFFLINE_RAW_RESPONSE,
    )


def classify(request: AnalysisRequest) -> AnalysisResult:
    if request.kind == AnalysisKind.BITE:
        return classify_bite(request.image)
    if request.kind == AnalysisKind.PLANT:
        return classify_plant(request.image)
    if request.kind == AnalysisKind.ANIMAL:
        return classify_animal(request.image)
    return compare_healing(request.image, request.comparison_image)
