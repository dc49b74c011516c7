# agents/crop_advisor/parser.py
"""
Response parsing - JSON extraction and schema repair for model output
"""
import json
import logging
import math
import re
from typing import Any, Dict, List, Optional

from agents.crop_advisor.models import (
    CropCategory, CropRecommendation, RecommendationResult, STANDARD_CATEGORIES
)
from core.exceptions import ExtractionError, ParseError, SchemaError

logger = logging.getLogger(__name__)

# Greedy: first "{" through last "}"
_JSON_SPAN = re.compile(r"\{[\s\S]*\}")

UNSPECIFIED_SOIL = "Not specified"

_CATEGORY_LOOKUP: Dict[str, str] = {c.lower(): c for c in STANDARD_CATEGORIES}
_CATEGORY_ALIASES: Dict[str, str] = {
    "grains": "Grains & Cereals",
    "cereals": "Grains & Cereals",
    "legumes": "Legumes & Pulses",
    "pulses": "Legumes & Pulses",
    "root crops": "Root Crops & Tubers",
    "tubers": "Root Crops & Tubers",
    "fruits": "Fruits & Berries",
    "fruit": "Fruits & Berries",
    "berries": "Fruits & Berries",
    "oilseeds": "Oil & Fiber Crops",
    "oil crops": "Oil & Fiber Crops",
    "fiber crops": "Oil & Fiber Crops",
    "cash crops": "Specialty & High-Value Crops",
    "specialty crops": "Specialty & High-Value Crops",
    "high-value crops": "Specialty & High-Value Crops",
}

def extract_json(raw: str) -> Any:
    """
    Pull the first-"{"-to-last-"}" span out of the response text and parse it.

    Raises ExtractionError when there is no such span and ParseError when the
    span is not valid JSON.
    """
    if not isinstance(raw, str):
        raise ExtractionError("AI response was not text")

    match = _JSON_SPAN.search(raw)
    if not match:
        raise ExtractionError("Failed to find a JSON object in AI response")

    try:
        return json.loads(match.group(0))
    except (ValueError, RecursionError) as e:
        logger.debug(f"Unparseable response text: {raw[:500]}...")
        raise ParseError(f"AI response was not valid JSON: {e}") from e

def _match_category(name: Any) -> Optional[str]:
    if not isinstance(name, str):
        return None
    key = " ".join(name.split()).lower().replace(" and ", " & ")
    return _CATEGORY_LOOKUP.get(key) or _CATEGORY_ALIASES.get(key)

def _coerce_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace("$", "").replace(",", "").rstrip("%")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number

def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()

def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes")
    return False

def _coerce_soils(value: Any) -> List[str]:
    if isinstance(value, str):
        value = value.split(",")
    soils = []
    if isinstance(value, list):
        soils = [_coerce_text(s) for s in value if _coerce_text(s)]
    return soils or [UNSPECIFIED_SOIL]

def _coerce_crop(raw: Any) -> Optional[CropRecommendation]:
    if not isinstance(raw, dict):
        return None
    name = _coerce_text(raw.get("name"))
    if not name:
        return None

    score = _coerce_number(raw.get("score"))
    profit = _coerce_number(raw.get("estimatedProfit"))
    price = _coerce_number(raw.get("marketPrice"))

    return CropRecommendation(
        name=name,
        description=_coerce_text(raw.get("description")),
        estimatedProfit=max(profit or 0.0, 0.0),
        marketPrice=max(price or 0.0, 0.0),
        score=int(round(min(max(score or 0.0, 0.0), 100.0))),
        growthPeriod=_coerce_text(raw.get("growthPeriod")),
        waterRequirements=_coerce_text(raw.get("waterRequirements")),
        soilCompatibility=_coerce_soils(raw.get("soilCompatibility")),
        maturityPeriod=_coerce_text(raw.get("maturityPeriod")),
        bestPlantingTime=_coerce_text(raw.get("bestPlantingTime")) or None,
        isTopPick=_coerce_bool(raw.get("isTopPick")),
    )

def enforce_single_top_pick(crops: List[CropRecommendation]) -> List[CropRecommendation]:
    """
    First crop flagged isTopPick stays the top pick, later flags are cleared.
    With no flag at all, the highest score wins (first occurrence on ties).
    """
    result: List[CropRecommendation] = []
    has_top_pick = False
    for crop in crops:
        if crop.isTopPick:
            if has_top_pick:
                crop = crop.model_copy(update={"isTopPick": False})
            else:
                has_top_pick = True
        result.append(crop)

    if result and not has_top_pick:
        best = max(range(len(result)), key=lambda i: (result[i].score, -i))
        result[best] = result[best].model_copy(update={"isTopPick": True})

    return result

def normalize_recommendations(parsed: Any) -> RecommendationResult:
    """
    Repair a parsed model answer into a RecommendationResult.

    Only a missing or non-list ``categories`` raises (SchemaError). Past that
    check every input yields a result holding each standard category exactly
    once, in standard order, with exactly one top pick per non-empty category.
    """
    if not isinstance(parsed, dict) or not isinstance(parsed.get("categories"), list):
        raise SchemaError("Invalid response format - missing categories array")

    merged: Dict[str, List[Any]] = {}
    for entry in parsed["categories"]:
        if not isinstance(entry, dict):
            continue
        category_type = _match_category(entry.get("type"))
        if category_type is None:
            logger.warning(f"Dropping unknown crop category: {entry.get('type')!r}")
            continue
        crops = entry.get("crops")
        if not isinstance(crops, list):
            crops = []
        merged.setdefault(category_type, []).extend(crops)

    categories = []
    for category_type in STANDARD_CATEGORIES:
        crops = [crop for crop in map(_coerce_crop, merged.get(category_type, [])) if crop is not None]
        categories.append(CropCategory(type=category_type, crops=enforce_single_top_pick(crops)))

    reasoning = parsed.get("reasoning")
    return RecommendationResult(
        categories=categories,
        reasoning=reasoning.strip() if isinstance(reasoning, str) else ""
    )
