# agents/crop_advisor/normalizer.py
"""
Input normalization - raw farm attributes to a canonical FarmRequest
"""
import hashlib
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from agents.crop_advisor.models import (
    FarmRequest, FarmRequestRaw, FarmingPriority, SoilType, WaterAvailability
)
from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_SOIL_LOOKUP = {soil.value.lower(): soil for soil in SoilType}

def water_category_for_inches(inches: float) -> WaterAvailability:
    """Map inches of water per season to its descriptive category"""
    if inches < 10:
        return WaterAvailability.LIMITED
    if inches < 15:
        return WaterAvailability.RAINFED
    if inches < 25:
        return WaterAvailability.BASIC_IRRIGATION
    return WaterAvailability.FULL_IRRIGATION

def _resolve_water(
    value: Union[float, str],
    explicit_inches: Optional[float]
) -> Tuple[WaterAvailability, Optional[float]]:
    if isinstance(value, str):
        text = value.strip().lower()
        try:
            return WaterAvailability(text), explicit_inches
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            raise ValueError(
                f"unknown water availability '{value}'; expected one of "
                f"{[w.value for w in WaterAvailability]} or inches per season"
            )

    inches = float(value)
    if inches < 0:
        raise ValueError("water availability in inches must not be negative")
    return water_category_for_inches(inches), inches

def _resolve_soil(value: str) -> SoilType:
    key = " ".join(value.replace("_", " ").split()).lower()
    soil = _SOIL_LOOKUP.get(key)
    if soil is None:
        raise ValueError(f"unknown soil type '{value}'")
    return soil

def pydantic_errors(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    return [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]

def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None

def normalize_farm_request(
    raw: Union[FarmRequestRaw, FarmRequest, Mapping[str, Any]]
) -> FarmRequest:
    """
    Convert raw farm attributes into a canonical FarmRequest.

    Water availability may arrive as a category name, a number of inches per
    season or a numeric string; it always leaves here as exactly one category.
    A numeric value is kept in ``waterAvailabilityInches``.

    Raises ValidationError when required fields are missing or invalid. No
    other side effects.
    """
    if isinstance(raw, FarmRequest):
        raw = raw.model_dump(mode="json")
    if not isinstance(raw, FarmRequestRaw):
        try:
            raw = FarmRequestRaw.model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationError("Invalid farm data", pydantic_errors(e)) from e

    errors: List[Dict[str, Any]] = []

    def fail(field: str, message: str) -> None:
        errors.append({"field": field, "message": message})

    for field in ("location", "soilType", "waterAvailability", "landSize", "budget", "farmingPriority"):
        value = getattr(raw, field)
        if value is None or (isinstance(value, str) and not value.strip()):
            fail(field, f"{field} is required")

    present = {e["field"] for e in errors}
    fields: Dict[str, Any] = {}

    if "location" not in present and not raw.location.name.strip():
        fail("location", "location name is required")

    if "soilType" not in present:
        try:
            fields["soilType"] = _resolve_soil(raw.soilType)
        except ValueError as e:
            fail("soilType", str(e))

    if "waterAvailability" not in present:
        try:
            category, inches = _resolve_water(raw.waterAvailability, raw.waterAvailabilityInches)
            fields["waterAvailability"] = category
            fields["waterAvailabilityInches"] = inches
        except ValueError as e:
            fail("waterAvailability", str(e))

    if "farmingPriority" not in present:
        try:
            fields["farmingPriority"] = FarmingPriority(raw.farmingPriority.strip().lower())
        except ValueError:
            fail("farmingPriority", f"farmingPriority must be one of {[p.value for p in FarmingPriority]}")

    for field in ("landSize", "budget"):
        value = getattr(raw, field)
        if value is not None and value <= 0:
            fail(field, f"{field} must be positive")

    if raw.waterAvailabilityInches is not None and raw.waterAvailabilityInches < 0:
        fail("waterAvailabilityInches", "waterAvailabilityInches must not be negative")

    if raw.experience is not None and raw.experience < 0:
        fail("experience", "experience must not be negative")

    if errors:
        logger.info(f"Rejected farm request: {errors}")
        raise ValidationError("Invalid farm data", errors)

    location = raw.location.model_copy(update={"name": raw.location.name.strip()})
    try:
        return FarmRequest(
            location=location,
            landSize=raw.landSize,
            budget=raw.budget,
            experience=raw.experience,
            previousCrop=_clean_text(raw.previousCrop),
            notes=_clean_text(raw.notes),
            **fields
        )
    except PydanticValidationError as e:
        raise ValidationError("Invalid farm data", pydantic_errors(e)) from e

def canonical_json(request: FarmRequest) -> str:
    """Stable serialization of a FarmRequest (sorted keys, no whitespace)"""
    return json.dumps(request.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))

def fingerprint(request: FarmRequest) -> str:
    """Cache key for a FarmRequest"""
    digest = hashlib.sha256(canonical_json(request).encode("utf-8")).hexdigest()
    return f"crop_advisor:{digest}"
