# agents/crop_advisor/prompts.py
"""
Prompt construction for the crop advisor agent

build_prompt is pure: equal FarmRequest values always render byte-identical
prompts, which keeps cache fingerprints and tests reproducible.
"""
from typing import List

from agents.crop_advisor.models import (
    FarmRequest, STANDARD_CATEGORIES, WATER_SOURCE_DETAILS
)

CROP_FIELDS_SCHEMA = """{
              "name": "Crop name",
              "description": "Brief description of why this crop is suitable",
              "estimatedProfit": Number (profit per acre in USD),
              "marketPrice": Number (price per unit in USD),
              "score": Number (0-100 suitability score),
              "growthPeriod": "Duration in weeks/months",
              "waterRequirements": "Description of water needs",
              "soilCompatibility": ["soil type 1", "soil type 2"],
              "maturityPeriod": "Time from planting to harvest (e.g., 90-120 days)",
              "bestPlantingTime": "Optimal planting season or months for this location",
              "isTopPick": Boolean (true only for the top crop in this category)
            }"""

OUTPUT_RULES = """Ensure you include at least one crop in each category that's suitable for the farm conditions.
If a category has no suitable crops, still include the category with an empty crops array.
Make sure there is exactly ONE crop with isTopPick:true in EACH non-empty category.
Ensure the sum of scores across all crops is reasonable (not too high).
Consider climate at the given coordinates, soil compatibility, and water needs carefully.
Do NOT include any text, explanations, or markdown outside of this JSON structure."""

def format_number(value: float) -> str:
    """Render 10.0 as '10' and 2.50 as '2.5'"""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return f"{value:.4f}".rstrip("0").rstrip(".")

def describe_water(request: FarmRequest) -> str:
    """Human-readable water availability for the prompt"""
    description = WATER_SOURCE_DETAILS[request.waterAvailability]["prompt"]
    if request.waterAvailabilityInches is not None:
        inches = format_number(request.waterAvailabilityInches)
        return f"{inches} inches per season ({description})"
    return description

def build_output_schema() -> str:
    """JSON structure the model must answer with"""
    first, *rest = STANDARD_CATEGORIES
    category_blocks = [
        f"""        {{
          "type": "{first}",
          "crops": [
            {CROP_FIELDS_SCHEMA}
          ]
        }}"""
    ]
    for category in rest:
        category_blocks.append(
            f"""        {{
          "type": "{category}",
          "crops": [...]
        }}"""
        )
    categories = ",\n".join(category_blocks)
    return f"""{{
      "categories": [
{categories}
      ],
      "reasoning": "Brief explanation of the overall recommendation logic based on the farm data"
    }}"""

def build_prompt(request: FarmRequest) -> str:
    """Render a FarmRequest into the instruction sent to the text model"""
    lines: List[str] = [
        "As an agricultural AI expert, analyze the following farm data and recommend crops categorized by type.",
        "",
        f"Farm location: {request.location.name}",
        f"Coordinates: {format_number(request.location.lat)}, {format_number(request.location.lng)}",
        f"Land size: {format_number(request.landSize)} acres",
        f"Soil type: {request.soilType.value}",
        f"Water availability: {describe_water(request)}",
        f"Budget: ${format_number(request.budget)} per acre",
        f"Farming priority: {request.farmingPriority.value}",
    ]
    if request.experience:
        lines.append(f"Farming experience: {request.experience} years")
    if request.previousCrop:
        lines.append(f"Previous crop: {request.previousCrop}")
    if request.notes:
        lines.append(f"Additional notes: {request.notes}")

    category_list = ", ".join(f'"{c}"' for c in STANDARD_CATEGORIES)
    lines.extend([
        "",
        "IMPORTANT: Your response MUST be a valid JSON object with the following structure:",
        build_output_schema(),
        "",
        f"Use exactly these category types, in this order: {category_list}.",
        OUTPUT_RULES,
    ])
    return "\n".join(lines)
