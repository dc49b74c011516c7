# agents/crop_advisor/report.py
"""
Plain-text recommendation report for download
"""
from datetime import date
from typing import List, Optional

from agents.crop_advisor.models import FarmRequest, RecommendationResult
from agents.crop_advisor.prompts import describe_water, format_number

def build_text_report(
    farm: FarmRequest,
    result: RecommendationResult,
    farm_name: Optional[str] = None,
    generated_on: Optional[date] = None
) -> str:
    generated_on = generated_on or date.today()
    lines: List[str] = [
        "Crop Recommendation Report",
        f"Farm: {farm_name or farm.location.name}",
        f"Date: {generated_on.isoformat()}",
        "",
        "FARM DETAILS",
        f"Location: {farm.location.name}",
        f"Land Size: {format_number(farm.landSize)} acres",
        f"Soil Type: {farm.soilType.value}",
        f"Water Availability: {describe_water(farm)}",
        f"Budget: ${format_number(farm.budget)}/acre",
        f"Farming Priority: {farm.farmingPriority.value}",
    ]
    if result.isFallback:
        lines.extend(["", "NOTE: sample recommendations, the AI service was unavailable."])

    lines.extend(["", "RECOMMENDED CROPS"])
    for category in result.categories:
        lines.extend(["", category.type.upper()])
        if not category.crops:
            lines.append("   No suitable crops for this farm.")
            continue
        for index, crop in enumerate(category.crops, start=1):
            top = " (Top Pick)" if crop.isTopPick else ""
            lines.extend([
                f"{index}. {crop.name}{top}",
                f"   Score: {crop.score}",
                f"   Estimated Profit: ${format_number(crop.estimatedProfit)}/acre",
                f"   Market Price: ${format_number(crop.marketPrice)}/unit",
                f"   Growth Period: {crop.growthPeriod}",
                f"   Maturity Period: {crop.maturityPeriod}",
            ])
            if crop.bestPlantingTime:
                lines.append(f"   Best Planting Time: {crop.bestPlantingTime}")
            lines.extend([
                f"   Description: {crop.description}",
                f"   Water Requirements: {crop.waterRequirements}",
                f"   Soil Compatibility: {', '.join(crop.soilCompatibility)}",
            ])

    lines.extend(["", "ANALYSIS SUMMARY", result.reasoning, ""])
    return "\n".join(lines)
