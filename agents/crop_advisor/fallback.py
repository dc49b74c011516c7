# agents/crop_advisor/fallback.py
"""
Static recommendation set returned when the text model cannot be reached
"""
from agents.crop_advisor.models import RecommendationResult
from agents.crop_advisor.parser import normalize_recommendations

FALLBACK_REASONING = (
    "Sample data displayed due to AI service connection issues. "
    "Please try again later for personalized recommendations."
)

FALLBACK_PAYLOAD = {
    "categories": [
        {
            "type": "Grains & Cereals",
            "crops": [
                {
                    "name": "Maize",
                    "description": "Widely adapted staple grain. General recommendation shown while the AI service is unavailable.",
                    "estimatedProfit": 1200,
                    "marketPrice": 4.5,
                    "score": 95,
                    "growthPeriod": "3-4 months",
                    "waterRequirements": "Medium, about 15-20 inches during growing season",
                    "soilCompatibility": ["Loamy", "Clay Loam"],
                    "maturityPeriod": "90-120 days",
                    "bestPlantingTime": "Spring to early Summer",
                    "isTopPick": True
                },
                {
                    "name": "Sorghum",
                    "description": "Drought tolerant grain for drier seasons. General recommendation shown while the AI service is unavailable.",
                    "estimatedProfit": 800,
                    "marketPrice": 3.0,
                    "score": 80,
                    "growthPeriod": "3-4 months",
                    "waterRequirements": "Low, drought resistant",
                    "soilCompatibility": ["Sandy Loam", "Clay", "Loamy"],
                    "maturityPeriod": "100-120 days",
                    "bestPlantingTime": "Late Spring",
                    "isTopPick": False
                }
            ]
        },
        {
            "type": "Legumes & Pulses",
            "crops": [
                {
                    "name": "Common Beans",
                    "description": "Nitrogen-fixing legume that improves soil for the next season. General recommendation shown while the AI service is unavailable.",
                    "estimatedProfit": 950,
                    "marketPrice": 3.2,
                    "score": 85,
                    "growthPeriod": "2-3 months",
                    "waterRequirements": "Low to medium",
                    "soilCompatibility": ["Sandy Loam", "Loamy"],
                    "maturityPeriod": "60-80 days",
                    "bestPlantingTime": "Early to mid Spring",
                    "isTopPick": True
                }
            ]
        },
        {
            "type": "Vegetables",
            "crops": [
                {
                    "name": "Tomato",
                    "description": "High-value vegetable with steady local demand. General recommendation shown while the AI service is unavailable.",
                    "estimatedProfit": 1100,
                    "marketPrice": 5.0,
                    "score": 80,
                    "growthPeriod": "4-5 months",
                    "waterRequirements": "High, regular irrigation needed",
                    "soilCompatibility": ["Loamy", "Clay Loam"],
                    "maturityPeriod": "110-140 days",
                    "bestPlantingTime": "Late Spring",
                    "isTopPick": True
                }
            ]
        },
        {
            "type": "Root Crops & Tubers",
            "crops": [
                {
                    "name": "Sweet Potato",
                    "description": "Hardy tuber suited to low input farming. General recommendation shown while the AI service is unavailable.",
                    "estimatedProfit": 900,
                    "marketPrice": 2.5,
                    "score": 78,
                    "growthPeriod": "3-5 months",
                    "waterRequirements": "Low to medium",
                    "soilCompatibility": ["Sandy", "Sandy Loam"],
                    "maturityPeriod": "90-150 days",
                    "bestPlantingTime": "Start of the rainy season",
                    "isTopPick": True
                }
            ]
        }
    ],
    "reasoning": FALLBACK_REASONING
}

def build_fallback_result() -> RecommendationResult:
    """Fallback recommendations, run through the same schema repair as live answers"""
    result = normalize_recommendations(FALLBACK_PAYLOAD)
    return result.model_copy(update={"isFallback": True})
