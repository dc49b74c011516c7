# agents/crop_advisor/__init__.py
"""
Crop advisor agent package
"""

from .agent import CropAdvisorAgent
from .models import FarmRequest, FarmRequestRaw, RecommendationResponse, RecommendationResult

__all__ = [
    "CropAdvisorAgent",
    "FarmRequest",
    "FarmRequestRaw",
    "RecommendationResponse",
    "RecommendationResult",
]
