# agents/crop_advisor/models.py
"""
Pydantic models for crop advisor agent

Field names follow the camelCase wire format used by the web front end and by
the JSON structure requested from the text model.
"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any, Union

class SoilType(str, Enum):
    LOAMY = "Loamy"
    SANDY = "Sandy"
    CLAY = "Clay"
    SILT = "Silt"
    SANDY_LOAM = "Sandy Loam"
    CLAY_LOAM = "Clay Loam"
    SILTY_CLAY = "Silty Clay"
    PEATY = "Peaty"
    CHALKY = "Chalky"
    ROCKY = "Rocky"
    RED_SOIL = "Red Soil"
    BLACK_SOIL = "Black Soil"

class WaterAvailability(str, Enum):
    LIMITED = "limited"
    RAINFED = "rainfed"
    BASIC_IRRIGATION = "basic-irrigation"
    FULL_IRRIGATION = "full-irrigation"

class FarmingPriority(str, Enum):
    PROFIT = "profit"
    BALANCED = "balanced"
    SUSTAINABILITY = "sustainability"

STANDARD_CATEGORIES: List[str] = [
    "Grains & Cereals",
    "Legumes & Pulses",
    "Vegetables",
    "Root Crops & Tubers",
    "Fruits & Berries",
    "Oil & Fiber Crops",
    "Specialty & High-Value Crops",
]

SOIL_TYPE_GROUPS: Dict[str, List[SoilType]] = {
    "Common Soils": [SoilType.LOAMY, SoilType.SANDY, SoilType.CLAY, SoilType.SILT],
    "Mixed Soils": [SoilType.SANDY_LOAM, SoilType.CLAY_LOAM, SoilType.SILTY_CLAY],
    "Other Soils": [
        SoilType.PEATY, SoilType.CHALKY, SoilType.ROCKY,
        SoilType.RED_SOIL, SoilType.BLACK_SOIL
    ],
}

# Display data and prompt wording per water source
WATER_SOURCE_DETAILS: Dict[WaterAvailability, Dict[str, str]] = {
    WaterAvailability.LIMITED: {
        "name": "Limited Water",
        "description": "Areas with very little rainfall and no irrigation",
        "inches": "5-10 inches per season",
        "prompt": "limited to approximately 5-10 inches per season",
    },
    WaterAvailability.RAINFED: {
        "name": "Rain-fed Farming",
        "description": "Relying only on natural rainfall",
        "inches": "10-15 inches per season",
        "prompt": "approximately 10-15 inches from rainfall per season",
    },
    WaterAvailability.BASIC_IRRIGATION: {
        "name": "Basic Irrigation",
        "description": "Natural rainfall plus some irrigation",
        "inches": "15-25 inches per season",
        "prompt": "approximately 15-25 inches (rainfall + basic irrigation) per season",
    },
    WaterAvailability.FULL_IRRIGATION: {
        "name": "Full Irrigation",
        "description": "Complete irrigation system available",
        "inches": "25-40 inches per season",
        "prompt": "approximately 25-40 inches (full irrigation system) per season",
    },
}

class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Place name")
    lat: float = Field(..., ge=-90, le=90, description="Latitude")
    lng: float = Field(..., ge=-180, le=180, description="Longitude")

class FarmRequestRaw(BaseModel):
    """Farm attributes as submitted by the caller, before normalization"""
    model_config = ConfigDict(extra="ignore")

    location: Optional[Location] = None
    landSize: Optional[float] = Field(None, description="Land size in acres")
    soilType: Optional[str] = None
    waterAvailability: Optional[Union[float, str]] = Field(
        None, description="Water category or inches per season"
    )
    waterAvailabilityInches: Optional[float] = None
    budget: Optional[float] = Field(None, description="Budget in USD per acre")
    farmingPriority: Optional[str] = None
    experience: Optional[int] = Field(None, description="Years of farming experience")
    previousCrop: Optional[str] = None
    notes: Optional[str] = None

class FarmRequest(BaseModel):
    """Canonical farm request; water availability always resolved to a category"""
    model_config = ConfigDict(frozen=True)

    location: Location
    landSize: float = Field(..., gt=0)
    soilType: SoilType
    waterAvailability: WaterAvailability
    waterAvailabilityInches: Optional[float] = Field(None, ge=0)
    budget: float = Field(..., gt=0)
    farmingPriority: FarmingPriority
    experience: Optional[int] = Field(None, ge=0)
    previousCrop: Optional[str] = None
    notes: Optional[str] = None

class CropRecommendation(BaseModel):
    name: str
    description: str = ""
    estimatedProfit: float = Field(0.0, ge=0, description="USD per acre")
    marketPrice: float = Field(0.0, ge=0, description="USD per unit")
    score: int = Field(0, ge=0, le=100, description="Suitability score")
    growthPeriod: str = ""
    waterRequirements: str = ""
    soilCompatibility: List[str] = Field(..., min_length=1)
    maturityPeriod: str = ""
    bestPlantingTime: Optional[str] = None
    isTopPick: bool = False

class CropCategory(BaseModel):
    type: str
    crops: List[CropRecommendation] = Field(default_factory=list)

    @property
    def top_pick(self) -> Optional[CropRecommendation]:
        return next((crop for crop in self.crops if crop.isTopPick), None)

class RecommendationResult(BaseModel):
    categories: List[CropCategory]
    reasoning: str = ""
    isFallback: bool = False

    def crop_count(self) -> int:
        return sum(len(category.crops) for category in self.categories)

class RecommendationStatus(str, Enum):
    FRESH = "fresh"
    CACHED = "cached"
    FALLBACK = "fallback"
    CANCELLED = "cancelled"

class RecommendationResponse(BaseModel):
    success: bool
    status: RecommendationStatus
    data: Optional[RecommendationResult] = None
    message: str
    timestamp: str
    metadata: Optional[Dict[str, Any]] = None

class CacheEntry(BaseModel):
    result: RecommendationResult
    createdAt: float

class ReportRequest(BaseModel):
    farm: FarmRequestRaw
    result: RecommendationResult
    farmName: Optional[str] = None
