from agents.crop_advisor.models import STANDARD_CATEGORIES
from agents.crop_advisor.normalizer import normalize_farm_request
from agents.crop_advisor.prompts import build_prompt, describe_water, format_number

def test_prompt_contains_farm_details(farm_data):
    prompt = build_prompt(normalize_farm_request(farm_data))

    for expected in (
        "10 acres",
        "Loamy",
        "approximately 10-15 inches from rainfall per season",
        "$1000 per acre",
        "balanced",
        "Nairobi",
        "-1.29, 36.82",
    ):
        assert expected in prompt

def test_prompt_is_deterministic(farm_data):
    first = build_prompt(normalize_farm_request(farm_data))
    second = build_prompt(normalize_farm_request(dict(farm_data)))
    assert first == second

def test_prompt_describes_output_schema(farm_data):
    prompt = build_prompt(normalize_farm_request(farm_data))

    for category in STANDARD_CATEGORIES:
        assert f'"type": "{category}"' in prompt
    for field in (
        "estimatedProfit", "marketPrice", "score", "growthPeriod", "waterRequirements",
        "soilCompatibility", "maturityPeriod", "bestPlantingTime", "isTopPick", "reasoning",
    ):
        assert f'"{field}"' in prompt
    assert "exactly ONE crop with isTopPick:true in EACH non-empty category" in prompt

def test_optional_fields_only_when_present(farm_data):
    plain = build_prompt(normalize_farm_request(farm_data))
    assert "Farming experience" not in plain
    assert "Previous crop" not in plain
    assert "Additional notes" not in plain

    farm_data.update({"experience": 5, "previousCrop": "Wheat", "notes": "Near a river"})
    detailed = build_prompt(normalize_farm_request(farm_data))
    assert "Farming experience: 5 years" in detailed
    assert "Previous crop: Wheat" in detailed
    assert "Additional notes: Near a river" in detailed

def test_numeric_water_is_described_in_inches(farm_data):
    farm_data["waterAvailability"] = 12.5
    request = normalize_farm_request(farm_data)
    assert describe_water(request) == (
        "12.5 inches per season (approximately 10-15 inches from rainfall per season)"
    )

def test_format_number():
    assert format_number(10.0) == "10"
    assert format_number(2.50) == "2.5"
    assert format_number(1234567) == "1234567"
    assert format_number(-1.29) == "-1.29"

def test_zero_experience_is_left_out(farm_data):
    farm_data["experience"] = 0
    assert "Farming experience" not in build_prompt(normalize_farm_request(farm_data))
