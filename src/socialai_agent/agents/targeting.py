from pydantic import ValidationError

from socialai_agent.models.campaign import TargetingSuggestion

from ._completion import complete_json, load_template


async def suggest_targeting(brand_profile: dict, platform: str = "Meta") -> dict:
    """플랫폼별 타게팅 추천 (연령대·관심사·행동·지역·플랫폼·일 예산)."""
    prompt = load_template("targeting").format(
        platform=platform,
        brand_name=brand_profile.get("name") or "The Brand",
        niche=brand_profile.get("niche", ""),
        description=brand_profile.get("description") or "Not provided",
        audience=brand_profile.get("targetAudience") or "Not specified",
    )
    raw = await complete_json(prompt, max_tokens=512)
    if not isinstance(raw, dict):
        return {}
    try:
        return TargetingSuggestion.model_validate(raw).model_dump(by_alias=True)
    except ValidationError:
        return {}
