from socialai_agent.config import get_settings

from ._completion import complete_json, load_template


def _string_list(raw: object, key: str) -> list[str]:
    values = raw.get(key) if isinstance(raw, dict) else None
    if not isinstance(values, list):
        return []
    return [str(v).strip() for v in values if str(v).strip()]


async def generate_business_names(niche: str) -> list[str]:
    """업종에 어울리는 상호명 후보를 생성합니다."""
    settings = get_settings()
    prompt = load_template("business_names").format(niche=niche, count=settings.name_count)
    raw = await complete_json(prompt, max_tokens=256)
    return _string_list(raw, "names")


async def generate_image_prompts(niche: str) -> list[str]:
    """제품형·라이프스타일형·미니멀형 광고 이미지 설명을 생성합니다."""
    settings = get_settings()
    prompt = load_template("image_prompts").format(niche=niche, count=settings.image_prompt_count)
    raw = await complete_json(prompt, max_tokens=512)
    return _string_list(raw, "prompts")
