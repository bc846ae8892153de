from socialai_agent.config import get_settings

from ._completion import complete_json, load_template
from ._rendering import render_image


def _description(raw: object) -> str:
    value = raw.get("description") if isinstance(raw, dict) else None
    return value.strip() if isinstance(value, str) else ""


async def generate_logo(brand_name: str, niche: str) -> dict:
    """로고 설명(색상·스타일·구성 요소)을 만들고 그 설명으로 로고 이미지를 렌더링합니다."""
    settings = get_settings()
    prompt = load_template("logo").format(
        brand_name=brand_name,
        niche=niche,
        monogram=brand_name[:2].upper(),
    )
    description = _description(await complete_json(prompt, max_tokens=512))
    image = None
    if description:
        image = await render_image(
            f"{description}\nFlat vector logo on a pure white background, no mockup.",
            settings.logo_size,
            settings.logo_size,
        )
    return {"description": description, "image": image}


async def generate_product_image(brand_name: str, niche: str) -> dict:
    settings = get_settings()
    prompt = load_template("product_image").format(brand_name=brand_name, niche=niche)
    description = _description(await complete_json(prompt, max_tokens=512))
    image = None
    if description:
        image = await render_image(description, settings.portrait_width, settings.portrait_height)
    return {"description": description, "image": image}
