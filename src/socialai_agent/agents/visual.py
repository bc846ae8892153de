from socialai_agent.config import get_settings

from ._completion import complete_json, load_template
from ._rendering import render_image


def _placement_section(logo_placement: dict | None) -> str:
    if not logo_placement:
        return "No logo placement requested; place the brand mark where it reads naturally."
    return (
        f"The logo MUST be placed in the {logo_placement.get('zone', 'TOP-LEFT corner')} area, "
        f"roughly {logo_placement.get('y', 5)}% from top and {logo_placement.get('x', 5)}% from left. "
        "Do not place it right on the edge; keep professional padding. "
        "The logo must be small and subtle, like a brand watermark."
    )


async def generate_ad_visual(
    brand_name: str,
    logo_description: str,
    product_description: str,
    ad_concept: dict,
    logo_placement: dict | None = None,
) -> dict:
    """로고·제품·카피를 하나의 광고 비주얼로 합성하는 설명을 만들고 이미지로 렌더링합니다."""
    prompt = load_template("ad_visual").format(
        brand_name=brand_name,
        logo_description=logo_description or "A professional logo",
        product_description=product_description or "The business's offering",
        headline=ad_concept.get("headline", ""),
        primary_text=ad_concept.get("primaryText", ""),
        cta=ad_concept.get("cta", ""),
        design_vibe=ad_concept.get("designVibe", ""),
        color_hex=ad_concept.get("colorHex", ""),
        visual_description=ad_concept.get("visualDescription", ""),
        placement=_placement_section(logo_placement),
    )
    raw = await complete_json(prompt, max_tokens=1024)
    value = raw.get("description") if isinstance(raw, dict) else None
    description = value.strip() if isinstance(value, str) else ""
    image = None
    if description:
        settings = get_settings()
        image = await render_image(description, settings.portrait_width, settings.portrait_height)
    return {"description": description, "image": image}
