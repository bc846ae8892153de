import logging

from pydantic import ValidationError

from socialai_agent.config import get_settings
from socialai_agent.models.concept import AdConceptDraft
from socialai_agent.utils.image_utils import prepare_image_for_vision

from ._completion import complete_json, load_template

logger = logging.getLogger(__name__)


def _vision_input(product_image: str | None) -> str | None:
    """제품 이미지가 있으면 Vision 입력으로 변환합니다. 디코딩 실패 시 텍스트만 사용."""
    if not product_image:
        return None
    settings = get_settings()
    try:
        return prepare_image_for_vision(product_image, max_side=settings.vision_image_max_side)
    except (ValueError, OSError) as exc:
        logger.warning("Ignoring unreadable product image: %s", exc)
        return None


async def generate_ad_concepts(brand_profile: dict) -> list[dict]:
    """Meta 광고용 컨셉을 생성합니다. 카피 언어는 설명 문구의 언어를 따릅니다."""
    settings = get_settings()
    niche = brand_profile.get("niche") or "General Business"
    prompt = load_template("ad_concepts").format(
        count=settings.concept_batch_size,
        brand_name=brand_profile.get("name") or "The Brand",
        niche=niche,
        description=(
            brand_profile.get("description")
            or f"A premium service/product in the {niche} industry."
        ),
        audience=brand_profile.get("targetAudience") or "General Public",
    )

    raw = await complete_json(
        prompt,
        model=settings.concept_model,
        max_tokens=2048,
        image_url=_vision_input(brand_profile.get("productImage")),
    )
    items = raw.get("concepts") if isinstance(raw, dict) else raw
    if not isinstance(items, list):
        return []

    concepts: list[dict] = []
    for item in items[: settings.concept_batch_size]:
        try:
            concepts.append(AdConceptDraft.model_validate(item).model_dump(by_alias=True))
        except ValidationError:
            logger.warning("Skipping malformed concept: %r", item)
    return concepts
