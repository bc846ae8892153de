import logging
import os

import fal_client

from socialai_agent.config import get_settings
from socialai_agent.utils.image_utils import download_image, image_to_data_url

logger = logging.getLogger(__name__)


async def render_image(prompt: str, width: int, height: int) -> str | None:
    """fal.ai 이미지 모델로 렌더링하고 PNG data URL로 반환합니다.

    IMAGE_GENERATION=false 이거나 결과 이미지가 없으면 None (설명 텍스트만 사용).
    """
    settings = get_settings()
    if not settings.image_generation:
        return None
    if settings.fal_key:
        os.environ["FAL_KEY"] = settings.fal_key

    result = await fal_client.run_async(
        settings.image_gen_model,
        arguments={
            "prompt": prompt,
            "image_size": {"width": width, "height": height},
            "num_inference_steps": 28,
            "guidance_scale": 3.5,
            "num_images": 1,
            "enable_safety_checker": True,
        },
    )
    images = result.get("images") or []
    if not images or not images[0].get("url"):
        logger.warning("Image model returned no images for %s", settings.image_gen_model)
        return None

    image = await download_image(images[0]["url"])
    return image_to_data_url(image, format="PNG")
