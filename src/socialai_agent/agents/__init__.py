from .brand_assets import generate_logo, generate_product_image
from .concepts import generate_ad_concepts
from .naming import generate_business_names, generate_image_prompts
from .targeting import suggest_targeting
from .visual import generate_ad_visual

__all__ = [
    "generate_business_names",
    "generate_image_prompts",
    "generate_logo",
    "generate_product_image",
    "generate_ad_concepts",
    "generate_ad_visual",
    "suggest_targeting",
]
