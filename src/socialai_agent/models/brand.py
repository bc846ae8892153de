from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LogoPosition(BaseModel):
    """로고 오버레이 위치. 크리에이티브 캔버스 대비 백분율."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(default=6, ge=0, le=100, description="좌측 기준 가로 위치 (%)")
    y: float = Field(default=4, ge=0, le=100, description="상단 기준 세로 위치 (%)")


class BrandProfile(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    business_name: str | None = Field(default=None, description="상호명")
    niche: str = Field(default="", description="업종 (예: 커피숍, 마케팅 에이전시)")
    description: str = Field(default="", description="비즈니스/오퍼 설명")
    target_audience: str = Field(default="", description="타깃 고객 설명")
    product_image: str | None = Field(default=None, description="제품 이미지 (data URL 또는 http URL)")
    logo_image: str | None = Field(default=None, description="로고 이미지 (data URL 또는 http URL)")
    logo_description: str = Field(default="", description="AI가 생성한 로고 설명")
    product_description: str = Field(default="", description="AI가 생성한 제품 이미지 설명")

    @property
    def display_name(self) -> str:
        return self.business_name or "The Brand"

    def has_niche(self) -> bool:
        return bool(self.niche.strip())
