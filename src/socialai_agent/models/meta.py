from enum import Enum

from pydantic import BaseModel, Field

PERSONAL_PORTFOLIO_ID = "personal"


class AssetType(str, Enum):
    PAGE = "page"
    INSTAGRAM = "instagram"
    AD_ACCOUNT = "ad_account"


class MetaAsset(BaseModel):
    id: str
    name: str
    type: AssetType
    access_token: str | None = Field(default=None, description="페이지 전용 액세스 토큰")


class BusinessPortfolio(BaseModel):
    id: str
    name: str
    verification_status: str = Field(default="unverified", description="verified|unverified")


PERSONAL_PORTFOLIO = BusinessPortfolio(
    id=PERSONAL_PORTFOLIO_ID,
    name="Personal Account",
    verification_status="unverified",
)


class AssetSelection(BaseModel):
    page: str | None = None
    instagram: str | None = None
    ad_account: str | None = None

    def is_complete(self) -> bool:
        return bool(self.page and self.instagram and self.ad_account)
