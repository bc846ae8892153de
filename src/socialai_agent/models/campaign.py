from datetime import date, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Objective(str, Enum):
    AWARENESS = "AWARENESS"
    TRAFFIC = "TRAFFIC"
    ENGAGEMENT = "ENGAGEMENT"
    LEADS = "LEADS"
    SALES = "SALES"


class BudgetType(str, Enum):
    DAILY = "DAILY"
    LIFETIME = "LIFETIME"


class Gender(str, Enum):
    ALL = "ALL"
    MEN = "MEN"
    WOMEN = "WOMEN"


def _today() -> str:
    return date.today().isoformat()


def _week_from_today() -> str:
    return (date.today() + timedelta(days=7)).isoformat()


class CampaignSettings(BaseModel):
    """광고 캠페인 설정. 총 예산은 저장하지 않고 항상 계산합니다."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    objective: Objective = Objective.TRAFFIC
    budget_type: BudgetType = BudgetType.DAILY
    budget_amount: float = Field(default=20, gt=0, description="예산 금액")
    duration: int = Field(default=7, gt=0, description="집행 기간 (일)")
    currency: str = "USD"
    start_date: str = Field(default_factory=_today, description="시작일 (YYYY-MM-DD)")
    end_date: str = Field(default_factory=_week_from_today, description="종료일 (YYYY-MM-DD)")
    locations: str = "United States"
    age_range: str = Field(default="18-65", description="연령대 'min-max'")
    gender: Gender = Gender.ALL
    interests: str = Field(default="", description="쉼표로 구분된 관심사")

    @property
    def total_budget(self) -> float:
        return self.budget_amount * self.duration

    def with_changes(self, **changes) -> "CampaignSettings":
        """변경 사항을 적용한 새 설정을 검증 후 반환합니다."""
        return CampaignSettings.model_validate({**self.model_dump(), **changes})


class TargetingSuggestion(BaseModel):
    """AI 타게팅 추천 결과 (프록시 응답 스키마)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    age_range: list[int] = Field(default_factory=list, description="[min, max]")
    interests: list[str] = Field(default_factory=list)
    behaviors: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    platforms: list[str] = Field(default_factory=list)
    budget_suggestion: float = Field(default=0, description="추천 일 예산 (USD)")

    def apply_to(self, settings: CampaignSettings) -> CampaignSettings:
        """추천값으로 타게팅 필드를 통째로 덮어씁니다. 비어 있는 항목은 기본값 사용."""
        defaults = CampaignSettings()
        changes: dict = {
            "locations": ", ".join(self.locations) or defaults.locations,
            "interests": ", ".join(self.interests),
            "age_range": defaults.age_range,
        }
        if len(self.age_range) >= 2:
            low, high = sorted(self.age_range[:2])
            changes["age_range"] = f"{low}-{high}"
        if self.budget_suggestion > 0:
            changes["budget_amount"] = self.budget_suggestion
        return settings.with_changes(**changes)
