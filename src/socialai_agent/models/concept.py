import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_HEX_RE = re.compile(r"#?([0-9a-fA-F]{6})")
_DEFAULT_COLOR = "#141414"


class AdConceptDraft(BaseModel):
    """프록시가 반환하는 광고 컨셉 원본 (id 부여 전)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    headline: str = Field(default="", description="헤드라인")
    primary_text: str = Field(default="", description="본문 카피")
    cta: str = Field(default="", description="행동 유도 문구 (CTA)")
    visual_description: str = Field(default="", description="비주얼 연출 설명")
    design_vibe: str = Field(default="", description="디자인 무드")
    color_hex: str = Field(default=_DEFAULT_COLOR, description="대표 색상 (#RRGGBB)")

    @field_validator("color_hex", mode="before")
    @classmethod
    def _normalize_color(cls, value: object) -> str:
        if not isinstance(value, str):
            return _DEFAULT_COLOR
        match = _HEX_RE.search(value)
        if match:
            return f"#{match.group(1).upper()}"
        return _DEFAULT_COLOR


class AdConcept(AdConceptDraft):
    id: str = Field(description="배치 내 고유 id (concept-0..)")


def number_batch(drafts: list[AdConceptDraft]) -> list[AdConcept]:
    """새 배치에 concept-0부터 순차 id를 부여합니다."""
    return [
        AdConcept(id=f"concept-{index}", **draft.model_dump())
        for index, draft in enumerate(drafts)
    ]
