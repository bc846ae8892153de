from pydantic import BaseModel, Field


class NamesResponse(BaseModel):
    names: list[str] = Field(default_factory=list)


class PromptsResponse(BaseModel):
    prompts: list[str] = Field(default_factory=list)


class DescriptionResponse(BaseModel):
    """로고·제품 이미지·광고 비주얼 생성 결과.

    description은 생성 설명, image는 렌더링된 PNG data URL (이미지 생성을 끈 경우 None).
    """

    description: str = ""
    image: str | None = None

    def is_empty(self) -> bool:
        return not (self.description.strip() or self.image)
