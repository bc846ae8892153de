"""
AI 프록시 클라이언트

모든 생성 작업은 `{operation: <name>, ...}` 형태의 단일 envelope로
하나의 엔드포인트에 POST 됩니다. 응답은 작업별 pydantic 스키마로 검증하며,
네트워크·상태코드·파싱 오류는 errors 모듈의 정규화된 예외로 변환합니다.
"""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urljoin, urlsplit

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from socialai_agent.compositor import placement_hint
from socialai_agent.config import get_settings
from socialai_agent.errors import (
    EmptyResultError,
    InputValidationError,
    ProxyAuthorizationError,
    ProxyServerError,
    RateLimitError,
)
from socialai_agent.models.brand import BrandProfile, LogoPosition
from socialai_agent.models.campaign import TargetingSuggestion
from socialai_agent.models.concept import AdConcept, AdConceptDraft, number_batch
from socialai_agent.models.proxy import DescriptionResponse, NamesResponse, PromptsResponse
from socialai_agent.utils.http_client import create_http_client

logger = logging.getLogger(__name__)

_CONCEPT_LIST = TypeAdapter(list[AdConceptDraft])


def resolve_proxy_endpoint(origin: str) -> str:
    """현재 origin에 맞는 프록시 엔드포인트를 반환합니다.

    로컬 개발 호스트·포트 조합이면 로컬 개발 API로, 그 외에는 같은 origin의 상대 경로로 보냅니다.
    """
    settings = get_settings()
    parts = urlsplit(origin)
    if parts.hostname in settings.dev_hosts and parts.port == settings.dev_port:
        return settings.dev_proxy_url
    return urljoin(origin, settings.proxy_path)


def _brand_payload(profile: BrandProfile) -> dict[str, Any]:
    return {
        "name": profile.display_name,
        "niche": profile.niche,
        "description": profile.description,
        "targetAudience": profile.target_audience,
        "productImage": profile.product_image,
    }


def _require(**fields: str | None) -> None:
    missing = [name for name, value in fields.items() if not (value and value.strip())]
    if missing:
        raise InputValidationError(f"{', '.join(missing)} is required")


class AIProxyClient:
    """AI 프록시 경계에 대한 작업별 진입점."""

    def __init__(
        self,
        origin: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self.endpoint = resolve_proxy_endpoint(origin or settings.app_origin)
        self._http = http_client or create_http_client(timeout=settings.proxy_timeout)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _post(self, operation: str, **fields: Any) -> Any:
        """envelope를 전송하고 파싱된 JSON을 반환합니다. JSON이 아니면 None."""
        payload = {"operation": operation, **fields}
        try:
            response = await self._http.post(self.endpoint, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Proxy request %s failed: %s", operation, exc)
            raise ProxyServerError() from exc

        if response.status_code == 400:
            raise InputValidationError(self._server_message(response) or "Invalid request")
        if response.status_code == 403:
            raise ProxyAuthorizationError()
        if response.status_code == 429:
            raise RateLimitError()
        if not response.is_success:
            logger.error("Proxy %s returned HTTP %d", operation, response.status_code)
            raise ProxyServerError()

        try:
            return response.json()
        except ValueError:
            logger.warning("Proxy %s returned a non-JSON body", operation)
            return None

    @staticmethod
    def _server_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return ""
        return body.get("error", "") if isinstance(body, dict) else ""

    @staticmethod
    def _parse(schema: type[BaseModel] | TypeAdapter, raw: Any, operation: str) -> Any | None:
        """스키마 검증. 형식이 맞지 않으면 None (호출 측에서 정책 결정)."""
        if raw is None:
            return None
        try:
            if isinstance(schema, TypeAdapter):
                return schema.validate_python(raw)
            return schema.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Malformed %s payload: %s", operation, exc.error_count())
            return None

    async def generate_business_names(self, niche: str) -> list[str]:
        _require(niche=niche)
        raw = await self._post("generateBusinessNames", niche=niche)
        parsed = self._parse(NamesResponse, raw, "generateBusinessNames")
        return parsed.names if parsed else []

    async def generate_image_prompts(self, niche: str) -> list[str]:
        _require(niche=niche)
        raw = await self._post("generateImagePrompts", niche=niche)
        parsed = self._parse(PromptsResponse, raw, "generateImagePrompts")
        return parsed.prompts if parsed else []

    async def generate_logo(self, brand_name: str, niche: str) -> DescriptionResponse:
        _require(brandName=brand_name, niche=niche)
        raw = await self._post("generateLogo", brandName=brand_name, niche=niche)
        return self._parse(DescriptionResponse, raw, "generateLogo") or DescriptionResponse()

    async def generate_product_image(self, description: str, niche: str) -> DescriptionResponse:
        _require(brandName=description, niche=niche)
        raw = await self._post("generateProductImage", brandName=description, niche=niche)
        return self._parse(DescriptionResponse, raw, "generateProductImage") or DescriptionResponse()

    async def generate_ad_concepts(self, profile: BrandProfile) -> list[AdConcept]:
        """광고 컨셉 배치를 요청합니다. 최대 concept_batch_size개, id는 매번 새로 부여."""
        _require(niche=profile.niche)
        raw = await self._post("generateAdConcepts", brandProfile=_brand_payload(profile))
        if isinstance(raw, dict):
            # {"concepts": [...]} 형태도 허용
            raw = raw.get("concepts")
        drafts = self._parse(_CONCEPT_LIST, raw, "generateAdConcepts") or []
        return number_batch(drafts[: get_settings().concept_batch_size])

    async def generate_ad_visual(
        self,
        profile: BrandProfile,
        concept: AdConcept,
        logo_position: LogoPosition | None = None,
    ) -> DescriptionResponse:
        """최종 합성 광고 비주얼을 요청합니다. 결과물이 비어 있으면 EmptyResultError."""
        brand_name = profile.business_name or profile.niche
        _require(brandName=brand_name)
        raw = await self._post(
            "generateAdVisual",
            brandName=brand_name,
            logoDescription=profile.logo_description,
            productDescription=profile.product_description or profile.description,
            adConcept=concept.model_dump(by_alias=True),
            logoPlacement=placement_hint(logo_position) if profile.logo_image else None,
        )
        parsed = self._parse(DescriptionResponse, raw, "generateAdVisual")
        if parsed is None or parsed.is_empty():
            raise EmptyResultError("No image generated.")
        return parsed

    async def generate_targeting_suggestions(
        self,
        profile: BrandProfile,
        platform: str = "Meta",
    ) -> TargetingSuggestion:
        _require(niche=profile.niche)
        raw = await self._post(
            "generateTargetingSuggestions",
            brandProfile=_brand_payload(profile),
            platform=platform,
        )
        return self._parse(TargetingSuggestion, raw, "generateTargetingSuggestions") or TargetingSuggestion()
