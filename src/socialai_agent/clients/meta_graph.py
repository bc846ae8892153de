"""
Meta Graph API 클라이언트

포트폴리오·자산 조회와 캠페인 생성(항상 PAUSED)을 담당합니다.
재시도는 하지 않습니다. 실패는 GraphAPIError로 호출 측에 그대로 전달됩니다.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any

import httpx
from pydantic import ValidationError

from socialai_agent.clients.auth import TokenSession
from socialai_agent.config import get_settings
from socialai_agent.errors import GraphAPIError
from socialai_agent.models.campaign import BudgetType, CampaignSettings, Objective
from socialai_agent.models.meta import AssetType, BusinessPortfolio, MetaAsset, PERSONAL_PORTFOLIO_ID
from socialai_agent.utils.http_client import create_http_client

logger = logging.getLogger(__name__)

_OBJECTIVE_MAP = {
    Objective.AWARENESS: "OUTCOME_AWARENESS",
    Objective.TRAFFIC: "OUTCOME_TRAFFIC",
    Objective.ENGAGEMENT: "OUTCOME_ENGAGEMENT",
    Objective.LEADS: "OUTCOME_LEADS",
    Objective.SALES: "OUTCOME_SALES",
}

# 캠페인은 어떤 설정이든 일시정지 상태로만 생성
_LAUNCH_STATUS = "PAUSED"

_PERSONAL_FIELDS = (
    "adaccounts{name,account_id},"
    "accounts{name,access_token,instagram_business_account{id,username}}"
)
_BUSINESS_FIELDS = (
    "owned_ad_accounts{name,account_id},"
    "owned_pages{name,access_token,instagram_business_account{id,username}}"
)


def _minor_units(amount: float) -> int:
    """Graph API 예산은 통화 최소 단위(센트)로 전달합니다."""
    return int(round(amount * 100))


def build_campaign_payload(settings: CampaignSettings, today: date | None = None) -> dict[str, Any]:
    today = today or date.today()
    payload: dict[str, Any] = {
        "name": f"SocialAI Campaign - {today.isoformat()}",
        "objective": _OBJECTIVE_MAP[settings.objective],
        "status": _LAUNCH_STATUS,
        "special_ad_categories": [],
    }
    if settings.budget_type == BudgetType.DAILY:
        payload["daily_budget"] = _minor_units(settings.budget_amount)
    else:
        payload["lifetime_budget"] = _minor_units(settings.budget_amount)
        payload["start_time"] = settings.start_date
        payload["stop_time"] = settings.end_date
    return payload


def _edge(data: dict, name: str) -> list[dict]:
    """`{name: {data: [...]}}` 형태의 엣지에서 dict 레코드만 꺼냅니다."""
    edge = data.get(name)
    records = edge.get("data") if isinstance(edge, dict) else None
    if not isinstance(records, list):
        return []
    return [r for r in records if isinstance(r, dict)]


def _flatten_assets(pages: list[dict], ad_accounts: list[dict]) -> list[MetaAsset]:
    """id가 없는 레코드는 건너뜁니다."""
    assets: list[MetaAsset] = []
    for page in pages:
        if not page.get("id"):
            logger.warning("Skipping page without id: %r", page)
            continue
        assets.append(
            MetaAsset(
                id=str(page["id"]),
                name=page.get("name") or "",
                type=AssetType.PAGE,
                access_token=page.get("access_token"),
            )
        )
        instagram = page.get("instagram_business_account")
        if isinstance(instagram, dict) and instagram.get("id"):
            assets.append(
                MetaAsset(
                    id=str(instagram["id"]),
                    name=f"@{instagram.get('username') or ''}",
                    type=AssetType.INSTAGRAM,
                )
            )
    for account in ad_accounts:
        account_id = account.get("account_id")
        if not account_id:
            logger.warning("Skipping ad account without account_id: %r", account)
            continue
        assets.append(
            MetaAsset(
                id=str(account_id),
                name=account.get("name") or f"Ad Account ({account_id})",
                type=AssetType.AD_ACCOUNT,
            )
        )
    return assets


class MetaGraphClient:
    def __init__(
        self,
        session: TokenSession | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self.session = session or TokenSession(settings.token_store_path or None)
        self._http = http_client or create_http_client(
            base_url=f"{settings.graph_base_url}/{settings.graph_api_version}",
            timeout=settings.graph_timeout,
        )

    def set_access_token(self, token: str) -> None:
        self.session.set(token)

    def get_access_token(self) -> str | None:
        return self.session.get()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _graph(
        self,
        endpoint: str,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict:
        token = self.session.get()
        if not token:
            raise GraphAPIError("No access token available. Please log in.")

        query = {**(params or {}), "access_token": token}
        try:
            response = await self._http.request(method, endpoint, params=query, json=body)
            data = response.json()
        except httpx.HTTPError as exc:
            logger.error("Graph request %s %s failed: %s", method, endpoint, exc)
            raise GraphAPIError("Graph API request failed - please check your connection") from exc
        except ValueError as exc:
            raise GraphAPIError("Graph API returned an unreadable response") from exc

        if not isinstance(data, dict):
            raise GraphAPIError("Graph API returned an unexpected response")
        if "error" in data:
            error = data["error"]
            logger.error("Graph API error on %s: %s", endpoint, error)
            message = error.get("message") if isinstance(error, dict) else None
            raise GraphAPIError(message or "Graph API Request Failed")
        if not response.is_success:
            raise GraphAPIError(f"Graph API Request Failed (HTTP {response.status_code})")
        return data

    async def get_portfolios(self) -> list[BusinessPortfolio]:
        """비즈니스 포트폴리오 목록. 없거나 실패하면 빈 리스트 (개인 계정으로 진행)."""
        try:
            data = await self._graph("/me/businesses", params={"fields": "id,name,verification_status"})
        except GraphAPIError as exc:
            logger.warning("Fetch portfolios failed or empty: %s", exc)
            return []
        records = data.get("data")
        if not isinstance(records, list):
            return []
        try:
            return [
                BusinessPortfolio(
                    id=str(item["id"]),
                    name=item.get("name") or "",
                    verification_status=(
                        "verified" if item.get("verification_status") == "verified" else "unverified"
                    ),
                )
                for item in records
                if isinstance(item, dict) and item.get("id")
            ]
        except ValidationError as exc:
            logger.warning("Malformed portfolio records: %s", exc.error_count())
            return []

    async def get_assets(self, portfolio_id: str = PERSONAL_PORTFOLIO_ID) -> list[MetaAsset]:
        """페이지(+연결된 인스타그램)와 광고 계정을 하나의 리스트로 평탄화합니다."""
        if portfolio_id == PERSONAL_PORTFOLIO_ID:
            data = await self._graph("/me", params={"fields": _PERSONAL_FIELDS})
            pages = _edge(data, "accounts")
            ad_accounts = _edge(data, "adaccounts")
        else:
            data = await self._graph(f"/{portfolio_id}", params={"fields": _BUSINESS_FIELDS})
            pages = _edge(data, "owned_pages")
            ad_accounts = _edge(data, "owned_ad_accounts")

        try:
            assets = _flatten_assets(pages, ad_accounts)
        except ValidationError as exc:
            raise GraphAPIError("Graph API returned malformed asset records") from exc
        logger.info("Loaded %d assets for portfolio %s", len(assets), portfolio_id)
        return assets

    async def launch_campaign(self, ad_account_id: str, settings: CampaignSettings) -> str:
        """일시정지 상태의 캠페인 컨테이너를 생성하고 campaign id를 반환합니다.

        광고 세트·광고(크리에이티브) 생성은 범위 밖입니다.
        """
        payload = build_campaign_payload(settings)
        data = await self._graph(f"/act_{ad_account_id}/campaigns", method="POST", body=payload)
        campaign_id = data.get("id")
        if not campaign_id:
            raise GraphAPIError("Campaign was not created")
        logger.info("Created paused campaign %s on act_%s", campaign_id, ad_account_id)
        return str(campaign_id)
