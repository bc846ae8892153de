"""
광고 크리에이티브 워크플로우 상태 머신

LANDING → BRAND_INPUT → CREATIVE_GENERATION → FINAL_REVIEW
→ META_CONNECT → ASSET_SELECTION → LAUNCHING → SUCCESS → (reset) LANDING

- 클라이언트 오류는 last_error에 기록하고 현재 단계에 머뭅니다 (재시도 가능)
- 사용자가 고칠 수 있는 입력 오류는 네트워크 호출 전에 거부합니다
- 잘못된 단계에서의 호출, 존재하지 않는 id 선택은 WorkflowError
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from socialai_agent.clients.auth import AuthHandoff
from socialai_agent.clients.meta_graph import MetaGraphClient
from socialai_agent.clients.proxy import AIProxyClient
from socialai_agent.compositor import clamp_position
from socialai_agent.config import get_settings
from socialai_agent.errors import AdAgentError, EmptyResultError, GraphAPIError, SlotBusyError, WorkflowError
from socialai_agent.models.brand import BrandProfile, LogoPosition
from socialai_agent.models.campaign import CampaignSettings, TargetingSuggestion
from socialai_agent.models.concept import AdConcept
from socialai_agent.models.meta import (
    PERSONAL_PORTFOLIO,
    AssetSelection,
    AssetType,
    BusinessPortfolio,
    MetaAsset,
)
from socialai_agent.models.proxy import DescriptionResponse
from socialai_agent.models.workflow import WorkflowStep
from socialai_agent.slots import Slot, SlotGuard

logger = logging.getLogger(__name__)

_NOT_APPLIED = object()


class AdWorkflow:
    def __init__(
        self,
        proxy: AIProxyClient | None = None,
        graph: MetaGraphClient | None = None,
    ):
        self.proxy = proxy or AIProxyClient()
        self.graph = graph or MetaGraphClient()
        self._slots = SlotGuard()
        self._init_state()

    def _init_state(self) -> None:
        self.step = WorkflowStep.LANDING
        self.last_error: str | None = None

        # Brand input
        self.brand = BrandProfile()
        self.suggested_names: list[str] = []
        self.image_suggestions: list[str] = []

        # Creative
        self.concepts: list[AdConcept] = []
        self.selected_concept: AdConcept | None = None
        self.generated_visual: DescriptionResponse | None = None
        self.logo_position = LogoPosition()

        # Review
        self.campaign = CampaignSettings()
        self.settings_saved = False
        self.targeting: TargetingSuggestion | None = None

        # Meta
        self.portfolios: list[BusinessPortfolio] = []
        self.selected_portfolio: BusinessPortfolio | None = None
        self.assets: list[MetaAsset] = []
        self.selected_assets = AssetSelection()
        self.launch_result: str | None = None

    # ── helpers ─────────────────────────────────────────────────────────────

    @property
    def total_budget(self) -> float:
        return self.campaign.total_budget

    def is_busy(self, slot: Slot) -> bool:
        return self._slots.is_busy(slot)

    def _require_step(self, *steps: WorkflowStep) -> None:
        if self.step not in steps:
            allowed = ", ".join(s.name for s in steps)
            raise WorkflowError(f"Not allowed in step {self.step.name} (expected {allowed})")

    def _transition(self, step: WorkflowStep) -> None:
        logger.info("Workflow step: %s -> %s", self.step.name, step.name)
        self.step = step

    def _reject(self, message: str) -> None:
        logger.info("Rejected: %s", message)
        self.last_error = message

    def _require_niche(self) -> bool:
        if self.brand.has_niche():
            return True
        self._reject("Please enter a Business Niche first (e.g., Coffee Shop, Marketing Agency).")
        return False

    async def _run(
        self,
        slot: Slot,
        call: Callable[[], Awaitable[Any]],
        apply: Callable[[Any], None],
    ) -> Any:
        """슬롯을 점유한 채 호출하고, 티켓이 최신일 때만 결과를 반영합니다."""
        try:
            ticket = self._slots.acquire(slot)
        except SlotBusyError:
            logger.warning("Ignoring %s request: already in progress", slot.value)
            return _NOT_APPLIED

        try:
            result = await call()
        except AdAgentError as exc:
            if self._slots.is_current(slot, ticket):
                logger.warning("%s failed: %s", slot.value, exc)
                self.last_error = str(exc)
            return _NOT_APPLIED
        finally:
            self._slots.release(slot, ticket)

        if not self._slots.is_current(slot, ticket):
            logger.info("Discarding stale %s result (ticket %d)", slot.value, ticket)
            return _NOT_APPLIED

        self.last_error = None
        apply(result)
        return result

    # ── LANDING / BRAND_INPUT ───────────────────────────────────────────────

    def start(self) -> None:
        self._require_step(WorkflowStep.LANDING)
        self._transition(WorkflowStep.BRAND_INPUT)

    def update_brand(self, **fields: Any) -> BrandProfile:
        self._require_step(
            WorkflowStep.BRAND_INPUT,
            WorkflowStep.CREATIVE_GENERATION,
            WorkflowStep.FINAL_REVIEW,
        )
        unknown = set(fields) - set(BrandProfile.model_fields)
        if unknown:
            raise WorkflowError(f"Unknown brand fields: {', '.join(sorted(unknown))}")
        self.brand = BrandProfile.model_validate({**self.brand.model_dump(), **fields})
        return self.brand

    def choose_name(self, name: str) -> None:
        self.update_brand(business_name=name)

    async def suggest_names(self) -> list[str] | None:
        self._require_step(WorkflowStep.BRAND_INPUT)
        if not self._require_niche():
            return None

        def apply(names: list[str]) -> None:
            self.suggested_names = names

        result = await self._run(
            Slot.NAMES,
            lambda: self.proxy.generate_business_names(self.brand.niche),
            apply,
        )
        return None if result is _NOT_APPLIED else result

    async def suggest_image_prompts(self) -> list[str] | None:
        self._require_step(WorkflowStep.BRAND_INPUT)
        if not self._require_niche():
            return None

        def apply(prompts: list[str]) -> None:
            self.image_suggestions = prompts

        result = await self._run(
            Slot.IMAGE_PROMPTS,
            lambda: self.proxy.generate_image_prompts(self.brand.niche),
            apply,
        )
        return None if result is _NOT_APPLIED else result

    async def generate_logo(self, text: str | None = None) -> DescriptionResponse | None:
        """로고 생성. 로고 문구는 영문(ASCII)만 허용합니다."""
        self._require_step(WorkflowStep.BRAND_INPUT)
        text = (text or self.brand.business_name or "").strip()
        if not text:
            self._reject("Please enter the text to appear on the logo.")
            return None
        if not text.isascii():
            self._reject(
                "Please use English characters ONLY for the logo text. "
                "AI cannot render other languages correctly on images."
            )
            return None
        if not self._require_niche():
            return None

        def apply(logo: DescriptionResponse) -> None:
            self.brand = self.brand.model_copy(
                update={
                    "logo_description": logo.description,
                    "logo_image": logo.image or self.brand.logo_image,
                }
            )

        result = await self._run(
            Slot.LOGO,
            lambda: self.proxy.generate_logo(text, self.brand.niche),
            apply,
        )
        return None if result is _NOT_APPLIED else result

    async def generate_product_image(self, description: str) -> DescriptionResponse | None:
        self._require_step(WorkflowStep.BRAND_INPUT)
        if not description.strip():
            self._reject("Please describe the image you want to generate.")
            return None
        if not self._require_niche():
            return None

        def apply(product: DescriptionResponse) -> None:
            self.brand = self.brand.model_copy(
                update={
                    "product_description": product.description,
                    "product_image": product.image or self.brand.product_image,
                }
            )

        result = await self._run(
            Slot.PRODUCT_IMAGE,
            lambda: self.proxy.generate_product_image(description, self.brand.niche),
            apply,
        )
        return None if result is _NOT_APPLIED else result

    # ── CREATIVE_GENERATION ─────────────────────────────────────────────────

    async def _fetch_concept_batch(self) -> list[AdConcept]:
        batch = await self.proxy.generate_ad_concepts(self.brand)
        expected = get_settings().concept_batch_size
        if len(batch) != expected:
            logger.warning("Concept batch has %d items, expected %d", len(batch), expected)
            raise EmptyResultError("Failed to generate concepts. Please try again.")
        return batch

    async def generate_concepts(self) -> list[AdConcept] | None:
        """컨셉 배치를 (재)생성합니다. 성공 시 이전 배치·선택·합성 결과를 통째로 교체."""
        self._require_step(WorkflowStep.BRAND_INPUT, WorkflowStep.CREATIVE_GENERATION)
        if not self._require_niche():
            return None

        def apply(batch: list[AdConcept]) -> None:
            self.concepts = batch
            self.selected_concept = None
            self.generated_visual = None
            if self.step != WorkflowStep.CREATIVE_GENERATION:
                self._transition(WorkflowStep.CREATIVE_GENERATION)

        result = await self._run(Slot.CONCEPTS, self._fetch_concept_batch, apply)
        return None if result is _NOT_APPLIED else result

    def select_concept(self, concept_id: str) -> AdConcept:
        self._require_step(WorkflowStep.CREATIVE_GENERATION)
        for concept in self.concepts:
            if concept.id == concept_id:
                if self.selected_concept is None or self.selected_concept.id != concept_id:
                    self.generated_visual = None
                self.selected_concept = concept
                return concept
        raise WorkflowError(f"Unknown concept: {concept_id}")

    def move_logo(self, x: float, y: float) -> LogoPosition:
        self.logo_position = clamp_position(x, y)
        return self.logo_position

    async def generate_visual(self) -> DescriptionResponse | None:
        """선택한 컨셉으로 최종 합성 비주얼을 요청합니다 (선택 사항)."""
        self._require_step(WorkflowStep.CREATIVE_GENERATION, WorkflowStep.FINAL_REVIEW)
        concept = self.selected_concept
        if concept is None:
            self._reject("Please select an ad concept first.")
            return None

        position = self.logo_position if self.brand.logo_image else None

        def apply(visual: DescriptionResponse) -> None:
            # 배치가 재생성되면 같은 id라도 다른 컨셉
            if self.selected_concept is not concept:
                logger.info("Selection changed while composing; dropping visual for %s", concept.id)
                return
            self.generated_visual = visual

        result = await self._run(
            Slot.VISUAL,
            lambda: self.proxy.generate_ad_visual(self.brand, concept, position),
            apply,
        )
        return None if result is _NOT_APPLIED else result

    def proceed_to_review(self) -> bool:
        self._require_step(WorkflowStep.CREATIVE_GENERATION)
        if self.selected_concept is None:
            self._reject("Please select an ad concept first.")
            return False
        self._transition(WorkflowStep.FINAL_REVIEW)
        return True

    # ── FINAL_REVIEW ────────────────────────────────────────────────────────

    def update_campaign(self, **changes: Any) -> bool:
        """수동 편집. 저장 확인 플래그는 해제됩니다."""
        self._require_step(WorkflowStep.FINAL_REVIEW)
        unknown = set(changes) - set(CampaignSettings.model_fields)
        if unknown:
            raise WorkflowError(f"Unknown campaign fields: {', '.join(sorted(unknown))}")
        try:
            self.campaign = self.campaign.with_changes(**changes)
        except ValidationError as exc:
            self._reject(f"Invalid campaign settings: {exc.errors()[0]['msg']}")
            return False
        self.settings_saved = False
        return True

    async def suggest_targeting(self, platform: str = "Meta") -> TargetingSuggestion | None:
        """AI 타게팅 추천으로 타게팅 필드를 통째로 덮어씁니다."""
        self._require_step(WorkflowStep.FINAL_REVIEW)
        if not self._require_niche():
            return None

        def apply(suggestion: TargetingSuggestion) -> None:
            self.targeting = suggestion
            self.campaign = suggestion.apply_to(self.campaign)
            self.settings_saved = False

        result = await self._run(
            Slot.TARGETING,
            lambda: self.proxy.generate_targeting_suggestions(self.brand, platform),
            apply,
        )
        return None if result is _NOT_APPLIED else result

    def save_settings(self) -> CampaignSettings:
        self._require_step(WorkflowStep.FINAL_REVIEW)
        self.settings_saved = True
        logger.info("Campaign settings saved (total budget %.2f %s)", self.total_budget, self.campaign.currency)
        return self.campaign

    # ── META_CONNECT / ASSET_SELECTION ──────────────────────────────────────

    async def connect_meta(self, handoff: AuthHandoff | None = None, app_id: str | None = None) -> bool:
        """로그인 핸드오프가 토큰을 넘겨준 뒤에만 META_CONNECT로 전이합니다.

        세션에 복구 가능한 토큰이 있으면 로그인 창을 열지 않습니다.
        """
        self._require_step(WorkflowStep.FINAL_REVIEW, WorkflowStep.META_CONNECT)

        token = self.graph.get_access_token()
        if not token:
            handoff = handoff or AuthHandoff()
            app_id = app_id or get_settings().facebook_app_id
            if not app_id:
                self._reject("Facebook App ID is not configured.")
                return False
            result = await self._run(
                Slot.LOGIN,
                lambda: handoff.authorize(app_id),
                self.graph.set_access_token,
            )
            if result is _NOT_APPLIED:
                return False

        return await self.complete_login()

    async def complete_login(self, token: str | None = None) -> bool:
        """토큰 수신 이후 단계: 포트폴리오 조회, 없으면 개인 계정 자산으로 바로 진행."""
        self._require_step(WorkflowStep.FINAL_REVIEW, WorkflowStep.META_CONNECT)
        if token:
            self.graph.set_access_token(token)
        if self.step != WorkflowStep.META_CONNECT:
            self._transition(WorkflowStep.META_CONNECT)

        def apply(portfolios: list[BusinessPortfolio]) -> None:
            self.portfolios = portfolios

        result = await self._run(Slot.PORTFOLIOS, self.graph.get_portfolios, apply)
        if result is _NOT_APPLIED:
            return False
        if not result:
            logger.info("No business portfolios; continuing with personal account")
            return await self.select_portfolio(PERSONAL_PORTFOLIO.id)
        return True

    async def _fetch_assets(self, portfolio_id: str) -> list[MetaAsset]:
        """자산 조회가 실패하면 세션 토큰을 폐기합니다. 다음 connect_meta는 로그인부터 다시 진행."""
        try:
            return await self.graph.get_assets(portfolio_id)
        except GraphAPIError:
            logger.warning("Asset fetch failed; clearing Meta session")
            self.graph.session.clear()
            raise

    async def select_portfolio(self, portfolio_id: str) -> bool:
        self._require_step(WorkflowStep.META_CONNECT)
        if portfolio_id == PERSONAL_PORTFOLIO.id:
            portfolio = PERSONAL_PORTFOLIO
        else:
            portfolio = next((p for p in self.portfolios if p.id == portfolio_id), None)
            if portfolio is None:
                raise WorkflowError(f"Unknown portfolio: {portfolio_id}")
        self.selected_portfolio = portfolio

        def apply(assets: list[MetaAsset]) -> None:
            self.assets = assets
            self.selected_assets = AssetSelection()
            self._transition(WorkflowStep.ASSET_SELECTION)

        result = await self._run(
            Slot.ASSETS,
            lambda: self._fetch_assets(portfolio.id),
            apply,
        )
        return result is not _NOT_APPLIED

    def select_asset(self, asset_type: AssetType | str, asset_id: str) -> AssetSelection:
        self._require_step(WorkflowStep.ASSET_SELECTION)
        asset_type = AssetType(asset_type)
        if not any(a.id == asset_id and a.type == asset_type for a in self.assets):
            raise WorkflowError(f"Unknown {asset_type.value}: {asset_id}")
        self.selected_assets = self.selected_assets.model_copy(update={asset_type.value: asset_id})
        return self.selected_assets

    # ── LAUNCHING / SUCCESS ─────────────────────────────────────────────────

    async def launch(self) -> str | None:
        self._require_step(WorkflowStep.ASSET_SELECTION)
        if not self.settings_saved:
            self._reject("Please save your campaign settings before launching.")
            return None
        if not self.selected_assets.is_complete():
            self._reject("Please select a Page, an Instagram account and an Ad Account.")
            return None
        if self.selected_concept is None:
            self._reject("Please select an ad concept first.")
            return None
        if self.is_busy(Slot.LAUNCH):
            logger.warning("Ignoring launch request: already in progress")
            return None

        self._transition(WorkflowStep.LAUNCHING)
        settings = self.campaign
        ad_account = self.selected_assets.ad_account

        def apply(campaign_id: str) -> None:
            self.launch_result = campaign_id
            self._transition(WorkflowStep.SUCCESS)

        result = await self._run(
            Slot.LAUNCH,
            lambda: self.graph.launch_campaign(ad_account, settings),
            apply,
        )
        if result is _NOT_APPLIED:
            if self.step == WorkflowStep.LAUNCHING:
                if self.last_error:
                    self.last_error = f"Launch failed: {self.last_error}"
                self._transition(WorkflowStep.ASSET_SELECTION)
            return None
        return result

    def reset(self) -> None:
        """모든 메모리 상태를 폐기하고 처음부터 다시 시작합니다."""
        self._require_step(WorkflowStep.SUCCESS)
        self._slots.invalidate_all()
        self.graph.session.clear()
        self._init_state()
        logger.info("Workflow reset")
