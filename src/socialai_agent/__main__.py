"""
사용법:
  uv run python -m socialai_agent.server   # 프록시 서버 (별도 터미널)
  uv run python -m socialai_agent

예시 입력값으로 워크플로우를 실행하는 CLI 진입점.
FACEBOOK_APP_ID가 설정되어 있으면 로그인 후 일시정지 캠페인까지 생성합니다.
"""
import asyncio
import logging

from socialai_agent.clients.auth import AuthHandoff
from socialai_agent.config import get_settings
from socialai_agent.models.meta import AssetType
from socialai_agent.models.workflow import WorkflowStep
from socialai_agent.utils.image_utils import encode_image_file
from socialai_agent.workflow import AdWorkflow

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

# ── 예시 입력값 (실제 사용 시 교체) ──────────────────────────
example_brand = {
    "niche": "Specialty Coffee Shop",
    "description": "Single-origin pour-over and fresh pastries, 2-for-1 lattes every Monday",
    "target_audience": "Remote workers and students aged 20-35",
    "logo_image": "",  # 파일 경로, URL 또는 data URL
    "product_image": "",
}


async def _read_redirect(handoff: AuthHandoff) -> None:
    """브라우저 로그인 후 리다이렉트된 URL을 붙여넣으면 토큰을 넘깁니다."""
    while not handoff.is_open:
        await asyncio.sleep(0.1)
    while handoff.is_open:
        url = await asyncio.to_thread(input, "Paste the redirected URL: ")
        if handoff.deliver_fragment(url):
            return
        print("  access_token not found in that URL, try again.")


def _first(workflow: AdWorkflow, asset_type: AssetType) -> str | None:
    return next((a.id for a in workflow.assets if a.type == asset_type), None)


async def main() -> None:
    settings = get_settings()
    workflow = AdWorkflow()
    workflow.start()
    brand = {k: v for k, v in example_brand.items() if v}
    for key in ("logo_image", "product_image"):
        if key in brand:
            brand[key] = encode_image_file(brand[key])
    workflow.update_brand(**brand)

    names = await workflow.suggest_names()
    if names:
        print("Name ideas:", ", ".join(names))
        workflow.choose_name(names[0])

    await workflow.generate_concepts()
    if workflow.step != WorkflowStep.CREATIVE_GENERATION:
        print(f"\n❌ Concept generation failed: {workflow.last_error}")
        return

    for concept in workflow.concepts:
        print(f"\n[{concept.id}] {concept.headline}")
        print(f"  {concept.primary_text}")
        print(f"  CTA: {concept.cta} | {concept.design_vibe} | {concept.color_hex}")

    workflow.select_concept(workflow.concepts[0].id)
    visual = await workflow.generate_visual()
    if visual:
        print(f"\nComposite visual:\n  {visual.description}")
    workflow.proceed_to_review()

    await workflow.suggest_targeting()
    saved = workflow.save_settings()
    print(
        f"\n✓ Settings saved: {saved.objective.value}, {saved.locations}, "
        f"ages {saved.age_range}, total {workflow.total_budget:.2f} {saved.currency}"
    )

    if not settings.facebook_app_id:
        print("\nFACEBOOK_APP_ID is not set; skipping campaign launch.")
        return

    handoff = AuthHandoff()
    reader = asyncio.create_task(_read_redirect(handoff))
    try:
        connected = await workflow.connect_meta(handoff)
    finally:
        reader.cancel()
    if not connected:
        print(f"\n❌ Meta connection failed: {workflow.last_error}")
        return

    if workflow.step == WorkflowStep.META_CONNECT:
        await workflow.select_portfolio(workflow.portfolios[0].id)

    for asset_type in AssetType:
        asset_id = _first(workflow, asset_type)
        if asset_id:
            workflow.select_asset(asset_type, asset_id)

    campaign_id = await workflow.launch()
    if campaign_id:
        print(f"\n✓ Paused campaign created: {campaign_id}")
    else:
        print(f"\n❌ {workflow.last_error}")


if __name__ == "__main__":
    asyncio.run(main())
