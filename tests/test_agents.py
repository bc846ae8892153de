"""생성 에이전트 테스트 (OpenAI 호출은 mock 처리)"""
import base64
import io
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from PIL import Image

from socialai_agent.agents._completion import _openai_client, _parse_json, complete_json
from socialai_agent.agents._rendering import render_image
from socialai_agent.errors import ProxyAuthorizationError
from socialai_agent.utils.image_utils import decode_data_url, image_to_data_url, prepare_image_for_vision


def test_parse_json_strips_code_fences():
    assert _parse_json('```json\n{"names": ["A"]}\n```') == {"names": ["A"]}
    assert _parse_json("not json") == {}
    assert _parse_json(None) == {}


@pytest.mark.asyncio
async def test_complete_json_requires_api_key():
    with patch("socialai_agent.agents._completion.get_settings") as settings:
        settings.return_value.openai_api_key = ""
        with pytest.raises(ProxyAuthorizationError, match="OPENAI_API_KEY"):
            await complete_json("hi")


@pytest.mark.asyncio
async def test_business_names_are_cleaned():
    raw = {"names": ["Loop Coffee", "  ", "Bean Lab "]}
    with patch("socialai_agent.agents.naming.complete_json", new=AsyncMock(return_value=raw)) as mock:
        from socialai_agent.agents.naming import generate_business_names
        names = await generate_business_names("Coffee Shop")

    assert names == ["Loop Coffee", "Bean Lab"]
    assert "Coffee Shop" in mock.await_args.args[0]


@pytest.mark.asyncio
async def test_concepts_accept_wrapped_list_and_truncate():
    raw = {
        "concepts": [
            {"headline": "One", "primaryText": "p", "colorHex": "1a1a2e"},
            {"headline": "Two"},
            {"headline": "Three"},
            {"headline": "Four"},
        ]
    }
    with patch("socialai_agent.agents.concepts.complete_json", new=AsyncMock(return_value=raw)) as mock:
        from socialai_agent.agents.concepts import generate_ad_concepts
        concepts = await generate_ad_concepts({"name": "Loop", "niche": "Cafe"})

    assert [c["headline"] for c in concepts] == ["One", "Two", "Three"]
    assert concepts[0]["colorHex"] == "#1A1A2E"
    assert mock.await_args.kwargs["image_url"] is None


@pytest.mark.asyncio
async def test_targeting_falls_back_to_empty_dict():
    with patch("socialai_agent.agents.targeting.complete_json", new=AsyncMock(return_value=["nope"])):
        from socialai_agent.agents.targeting import suggest_targeting
        assert await suggest_targeting({"niche": "Cafe"}) == {}


def test_large_product_image_is_downscaled():
    buf = io.BytesIO()
    Image.new("RGB", (2400, 1200), (200, 120, 40)).save(buf, format="PNG")
    data_url = "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode()

    prepared = prepare_image_for_vision(data_url, max_side=600)

    assert prepared.startswith("data:image/jpeg;base64,")
    assert decode_data_url(prepared).size == (600, 300)


def test_small_image_and_urls_pass_through():
    small = image_to_data_url(Image.new("RGB", (100, 100)))
    assert prepare_image_for_vision(small, max_side=600) == small
    assert prepare_image_for_vision("https://cdn.example.com/a.jpg") == "https://cdn.example.com/a.jpg"


def test_openai_client_is_reused():
    _openai_client.cache_clear()
    with patch("socialai_agent.agents._completion.create_openai_client", side_effect=lambda: object()) as factory:
        assert _openai_client() is _openai_client()
    assert factory.call_count == 1
    _openai_client.cache_clear()


@pytest.mark.asyncio
async def test_logo_is_rendered_from_description():
    with (
        patch(
            "socialai_agent.agents.brand_assets.complete_json",
            new=AsyncMock(return_value={"description": "Teal LC monogram"}),
        ),
        patch(
            "socialai_agent.agents.brand_assets.render_image",
            new=AsyncMock(return_value="data:image/png;base64,AAAA"),
        ) as render,
    ):
        from socialai_agent.agents.brand_assets import generate_logo
        logo = await generate_logo("Loop", "Cafe")

    assert logo == {"description": "Teal LC monogram", "image": "data:image/png;base64,AAAA"}
    assert render.await_args.args[0].startswith("Teal LC monogram")
    assert render.await_args.args[1] == render.await_args.args[2]


@pytest.mark.asyncio
async def test_empty_description_skips_rendering():
    with (
        patch("socialai_agent.agents.visual.complete_json", new=AsyncMock(return_value={})),
        patch("socialai_agent.agents.visual.render_image", new=AsyncMock()) as render,
    ):
        from socialai_agent.agents.visual import generate_ad_visual
        visual = await generate_ad_visual("Loop", "", "", {"headline": "h"})

    assert visual == {"description": "", "image": None}
    render.assert_not_awaited()


@pytest.mark.asyncio
async def test_render_image_returns_png_data_url():
    result = {"images": [{"url": "https://fal.media/files/ad.png"}]}
    with (
        patch("socialai_agent.agents._rendering.fal_client.run_async", new=AsyncMock(return_value=result)) as run,
        patch(
            "socialai_agent.agents._rendering.download_image",
            new=AsyncMock(return_value=Image.new("RGB", (8, 8))),
        ) as download,
    ):
        data_url = await render_image("A latte ad", 768, 1024)

    assert data_url.startswith("data:image/png;base64,")
    assert run.await_args.kwargs["arguments"]["image_size"] == {"width": 768, "height": 1024}
    download.assert_awaited_once_with("https://fal.media/files/ad.png")


@pytest.mark.asyncio
async def test_render_image_can_be_disabled():
    with (
        patch("socialai_agent.agents._rendering.get_settings") as settings,
        patch("socialai_agent.agents._rendering.fal_client.run_async", new=AsyncMock()) as run,
    ):
        settings.return_value = MagicMock(image_generation=False)
        assert await render_image("A latte ad", 768, 1024) is None
    run.assert_not_awaited()
