"""Meta Graph 클라이언트 및 로그인 핸드오프 테스트"""
import asyncio
import json
from datetime import date
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from socialai_agent.clients.auth import (
    OAUTH_SCOPES,
    AuthHandoff,
    AuthMessage,
    TokenSession,
    build_authorization_url,
    parse_callback_fragment,
)
from socialai_agent.clients.meta_graph import MetaGraphClient, build_campaign_payload
from socialai_agent.errors import AuthHandoffError, GraphAPIError
from socialai_agent.models.campaign import CampaignSettings
from socialai_agent.models.meta import AssetType


def _graph(handler, token: str | None = "user-token"):
    session = TokenSession()
    if token:
        session.set(token)
    http = httpx.AsyncClient(
        base_url="https://graph.facebook.com/v19.0",
        transport=httpx.MockTransport(handler),
    )
    return MetaGraphClient(session=session, http_client=http)


@pytest.mark.asyncio
async def test_requests_without_token_fail():
    client = _graph(lambda r: httpx.Response(200, json={}), token=None)
    with pytest.raises(GraphAPIError, match="log in"):
        await client.get_assets()


@pytest.mark.asyncio
async def test_portfolios_are_parsed():
    def handler(request):
        assert request.url.path == "/v19.0/me/businesses"
        assert request.url.params["access_token"] == "user-token"
        return httpx.Response(
            200,
            json={"data": [
                {"id": "b1", "name": "Loop Holdings", "verification_status": "verified"},
                {"id": "b2", "name": "Side Project", "verification_status": "pending_submission"},
            ]},
        )

    portfolios = await _graph(handler).get_portfolios()
    assert [(p.id, p.verification_status) for p in portfolios] == [("b1", "verified"), ("b2", "unverified")]


@pytest.mark.asyncio
async def test_portfolio_failure_returns_empty_list():
    client = _graph(lambda r: httpx.Response(400, json={"error": {"message": "Permissions error"}}))
    assert await client.get_portfolios() == []


@pytest.mark.asyncio
async def test_personal_assets_are_flattened():
    def handler(request):
        assert request.url.path == "/v19.0/me"
        return httpx.Response(
            200,
            json={
                "accounts": {"data": [
                    {
                        "id": "p1",
                        "name": "Loop Coffee",
                        "access_token": "page-token",
                        "instagram_business_account": {"id": "ig1", "username": "loopcoffee"},
                    },
                    {"id": "p2", "name": "Loop Events"},
                ]},
                "adaccounts": {"data": [{"account_id": "999"}]},
            },
        )

    assets = await _graph(handler).get_assets("personal")

    assert [(a.type, a.id, a.name) for a in assets] == [
        (AssetType.PAGE, "p1", "Loop Coffee"),
        (AssetType.INSTAGRAM, "ig1", "@loopcoffee"),
        (AssetType.PAGE, "p2", "Loop Events"),
        (AssetType.AD_ACCOUNT, "999", "Ad Account (999)"),
    ]
    assert assets[0].access_token == "page-token"


@pytest.mark.asyncio
async def test_business_assets_use_owned_edges():
    def handler(request):
        assert request.url.path == "/v19.0/b1"
        assert "owned_pages" in request.url.params["fields"]
        return httpx.Response(
            200,
            json={
                "owned_pages": {"data": [{"id": "p9", "name": "Biz Page"}]},
                "owned_ad_accounts": {"data": [{"account_id": "42", "name": "Main"}]},
            },
        )

    assets = await _graph(handler).get_assets("b1")
    assert [a.id for a in assets] == ["p9", "42"]


@pytest.mark.asyncio
async def test_launch_always_creates_paused_campaign():
    sent = []

    def handler(request):
        assert request.method == "POST"
        assert request.url.path == "/v19.0/act_999/campaigns"
        sent.append(json.loads(request.content))
        return httpx.Response(200, json={"id": "cmp-1"})

    settings = CampaignSettings(objective="SALES", budget_type="DAILY", budget_amount=50)
    campaign_id = await _graph(handler).launch_campaign("999", settings)

    assert campaign_id == "cmp-1"
    assert sent[0]["status"] == "PAUSED"
    assert sent[0]["objective"] == "OUTCOME_SALES"
    assert sent[0]["daily_budget"] == 5000
    assert "lifetime_budget" not in sent[0]


def test_lifetime_budget_payload():
    settings = CampaignSettings(
        budget_type="LIFETIME",
        budget_amount=120.5,
        start_date="2026-11-01",
        end_date="2026-11-08",
    )
    payload = build_campaign_payload(settings, today=date(2026, 10, 16))

    assert payload["name"] == "SocialAI Campaign - 2026-10-16"
    assert payload["status"] == "PAUSED"
    assert payload["lifetime_budget"] == 12050
    assert payload["stop_time"] == "2026-11-08"


@pytest.mark.asyncio
async def test_graph_error_message_is_surfaced():
    client = _graph(lambda r: httpx.Response(400, json={"error": {"message": "Invalid ad account"}}))
    with pytest.raises(GraphAPIError, match="Invalid ad account"):
        await client.launch_campaign("1", CampaignSettings())


@pytest.mark.asyncio
async def test_launch_without_id_fails():
    client = _graph(lambda r: httpx.Response(200, json={"success": True}))
    with pytest.raises(GraphAPIError):
        await client.launch_campaign("1", CampaignSettings())


def test_token_session_recovers_from_store(tmp_path):
    store = tmp_path / "fb_access_token"
    TokenSession(store).set("abc")

    recovered = TokenSession(store)
    assert recovered.get() == "abc"

    recovered.clear()
    assert recovered.get() is None
    assert not store.exists()


def test_authorization_url():
    url = build_authorization_url("12345", redirect_uri="https://app.example.com/", state="s1")
    parts = urlsplit(url)
    query = parse_qs(parts.query)

    assert parts.path == "/v19.0/dialog/oauth"
    assert query["client_id"] == ["12345"]
    assert query["response_type"] == ["token"]
    assert query["state"] == ["s1"]
    assert query["scope"][0].split(",") == list(OAUTH_SCOPES)


def test_parse_callback_fragment():
    assert parse_callback_fragment("https://app/#access_token=tok123&expires_in=3600") == "tok123"
    assert parse_callback_fragment("#state=x") is None


@pytest.mark.asyncio
async def test_handoff_delivers_token():
    opened = []
    handoff = AuthHandoff(opener=opened.append)

    async def callback():
        await asyncio.sleep(0)
        assert handoff.deliver({"type": "FACEBOOK_AUTH_SUCCESS", "token": "tok"})

    task = asyncio.create_task(callback())
    token = await handoff.authorize("12345", timeout=1)
    await task

    assert token == "tok"
    assert opened and "client_id=12345" in opened[0]
    assert handoff.is_open is False


@pytest.mark.asyncio
async def test_handoff_timeout_and_cancel():
    handoff = AuthHandoff(opener=lambda url: None)
    handoff.open("https://login")
    with pytest.raises(AuthHandoffError, match="timed out"):
        await handoff.wait(timeout=0.01)

    handoff.open("https://login")
    asyncio.get_running_loop().call_soon(handoff.cancel)
    with pytest.raises(AuthHandoffError, match="cancelled"):
        await handoff.wait(timeout=1)

    assert handoff.deliver(AuthMessage(token="late")) is False


@pytest.mark.asyncio
async def test_portfolio_records_without_id_are_skipped():
    client = _graph(lambda r: httpx.Response(200, json={"data": [{"name": "x"}, "junk"]}))
    assert await client.get_portfolios() == []


@pytest.mark.asyncio
async def test_partial_asset_records_are_skipped():
    def handler(request):
        return httpx.Response(
            200,
            json={
                "accounts": {"data": [
                    {"name": "No id"},
                    {"id": "p1", "name": "Loop Coffee", "instagram_business_account": {"username": "x"}},
                ]},
                "adaccounts": {"data": [{"name": "No account id"}, {"account_id": "7"}]},
            },
        )

    assets = await _graph(handler).get_assets()
    assert [(a.type, a.id) for a in assets] == [(AssetType.PAGE, "p1"), (AssetType.AD_ACCOUNT, "7")]


@pytest.mark.asyncio
async def test_string_error_body_is_normalized():
    client = _graph(lambda r: httpx.Response(500, json={"error": "internal"}))
    with pytest.raises(GraphAPIError, match="Graph API Request Failed"):
        await client.get_assets("b1")
