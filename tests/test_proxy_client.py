"""AI 프록시 클라이언트 테스트: httpx.MockTransport로 프록시 응답을 흉내냅니다."""
import json

import httpx
import pytest

from socialai_agent.clients.proxy import AIProxyClient, resolve_proxy_endpoint
from socialai_agent.errors import (
    EmptyResultError,
    InputValidationError,
    ProxyAuthorizationError,
    ProxyServerError,
    RateLimitError,
)
from socialai_agent.models.brand import BrandProfile, LogoPosition
from socialai_agent.models.concept import AdConcept

_CONCEPT = {
    "headline": "Mondays taste better",
    "primaryText": "Two lattes for the price of one.",
    "cta": "Visit today",
    "visualDescription": "Latte art on a walnut counter",
    "designVibe": "warm minimal",
    "colorHex": "#6F4E37",
}


def _client(handler, calls=None):
    def recording(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(json.loads(request.content))
        return handler(request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(recording))
    return AIProxyClient(origin="https://ads.example.com", http_client=http)


def test_endpoint_resolution():
    assert resolve_proxy_endpoint("http://localhost:5173") == "http://localhost:3001/api/generate"
    assert resolve_proxy_endpoint("http://127.0.0.1:5173/app") == "http://localhost:3001/api/generate"
    assert resolve_proxy_endpoint("http://localhost:8080") == "http://localhost:8080/api/generate"
    assert resolve_proxy_endpoint("https://ads.example.com/studio/") == "https://ads.example.com/api/generate"


@pytest.mark.asyncio
async def test_empty_niche_is_rejected_before_network():
    calls: list = []
    client = _client(lambda r: httpx.Response(200, json={"names": ["x"]}), calls)

    for niche in ["", "   "]:
        with pytest.raises(InputValidationError):
            await client.generate_business_names(niche)
    with pytest.raises(InputValidationError):
        await client.generate_ad_concepts(BrandProfile(niche=""))

    assert calls == []


@pytest.mark.asyncio
async def test_uniform_envelope_and_names():
    calls: list = []
    client = _client(lambda r: httpx.Response(200, json={"names": ["Bean There", "Daily Grind"]}), calls)

    names = await client.generate_business_names("Coffee Shop")

    assert names == ["Bean There", "Daily Grind"]
    assert calls == [{"operation": "generateBusinessNames", "niche": "Coffee Shop"}]


@pytest.mark.asyncio
async def test_missing_fields_default_to_empty():
    client = _client(lambda r: httpx.Response(200, json={}))

    assert await client.generate_image_prompts("Bakery") == []
    logo = await client.generate_logo("Crumb", "Bakery")
    assert logo.description == ""
    suggestion = await client.generate_targeting_suggestions(BrandProfile(niche="Bakery"))
    assert suggestion.interests == []


@pytest.mark.asyncio
async def test_malformed_payload_is_empty_for_list_operations():
    client = _client(lambda r: httpx.Response(200, json={"names": "not-a-list"}))
    assert await client.generate_business_names("Gym") == []

    client = _client(lambda r: httpx.Response(200, content=b"<html>oops</html>"))
    assert await client.generate_business_names("Gym") == []
    assert await client.generate_ad_concepts(BrandProfile(niche="Gym")) == []


@pytest.mark.asyncio
async def test_concepts_are_numbered_and_truncated():
    calls: list = []
    client = _client(lambda r: httpx.Response(200, json=[_CONCEPT] * 4), calls)

    batch = await client.generate_ad_concepts(
        BrandProfile(business_name="Loop Coffee", niche="Coffee Shop", target_audience="Students")
    )

    assert [c.id for c in batch] == ["concept-0", "concept-1", "concept-2"]
    assert batch[0].primary_text == "Two lattes for the price of one."
    sent = calls[0]["brandProfile"]
    assert sent["name"] == "Loop Coffee"
    assert sent["targetAudience"] == "Students"


@pytest.mark.asyncio
async def test_visual_requires_an_artifact():
    concept = AdConcept.model_validate({**_CONCEPT, "id": "concept-0"})
    profile = BrandProfile(business_name="Loop", niche="Coffee Shop", logo_image="data:image/png;base64,AAAA")

    client = _client(lambda r: httpx.Response(200, json={"description": ""}))
    with pytest.raises(EmptyResultError):
        await client.generate_ad_visual(profile, concept, LogoPosition(x=80, y=80))

    calls: list = []
    client = _client(lambda r: httpx.Response(200, json={"description": "A latte ad"}), calls)
    visual = await client.generate_ad_visual(profile, concept, LogoPosition(x=80, y=80))

    assert visual.description == "A latte ad"
    assert calls[0]["logoPlacement"] == {"zone": "BOTTOM-RIGHT", "x": 80, "y": 80}
    assert calls[0]["adConcept"]["headline"] == "Mondays taste better"


@pytest.mark.parametrize(
    "status, error",
    [
        (403, ProxyAuthorizationError),
        (429, RateLimitError),
        (500, ProxyServerError),
        (502, ProxyServerError),
        (400, InputValidationError),
    ],
)
@pytest.mark.asyncio
async def test_status_codes_map_to_canonical_errors(status, error):
    client = _client(lambda r: httpx.Response(status, json={"error": "niche parameter is required"}))
    with pytest.raises(error) as exc_info:
        await client.generate_business_names("Gym")
    assert str(exc_info.value)


@pytest.mark.asyncio
async def test_connection_failure_is_normalized():
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(boom)
    with pytest.raises(ProxyServerError, match="please try again"):
        await client.generate_business_names("Gym")


@pytest.mark.asyncio
async def test_logo_image_artifact_is_returned():
    client = _client(
        lambda r: httpx.Response(200, json={"description": "LC monogram", "image": "data:image/png;base64,AAAA"})
    )
    logo = await client.generate_logo("Loop", "Coffee Shop")
    assert logo.image == "data:image/png;base64,AAAA"
    assert logo.description == "LC monogram"
