"""
AI 프록시 서버

브라우저 앱이 API 키 없이 호출할 수 있도록 생성 작업을 서버 측에서 대행합니다.
모든 작업은 POST /api/generate 에 `{operation: <name>, ...}` envelope로 들어옵니다.

사용법:
  uv run python -m socialai_agent.server
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import openai
from fastapi import Body, FastAPI
from fastapi.responses import JSONResponse

from socialai_agent import agents
from socialai_agent.config import get_settings
from socialai_agent.errors import ProxyAuthorizationError

logger = logging.getLogger(__name__)

app = FastAPI(title="SocialAI Proxy")


class MissingFieldError(Exception):
    pass


def _require(params: dict, *names: str) -> None:
    missing = [n for n in names if not params.get(n)]
    if missing:
        raise MissingFieldError(f"{' and '.join(missing)} parameter{'s are' if len(missing) > 1 else ' is'} required")


async def _business_names(params: dict) -> dict:
    _require(params, "niche")
    return {"names": await agents.generate_business_names(params["niche"])}


async def _image_prompts(params: dict) -> dict:
    _require(params, "niche")
    return {"prompts": await agents.generate_image_prompts(params["niche"])}


async def _logo(params: dict) -> dict:
    _require(params, "brandName", "niche")
    return await agents.generate_logo(params["brandName"], params["niche"])


async def _product_image(params: dict) -> dict:
    _require(params, "brandName", "niche")
    return await agents.generate_product_image(params["brandName"], params["niche"])


async def _ad_concepts(params: dict) -> list:
    _require(params, "brandProfile")
    return await agents.generate_ad_concepts(params["brandProfile"])


async def _ad_visual(params: dict) -> dict:
    _require(params, "brandName", "adConcept")
    return await agents.generate_ad_visual(
        brand_name=params["brandName"],
        logo_description=params.get("logoDescription") or "",
        product_description=params.get("productDescription") or "",
        ad_concept=params["adConcept"],
        logo_placement=params.get("logoPlacement"),
    )


async def _targeting(params: dict) -> dict:
    _require(params, "brandProfile")
    return await agents.suggest_targeting(params["brandProfile"], params.get("platform") or "Meta")


OPERATIONS: dict[str, Callable[[dict], Awaitable[Any]]] = {
    "generateBusinessNames": _business_names,
    "generateImagePrompts": _image_prompts,
    "generateLogo": _logo,
    "generateProductImage": _product_image,
    "generateAdConcepts": _ad_concepts,
    "generateAdVisual": _ad_visual,
    "generateTargetingSuggestions": _targeting,
}


def _error(status: int, message: str, code: str | None = None) -> JSONResponse:
    body = {"error": message}
    if code:
        body["code"] = code
    return JSONResponse(status_code=status, content=body)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok"}


@app.post(get_settings().proxy_path)
async def generate(envelope: dict[str, Any] = Body(...)):
    params = dict(envelope)
    operation = params.pop("operation", None)
    handler = OPERATIONS.get(operation)
    if handler is None:
        return _error(400, "Unknown operation")

    try:
        return await handler(params)
    except MissingFieldError as exc:
        return _error(400, str(exc))
    except (ProxyAuthorizationError, openai.AuthenticationError, openai.PermissionDeniedError) as exc:
        logger.error("Authorization failure on %s: %s", operation, exc)
        return _error(403, "Authorization failed - please check API key configuration", "AUTH_ERROR")
    except openai.RateLimitError as exc:
        logger.warning("Upstream rate limit on %s: %s", operation, exc)
        return _error(429, "Rate limit exceeded - please try again in a few moments", "RATE_LIMIT")
    except Exception:
        logger.exception("API error on %s", operation)
        return _error(500, "Server error processing your request - please try again", "SERVER_ERROR")


def main() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = get_settings()
    uvicorn.run(app, host=settings.server_host, port=settings.server_port)


if __name__ == "__main__":
    main()
