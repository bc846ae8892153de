import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

from openai import AsyncOpenAI

from socialai_agent.config import get_settings
from socialai_agent.errors import ProxyAuthorizationError
from socialai_agent.utils.http_client import create_openai_client

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent.parent / "utils/prompt_templates"
_FENCE_RE = re.compile(r"```(?:json)?")


@lru_cache(maxsize=1)
def _openai_client() -> AsyncOpenAI:
    """프로세스 당 하나의 클라이언트를 재사용합니다 (연결 풀 공유)."""
    return create_openai_client()


def load_template(name: str) -> str:
    return (_TEMPLATE_DIR / f"{name}.txt").read_text(encoding="utf-8")


def _parse_json(text: str | None) -> Any:
    """모델 응답 텍스트를 JSON으로 파싱합니다. 비어 있거나 깨져 있으면 빈 dict."""
    if not text:
        return {}
    clean = _FENCE_RE.sub("", text).strip()
    try:
        return json.loads(clean)
    except json.JSONDecodeError:
        logger.warning("Model returned non-JSON content (%d chars)", len(clean))
        return {}


async def complete_json(
    prompt: str,
    model: str | None = None,
    max_tokens: int = 1024,
    image_url: str | None = None,
) -> Any:
    """JSON 모드로 chat completion을 호출하고 파싱된 결과를 반환합니다."""
    settings = get_settings()
    if not settings.openai_api_key:
        raise ProxyAuthorizationError("OPENAI_API_KEY environment variable is not set")

    client = _openai_client()
    content: str | list[dict] = prompt
    if image_url:
        content = [
            {"type": "image_url", "image_url": {"url": image_url, "detail": "low"}},
            {"type": "text", "text": prompt},
        ]

    response = await client.chat.completions.create(
        model=model or settings.text_model,
        messages=[{"role": "user", "content": content}],
        response_format={"type": "json_object"},
        max_tokens=max_tokens,
    )
    return _parse_json(response.choices[0].message.content)
