"""
Meta 로그인 (OAuth implicit flow) 및 액세스 토큰 세션

로그인은 두 단계로 진행됩니다.
  1) open(): 인증 URL을 브라우저/팝업으로 연다
  2) wait(): 콜백이 deliver()로 넘겨주는 단일 AuthMessage를 기다린다 (타임아웃·취소 가능)
"""
from __future__ import annotations

import asyncio
import logging
import webbrowser
from collections.abc import Callable
from pathlib import Path
from typing import Literal
from urllib.parse import parse_qs, urlencode

from pydantic import BaseModel

from socialai_agent.config import get_settings
from socialai_agent.errors import AuthHandoffError

logger = logging.getLogger(__name__)

AUTH_SUCCESS_MESSAGE = "FACEBOOK_AUTH_SUCCESS"

OAUTH_SCOPES = (
    "public_profile",
    "email",
    "pages_show_list",
    "pages_manage_metadata",
    "pages_read_engagement",
    "pages_manage_posts",
    "ads_read",
    "ads_management",
    "business_management",
)


class AuthMessage(BaseModel):
    type: Literal["FACEBOOK_AUTH_SUCCESS"] = AUTH_SUCCESS_MESSAGE
    token: str


class TokenSession:
    """워크플로우 세션에 묶인 bearer 토큰 저장소.

    메모리 캐시를 우선 사용하고, store_path가 있으면 파일에도 기록해 재시작 후 복구합니다.
    갱신(refresh) 로직은 없습니다. 만료는 일반 요청 실패로 드러납니다.
    """

    def __init__(self, store_path: str | Path | None = None):
        self._token: str | None = None
        self._store = Path(store_path) if store_path else None

    def set(self, token: str) -> None:
        self._token = token
        if self._store is not None:
            self._store.write_text(token, encoding="utf-8")

    def get(self) -> str | None:
        if self._token:
            return self._token
        if self._store is not None and self._store.exists():
            self._token = self._store.read_text(encoding="utf-8").strip() or None
        return self._token

    def clear(self) -> None:
        self._token = None
        if self._store is not None:
            self._store.unlink(missing_ok=True)


def build_authorization_url(
    app_id: str,
    redirect_uri: str | None = None,
    state: str | None = None,
) -> str:
    settings = get_settings()
    query = urlencode(
        {
            "client_id": app_id,
            "redirect_uri": redirect_uri or settings.oauth_redirect_uri,
            "state": state or settings.oauth_state,
            "response_type": "token",
            "scope": ",".join(OAUTH_SCOPES),
        }
    )
    return f"{settings.oauth_dialog_url}/{settings.graph_api_version}/dialog/oauth?{query}"


def parse_callback_fragment(fragment: str) -> str | None:
    """리다이렉트 URL의 fragment(#access_token=...)에서 토큰을 꺼냅니다."""
    fragment = fragment.split("#", 1)[-1]
    if "access_token=" not in fragment:
        return None
    values = parse_qs(fragment).get("access_token")
    return values[0] if values else None


class AuthHandoff:
    """로그인 컨텍스트를 열고 단일 채널로 토큰을 전달받는 핸드오프."""

    def __init__(self, opener: Callable[[str], object] = webbrowser.open):
        self._opener = opener
        self._pending: asyncio.Future[str] | None = None

    @property
    def is_open(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def open(self, authorization_url: str) -> None:
        if self.is_open:
            raise AuthHandoffError("A login window is already open")
        self._pending = asyncio.get_running_loop().create_future()
        logger.info("Opening Facebook login: %s", authorization_url)
        self._opener(authorization_url)

    def deliver(self, message: AuthMessage | dict) -> bool:
        """콜백 쪽에서 토큰 메시지를 넘깁니다. 대기 중인 핸드오프가 없으면 False."""
        if isinstance(message, dict):
            message = AuthMessage.model_validate(message)
        if not self.is_open:
            logger.warning("Dropping auth message: no login in progress")
            return False
        self._pending.set_result(message.token)
        return True

    def deliver_fragment(self, fragment: str) -> bool:
        token = parse_callback_fragment(fragment)
        if token is None:
            return False
        return self.deliver(AuthMessage(token=token))

    def cancel(self) -> None:
        if self.is_open:
            self._pending.cancel()

    async def wait(self, timeout: float | None = None) -> str:
        if self._pending is None:
            raise AuthHandoffError("Login was not started")
        timeout = timeout if timeout is not None else get_settings().oauth_timeout
        try:
            return await asyncio.wait_for(asyncio.shield(self._pending), timeout)
        except asyncio.TimeoutError as exc:
            self._pending.cancel()
            raise AuthHandoffError("Login timed out. Please try again.") from exc
        except asyncio.CancelledError as exc:
            if not self._pending.cancelled():
                raise
            raise AuthHandoffError("Login was cancelled.") from exc
        finally:
            self._pending = None

    async def authorize(self, app_id: str, timeout: float | None = None) -> str:
        """open → wait 를 한 번에 수행합니다."""
        self.open(build_authorization_url(app_id))
        return await self.wait(timeout)
