"""
정규화된 예외 계층

클라이언트는 네트워크·파싱 예외를 모두 아래 예외로 변환해 다시 던집니다.
워크플로우는 원시 httpx/openai 예외를 절대 받지 않습니다.
"""


class AdAgentError(Exception):
    """모든 도메인 예외의 기반 클래스. 메시지는 사용자에게 그대로 노출 가능."""


class AdProxyError(AdAgentError):
    """AI 프록시 호출 실패."""


class InputValidationError(AdProxyError):
    """필수 입력 누락. 네트워크 호출 전에 거부됩니다."""


class ProxyAuthorizationError(AdProxyError):
    def __init__(self, message: str = "Authorization failed - please check API key configuration"):
        super().__init__(message)


class RateLimitError(AdProxyError):
    def __init__(self, message: str = "Rate limit exceeded - please try again in a few moments"):
        super().__init__(message)


class ProxyServerError(AdProxyError):
    def __init__(self, message: str = "Server error processing your request - please try again"):
        super().__init__(message)


class EmptyResultError(AdProxyError):
    """단일 결과물이 필수인 작업(비주얼 합성 등)이 빈 응답을 받은 경우."""


class GraphAPIError(AdAgentError):
    """Meta Graph API 요청 실패. 플랫폼이 반환한 메시지를 그대로 담습니다."""


class AuthHandoffError(AdAgentError):
    """OAuth 로그인 핸드오프 실패 (타임아웃·취소)."""


class WorkflowError(AdAgentError):
    """현재 단계에서 허용되지 않는 전이 또는 잘못된 선택."""


class SlotBusyError(AdAgentError):
    def __init__(self, slot: str):
        super().__init__(f"Operation '{slot}' is already in progress")
        self.slot = slot
