"""
크리에이티브 로고 배치 계산

실제 픽셀 합성은 생성 모델이 수행합니다. 여기서는 백분율 좌표를
9개 구역(TOP/CENTER/BOTTOM × LEFT/CENTER/RIGHT) 중 하나로 분류하고,
비주얼 생성 요청에 실을 배치 가이드를 만듭니다.
"""
from __future__ import annotations

from socialai_agent.models.brand import LogoPosition

_LOWER_BAND = 33
_UPPER_BAND = 66

# 드래그 중 로고가 프레임 밖으로 나가지 않도록 제한하는 최대값 (%)
_MAX_DRAG_PERCENT = 90

_DEFAULT_PLACEMENT = "TOP-LEFT corner"
# 위치 미지정 시 프롬프트에 실을 좌표 (%)
_DEFAULT_HINT_PERCENT = 5


def _band(value: float, low: str, high: str) -> str:
    if value < _LOWER_BAND:
        return low
    if value > _UPPER_BAND:
        return high
    return "CENTER"


def classify_zone(x: float, y: float) -> str:
    """좌표(%)를 'TOP-LEFT' 형태의 구역 이름으로 분류합니다. 경계값 33·66은 CENTER."""
    vertical = _band(y, "TOP", "BOTTOM")
    horizontal = _band(x, "LEFT", "RIGHT")
    return f"{vertical}-{horizontal}"


def describe_placement(position: LogoPosition | None) -> str:
    if position is None:
        return _DEFAULT_PLACEMENT
    return classify_zone(position.x, position.y)


def clamp_position(x: float, y: float) -> LogoPosition:
    """드래그 좌표를 [0, 90] 범위로 클램핑합니다."""
    return LogoPosition(
        x=max(0, min(_MAX_DRAG_PERCENT, x)),
        y=max(0, min(_MAX_DRAG_PERCENT, y)),
    )


def placement_hint(position: LogoPosition | None) -> dict:
    """비주얼 합성 요청에 함께 보내는 로고 배치 가이드."""
    if position is None:
        x = y = _DEFAULT_HINT_PERCENT
    else:
        x, y = position.x, position.y
    return {
        "zone": describe_placement(position),
        "x": round(x, 1),
        "y": round(y, 1),
    }
