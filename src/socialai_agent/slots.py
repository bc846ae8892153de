"""
작업 슬롯별 single-flight 가드

슬롯마다 진행 중인 요청은 최대 1개입니다. 두 번째 요청은 대기열에 넣지 않고 거부합니다.
모든 티켓은 단조 증가하는 시퀀스 번호를 가지며, 결과는 자기 티켓이 여전히
해당 슬롯의 최신 티켓일 때만 상태에 반영합니다 (reset 이후 늦게 도착한 응답 차단).
"""
from __future__ import annotations

import itertools
from enum import Enum

from socialai_agent.errors import SlotBusyError


class Slot(str, Enum):
    NAMES = "names"
    IMAGE_PROMPTS = "image_prompts"
    LOGO = "logo"
    PRODUCT_IMAGE = "product_image"
    CONCEPTS = "concepts"
    VISUAL = "visual"
    TARGETING = "targeting"
    LOGIN = "login"
    PORTFOLIOS = "portfolios"
    ASSETS = "assets"
    LAUNCH = "launch"


class SlotGuard:
    def __init__(self):
        self._sequence = itertools.count(1)
        self._pending: dict[Slot, int] = {}
        self._current: dict[Slot, int] = {}

    def is_busy(self, slot: Slot) -> bool:
        return slot in self._pending

    def acquire(self, slot: Slot) -> int:
        if slot in self._pending:
            raise SlotBusyError(slot.value)
        ticket = next(self._sequence)
        self._pending[slot] = ticket
        self._current[slot] = ticket
        return ticket

    def release(self, slot: Slot, ticket: int) -> None:
        if self._pending.get(slot) == ticket:
            del self._pending[slot]

    def is_current(self, slot: Slot, ticket: int) -> bool:
        return self._current.get(slot) == ticket

    def invalidate_all(self) -> None:
        """진행 중인 모든 티켓을 무효화합니다. 시퀀스는 계속 증가합니다."""
        self._pending.clear()
        self._current.clear()

