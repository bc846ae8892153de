import pytest

from socialai_agent.errors import SlotBusyError
from socialai_agent.slots import Slot, SlotGuard


def test_second_claim_on_busy_slot_is_rejected():
    guard = SlotGuard()
    ticket = guard.acquire(Slot.LOGO)
    assert guard.is_busy(Slot.LOGO)
    assert not guard.is_busy(Slot.VISUAL)
    with pytest.raises(SlotBusyError, match="logo"):
        guard.acquire(Slot.LOGO)

    guard.release(Slot.LOGO, ticket)
    assert not guard.is_busy(Slot.LOGO)
    assert guard.is_current(Slot.LOGO, ticket)


def test_invalidate_makes_outstanding_tickets_stale():
    guard = SlotGuard()
    ticket = guard.acquire(Slot.CONCEPTS)
    guard.invalidate_all()

    newer = guard.acquire(Slot.CONCEPTS)
    guard.release(Slot.CONCEPTS, ticket)

    assert newer > ticket
    assert not guard.is_current(Slot.CONCEPTS, ticket)
    assert guard.is_current(Slot.CONCEPTS, newer)
    assert guard.is_busy(Slot.CONCEPTS)
