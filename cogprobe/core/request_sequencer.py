"""Per-slot request sequencing for out-of-order async sample responses.

Every sample request is tagged with a monotonic sequence number from its
slot's counter. When the response arrives, accept() decides whether it may
still be applied.

Slots:
- HOVER: supersede-able. Only the newest response is applied, older
  responses arriving late are rejected with StaleResponse.
- CLICK / PATH_STEP: every response is applied, in arrival order.
"""

import logging
from enum import Enum

from cogprobe.exceptions import StaleResponse

logger = logging.getLogger(__name__)


class SampleSlot(Enum):
    """Logical consumer of a sample response."""

    HOVER = "hover"
    CLICK = "click"
    PATH_STEP = "path_step"

    @property
    def is_supersedable(self) -> bool:
        """True if a newer request makes older responses for this slot worthless."""
        return self is SampleSlot.HOVER


class RequestSequencer:
    """Issues sequence numbers and checks responses against them.

    Example:
        seq = RequestSequencer()
        first = seq.issue(SampleSlot.HOVER)   # 1
        second = seq.issue(SampleSlot.HOVER)  # 2
        seq.accept(SampleSlot.HOVER, second)  # applied
        seq.accept(SampleSlot.HOVER, first)   # raises StaleResponse
    """

    def __init__(self) -> None:
        self._issued: dict[SampleSlot, int] = {slot: 0 for slot in SampleSlot}
        self._applied: dict[SampleSlot, int] = {slot: 0 for slot in SampleSlot}

    def issue(self, slot: SampleSlot) -> int:
        """Tag a new request for slot, returns its sequence number (starting at 1)."""
        self._issued[slot] += 1
        return self._issued[slot]

    def accept(self, slot: SampleSlot, sequence: int) -> None:
        """Mark a response as applied.

        Raises:
            StaleResponse: If slot is supersede-able and a response with an equal
                or higher sequence was already applied.
            ValueError: If sequence was never issued.
        """
        if not 1 <= sequence <= self._issued[slot]:
            raise ValueError(f"Sequence {sequence} was never issued for slot {slot.value}")

        latest = self._applied[slot]
        if slot.is_supersedable and sequence <= latest:
            raise StaleResponse(slot=slot.value, sequence=sequence, latest_applied=latest)
        self._applied[slot] = max(latest, sequence)

    def is_stale(self, slot: SampleSlot, sequence: int) -> bool:
        """Check without recording whether accept() would reject sequence."""
        return slot.is_supersedable and sequence <= self._applied[slot]

    def latest_applied(self, slot: SampleSlot) -> int:
        return self._applied[slot]

    def __repr__(self) -> str:
        parts = ", ".join(f"{s.value}={self._applied[s]}/{self._issued[s]}" for s in SampleSlot)
        return f"RequestSequencer({parts})"
