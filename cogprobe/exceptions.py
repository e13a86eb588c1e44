"""Error kinds raised by the sampling engine.

- InvalidCoordinate: malformed coordinate input, propagated to the caller
- SampleUnavailable: raster read failed, converted to a no-data result by the session
- StaleResponse: superseded sample response, dropped silently by the session
"""


class InvalidCoordinate(ValueError):
    """Coordinate is NaN, infinite, or outside the valid range of its frame."""


class SampleUnavailable(RuntimeError):
    """Raster backend could not produce a value (I/O error, timeout)."""


class StaleResponse(Exception):
    """Sample response arrived after a newer response for the same slot was applied."""

    def __init__(self, slot: str, sequence: int, latest_applied: int) -> None:
        self.slot = slot
        self.sequence = sequence
        self.latest_applied = latest_applied
        super().__init__(f"Stale {slot} response #{sequence} (latest applied #{latest_applied})")
