"""PinStore - ordered collection of dropped pins.

Owns all Pin objects of one session. Identifiers are assigned from a
monotonic counter and are never reused, even after removal or clear().
"""

import logging
from typing import Optional

from cogprobe.model.geo_point import GeoPoint
from cogprobe.model.pin import Pin

logger = logging.getLogger(__name__)


class PinStore:
    """Insertion-ordered pin collection with stable ids.

    Example:
        store = PinStore()
        pin = store.add(point=GeoPoint(lon=78.96, lat=20.59), value=245.7)
        store.remove(pin_id=pin.id)  # True
        store.remove(pin_id=pin.id)  # False, already gone
    """

    def __init__(self) -> None:
        self._pins: dict[int, Pin] = {}
        self._next_id = 1

    def add(self, point: GeoPoint, value: Optional[float]) -> Pin:
        """Append a new pin with the next identifier.

        Args:
            point: Pin location
            value: Sampled value, None for no data

        Returns:
            The created Pin.
        """
        pin = Pin(id=self._next_id, point=point, value=value)
        self._next_id += 1
        self._pins[pin.id] = pin
        logger.info(f"[PIN] Added {pin}")
        return pin

    def remove(self, pin_id: int) -> bool:
        """Remove a pin by id.

        Returns:
            True if the pin existed and was removed, False otherwise.
        """
        removed = self._pins.pop(pin_id, None)
        if removed is None:
            logger.debug(f"[PIN] Remove ignored: no pin {pin_id}")
            return False
        logger.info(f"[PIN] Removed pin {pin_id}")
        return True

    def get(self, pin_id: int) -> Optional[Pin]:
        """Look up a pin by id."""
        return self._pins.get(pin_id)

    def list(self) -> tuple[Pin, ...]:
        """Read-only snapshot in insertion order."""
        return tuple(self._pins.values())

    def clear(self) -> None:
        """Remove all pins. The id counter keeps counting."""
        self._pins.clear()

    def __len__(self) -> int:
        return len(self._pins)

    def __repr__(self) -> str:
        return f"PinStore(pins={len(self._pins)}, next_id={self._next_id})"
