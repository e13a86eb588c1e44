"""Map event detector - turns raw map surface events into typed MapEvents.

Raw events are plain dicts as produced by the map surface:
    {"type": "click" | "pointermove", "coordinate": [x, y],
     "resolution": r, "projection": "EPSG:3857"}

Malformed events are logged and ignored. An event with the same type and
coordinate as the previous one of its type is a replay (Streamlit reruns
report the last event again) and is ignored.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from cogprobe.constants import MapConfig
from cogprobe.model.map_event import Clicked, MapEvent, MapEventType, PointerMoved

logger = logging.getLogger(__name__)

_EVENT_CLASSES: dict[MapEventType, type[MapEvent]] = {
    MapEventType.POINTER_MOVE: PointerMoved,
    MapEventType.CLICK: Clicked,
}


@dataclass
class MapEventDetector:
    """Parses raw map events and suppresses replayed ones.

    Attributes:
        last_keys: Dedup key of the last accepted event per event type
    """

    last_keys: dict[MapEventType, str] = field(default_factory=dict)

    def detect(self, raw: Optional[dict[str, Any]]) -> Optional[MapEvent]:
        """Parse a raw event, returning None for nothing/malformed/replayed.

        Args:
            raw: Raw event dict or None (no event this render)

        Returns:
            PointerMoved or Clicked for new events, None otherwise
        """
        if not raw:
            return None

        event = self.parse(raw=raw)
        if event is None:
            return None

        key = event.make_dedup_key()
        if key == self.last_keys.get(event.event_type):
            logger.debug(f"Replayed map event ignored: {key}")
            return None
        self.last_keys[event.event_type] = key
        return event

    @staticmethod
    def parse(raw: dict[str, Any]) -> Optional[MapEvent]:
        """Convert a raw dict into a typed MapEvent, None if malformed."""
        try:
            event_type = MapEventType(raw.get("type"))
        except ValueError:
            logger.warning(f"Unknown map event type: {raw.get('type')!r}")
            return None

        coordinate = raw.get("coordinate")
        if not isinstance(coordinate, (list, tuple)) or len(coordinate) != 2:
            logger.warning(f"Map event without (x, y) coordinate: {raw}")
            return None

        try:
            x, y = float(coordinate[0]), float(coordinate[1])
            resolution = float(raw.get("resolution"))
        except (TypeError, ValueError):
            logger.warning(f"Map event with non-numeric fields: {raw}")
            return None

        try:
            return _EVENT_CLASSES[event_type](
                coordinate=(x, y),
                resolution=resolution,
                projection=raw.get("projection") or MapConfig.MAP_PROJECTION,
            )
        except ValueError as e:
            logger.warning(f"Invalid map event {raw}: {e}")
            return None

    def clear(self) -> None:
        """Forget replay keys so the same spot can be probed again."""
        self.last_keys.clear()
