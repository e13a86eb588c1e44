"""Pydeck map rendering with click (and optional hover) capture via streamlit-deckgl.

st_deckgl returns the deck.gl event with the picked coordinate as
[lon, lat]. The map surface contract of the engine is map-projection
coordinates plus view resolution, so the event is converted here into
the raw event dict that MapEventDetector parses.
"""

import logging
from typing import Any, Optional

import pydeck as pdk
from streamlit_deckgl import st_deckgl  # type: ignore[import-untyped]

from cogprobe.constants import MapConfig
from cogprobe.core.coordinate_transform import CoordinateTransform
from cogprobe.exceptions import InvalidCoordinate
from cogprobe.model.geo_point import GeoPoint
from cogprobe.model.map_event import MapEventType

logger = logging.getLogger(__name__)

# deck.gl event names -> engine event types
_DECK_EVENT_TYPES = {
    "click": MapEventType.CLICK,
    "hover": MapEventType.POINTER_MOVE,
}


def resolution_for_zoom(zoom: float) -> float:
    """Web Mercator ground resolution (meters per pixel at the equator) for a zoom level."""
    return MapConfig.WEB_MERCATOR_RESOLUTION_Z0 / (2**zoom)


def to_raw_map_event(
    deck_event: Optional[dict[str, Any]],
    zoom: float,
    transform: CoordinateTransform,
) -> Optional[dict[str, Any]]:
    """Convert a st_deckgl event into a raw map event dict.

    Args:
        deck_event: Event returned by st_deckgl, or None
        zoom: Current map zoom (determines the view resolution)
        transform: Map projection transform

    Returns:
        {"type", "coordinate", "resolution", "projection"} or None if not a usable event
    """
    if not deck_event or not isinstance(deck_event, dict):
        return None

    event_name = deck_event.get("eventType", "click")
    event_type = _DECK_EVENT_TYPES.get(event_name)
    if event_type is None:
        logger.debug(f"Ignoring deck.gl event {event_name!r}")
        return None

    coord = deck_event.get("coordinate")
    if not isinstance(coord, (list, tuple)) or len(coord) < 2:
        return None

    try:
        x, y = transform.to_map(GeoPoint(lon=float(coord[0]), lat=float(coord[1])))
    except (InvalidCoordinate, TypeError, ValueError) as e:
        logger.warning(f"Discarding deck.gl event at {coord}: {e}")
        return None

    return {
        "type": event_type.value,
        "coordinate": [x, y],
        "resolution": resolution_for_zoom(zoom=zoom),
        "projection": transform.map_projection,
    }


def render_pydeck_map(
    deck: pdk.Deck,
    key: str,
    zoom: float,
    transform: CoordinateTransform,
    height: int = MapConfig.MAP_HEIGHT_PX,
    hover: bool = False,
) -> Optional[dict[str, Any]]:
    """Render the deck and return the raw map event of this render, if any.

    Args:
        deck: Configured pydeck.Deck object
        key: Unique key for this component instance
        zoom: Zoom the deck is shown at
        transform: Map projection transform
        height: Height in pixels
        hover: Also report hover events (one rerun per hover)

    Returns:
        Raw map event dict or None.
    """
    # MUST pass events to enable event reporting
    events = ["click", "hover"] if hover else ["click"]
    deck_event = st_deckgl(deck, key=key, height=height, events=events)
    return to_raw_map_event(deck_event=deck_event, zoom=zoom, transform=transform)
