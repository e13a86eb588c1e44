"""MapRenderer - Pydeck map rendering for the COG probe.

Renders the probe state on an OpenStreetMap basemap using deck.gl:
- Pins as clickable markers, gray when the raster had no value (ScatterplotLayer)
- The drawn path as a line once it has two vertices (PathLayer)
- Path vertices as small dots (ScatterplotLayer)
- The latest hover readout as a marker (ScatterplotLayer)

Uses [lon, lat] coordinate order and RGBA color lists, data as list[dict].
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import pydeck as pdk

from cogprobe.constants import MapConfig, MarkerConfig, StyleConfig
from cogprobe.model.message import format_value
from cogprobe.model.path_vertex import PathVertex
from cogprobe.model.pin import Pin
from cogprobe.model.sample_result import SampleResult

logger = logging.getLogger(__name__)

# Mapbox GL style for the 2D OpenStreetMap raster basemap.
# pydeck's TileLayer cannot render raster tiles without a JS renderSubLayers
# callback, so the basemap goes through map_style with map_provider="mapbox".
OSM_STYLE: dict[str, object] = {
    "version": 8,
    "sources": {
        "osm": {
            "type": "raster",
            "tiles": [StyleConfig.OSM_TILES],
            "tileSize": 256,
            "attribution": '© <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors',
        }
    },
    "layers": [{"id": "osm", "type": "raster", "source": "osm", "minzoom": 0, "maxzoom": 19}],
}


@dataclass
class LayerCollection:
    """Pydeck layers with z-ordering (back to front): path → vertices → pins → hover."""

    path: list[pdk.Layer] = field(default_factory=list)
    vertices: list[pdk.Layer] = field(default_factory=list)
    pins: list[pdk.Layer] = field(default_factory=list)
    hover: list[pdk.Layer] = field(default_factory=list)

    def get_ordered_layers(self) -> list[pdk.Layer]:
        """Return all layers in correct z-order (back to front)."""
        return self.path + self.vertices + self.pins + self.hover


class MapRenderer:
    """Renders pins, path and hover readout on a Pydeck map.

    Example:
        renderer = MapRenderer(zoom=5)
        deck = renderer.render(pins=update.pins, vertices=update.vertices, hover=update.hover)
    """

    def __init__(
        self,
        center_lat: float = MapConfig.START_CENTER_LAT,
        center_lon: float = MapConfig.START_CENTER_LON,
        zoom: float = MapConfig.DEFAULT_ZOOM,
    ) -> None:
        """Initialize map renderer.

        Args:
            center_lat: Initial map center latitude
            center_lon: Initial map center longitude
            zoom: Initial zoom level
        """
        self.center_lat = center_lat
        self.center_lon = center_lon
        self.zoom = zoom

    def get_view_state(self) -> pdk.ViewState:
        """Create Pydeck ViewState from current settings (top-down, north up)."""
        return pdk.ViewState(
            latitude=self.center_lat,
            longitude=self.center_lon,
            zoom=self.zoom,
            pitch=0,
            bearing=0,
        )

    def render(
        self,
        pins: tuple[Pin, ...] = (),
        vertices: tuple[PathVertex, ...] = (),
        hover: Optional[SampleResult] = None,
    ) -> pdk.Deck:
        """Render complete map with all layers.

        Args:
            pins: Pins to show
            vertices: Path vertices in sequence order
            hover: Latest hover readout

        Returns:
            pdk.Deck object ready for display.
        """
        layers = LayerCollection()

        if len(vertices) > 1:
            layers.path.append(self._create_path_layer(vertices=vertices))
        if vertices:
            layers.vertices.append(self._create_vertex_layer(vertices=vertices))
        if pins:
            layers.pins.append(self._create_pin_layer(pins=pins))
        if hover is not None:
            layers.hover.append(self._create_hover_layer(hover=hover))

        return pdk.Deck(
            map_style=OSM_STYLE,
            map_provider="mapbox",
            initial_view_state=self.get_view_state(),
            layers=layers.get_ordered_layers(),
            tooltip=self._create_tooltip_config(),
        )

    # =========================================================================
    # LAYERS
    # =========================================================================

    @staticmethod
    def _create_pin_layer(pins: tuple[Pin, ...]) -> pdk.Layer:
        pin_data = [
            {
                "type": "pin",
                "id": pin.id,
                "position": [pin.lon, pin.lat],
                "color": MarkerConfig.PIN_COLOR if pin.value is not None else MarkerConfig.PIN_NO_DATA_COLOR,
                "name": f"Pin {pin.id}: {format_value(pin.value)}",
            }
            for pin in pins
        ]
        return pdk.Layer(
            "ScatterplotLayer",
            pin_data,
            get_position="position",
            get_fill_color="color",
            get_line_color=MarkerConfig.PIN_BORDER_COLOR,
            get_radius=MarkerConfig.PIN_RADIUS_PX,
            radius_units="pixels",
            stroked=True,
            line_width_min_pixels=2,
            pickable=True,
            auto_highlight=True,
            id="pins",
        )

    @staticmethod
    def _create_path_layer(vertices: tuple[PathVertex, ...]) -> pdk.Layer:
        """Single line through all vertices in sequence order."""
        path_data = [
            {
                "type": "path",
                "path": [list(v.point.lon_lat) for v in vertices],
                "name": f"Path ({len(vertices)} points)",
            }
        ]
        return pdk.Layer(
            "PathLayer",
            path_data,
            get_path="path",
            get_color=MarkerConfig.PATH_COLOR,
            get_width=MarkerConfig.PATH_WIDTH_PX,
            width_units="pixels",
            pickable=False,
            id="path",
        )

    @staticmethod
    def _create_vertex_layer(vertices: tuple[PathVertex, ...]) -> pdk.Layer:
        vertex_data = [
            {
                "type": "vertex",
                "id": v.sequence,
                "position": list(v.point.lon_lat),
                "name": f"Point {v.sequence + 1}: {format_value(v.value)}",
            }
            for v in vertices
        ]
        return pdk.Layer(
            "ScatterplotLayer",
            vertex_data,
            get_position="position",
            get_fill_color=MarkerConfig.PATH_COLOR,
            get_radius=MarkerConfig.VERTEX_RADIUS_PX,
            radius_units="pixels",
            pickable=True,
            id="vertices",
        )

    @staticmethod
    def _create_hover_layer(hover: SampleResult) -> pdk.Layer:
        hover_data = [
            {
                "type": "hover",
                "position": list(hover.point.lon_lat),
                "name": f"Value: {format_value(hover.value)}",
            }
        ]
        return pdk.Layer(
            "ScatterplotLayer",
            hover_data,
            get_position="position",
            get_fill_color=MarkerConfig.HOVER_COLOR,
            get_radius=MarkerConfig.HOVER_RADIUS_PX,
            radius_units="pixels",
            pickable=False,
            id="hover",
        )

    def _create_tooltip_config(self) -> dict[str, str | dict[str, str]]:
        """Create Pydeck tooltip configuration - name only, details in side panel."""
        return {
            "html": "<b>{name}</b>",
            "style": {
                "backgroundColor": "rgba(255, 255, 255, 0.95)",
                "color": "#333",
                "padding": "6px 10px",
                "borderRadius": "4px",
            },
        }
