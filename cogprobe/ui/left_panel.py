"""Sidebar UI renderer for the COG probe.

Renders the left sidebar with:
- Raster source input
- Mode selector (Viewing / Pins / Path)
- Click options and view zoom
- Pin list with a remove button per pin
- Path summary with reset button

All rendering logic is encapsulated to keep the main app.py concise.
"""

import logging
from typing import Any, Literal

import streamlit as st

from cogprobe.constants import CoordinateConfig, MapConfig
from cogprobe.model.message import ModeContextMessage, format_value
from cogprobe.ui.session import ProbeSession

logger = logging.getLogger(__name__)

# (label, transition event, state check)
_MODES = [
    ("👀 View", "stop", "is_idle"),
    ("📍 Pins", "drop_pins", "is_pin_dropping"),
    ("📈 Path", "draw_path", "is_drawing_path"),
]


class SidebarRenderer:
    """Renders the sidebar UI and returns the view settings.

    Mode changes and edits go straight to the session; the returned dict
    only carries settings the app needs for rendering.
    """

    def __init__(self, session: ProbeSession, cog_url: str, zoom: float, hover: bool) -> None:
        """Initialize sidebar renderer with required dependencies."""
        self.session = session
        self.sm = session.state_machine
        self.ctx = session.context
        self.cog_url = cog_url
        self.zoom = zoom
        self.hover = hover

    def render(self) -> dict[str, Any]:
        """Render complete sidebar.

        Returns:
            Dict with keys: cog_url, zoom, hover
        """
        with st.sidebar:
            settings = {"cog_url": self._render_source_input()}

            st.divider()
            self._render_mode_selector()
            ModeContextMessage(
                state_name=self.sm.get_state_name(),
                vertex_count=len(self.ctx.path),
                pins_while_drawing=self.ctx.pins_while_drawing,
            ).display()

            st.divider()
            settings.update(self._render_options())

            st.divider()
            self._render_pin_list()

            st.divider()
            self._render_path_summary()

            return settings

    def _render_source_input(self) -> str:
        st.markdown("### 🗺️ Raster Source")
        return st.text_input(
            "COG URL or local path",
            value=self.cog_url,
            help="Cloud-optimized GeoTIFF; remote files are read with HTTP range requests",
        ).strip()

    def _render_mode_selector(self) -> None:
        """Render one button per mode; the active mode is highlighted."""
        st.markdown("### 🧭 Mode")
        cols = st.columns(len(_MODES))
        for col, (label, event, check) in zip(cols, _MODES):
            active = getattr(self.sm, check)
            button_type: Literal["primary", "secondary"] = "primary" if active else "secondary"
            with col:
                if st.button(label, width="stretch", type=button_type, key=f"mode_btn_{event}", disabled=active):
                    if self.sm.try_transition(event):
                        logger.info(f"UI: Mode set to {self.sm.get_state_name()}")
                        st.rerun()

    def _render_options(self) -> dict[str, Any]:
        st.markdown("### ⚙️ Options")
        self.ctx.pins_while_drawing = st.checkbox(
            "Drop pins while drawing",
            value=self.ctx.pins_while_drawing,
            help="Each path click also drops a pin",
        )
        self.ctx.single_pin = st.checkbox(
            "Keep only the latest pin",
            value=self.ctx.single_pin,
            help="A new pin replaces the previous one",
        )
        hover = st.checkbox(
            "Hover readout",
            value=self.hover,
            help="Sample under the pointer (reruns the app on every hover)",
        )
        zoom = st.slider(
            "Zoom",
            min_value=0.0,
            max_value=20.0,
            value=float(self.zoom),
            step=0.5,
            help="Map zoom; also picks the raster detail level that is sampled",
        )
        return {"hover": hover, "zoom": zoom}

    def _render_pin_list(self) -> None:
        pins = self.ctx.pins.list()
        st.markdown(f"### 📍 Pins ({len(pins)})")
        if not pins:
            st.caption("No pins yet")
            return

        d = CoordinateConfig.DISPLAY_DECIMALS
        for pin in pins:
            col_text, col_btn = st.columns([4, 1])
            with col_text:
                st.markdown(
                    f"**#{pin.id}** {pin.lat:.{d}f}, {pin.lon:.{d}f}  \n**Value:** {format_value(pin.value)}"
                )
            with col_btn:
                if st.button("🗑️", key=f"remove_pin_{pin.id}", help=f"Remove pin {pin.id}"):
                    self.session.remove_pin(pin_id=pin.id)
                    st.rerun()

        if st.button("Clear all pins", width="stretch"):
            for pin in pins:
                self.session.remove_pin(pin_id=pin.id)
            st.rerun()

    def _render_path_summary(self) -> None:
        st.markdown(f"### 📈 Path ({len(self.ctx.path)} points)")
        if st.button("🔄 Reset Path", width="stretch", disabled=self.ctx.path.is_empty):
            self.session.reset_path()
            st.rerun()


def default_view_settings() -> dict[str, Any]:
    """Initial sidebar settings."""
    return {"zoom": float(MapConfig.DEFAULT_ZOOM), "hover": False}
