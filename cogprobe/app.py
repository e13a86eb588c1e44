"""COG Probe - Interactive raster probing application.

Click the map to read raster values from a cloud-optimized GeoTIFF, drop
pins, or draw a path and see its elevation profile.

Run: streamlit run cogprobe/app.py
"""

import asyncio
import logging
import traceback
from typing import Optional

import streamlit as st

from cogprobe.constants import AppConfig, ChartConfig, MapConfig, RasterConfig
from cogprobe.core.coordinate_transform import CoordinateTransform
from cogprobe.core.raster_sampler import RasterSampler
from cogprobe.model.message import ProbeReadoutMessage, toast_for_result
from cogprobe.ui.bottom_chart import ProfileChart
from cogprobe.ui.center_map import MapRenderer
from cogprobe.ui.event_detector import MapEventDetector
from cogprobe.ui.left_panel import SidebarRenderer, default_view_settings
from cogprobe.ui.pydeck_click_handler import render_pydeck_map
from cogprobe.ui.session import ProbeSession, ProbeUpdate
from cogprobe.ui.state_machine import ProbeContext

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# SESSION STATE
# =============================================================================


def init_session_state() -> None:
    """Initialize session state with sampler, probe session and UI components."""
    if "cog_url" not in st.session_state:
        local = RasterConfig.LOCAL_COG_PATH
        st.session_state.cog_url = str(local) if local.exists() else RasterConfig.DEFAULT_COG_URL

    if "view" not in st.session_state:
        st.session_state.view = default_view_settings()

    if "transform" not in st.session_state:
        st.session_state.transform = CoordinateTransform(map_projection=MapConfig.MAP_PROJECTION)

    if "probe_session" not in st.session_state:
        st.session_state.probe_session = _create_session(url=st.session_state.cog_url, context=None)

    if "event_detector" not in st.session_state:
        st.session_state.event_detector = MapEventDetector()

    if "map_version" not in st.session_state:
        st.session_state.map_version = 0


def _create_session(
    url: str,
    context: Optional[ProbeContext],
    runner: Optional[asyncio.Runner] = None,
) -> ProbeSession:
    """Create a probe session on a new sampler, keeping pins and path of context and the event loop."""
    return ProbeSession(
        sampler=RasterSampler(url=url),
        transform=st.session_state.transform,
        context=context,
        runner=runner,
    )


def switch_raster(url: str) -> None:
    """Point the session at another raster; pins and path are kept."""
    old: ProbeSession = st.session_state.probe_session
    logger.info(f"Switching raster {st.session_state.cog_url} -> {url}")
    old.sampler.close()
    st.session_state.cog_url = url
    st.session_state.probe_session = _create_session(url=url, context=old.context, runner=old.runner)


def reset_ui_state() -> None:
    """Reset UI state while preserving pins and path.

    Called when an error occurs to recover gracefully. Resets the state
    machine to Idle, the click dedup and the map component.
    """
    logger.info("Resetting UI state due to error recovery")

    old: ProbeSession = st.session_state.probe_session
    context = old.context
    context.state = None
    context.clear_readouts()
    st.session_state.probe_session = ProbeSession(
        sampler=old.sampler, transform=old.transform, context=context, runner=old.runner
    )
    st.session_state.event_detector = MapEventDetector()
    st.session_state.map_version = st.session_state.get("map_version", 0) + 1

    logger.info("UI state reset complete - pins and path preserved")


# =============================================================================
# MAP RENDERING
# =============================================================================


def _render_map() -> Optional[ProbeUpdate]:
    """Render map, process this render's map event and return the resulting update."""
    session: ProbeSession = st.session_state.probe_session
    detector: MapEventDetector = st.session_state.event_detector
    view = st.session_state.view

    snapshot = session.snapshot()
    renderer = MapRenderer(zoom=view["zoom"])
    deck = renderer.render(pins=snapshot.pins, vertices=snapshot.vertices, hover=snapshot.hover)

    raw_event = render_pydeck_map(
        deck=deck,
        key=f"main_map_{st.session_state.map_version}",
        zoom=view["zoom"],
        transform=session.transform,
        height=MapConfig.MAP_HEIGHT_PX,
        hover=view["hover"],
    )

    event = detector.detect(raw=raw_event)
    if event is None:
        return None

    logger.info(f"[MAIN] {type(event).__name__} at {event.coordinate} (state={session.state_machine.get_state_name()})")
    return session.dispatch(event)


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Application entry point."""
    st.set_page_config(page_title=AppConfig.TITLE, page_icon=AppConfig.ICON, layout=AppConfig.LAYOUT)
    init_session_state()

    st.title(AppConfig.TITLE)

    try:
        _run_app_ui()
    except Exception as e:
        # Log full traceback for debugging
        error_msg = f"{type(e).__name__}: {e}"
        full_traceback = traceback.format_exc()
        logger.error(f"[UI] UI error caught: {error_msg}\n{full_traceback}")

        st.error(f"⚠️ [UI] Something went wrong: {error_msg}")

        # Reset UI state while preserving pins and path
        reset_ui_state()

        if st.button("🔄 Reset and Continue", type="primary"):
            st.rerun()


def _run_app_ui() -> None:
    """Run the main application UI. Separated for error handling wrapper."""
    session: ProbeSession = st.session_state.probe_session
    logger.info(f"[MAIN] Render cycle starting: state={session.state_machine.get_state_name()}")

    sidebar = SidebarRenderer(
        session=session,
        cog_url=st.session_state.cog_url,
        zoom=st.session_state.view["zoom"],
        hover=st.session_state.view["hover"],
    )
    settings = sidebar.render()
    st.session_state.view.update(zoom=settings["zoom"], hover=settings["hover"])

    if settings["cog_url"] and settings["cog_url"] != st.session_state.cog_url:
        switch_raster(url=settings["cog_url"])
        st.rerun()

    if st.session_state.cog_url == RasterConfig.DEFAULT_COG_URL:
        st.info("Enter the URL of a cloud-optimized GeoTIFF in the sidebar. Probes show N/A until then.")

    update = _render_map()
    if update is not None and update.result is not None:
        toast = toast_for_result(result=update.result)
        if toast is not None:
            toast.display()
        # Redraw markers and profile with the applied result
        st.rerun()

    session = st.session_state.probe_session
    readout = session.context.last_result or session.context.hover
    if readout is not None:
        ProbeReadoutMessage(result=readout).display()

    profile = session.snapshot().profile
    if profile:
        chart = ProfileChart(width=ChartConfig.DEFAULT_WIDTH, height=ChartConfig.PROFILE_HEIGHT)
        st.plotly_chart(chart.render_profile(samples=profile), width="stretch", key="path_profile")
    elif session.state_machine.is_drawing_path:
        st.caption("Click the map to add points to the elevation profile.")


if __name__ == "__main__":
    main()
