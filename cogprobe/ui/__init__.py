"""User interface components for the COG probe.

File Structure (layout-based naming):
- left_panel.py: Sidebar with source input, mode selection, pins, path
- center_map.py: Pydeck map with pins, path and hover marker
- bottom_chart.py: Plotly elevation profile chart

Core Components:
- session.py: ProbeSession, the engine boundary fed with map events
- state_machine.py: ProbeStateMachine (4 states) + ProbeContext
- event_detector.py: Raw map events to typed MapEvents
- pydeck_click_handler.py: streamlit-deckgl map with event capture

Streamlit modules (left_panel, pydeck_click_handler) are not imported here
so the engine can be used without a running Streamlit app.
"""

from cogprobe.ui.bottom_chart import ProfileChart
from cogprobe.ui.center_map import MapRenderer
from cogprobe.ui.event_detector import MapEventDetector
from cogprobe.ui.session import ProbeSession, ProbeUpdate
from cogprobe.ui.state_machine import ClickTarget, ProbeContext, ProbeStateMachine, TransitionLogger

__all__ = [
    "ProbeSession",
    "ProbeUpdate",
    "ProbeStateMachine",
    "ProbeContext",
    "ClickTarget",
    "TransitionLogger",
    "MapEventDetector",
    "MapRenderer",
    "ProfileChart",
]
