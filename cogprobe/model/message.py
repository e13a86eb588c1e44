"""Message - User-facing messages for the COG probe UI.

Architecture:
- SIDEBAR: ONE blue info message showing the current mode and what clicks do
- UNDER MAP: ONE readout of the last sample (Lat / Lon / Value or N/A)
- TOASTS: Transient notices for samples that failed or fell outside the raster

Failed and no-data samples are shown as "N/A" readouts; they never block interaction.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cogprobe.constants import CoordinateConfig
from cogprobe.model.sample_result import SampleResult

NO_DATA_TEXT = "N/A"


def format_value(value: Optional[float]) -> str:
    """Format a sampled value for display, "N/A" for no data."""
    if value is None:
        return NO_DATA_TEXT
    return f"{value:.{CoordinateConfig.VALUE_DECIMALS}f}"


class MessageLevel(Enum):
    """Display level for UI messages."""

    INFO = "info"  # Blue - context/status
    WARNING = "warning"  # Yellow - action instructions
    ERROR = "error"  # Red - failures


@dataclass(frozen=True)
class Message(ABC):
    """Abstract base class for user-facing messages displayed inline (sidebars/panels)."""

    @property
    @abstractmethod
    def message(self) -> str:
        """Formatted message for display in Streamlit."""
        raise NotImplementedError

    @property
    @abstractmethod
    def level(self) -> MessageLevel:
        """Display level."""
        raise NotImplementedError

    def display(self) -> None:
        """Render this message using the appropriate Streamlit function."""
        import streamlit as st

        render_fn = {
            MessageLevel.INFO: st.info,
            MessageLevel.WARNING: st.warning,
            MessageLevel.ERROR: st.error,
        }[self.level]
        render_fn(self.message)


@dataclass(frozen=True)
class ToastMessage(ABC):
    """Abstract base class for transient popup notifications."""

    @property
    @abstractmethod
    def message(self) -> str:
        """Formatted message for the toast notification."""
        raise NotImplementedError

    @property
    @abstractmethod
    def icon(self) -> str:
        """Icon to show in toast. Override in subclasses."""
        raise NotImplementedError

    def display(self) -> None:
        """Show this message as a toast notification and log it."""
        import streamlit as st

        logger = logging.getLogger(__name__)
        logger.info(f"[TOAST] {self.icon} {self.message}")
        st.toast(f"{self.icon} {self.message}")


# =============================================================================
# TOAST MESSAGES
# =============================================================================


@dataclass(frozen=True)
class OutsideRasterMessage(ToastMessage):
    """User probed a point without raster coverage."""

    lat: float
    lon: float

    @property
    def icon(self) -> str:
        return "📍"

    @property
    def message(self) -> str:
        return f"No Data — Point ({self.lat:.4f}, {self.lon:.4f}) has no raster value."


@dataclass(frozen=True)
class SampleFailedMessage(ToastMessage):
    """Raster backend failed or timed out for a probe."""

    lat: float
    lon: float

    @property
    def icon(self) -> str:
        return "⚠️"

    @property
    def message(self) -> str:
        return f"Raster Unavailable — Could not read ({self.lat:.4f}, {self.lon:.4f}). Showing N/A."


# =============================================================================
# UNDER MAP - Sample readout
# =============================================================================


@dataclass(frozen=True)
class ProbeReadoutMessage(Message):
    """Readout of a single sample, as in the pin overlay.

    Example:
        **Lat:** 20.59370 · **Lon:** 78.96290 · **Value:** 245.70
    """

    result: SampleResult

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        d = CoordinateConfig.DISPLAY_DECIMALS
        point = self.result.point
        return (
            f"**Lat:** {point.lat:.{d}f} · **Lon:** {point.lon:.{d}f} · "
            f"**Value:** {format_value(self.result.value)}"
        )


def toast_for_result(result: SampleResult) -> Optional[ToastMessage]:
    """Pick the toast to show for a sample without value, or None if it has one."""
    if result.has_value:
        return None
    if result.is_unavailable:
        return SampleFailedMessage(lat=result.point.lat, lon=result.point.lon)
    return OutsideRasterMessage(lat=result.point.lat, lon=result.point.lon)


# =============================================================================
# SIDEBAR - Mode context (BLUE)
# =============================================================================


@dataclass(frozen=True)
class ModeContextMessage(Message):
    """Sidebar: what clicking the map does in the current state."""

    state_name: str
    vertex_count: int = 0
    pins_while_drawing: bool = True

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        if self.state_name == "PinDropping":
            return "📍 **Pin Mode** — Click the map to drop a pin with the raster value."
        if self.state_name in ("PathEmpty", "PathAccumulating"):
            also = " Each click also drops a pin." if self.pins_while_drawing else ""
            return (
                f"📈 **Path Mode** — {self.vertex_count} point(s). "
                f"Click the map to extend the elevation profile.{also}"
            )
        return "👀 **Viewing** — Hover readout only. Pick a mode to start probing."
