"""ProfileChart - Plotly elevation profile rendering.

Renders the profile derived from the drawn path as a line chart of
elevation over (placeholder) distance, one marker per path vertex.
"""

import logging
from typing import Optional, Sequence

import plotly.graph_objects as go

from cogprobe.constants import ChartConfig, StyleConfig
from cogprobe.model.profile_sample import ProfileSample

logger = logging.getLogger(__name__)


class ProfileChart:
    """Renders elevation profiles using Plotly.

    Example:
        chart = ProfileChart(width=800, height=250)
        fig = chart.render_profile(samples=update.profile)
        st.plotly_chart(fig)
    """

    def __init__(
        self,
        width: int = ChartConfig.DEFAULT_WIDTH,
        height: int = ChartConfig.PROFILE_HEIGHT,
    ) -> None:
        """Initialize profile chart renderer.

        Args:
            width: Chart width in pixels
            height: Chart height in pixels
        """
        self.width = width
        self.height = height

    def render_profile(
        self,
        samples: Sequence[ProfileSample],
        title: Optional[str] = None,
    ) -> go.Figure:
        """Render elevation profile for a derived path profile.

        Args:
            samples: Profile samples in path order
            title: Optional chart title

        Returns:
            Plotly Figure object.
        """
        if not samples:
            raise ValueError("Profile must have samples to render")

        distances = [s.distance for s in samples]
        elevations = [s.elevation for s in samples]

        min_elev, max_elev = self.y_range(elevations=elevations)

        fig = go.Figure()
        fig.add_trace(
            go.Scatter(
                x=distances,
                y=elevations,
                mode="lines+markers",
                line=dict(color=StyleConfig.PROFILE_LINE_COLOR, width=2),
                marker=dict(size=6),
                name="Elevation",
                hovertemplate="Distance: %{x:.0f}<br>Elevation: %{y:.2f}<extra></extra>",
            )
        )

        fig.update_layout(
            title=dict(text=title or f"Elevation Profile ({len(samples)} points)", x=0.5),
            xaxis=dict(
                title="Distance",
                showgrid=True,
                gridcolor=StyleConfig.GRID_COLOR,
            ),
            yaxis=dict(
                title="Elevation",
                showgrid=True,
                gridcolor=StyleConfig.GRID_COLOR,
                range=[min_elev, max_elev],
            ),
            showlegend=False,
            width=self.width,
            height=self.height,
            margin=dict(l=50, r=30, t=50, b=50),
            plot_bgcolor="white",
        )
        return fig

    @staticmethod
    def y_range(elevations: Sequence[float]) -> tuple[float, float]:
        """Y-axis range with padding (not starting from 0)."""
        min_elev = min(elevations)
        max_elev = max(elevations)
        padding = max(
            (max_elev - min_elev) * ChartConfig.ELEVATION_PADDING_FACTOR,
            ChartConfig.ELEVATION_PADDING_MIN,
        )
        return min_elev - padding, max_elev + padding
