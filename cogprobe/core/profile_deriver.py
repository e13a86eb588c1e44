"""Profile deriver - turns an accumulated path into a distance/elevation series.

Distance is a placeholder axis: vertex index times a fixed unit step.
Missing values plot at elevation 0.
"""

from typing import Sequence

from cogprobe.constants import ProfileConfig
from cogprobe.model.path_vertex import PathVertex
from cogprobe.model.profile_sample import ProfileSample


def derive_profile(
    vertices: Sequence[PathVertex],
    unit_step: float = ProfileConfig.UNIT_STEP,
) -> list[ProfileSample]:
    """Derive the profile of a path.

    Args:
        vertices: Path vertices in sequence order
        unit_step: Distance between consecutive vertices on the profile axis

    Returns:
        One ProfileSample per vertex, distance = index * unit_step.

    Raises:
        ValueError: If unit_step is not positive.
    """
    if unit_step <= 0:
        raise ValueError(f"Profile unit step must be positive, got {unit_step}")

    return [
        ProfileSample(
            distance=i * unit_step,
            elevation=vertex.value if vertex.value is not None else 0.0,
        )
        for i, vertex in enumerate(vertices)
    ]


def profile_to_records(samples: Sequence[ProfileSample]) -> list[dict]:
    """Chart payload: [{"distance": ..., "elevation": ...}, ...]."""
    return [s.to_dict() for s in samples]
