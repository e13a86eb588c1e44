"""Probe session - the engine boundary between map events and stores.

One ProbeSession per map view. It owns the state machine (and through its
context the PinStore and PathAccumulator), the request sequencer and the
listeners, and takes the sampler and coordinate transform from the caller.

Request flow:
    MapEvent -> CoordinateTransform.to_geo -> sequence tag -> RasterSampler.sample
    (with timeout) -> stale check -> merge into stores -> derive profile
    -> ProbeUpdate published to listeners

Sampling failures never leave this module: they are logged and stored
as no-data results. Only InvalidCoordinate propagates to the caller.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from cogprobe.constants import MapConfig, ProfileConfig, SamplingConfig
from cogprobe.core.coordinate_transform import CoordinateTransform
from cogprobe.core.profile_deriver import derive_profile
from cogprobe.core.request_sequencer import RequestSequencer, SampleSlot
from cogprobe.exceptions import SampleUnavailable, StaleResponse
from cogprobe.model.geo_point import GeoPoint
from cogprobe.model.map_event import Clicked, MapEvent, PointerMoved
from cogprobe.model.path_vertex import PathVertex
from cogprobe.model.pin import Pin
from cogprobe.model.profile_sample import ProfileSample
from cogprobe.model.sample_result import SampleResult
from cogprobe.ui.state_machine import ProbeContext, ProbeStateMachine

logger = logging.getLogger(__name__)


class Sampler(Protocol):
    """Anything that samples a raster like RasterSampler."""

    async def sample(
        self,
        point: GeoPoint,
        resolution: float,
        target_projection: str = MapConfig.MAP_PROJECTION,
        all_bands: bool = False,
    ) -> SampleResult: ...


@dataclass(frozen=True)
class ProbeUpdate:
    """Immutable snapshot published after every applied change.

    Attributes:
        slot: Which request slot produced the change (None for direct edits)
        result: The sample that was applied, if any
        pins: All pins in insertion order
        vertices: All path vertices in sequence order
        profile: Profile derived from vertices
        hover: Latest applied hover readout
        pin: Pin created by this change, if any
        vertex: Vertex appended by this change, if any
    """

    slot: Optional[SampleSlot]
    result: Optional[SampleResult]
    pins: tuple[Pin, ...]
    vertices: tuple[PathVertex, ...]
    profile: tuple[ProfileSample, ...]
    hover: Optional[SampleResult] = None
    pin: Optional[Pin] = None
    vertex: Optional[PathVertex] = None


ProbeListener = Callable[[ProbeUpdate], None]


class ProbeSession:
    """Dispatches map events to the sampler and merges results into the stores.

    Example:
        session = ProbeSession(sampler=RasterSampler(url))
        session.state_machine.drop_pins()
        update = await session.handle(Clicked(coordinate=(x, y), resolution=611.5))
        update.pin.value  # 245.7
    """

    def __init__(
        self,
        sampler: Sampler,
        transform: Optional[CoordinateTransform] = None,
        context: Optional[ProbeContext] = None,
        timeout_s: float = SamplingConfig.TIMEOUT_S,
        unit_step: float = ProfileConfig.UNIT_STEP,
        runner: Optional[asyncio.Runner] = None,
    ) -> None:
        """Initialize session.

        Args:
            sampler: Raster sampler (owned by the caller)
            transform: Map <-> geographic transform (Web Mercator if None)
            context: State machine model holding the stores (fresh if None)
            timeout_s: Per-request sampling timeout in seconds
            unit_step: Profile distance between consecutive vertices
            runner: Event loop for dispatch(), shared across sessions of one view (created on first use if None)
        """
        if timeout_s <= 0:
            raise ValueError(f"Sampling timeout must be positive, got {timeout_s}")
        self.sampler = sampler
        self.transform = transform or CoordinateTransform()
        self.state_machine, self.context = ProbeStateMachine.create(context=context)
        self.sequencer = RequestSequencer()
        self.timeout_s = timeout_s
        self.unit_step = unit_step
        self.runner = runner
        self._listeners: list[ProbeListener] = []

    # =========================================================================
    # EVENTS
    # =========================================================================

    async def handle(self, event: MapEvent) -> Optional[ProbeUpdate]:
        """Process one map event.

        Returns:
            The published ProbeUpdate, or None if the event changed nothing
            (stale hover, click while idle).

        Raises:
            InvalidCoordinate: If the event coordinate cannot be converted.
        """
        if isinstance(event, PointerMoved):
            return await self._handle_pointer_move(event=event)
        if isinstance(event, Clicked):
            return await self._handle_click(event=event)
        raise TypeError(f"Unsupported map event {type(event).__name__}")

    def dispatch(self, event: MapEvent) -> Optional[ProbeUpdate]:
        """Synchronous handle() for callers without a running event loop.

        Runs on the session's long-lived loop. asyncio.run() would join the
        default executor on exit and so wait out a timed out read; here its
        worker thread is left to finish on its own.
        """
        if self.runner is None:
            self.runner = asyncio.Runner()
        return self.runner.run(self.handle(event))

    def close(self) -> None:
        """Close the dispatch loop, waiting for abandoned reads to finish."""
        if self.runner is not None:
            self.runner.close()
            self.runner = None

    async def _handle_pointer_move(self, event: PointerMoved) -> Optional[ProbeUpdate]:
        point = self._to_geo(event=event)
        sequence = self.sequencer.issue(SampleSlot.HOVER)
        result = await self._sample(point=point, event=event)

        try:
            self.sequencer.accept(SampleSlot.HOVER, sequence)
        except StaleResponse as e:
            logger.debug(f"[SAMPLE] Dropped: {e}")
            return None

        self.context.hover = result
        return self._publish(slot=SampleSlot.HOVER, result=result)

    async def _handle_click(self, event: Clicked) -> Optional[ProbeUpdate]:
        # Routing is decided when the click happens, not when its sample returns
        target = self.state_machine.click_target()
        if target.is_empty:
            logger.debug(f"[CLICK] Ignored in {self.state_machine.get_state_name()}")
            return None

        point = self._to_geo(event=event)
        slot = SampleSlot.PATH_STEP if target.path else SampleSlot.CLICK
        sequence = self.sequencer.issue(slot)
        path_generation = self.context.path.generation
        result = await self._sample(point=point, event=event)
        self.sequencer.accept(slot, sequence)
        self.context.last_result = result

        pin = None
        if target.pins:
            if self.context.single_pin:
                self.context.pins.clear()
            pin = self.context.pins.add(point=point, value=result.value)

        vertex = None
        if target.path:
            if self.context.path.generation != path_generation:
                logger.info(f"[PATH] Discarded step #{sequence} at {point}: path was reset meanwhile")
            else:
                vertex = self.context.path.append(point=point, value=result.value)
                if self.state_machine.is_drawing_path:
                    self.state_machine.add_vertex()

        return self._publish(slot=slot, result=result, pin=pin, vertex=vertex)

    # =========================================================================
    # DIRECT EDITS
    # =========================================================================

    def remove_pin(self, pin_id: int) -> bool:
        """Remove a pin, publishing an update if it existed."""
        removed = self.context.pins.remove(pin_id=pin_id)
        if removed:
            self._publish(slot=None, result=None)
        return removed

    def reset_path(self) -> ProbeUpdate:
        """Empty the path (staying in path mode if drawing)."""
        if self.state_machine.is_drawing_path:
            self.state_machine.reset_path()
        else:
            self.context.path.reset()
        return self._publish(slot=None, result=None)

    def snapshot(self) -> ProbeUpdate:
        """Current state without publishing."""
        return self._build_update(slot=None, result=None)

    def add_listener(self, listener: ProbeListener) -> None:
        """Register a callback receiving every published ProbeUpdate."""
        self._listeners.append(listener)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _to_geo(self, event: MapEvent) -> GeoPoint:
        return self.transform.for_projection(event.projection).to_geo(event.coordinate)

    async def _sample(self, point: GeoPoint, event: MapEvent) -> SampleResult:
        """Sample with timeout; any backend failure becomes an unavailable result."""
        try:
            return await asyncio.wait_for(
                self.sampler.sample(point=point, resolution=event.resolution, target_projection=event.projection),
                timeout=self.timeout_s,
            )
        except TimeoutError:
            logger.warning(f"[SAMPLE] Timed out after {self.timeout_s}s at {point}")
        except SampleUnavailable as e:
            logger.warning(f"[SAMPLE] Unavailable at {point}: {e}")
        except OSError as e:
            logger.warning(f"[SAMPLE] Backend I/O error at {point}: {type(e).__name__}: {e}")
        return SampleResult.unavailable(point=point)

    def _build_update(
        self,
        slot: Optional[SampleSlot],
        result: Optional[SampleResult],
        pin: Optional[Pin] = None,
        vertex: Optional[PathVertex] = None,
    ) -> ProbeUpdate:
        vertices = self.context.path.vertices()
        return ProbeUpdate(
            slot=slot,
            result=result,
            pins=self.context.pins.list(),
            vertices=vertices,
            profile=tuple(derive_profile(vertices=vertices, unit_step=self.unit_step)),
            hover=self.context.hover,
            pin=pin,
            vertex=vertex,
        )

    def _publish(
        self,
        slot: Optional[SampleSlot],
        result: Optional[SampleResult],
        pin: Optional[Pin] = None,
        vertex: Optional[PathVertex] = None,
    ) -> ProbeUpdate:
        update = self._build_update(slot=slot, result=result, pin=pin, vertex=vertex)
        for listener in self._listeners:
            listener(update)
        return update

    def __repr__(self) -> str:
        return f"ProbeSession(sampler={self.sampler!r}, {self.state_machine!r})"
