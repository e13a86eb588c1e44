"""State machine for the COG probe interaction modes.

Uses python-statemachine with the model pattern: ProbeContext is the model
and holds the stores that clicks feed.

States (4 states):
    IDLE: Viewing only, pointer moves update the hover readout
    PIN_DROPPING: Clicks drop pins
    PATH_EMPTY: Drawing a path, no vertex yet
    PATH_ACCUMULATING: Drawing a path with one or more vertices

Transitions:
    IDLE / PATH_* -> PIN_DROPPING: drop_pins
    IDLE / PIN_DROPPING -> PATH_EMPTY: draw_path (starts a fresh path)
    PATH_EMPTY / PATH_ACCUMULATING -> PATH_ACCUMULATING: add_vertex
    PATH_EMPTY / PATH_ACCUMULATING -> PATH_EMPTY: reset_path
    any active state -> IDLE: stop

Click routing (see ClickTarget):
    PIN_DROPPING -> pin store only
    PATH_* -> path, plus pin store when pins_while_drawing is set
    IDLE -> nothing
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from cogprobe.model.path_accumulator import PathAccumulator
from cogprobe.model.pin_store import PinStore
from cogprobe.model.sample_result import SampleResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClickTarget:
    """Which stores a click result is merged into."""

    pins: bool = False
    path: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.pins or self.path)


@dataclass
class ProbeContext:
    """Shared context/model for the state machine.

    Holds the stores fed by clicks, the latest readouts and the user's
    click options.

    Note: The 'state' field is managed by python-statemachine when this
    object is passed as the model. It stores the current state value.
    """

    # State managed by python-statemachine (model pattern)
    state: str | None = None

    pins: PinStore = field(default_factory=PinStore)
    path: PathAccumulator = field(default_factory=PathAccumulator)

    # Latest readouts
    hover: SampleResult | None = None
    last_result: SampleResult | None = None

    # Settings
    pins_while_drawing: bool = True
    single_pin: bool = False

    def clear_readouts(self) -> None:
        """Forget hover and last click readouts."""
        self.hover = None
        self.last_result = None

    def __repr__(self) -> str:
        return (
            f"ProbeContext(state={self.state}, pins={len(self.pins)}, "
            f"vertices={len(self.path)}, pins_while_drawing={self.pins_while_drawing})"
        )


class TransitionLogger:
    """Listener that logs every transition.

    Usage:
        sm = ProbeStateMachine(context=context)
        sm.add_listener(TransitionLogger())
    """

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.info(f"[STATE] {source.name} --({event})--> {target.name}")


class ProbeStateMachine(StateMachine):
    """State machine for the probe interaction modes.

    See module docstring for complete transition documentation.
    """

    # ==========================================================================
    # State Definitions
    # ==========================================================================

    idle = State("Idle", initial=True)
    pin_dropping = State("PinDropping")
    path_empty = State("PathEmpty")
    path_accumulating = State("PathAccumulating")

    # ==========================================================================
    # Transitions
    # ==========================================================================

    drop_pins = idle.to(pin_dropping) | path_empty.to(pin_dropping) | path_accumulating.to(pin_dropping)

    # Entering path mode always starts from an empty path
    draw_path = idle.to(path_empty) | pin_dropping.to(path_empty)

    add_vertex = path_empty.to(path_accumulating) | path_accumulating.to.itself()

    reset_path = path_accumulating.to(path_empty) | path_empty.to.itself()

    stop = pin_dropping.to(idle) | path_empty.to(idle) | path_accumulating.to(idle)

    # ==========================================================================
    # State Check Properties
    # ==========================================================================

    @property
    def is_idle(self) -> bool:
        return self.idle.is_active

    @property
    def is_pin_dropping(self) -> bool:
        return self.pin_dropping.is_active

    @property
    def is_drawing_path(self) -> bool:
        """True in either path state."""
        return self.path_empty.is_active or self.path_accumulating.is_active

    # ==========================================================================
    # Transition Actions (before_* hooks)
    # ==========================================================================

    def before_draw_path(self) -> None:
        """Action before entering path mode: discard any previous path."""
        self.context.path.reset()

    def before_reset_path(self) -> None:
        self.context.path.reset()

    # ==========================================================================
    # Initialization
    # ==========================================================================

    def __init__(self, context: ProbeContext | None = None, start_value: str | None = None) -> None:
        """Initialize state machine with model pattern.

        Args:
            context: Shared context/model (creates new if None)
            start_value: Optional initial state value (for restoring state)
        """
        model = context or ProbeContext()
        super().__init__(model=model, start_value=start_value)

    # ==========================================================================
    # Utility Methods
    # ==========================================================================

    @property
    def context(self) -> ProbeContext:
        """Alias for model."""
        return self.model

    def click_target(self) -> ClickTarget:
        """Which stores a click in the current state feeds."""
        if self.is_pin_dropping:
            return ClickTarget(pins=True)
        if self.is_drawing_path:
            return ClickTarget(pins=self.context.pins_while_drawing, path=True)
        return ClickTarget()

    def get_state_name(self) -> str:
        """Get current state name for display."""
        return self.current_state.name

    def __repr__(self) -> str:
        return f"ProbeStateMachine(state={self.get_state_name()}, model={self.context!r})"

    def try_transition(self, event: str, **kwargs: Any) -> bool:
        """Attempt a transition, returning success/failure.

        Args:
            event: Transition event name
            **kwargs: Arguments for transition

        Returns:
            True if transition succeeded, False otherwise.
        """
        try:
            self.send(event, **kwargs)
            return True
        except TransitionNotAllowed:
            logger.warning(f"Transition '{event}' not allowed from {self.get_state_name()}")
            return False

    @staticmethod
    def create(context: ProbeContext | None = None) -> tuple["ProbeStateMachine", ProbeContext]:
        """Factory method to create state machine with context and transition logging.

        Returns:
            Tuple of (ProbeStateMachine, ProbeContext)
        """
        context = context or ProbeContext()
        sm = ProbeStateMachine(context=context)
        sm.add_listener(TransitionLogger())
        logger.info(f"Created ProbeStateMachine ({sm.get_state_name()})")
        return sm, context
