"""
Lazy-Load Pump - drive progressive rendering until the result list settles

The pump is a small state machine:

    POLLING --(settle_reason(state) is not None)--> SETTLED

`advance()` is the single per-tick transition and `settle_reason()` the pure
termination predicate; neither touches the page. `LazyLoadPump` is the driver
that reads observations from a PageProbe, scrolls one step per tick and waits
between ticks. Scheduling is whatever the probe's `wait()` does (the live
session uses Playwright's wait_for_timeout).
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Protocol


DEFAULT_BASE_DELAY_MS = 800
DEFAULT_SETTLE_PAUSE_MS = 500
MAX_ATTEMPTS = 150
LOADING_BACKOFF = 3

# Settle thresholds (ticks)
BOTTOM_STABLE_TICKS = 2           # height stable for more than this at the bottom
POSITION_STABLE_TICKS = 5
HEIGHT_STABLE_TICKS = 10
HEIGHT_STABLE_MIN_FRACTION = 0.7
BOTTOM_TOLERANCE_PX = 2


class PumpPhase(str, Enum):
    POLLING = "polling"
    SETTLED = "settled"


@dataclass(frozen=True)
class PumpObservation:
    """What one tick reads from the page."""
    scroll_top: float
    document_height: float
    viewport_height: float
    result_count: int = 0
    loading: bool = False


@dataclass(frozen=True)
class PumpState:
    scroll_position: float = 0.0
    document_height: float = 0.0
    visible_result_count: int = 0
    no_position_change: int = 0
    no_height_change: int = 0
    attempts: int = 0
    loading: bool = False
    at_bottom: bool = False
    scroll_fraction: float = 0.0
    phase: PumpPhase = PumpPhase.POLLING
    reason: Optional[str] = None

    @property
    def settled(self) -> bool:
        return self.phase is PumpPhase.SETTLED


def _scroll_fraction(obs: PumpObservation) -> float:
    if obs.document_height <= 0:
        return 1.0
    return min(1.0, (obs.scroll_top + obs.viewport_height) / obs.document_height)


def _at_bottom(obs: PumpObservation) -> bool:
    return obs.scroll_top + obs.viewport_height >= obs.document_height - BOTTOM_TOLERANCE_PX


def settle_reason(state: PumpState, max_attempts: int = MAX_ATTEMPTS) -> Optional[str]:
    """Why polling should stop now, or None to keep polling."""
    if state.at_bottom and not state.loading and state.no_height_change > BOTTOM_STABLE_TICKS:
        return "bottom_reached"
    if state.no_position_change >= POSITION_STABLE_TICKS and not state.loading:
        return "position_stable"
    if state.no_height_change >= HEIGHT_STABLE_TICKS and state.scroll_fraction > HEIGHT_STABLE_MIN_FRACTION:
        return "height_stable"
    if state.attempts >= max_attempts:
        return "max_attempts"
    return None


def advance(state: PumpState, obs: PumpObservation, max_attempts: int = MAX_ATTEMPTS) -> PumpState:
    """One tick: fold an observation into the counters and test for settle."""
    if state.settled:
        return state

    no_position = 0 if obs.scroll_top != state.scroll_position else state.no_position_change + 1
    no_height = 0 if obs.document_height != state.document_height else state.no_height_change + 1
    if obs.result_count != state.visible_result_count:
        no_position = no_height = 0

    nxt = PumpState(
        scroll_position=obs.scroll_top,
        document_height=obs.document_height,
        visible_result_count=obs.result_count,
        no_position_change=no_position,
        no_height_change=no_height,
        attempts=state.attempts + 1,
        loading=obs.loading,
        at_bottom=_at_bottom(obs),
        scroll_fraction=_scroll_fraction(obs),
    )
    reason = settle_reason(nxt, max_attempts)
    if reason is not None:
        nxt = replace(nxt, phase=PumpPhase.SETTLED, reason=reason)
    return nxt


def next_delay_ms(state: PumpState, base_delay_ms: int = DEFAULT_BASE_DELAY_MS) -> int:
    """Delay before the next tick; tripled while a loading indicator is shown."""
    return base_delay_ms * LOADING_BACKOFF if state.loading else base_delay_ms


class PageProbe(Protocol):
    """Page-side operations the pump needs."""

    def observe(self) -> PumpObservation: ...

    def scroll_step(self) -> None: ...

    def scroll_to_top(self) -> None: ...

    def wait(self, ms: int) -> None: ...


@dataclass(frozen=True)
class PumpOutcome:
    state: PumpState
    ticks: int
    waited_ms: int
    elapsed_ms: int

    @property
    def reason(self) -> Optional[str]:
        return self.state.reason


class LazyLoadPump:
    """Scroll a results page until lazily rendered cards stop appearing."""

    def __init__(
        self,
        probe: PageProbe,
        *,
        base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
        settle_pause_ms: int = DEFAULT_SETTLE_PAUSE_MS,
        max_attempts: int = MAX_ATTEMPTS,
        verbose: bool = False,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.probe = probe
        self.base_delay_ms = int(base_delay_ms)
        self.settle_pause_ms = int(settle_pause_ms)
        self.max_attempts = int(max_attempts)
        self.verbose = verbose

    def run(self) -> PumpOutcome:
        t0 = time.perf_counter()
        waited = 0
        state = PumpState()
        while not state.settled:
            state = advance(state, self.probe.observe(), self.max_attempts)
            if self.verbose:
                print(
                    f"pump tick {state.attempts}: results={state.visible_result_count} "
                    f"height={state.document_height:.0f} at_bottom={state.at_bottom} loading={state.loading}"
                )
            if state.settled:
                break
            self.probe.scroll_step()
            delay = next_delay_ms(state, self.base_delay_ms)
            self.probe.wait(delay)
            waited += delay

        # Back to the top so every card has been rendered at least once before the snapshot
        self.probe.scroll_to_top()
        self.probe.wait(self.settle_pause_ms)
        waited += self.settle_pause_ms
        if self.verbose:
            print(f"pump settled after {state.attempts} ticks ({state.reason})")
        return PumpOutcome(
            state=state,
            ticks=state.attempts,
            waited_ms=waited,
            elapsed_ms=int((time.perf_counter() - t0) * 1000),
        )
