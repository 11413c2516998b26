"""
Shutter State Resolver
=======================
Turns one snapshot of the roof's end-stop and motion bits into a
single reported shutter state.

Rules are evaluated top to bottom; the first match wins:

    1. open end stop, no motion flag, not slewing      -> OPEN
    2. closed end stop, no motion flag, not slewing    -> CLOSED
    3. neither end stop, not slewing                   -> OPEN
    4. slewing with a motion flag                      -> OPENING / CLOSING
                                                          (CLOSING if both)
    5. anything else                                   -> previous state

Rule 3 reports an open roof when it cannot see either end stop
while stationary: a roof that is not proven closed is treated as
open. With `strict_end_stops` it reports UNKNOWN instead.

Rule 5 is the hysteresis: ambiguous readings never move the
reported state, so a single bad read cannot cause a transition.
Resolution never raises.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ShutterState(IntEnum):
    OPEN = 0
    CLOSED = 1
    OPENING = 2
    CLOSING = 3
    UNKNOWN = 4     # stopped mid-travel or indeterminate


@dataclass(frozen=True)
class SensorSnapshot:
    """One read of the roof feedback bits."""
    roof_open: bool = False
    roof_closed: bool = False
    roof_opening: bool = False
    roof_closing: bool = False
    slewing: bool = False

    @property
    def moving(self) -> bool:
        """Either direction flag is set."""
        return self.roof_opening or self.roof_closing

    def as_bits(self) -> str:
        return "open={:d} closed={:d} opening={:d} closing={:d} slewing={:d}".format(
            self.roof_open, self.roof_closed,
            self.roof_opening, self.roof_closing, self.slewing,
        )


@dataclass(frozen=True)
class ResolutionRule:
    """A named condition and the state it produces."""
    name: str
    matches: Callable[[SensorSnapshot], bool]
    state: Callable[[SensorSnapshot], ShutterState]


def _motion_state(s: SensorSnapshot) -> ShutterState:
    # closing is checked last and wins when both flags are set
    state = ShutterState.OPENING if s.roof_opening else None
    if s.roof_closing:
        state = ShutterState.CLOSING
    return state


RULE_OPEN = ResolutionRule(
    name="open",
    matches=lambda s: s.roof_open and not s.moving and not s.slewing,
    state=lambda s: ShutterState.OPEN,
)
RULE_CLOSED = ResolutionRule(
    name="closed",
    matches=lambda s: s.roof_closed and not s.moving and not s.slewing,
    state=lambda s: ShutterState.CLOSED,
)
RULE_NO_END_STOP = ResolutionRule(
    name="no_end_stop",
    matches=lambda s: not s.roof_closed and not s.roof_open and not s.slewing,
    state=lambda s: ShutterState.OPEN,
)
RULE_NO_END_STOP_STRICT = ResolutionRule(
    name="no_end_stop",
    matches=RULE_NO_END_STOP.matches,
    state=lambda s: ShutterState.UNKNOWN,
)
RULE_MOVING = ResolutionRule(
    name="moving",
    matches=lambda s: s.slewing and s.moving,
    state=_motion_state,
)

DEFAULT_RULES = (RULE_OPEN, RULE_CLOSED, RULE_NO_END_STOP, RULE_MOVING)
STRICT_RULES = (RULE_OPEN, RULE_CLOSED, RULE_NO_END_STOP_STRICT, RULE_MOVING)

HOLD = "hold"


class ShutterStateResolver:
    """
    Holds the last reported shutter state and updates it from
    sensor snapshots.

    Starts CLOSED: the roof is assumed shut until the sensors
    prove otherwise.
    """

    def __init__(self, strict_end_stops: bool = False, initial: ShutterState = ShutterState.CLOSED):
        self.set_strict(strict_end_stops)
        self._state = initial
        self._last_rule: Optional[str] = None

    def set_strict(self, strict_end_stops: bool):
        """Select whether a stationary roof without end stops reads UNKNOWN."""
        self.rules = STRICT_RULES if strict_end_stops else DEFAULT_RULES

    @property
    def state(self) -> ShutterState:
        return self._state

    @property
    def last_rule(self) -> Optional[str]:
        """Name of the rule that produced the last result ("hold" for fall-through)."""
        return self._last_rule

    def evaluate(self, snapshot: SensorSnapshot) -> tuple:
        """Return (state, rule name) for a snapshot without storing it."""
        for rule in self.rules:
            if rule.matches(snapshot):
                return rule.state(snapshot), rule.name
        return self._state, HOLD

    def resolve(self, snapshot: SensorSnapshot) -> ShutterState:
        """Resolve a snapshot and retain the result as the last known state."""
        state, rule = self.evaluate(snapshot)
        if state != self._state:
            logger.info(
                "Shutter state %s -> %s (rule %s, %s)",
                self._state.name, state.name, rule, snapshot.as_bits(),
            )
        elif rule == HOLD:
            logger.debug("Ambiguous sensors (%s), holding %s", snapshot.as_bits(), state.name)
        self._state = state
        self._last_rule = rule
        return state
