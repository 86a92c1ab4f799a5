"""Game phases and the transitions allowed between them."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from .errors import GameStateError, WrongPhase

if TYPE_CHECKING:
    from .state import GameState

logger = logging.getLogger(__name__)


class Phase(Enum):
    SETUP = "setup"
    DEALING = "dealing"
    BIDDING = "bidding"
    PLAYING = "playing"
    SCORING = "scoring"
    FINISHED = "finished"


TRANSITIONS: dict[Phase, frozenset[Phase]] = {
    Phase.SETUP: frozenset({Phase.DEALING}),
    # A failed deal falls back to setup.
    Phase.DEALING: frozenset({Phase.BIDDING, Phase.SETUP}),
    Phase.BIDDING: frozenset({Phase.PLAYING}),
    Phase.PLAYING: frozenset({Phase.SCORING}),
    Phase.SCORING: frozenset({Phase.DEALING, Phase.FINISHED}),
    Phase.FINISHED: frozenset(),
}


def ensure_phase(state: "GameState", *expected: Phase) -> None:
    if state.phase not in expected:
        names = ", ".join(phase.value for phase in expected)
        raise WrongPhase(f"Action not allowed in phase {state.phase.value}. Expected {names}.")


def transition(state: "GameState", target: Phase) -> None:
    if target not in TRANSITIONS[state.phase]:
        raise GameStateError(f"Cannot move from {state.phase.value} to {target.value}.")
    logger.info("Round %d: %s -> %s", state.round_number, state.phase.value, target.value)
    state.phase = target
