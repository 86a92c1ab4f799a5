"""Typed, recoverable errors raised by engine operations.

Every mutating operation validates before it touches state, so catching one
of these leaves the game exactly as it was before the call. The only
exception is :class:`SetupError` during dealing, which moves the game back to
the setup phase before it propagates.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    VALIDATION = "validation"
    GAME_STATE = "game_state"
    NOT_YOUR_TURN = "not_your_turn"
    CARD_NOT_IN_HAND = "card_not_in_hand"
    MUST_FOLLOW_SUIT = "must_follow_suit"
    SETUP = "setup"


class EngineError(RuntimeError):
    """Base class for every rejected engine action."""

    kind: ErrorKind = ErrorKind.GAME_STATE


class InvalidMove(EngineError, ValueError):
    """Raised when an action has an illegal shape or value."""

    kind = ErrorKind.VALIDATION


class InvalidBid(InvalidMove):
    """Raised when a bid cannot legally be placed or revealed."""


class SnapshotError(InvalidMove):
    """Raised when a snapshot does not describe a well-formed game."""


class GameStateError(EngineError):
    """Raised when the game is not in a state that allows the action."""

    kind = ErrorKind.GAME_STATE


class WrongPhase(GameStateError):
    """Raised when an action is attempted outside its phase."""


class TrickError(GameStateError):
    """Raised when a trick cannot be resolved."""


class NotYourTurn(EngineError):
    """Raised when a player acts out of turn."""

    kind = ErrorKind.NOT_YOUR_TURN


class InvalidPlay(EngineError):
    """Base class for illegal card plays."""


class CardNotInHand(InvalidPlay):
    kind = ErrorKind.CARD_NOT_IN_HAND


class MustFollowSuit(InvalidPlay):
    kind = ErrorKind.MUST_FOLLOW_SUIT


class SetupError(EngineError):
    """Raised when a round cannot be dealt with the configured deck."""

    kind = ErrorKind.SETUP
