"""Game state containers for Ninety-Nine.

The whole game hangs off one mutable :class:`GameState`. Entities reference
each other by id: hands, bids and tricks hold card ids that resolve through
the round's card table, and players are looked up in ``players`` by the ids
listed in ``player_order``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .cards import Card, Suit
from .config import GameSettings
from .errors import GameStateError, InvalidMove
from .phases import Phase
from .scoring import RoundResult
from .trick import Trick


def timestamp() -> float:
    return time.time()


class AILevel(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass
class PlayerState:
    id: str
    name: str
    hand: List[str] = field(default_factory=list)
    bid_card_ids: List[str] = field(default_factory=list)
    bid_value: Optional[int] = None
    reveal_bid: bool = False
    tricks_won: int = 0
    score: int = 0
    is_active: bool = True
    is_ai: bool = False
    ai_level: Optional[AILevel] = None
    updated_at: float = 0.0

    def reset_for_round(self, stamp: float) -> None:
        self.hand = []
        self.bid_card_ids = []
        self.bid_value = None
        self.reveal_bid = False
        self.tricks_won = 0
        self.updated_at = stamp


@dataclass
class Bid:
    player_id: str
    card_ids: Tuple[str, ...]
    value: int
    round_number: int
    revealed: bool = False
    timestamp: float = 0.0


@dataclass
class RoundState:
    number: int
    cards: Dict[str, Card]
    stock: List[str] = field(default_factory=list)
    turnup_card_id: Optional[str] = None
    trump_suit: Optional[Suit] = None
    tricks: Dict[str, Trick] = field(default_factory=dict)
    trick_history: List[str] = field(default_factory=list)
    current_trick_id: Optional[str] = None
    bids: Dict[str, Bid] = field(default_factory=dict)
    bid_phase_complete: bool = False
    tricks_played: int = 0

    def current_trick(self) -> Optional[Trick]:
        if self.current_trick_id is None:
            return None
        return self.tricks[self.current_trick_id]

    def archived_tricks(self) -> List[Trick]:
        return [self.tricks[trick_id] for trick_id in self.trick_history]


@dataclass
class GameState:
    settings: GameSettings = field(default_factory=GameSettings)
    phase: Phase = Phase.SETUP
    round_number: int = 0
    player_order: List[str] = field(default_factory=list)
    players: Dict[str, PlayerState] = field(default_factory=dict)
    current_player_index: Optional[int] = None
    current_bidder_index: Optional[int] = None
    round: Optional[RoundState] = None
    round_results: List[RoundResult] = field(default_factory=list)
    last_action: Optional[str] = None
    last_action_at: Optional[float] = None

    def active_player_ids(self) -> List[str]:
        return [player_id for player_id in self.player_order if self.players[player_id].is_active]

    def player(self, player_id: str) -> PlayerState:
        try:
            return self.players[player_id]
        except KeyError:
            raise InvalidMove(f"Unknown player {player_id!r}.") from None

    def current_player_id(self) -> Optional[str]:
        if self.current_player_index is None:
            return None
        return self.player_order[self.current_player_index]

    def current_bidder_id(self) -> Optional[str]:
        if self.current_bidder_index is None:
            return None
        return self.player_order[self.current_bidder_index]

    def require_round(self) -> RoundState:
        if self.round is None:
            raise GameStateError("No round is in progress.")
        return self.round

    def current_trick(self) -> Optional[Trick]:
        if self.round is None:
            return None
        return self.round.current_trick()

    def card(self, card_id: str) -> Card:
        return self.require_round().cards[card_id]

    def hand_cards(self, player_id: str) -> List[Card]:
        round_state = self.require_round()
        return [round_state.cards[card_id] for card_id in self.player(player_id).hand]

    def touch(self, action: str) -> float:
        stamp = timestamp()
        self.last_action = action
        self.last_action_at = stamp
        return stamp
