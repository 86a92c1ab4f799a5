"""Common AI strategy interfaces."""

from __future__ import annotations

import random
from collections import Counter
from typing import Iterable, List, Optional

from ninetynine.cards import RANK_STRENGTH, Card, Rank, Suit, card_strength
from ninetynine.mechanics import follow_suit_cards
from ninetynine.state import AILevel, GameState, PlayerState
from ninetynine.trick import Trick, resolve_trick, winning_play

HIGH_CARD_STRENGTH = RANK_STRENGTH[Rank.TEN]
MAX_AI_BID = 9
LONG_SUIT_LENGTH = 3


def count_high_cards(cards: Iterable[Card]) -> int:
    """Cards ranked ten or better; the joker counts."""
    return sum(1 for card in cards if card_strength(card) >= HIGH_CARD_STRENGTH)


def long_suits(cards: Iterable[Card]) -> List[Suit]:
    counts = Counter(card.suit for card in cards if not card.is_joker())
    return [suit for suit, count in counts.items() if count >= LONG_SUIT_LENGTH]


def bid_cap(state: GameState) -> int:
    return min(MAX_AI_BID, state.settings.cards_per_player)


class AIStrategy:
    """Base class for AI policies.

    Strategies only decide; the driver submits their decisions through the
    same engine entry points a human player uses.
    """

    name: str = "BaseAI"
    level: AILevel = AILevel.MEDIUM

    def __init__(self, seed: Optional[int] = None, *, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random(seed)

    def calculate_bid(self, player: PlayerState, state: GameState) -> int:
        """Return an integer bid for ``player``."""
        return 0

    def calculate_card_play(self, player: PlayerState, trick: Trick, state: GameState) -> Optional[str]:
        """Return the id of the card to play, or None when nothing is playable."""
        legal = self.legal_options(player, trick, state)
        return legal[0] if legal else None

    def determine_trick_winner(self, trick: Trick, state: GameState) -> Optional[str]:
        """Return who takes the trick, or who is taking it so far when it is unfinished."""
        cards = state.require_round().cards
        played = [(player_id, cards[card_id]) for player_id, card_id in trick.played()]
        if not played:
            return None
        if trick.is_full():
            return resolve_trick(played, trick.lead_suit, trick.trump_suit)
        return winning_play(played, trick.lead_suit, trick.trump_suit)[0]

    @staticmethod
    def hand_cards(player: PlayerState, state: GameState) -> List[Card]:
        return [state.card(card_id) for card_id in player.hand]

    @staticmethod
    def legal_options(player: PlayerState, trick: Optional[Trick], state: GameState) -> List[str]:
        lead_suit = trick.lead_suit if trick is not None else None
        return follow_suit_cards(player.hand, state.require_round().cards, lead_suit)
