"""Medium AI: rewards one long suit and plays the natural card."""

from __future__ import annotations

from typing import Optional

from ninetynine.mechanics import suggest_play
from ninetynine.state import AILevel, GameState, PlayerState
from ninetynine.trick import Trick

from .base import AIStrategy, bid_cap, count_high_cards, long_suits


class MediumStrategy(AIStrategy):
    name = "Medium"
    level = AILevel.MEDIUM

    def calculate_bid(self, player: PlayerState, state: GameState) -> int:
        cards = self.hand_cards(player, state)
        estimate = count_high_cards(cards) + (1 if long_suits(cards) else 0)
        return min(estimate, bid_cap(state))

    def calculate_card_play(self, player: PlayerState, trick: Trick, state: GameState) -> Optional[str]:
        legal = self.legal_options(player, trick, state)
        return suggest_play(legal, state.require_round().cards, trick.lead_suit)
