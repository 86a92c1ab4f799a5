"""Easy AI: counts high cards and plays any legal card."""

from __future__ import annotations

from typing import Optional

from ninetynine.state import AILevel, GameState, PlayerState
from ninetynine.trick import Trick

from .base import AIStrategy, bid_cap, count_high_cards


class EasyStrategy(AIStrategy):
    name = "Easy"
    level = AILevel.EASY

    def calculate_bid(self, player: PlayerState, state: GameState) -> int:
        return min(count_high_cards(self.hand_cards(player, state)), bid_cap(state))

    def calculate_card_play(self, player: PlayerState, trick: Trick, state: GameState) -> Optional[str]:
        legal = self.legal_options(player, trick, state)
        if not legal:
            return None
        return self._rng.choice(legal)
