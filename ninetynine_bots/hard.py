"""Hard AI: plays to its own contract."""

from __future__ import annotations

from typing import Optional

from ninetynine.cards import Card, beats
from ninetynine.mechanics import play_order_key
from ninetynine.state import AILevel, GameState, PlayerState
from ninetynine.trick import Trick, winning_play

from .base import AIStrategy, bid_cap, count_high_cards, long_suits


class HardStrategy(AIStrategy):
    """Chase tricks while short of the bid, then shed cards that cannot win."""

    name = "Hard"
    level = AILevel.HARD

    def calculate_bid(self, player: PlayerState, state: GameState) -> int:
        cards = self.hand_cards(player, state)
        estimate = count_high_cards(cards) + len(long_suits(cards))
        return min(estimate, bid_cap(state))

    def calculate_card_play(self, player: PlayerState, trick: Trick, state: GameState) -> Optional[str]:
        legal = self.legal_options(player, trick, state)
        if not legal:
            return None

        cards = state.require_round().cards
        needs_tricks = (player.bid_value or 0) > player.tricks_won

        def key(card_id: str) -> tuple[int, int]:
            return play_order_key(cards[card_id])

        played = [(player_id, cards[card_id]) for player_id, card_id in trick.played()]
        if not played:
            return max(legal, key=key) if needs_tricks else min(legal, key=key)

        _, best = winning_play(played, trick.lead_suit, trick.trump_suit)
        winners = [card_id for card_id in legal if beats(cards[card_id], best, trick.lead_suit, trick.trump_suit)]
        losers = [card_id for card_id in legal if card_id not in winners]

        if needs_tricks:
            if winners:
                # Cheapest winner, saving trumps and the joker where a plain card does the job.
                return min(
                    winners,
                    key=lambda card_id: (self._is_power_card(cards[card_id], trick), key(card_id)),
                )
            return min(legal, key=key)

        if losers:
            return max(losers, key=key)
        return min(legal, key=key)

    @staticmethod
    def _is_power_card(card: Card, trick: Trick) -> bool:
        return card.is_joker() or (trick.trump_suit is not None and card.suit is trick.trump_suit)
