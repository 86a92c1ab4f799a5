"""Strategy selection and single-step AI turns."""

from __future__ import annotations

import logging
from random import Random
from typing import Dict, Optional, Union

from ninetynine.bidding import place_bid, reveal_bid, reveal_order
from ninetynine.errors import CardNotInHand, MustFollowSuit, NotYourTurn
from ninetynine.mechanics import check_play, legal_cards, play_card
from ninetynine.phases import Phase
from ninetynine.state import AILevel, GameState

from .base import AIStrategy
from .easy import EasyStrategy
from .hard import HardStrategy
from .medium import MediumStrategy

logger = logging.getLogger(__name__)

STRATEGY_REGISTRY: Dict[AILevel, type[AIStrategy]] = {
    AILevel.EASY: EasyStrategy,
    AILevel.MEDIUM: MediumStrategy,
    AILevel.HARD: HardStrategy,
}


def get_ai_strategy(level: Union[AILevel, str, None], rng: Optional[Random] = None) -> AIStrategy:
    """Return the strategy for ``level``; anything unrecognized gets the medium tier."""
    if isinstance(level, str):
        try:
            level = AILevel(level.lower())
        except ValueError:
            level = AILevel.MEDIUM
    strategy_cls = STRATEGY_REGISTRY.get(level, MediumStrategy) if level is not None else MediumStrategy
    return strategy_cls(rng=rng)


def pending_action(state: GameState, player_id: str) -> Optional[str]:
    """Name the action ``player_id`` owes the game right now, if any."""
    round_state = state.round
    if round_state is None:
        return None
    if state.phase is Phase.BIDDING:
        if not round_state.bid_phase_complete:
            return "place_bid" if state.current_bidder_id() == player_id else None
        bid = round_state.bids.get(player_id)
        return "reveal_bid" if bid is not None and not bid.revealed else None
    if state.phase is Phase.PLAYING and state.current_player_id() == player_id:
        return "play_card"
    return None


def next_actor(state: GameState) -> Optional[str]:
    """Return the player the game is waiting on during bidding or play."""
    if state.phase is Phase.BIDDING and state.round is not None:
        if not state.round.bid_phase_complete:
            return state.current_bidder_id()
        return next(
            (player_id for player_id in reveal_order(state) if not state.round.bids[player_id].revealed),
            None,
        )
    if state.phase is Phase.PLAYING:
        return state.current_player_id()
    return None


def take_ai_turn(
    state: GameState,
    player_id: str,
    rng: Optional[Random] = None,
    *,
    strategy: Optional[AIStrategy] = None,
) -> str:
    """Perform the one action owed by ``player_id`` and return its name.

    Decisions go through the public engine operations, so an AI move is
    validated exactly like a human one. A card the strategy picks that the
    validator rejects is replaced by the first legal card.
    """
    player = state.player(player_id)
    action = pending_action(state, player_id)
    if action is None:
        raise NotYourTurn(f"{player_id} has nothing to do in phase {state.phase.value}.")
    if strategy is None:
        strategy = get_ai_strategy(player.ai_level, rng)

    if action == "place_bid":
        place_bid(state, player_id, strategy.calculate_bid(player, state))
    elif action == "reveal_bid":
        reveal_bid(state, player_id)
    else:
        trick = state.current_trick()
        assert trick is not None
        card_id = strategy.calculate_card_play(player, trick, state)
        if card_id is None:
            card_id = legal_cards(state, player_id)[0]
            logger.warning("%s strategy chose no card for %s; playing %s", strategy.name, player_id, card_id)
        try:
            check_play(state, player_id, card_id)
        except (CardNotInHand, MustFollowSuit) as exc:
            fallback = legal_cards(state, player_id)[0]
            logger.warning("%s rejected for %s (%s); playing %s", card_id, player_id, exc, fallback)
            card_id = fallback
        play_card(state, player_id, card_id)
    return action
