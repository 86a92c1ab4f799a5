"""High-level game orchestration for Ninety-Nine."""

from __future__ import annotations

import logging
from random import Random
from typing import Optional, Sequence

from .cards import Card
from .config import GameSettings
from .deck import create_deck, deal, determine_trump
from .errors import InvalidMove, SetupError
from .phases import Phase, ensure_phase, transition
from .scoring import RoundResult, compute_round_result, is_game_over
from .state import AILevel, GameState, PlayerState, RoundState, timestamp

logger = logging.getLogger(__name__)


def create_game(settings: Optional[GameSettings] = None) -> GameState:
    return GameState(settings=settings if settings is not None else GameSettings())


def add_player(
    state: GameState,
    name: str,
    *,
    player_id: Optional[str] = None,
    is_ai: bool = False,
    ai_level: Optional[AILevel] = None,
    is_active: bool = True,
) -> PlayerState:
    """Seat a new player; seating order is the bid and lead order."""
    ensure_phase(state, Phase.SETUP)
    if player_id is None:
        player_id = f"player-{len(state.player_order) + 1}"
    if player_id in state.players:
        raise InvalidMove(f"Player id {player_id!r} is already seated.")
    if len(state.player_order) >= state.settings.max_players:
        raise InvalidMove(f"The table is full ({state.settings.max_players} players).")
    if is_ai and ai_level is None:
        ai_level = AILevel.MEDIUM

    player = PlayerState(
        id=player_id,
        name=name,
        is_active=is_active,
        is_ai=is_ai,
        ai_level=ai_level if is_ai else None,
        updated_at=timestamp(),
    )
    state.players[player_id] = player
    state.player_order.append(player_id)
    state.touch("add_player")
    return player


def _deal_round(
    state: GameState,
    round_number: int,
    rng: Optional[Random],
    deck: Optional[Sequence[Card]],
) -> GameState:
    settings = state.settings
    seated = state.active_player_ids()
    cards = list(deck) if deck is not None else create_deck(settings.deck_variant, rng)

    try:
        if len(cards) != settings.deck_size:
            raise SetupError(f"Deck must contain exactly {settings.deck_size} cards.")
        result = deal(cards, len(seated), settings.cards_per_player)
    except SetupError:
        logger.warning("Deal for round %d failed; returning to setup", round_number)
        stamp = state.touch("deal_failed")
        for player in state.players.values():
            player.reset_for_round(stamp)
        state.round = None
        state.current_bidder_index = None
        state.current_player_index = None
        transition(state, Phase.SETUP)
        raise

    stamp = state.touch("deal")
    card_table = {card.id: card for card in result.stock}
    for hand in result.hands:
        card_table.update((card.id, card) for card in hand)
    turnup_id = None
    if result.turnup is not None:
        turnup_id = result.turnup.id
        card_table[turnup_id] = result.turnup

    state.round_number = round_number
    state.round = RoundState(
        number=round_number,
        cards=card_table,
        stock=[card.id for card in result.stock],
        turnup_card_id=turnup_id,
        trump_suit=determine_trump(result.turnup, settings.trump_allowed),
    )
    for player in state.players.values():
        player.reset_for_round(stamp)
    for player_id, hand in zip(seated, result.hands):
        state.players[player_id].hand = [card.id for card in hand]

    state.current_player_index = None
    state.current_bidder_index = state.player_order.index(seated[0])
    logger.info(
        "Round %d dealt to %d players; trump %s",
        round_number,
        len(seated),
        state.round.trump_suit or "none",
    )
    transition(state, Phase.BIDDING)
    return state


def start_game(
    state: GameState,
    rng: Optional[Random] = None,
    *,
    deck: Optional[Sequence[Card]] = None,
) -> GameState:
    """Validate the table, then deal the next round.

    A game that fell back to setup after a failed deal resumes its round
    numbering, so scored rounds still count towards ``max_rounds``.
    ``deck`` replaces the shuffled deck, which is how tests stack a deal.
    """
    ensure_phase(state, Phase.SETUP)
    count = len(state.active_player_ids())
    settings = state.settings
    if not settings.min_players <= count <= settings.max_players:
        raise InvalidMove(
            f"Need between {settings.min_players} and {settings.max_players} active players, got {count}."
        )
    transition(state, Phase.DEALING)
    return _deal_round(state, state.round_number + 1, rng, deck)


def start_new_round(
    state: GameState,
    rng: Optional[Random] = None,
    *,
    deck: Optional[Sequence[Card]] = None,
) -> GameState:
    """Reset round-scoped state and deal the next round; scores carry over."""
    ensure_phase(state, Phase.DEALING)
    return _deal_round(state, state.round_number + 1, rng, deck)


def score_round(state: GameState) -> RoundResult:
    """Apply the round's score deltas and decide whether the game continues."""
    ensure_phase(state, Phase.SCORING)
    result = compute_round_result(state)

    stamp = state.touch("score_round")
    for score in result.scores:
        player = state.players[score.player_id]
        player.score = score.total
        player.updated_at = stamp
    state.round_results.append(result)
    logger.info(
        "Round %d scored: %s",
        result.round_number,
        ", ".join(f"{score.player_id} {score.delta:+d} -> {score.total}" for score in result.scores),
    )

    threshold = state.settings.scoring.game_over_threshold
    active = [state.players[player_id] for player_id in state.active_player_ids()]
    if is_game_over(active, threshold) or state.round_number >= state.settings.max_rounds:
        transition(state, Phase.FINISHED)
    else:
        transition(state, Phase.DEALING)
    return result


def winners(state: GameState) -> list[str]:
    """Return the active player ids sharing the highest cumulative score."""
    active = state.active_player_ids()
    if not active:
        return []
    best = max(state.players[player_id].score for player_id in active)
    return [player_id for player_id in active if state.players[player_id].score == best]
