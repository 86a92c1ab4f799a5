"""Turn legality and card play for Ninety-Nine."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Mapping, Optional

from .cards import STANDARD_SUITS, Card, Suit, card_strength
from .errors import CardNotInHand, EngineError, MustFollowSuit, NotYourTurn
from .phases import Phase, ensure_phase, transition
from .state import GameState
from .trick import Trick, open_trick, resolve_trick

logger = logging.getLogger(__name__)

_SUIT_ORDER = {suit: index for index, suit in enumerate(STANDARD_SUITS + [Suit.JOKER])}


def play_order_key(card: Card) -> tuple[int, int]:
    """Sort key ordering cards by strength, breaking ties by suit."""
    return card_strength(card), _SUIT_ORDER[card.suit]


def follow_suit_cards(hand: Iterable[str], cards: Mapping[str, Card], lead_suit: Optional[Suit]) -> List[str]:
    """Return the card ids of ``hand`` that may be played against ``lead_suit``.

    Holding any card of the lead suit forces that suit; otherwise every card
    is playable. The joker is its own suit.
    """
    hand_ids = list(hand)
    if lead_suit is None:
        return hand_ids
    following = [card_id for card_id in hand_ids if cards[card_id].suit is lead_suit]
    return following if following else hand_ids


def legal_cards(state: GameState, player_id: str) -> List[str]:
    """Return the legal subset of a player's hand for the current trick."""
    trick = state.current_trick()
    if trick is None:
        return []
    player = state.player(player_id)
    return follow_suit_cards(player.hand, state.require_round().cards, trick.lead_suit)


def check_play(state: GameState, player_id: str, card_id: str) -> None:
    ensure_phase(state, Phase.PLAYING)
    player = state.player(player_id)
    if state.current_player_id() != player_id:
        raise NotYourTurn(f"It is not {player_id}'s turn to play.")
    if card_id not in player.hand:
        raise CardNotInHand(f"Card {card_id} is not in {player_id}'s hand.")
    if card_id not in legal_cards(state, player_id):
        trick = state.current_trick()
        assert trick is not None
        raise MustFollowSuit(f"{player_id} must follow {trick.lead_suit}.")


def is_legal_play(state: GameState, player_id: str, card_id: str) -> bool:
    try:
        check_play(state, player_id, card_id)
    except EngineError:
        return False
    return True


def suggest_play(legal: Iterable[str], cards: Mapping[str, Card], lead_suit: Optional[Suit]) -> Optional[str]:
    """Natural play: lead the highest card, follow with the lowest card of the lead suit, else the lowest."""
    options = list(legal)
    if not options:
        return None
    if lead_suit is None:
        return max(options, key=lambda card_id: play_order_key(cards[card_id]))
    following = [card_id for card_id in options if cards[card_id].suit is lead_suit]
    pool = following if following else options
    return min(pool, key=lambda card_id: play_order_key(cards[card_id]))


def _open_next_trick(state: GameState, leader_id: str, stamp: float) -> Trick:
    round_state = state.require_round()
    trick = open_trick(
        round_number=round_state.number,
        trick_number=round_state.tricks_played + 1,
        leader_id=leader_id,
        seating=state.active_player_ids(),
        trump_suit=round_state.trump_suit,
        timestamp=stamp,
    )
    round_state.tricks[trick.id] = trick
    round_state.current_trick_id = trick.id
    state.current_player_index = state.player_order.index(leader_id)
    return trick


def begin_play(state: GameState, stamp: float) -> None:
    """Move a fully bid round into play with the first seated player leading."""
    transition(state, Phase.PLAYING)
    leader_id = state.active_player_ids()[0]
    _open_next_trick(state, leader_id, stamp)


def _complete_trick(state: GameState, trick: Trick, stamp: float) -> None:
    round_state = state.require_round()
    plays = [(player_id, round_state.cards[card_id]) for player_id, card_id in trick.played()]
    winner_id = resolve_trick(plays, trick.lead_suit, trick.trump_suit)

    trick.winner_id = winner_id
    trick.complete = True
    trick.updated_at = stamp
    round_state.trick_history.append(trick.id)
    round_state.current_trick_id = None
    round_state.tricks_played += 1

    winner = state.players[winner_id]
    winner.tricks_won += 1
    winner.updated_at = stamp
    logger.info(
        "Trick %s won by %s with %s",
        trick.id,
        winner_id,
        trick.plays[winner_id],
    )

    if round_state.tricks_played >= state.settings.round_tricks:
        state.current_player_index = None
        transition(state, Phase.SCORING)
    else:
        _open_next_trick(state, winner_id, stamp)


def play_card(state: GameState, player_id: str, card_id: str) -> GameState:
    """Play a card into the current trick, resolving the trick once it is full."""
    check_play(state, player_id, card_id)

    round_state = state.require_round()
    trick = state.current_trick()
    assert trick is not None
    player = state.players[player_id]
    stamp = state.touch("play_card")

    card = round_state.cards[card_id]
    player.hand.remove(card_id)
    player.updated_at = stamp
    round_state.cards[card_id] = replace(card, face_up=True)
    trick.plays[player_id] = card_id
    if trick.lead_suit is None:
        trick.lead_suit = card.suit
    trick.updated_at = stamp
    logger.debug("%s played %s into %s", player_id, card_id, trick.id)

    if trick.is_full():
        _complete_trick(state, trick, stamp)
    else:
        next_player = trick.next_player()
        assert next_player is not None
        state.current_player_index = state.player_order.index(next_player)
    return state
