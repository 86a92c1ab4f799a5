"""Bid resolution and the bidding round for Ninety-Nine."""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Sequence, Tuple, Union

from .cards import Card, Suit
from .errors import GameStateError, InvalidBid, NotYourTurn
from .mechanics import begin_play
from .phases import Phase, ensure_phase
from .state import Bid, GameState

logger = logging.getLogger(__name__)

# Points each bid card contributes by suit.
SUIT_BID_VALUES: dict[Suit, int] = {
    Suit.CLUBS: 3,
    Suit.HEARTS: 2,
    Suit.SPADES: 1,
    Suit.DIAMONDS: 0,
    Suit.JOKER: 0,
}

BidInput = Union[int, Sequence[str]]


def bid_value_from_cards(cards: Iterable[Card]) -> int:
    return sum(SUIT_BID_VALUES[card.suit] for card in cards)


def resolve_bid_value(bid: Union[int, Iterable[Card]]) -> int:
    """Normalize either bid representation to an integer."""
    if isinstance(bid, int) and not isinstance(bid, bool):
        return bid
    return bid_value_from_cards(bid)


def validate_bid(
    bid: BidInput,
    *,
    hand: Sequence[str],
    cards: Mapping[str, Card],
    cards_per_player: int,
    bid_card_count: int,
) -> Tuple[Tuple[str, ...], int]:
    """Check a bid against the bidder's hand and return ``(card_ids, value)``.

    Raises:
        InvalidBid: the integer is out of range, or the card ids are not
            exactly ``bid_card_count`` distinct cards held by the bidder.
    """
    if isinstance(bid, bool):
        raise InvalidBid("A bid must be an integer or a sequence of card ids.")

    if isinstance(bid, int):
        if not 0 <= bid <= cards_per_player:
            raise InvalidBid(f"Bid {bid} must be between 0 and {cards_per_player}.")
        return (), bid

    if isinstance(bid, str):
        raise InvalidBid("A card bid must be a sequence of card ids, not a single string.")

    card_ids = tuple(bid)
    if len(card_ids) != bid_card_count:
        raise InvalidBid(f"A card bid uses exactly {bid_card_count} cards.")
    if len(set(card_ids)) != len(card_ids):
        raise InvalidBid("Bid cards must be distinct.")
    missing = [card_id for card_id in card_ids if card_id not in hand]
    if missing:
        raise InvalidBid(f"Bid cards not in hand: {', '.join(missing)}.")

    value = bid_value_from_cards(cards[card_id] for card_id in card_ids)
    if value > cards_per_player:
        raise InvalidBid(f"Bid cards resolve to {value}, above the limit of {cards_per_player}.")
    return card_ids, value


def reveal_order(state: GameState) -> List[str]:
    """Seating order in which bids are conventionally shown."""
    return [player_id for player_id in state.active_player_ids() if player_id in state.require_round().bids]


def all_bids_revealed(state: GameState) -> bool:
    round_state = state.require_round()
    return round_state.bid_phase_complete and all(bid.revealed for bid in round_state.bids.values())


def place_bid(state: GameState, player_id: str, bid: BidInput) -> GameState:
    """Record a player's bid and pass the turn to the next bidder."""
    ensure_phase(state, Phase.BIDDING)
    round_state = state.require_round()
    player = state.player(player_id)

    if player_id in round_state.bids:
        raise InvalidBid(f"{player_id} has already bid this round.")
    if round_state.bid_phase_complete or state.current_bidder_id() != player_id:
        raise NotYourTurn(f"It is not {player_id}'s turn to bid.")

    card_ids, value = validate_bid(
        bid,
        hand=player.hand,
        cards=round_state.cards,
        cards_per_player=state.settings.cards_per_player,
        bid_card_count=state.settings.bid_card_count,
    )

    stamp = state.touch("place_bid")
    round_state.bids[player_id] = Bid(
        player_id=player_id,
        card_ids=card_ids,
        value=value,
        round_number=round_state.number,
        timestamp=stamp,
    )
    player.bid_card_ids = list(card_ids)
    player.bid_value = value
    player.reveal_bid = False
    player.updated_at = stamp
    logger.debug("%s bid %d (cards: %s)", player_id, value, ", ".join(card_ids) or "none")

    seated = state.active_player_ids()
    position = seated.index(player_id)
    if position + 1 < len(seated):
        state.current_bidder_index = state.player_order.index(seated[position + 1])
        return state

    round_state.bid_phase_complete = True
    state.current_bidder_index = None
    logger.info(
        "Round %d bidding complete: %s",
        round_state.number,
        ", ".join(f"{pid}={round_state.bids[pid].value}" for pid in seated),
    )
    if not state.settings.require_reveal:
        begin_play(state, stamp)
    return state


def reveal_bid(state: GameState, player_id: str) -> GameState:
    """Reveal a placed bid; revealing the last one starts play when reveals are required."""
    ensure_phase(state, Phase.BIDDING, Phase.PLAYING, Phase.SCORING)
    round_state = state.require_round()
    player = state.player(player_id)

    if not round_state.bid_phase_complete:
        raise GameStateError("Bids can only be revealed once every player has bid.")
    bid = round_state.bids.get(player_id)
    if bid is None:
        raise InvalidBid(f"{player_id} has no bid to reveal.")
    if bid.revealed:
        raise InvalidBid(f"{player_id} has already revealed their bid.")

    stamp = state.touch("reveal_bid")
    bid.revealed = True
    bid.timestamp = stamp
    player.reveal_bid = True
    player.updated_at = stamp
    logger.debug("%s revealed a bid of %d", player_id, bid.value)

    if state.phase is Phase.BIDDING and all_bids_revealed(state):
        begin_play(state, stamp)
    return state
