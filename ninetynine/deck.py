"""Deck creation, dealing and trump determination for Ninety-Nine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from random import Random
from typing import List, Optional, Sequence

from .cards import NINETY_NINE_RANKS, STANDARD_RANKS, STANDARD_SUITS, Card, Rank, Suit
from .errors import SetupError

logger = logging.getLogger(__name__)


class DeckVariant(str, Enum):
    STANDARD = "standard"
    NINETY_NINE = "ninety-nine"


DECK_SIZES = {
    DeckVariant.STANDARD: 52,
    DeckVariant.NINETY_NINE: 37,
}


def build_deck(variant: DeckVariant = DeckVariant.NINETY_NINE) -> List[Card]:
    """Return the ordered deck for the variant."""
    variant = DeckVariant(variant)
    if variant is DeckVariant.STANDARD:
        return [Card(rank, suit) for suit in STANDARD_SUITS for rank in STANDARD_RANKS]
    cards = [Card(rank, suit) for suit in STANDARD_SUITS for rank in NINETY_NINE_RANKS]
    cards.append(Card(Rank.JOKER, Suit.JOKER))
    return cards


def create_deck(variant: DeckVariant = DeckVariant.NINETY_NINE, rng: Optional[Random] = None) -> List[Card]:
    """Return a freshly shuffled deck; pass a seeded ``Random`` for repeatable deals."""
    cards = build_deck(variant)
    if rng is None:
        rng = Random()
    rng.shuffle(cards)
    return cards


@dataclass(frozen=True)
class DealResult:
    hands: List[List[Card]]
    stock: List[Card]
    turnup: Optional[Card]


def deal(deck: Sequence[Card], num_players: int, cards_per_player: int) -> DealResult:
    """Deal round-robin from the top of the deck, then turn up the next card.

    Hand cards and the turnup are flipped face up; the stock stays face down.
    The turnup is ``None`` when the hands use up the deck exactly.
    """
    if num_players < 1 or cards_per_player < 1:
        raise SetupError("A deal needs at least one player and one card per player.")

    cards = list(deck)
    if len({card.id for card in cards}) != len(cards):
        raise SetupError("Deck contains duplicate cards.")

    needed = num_players * cards_per_player
    if len(cards) < needed:
        raise SetupError(
            f"Deck of {len(cards)} cards cannot deal {cards_per_player} cards to {num_players} players."
        )

    hands: List[List[Card]] = [[] for _ in range(num_players)]
    for index in range(needed):
        hands[index % num_players].append(replace(cards[index], face_up=True))

    turnup: Optional[Card] = None
    remaining = cards[needed:]
    if remaining:
        turnup = replace(remaining[0], face_up=True)
        remaining = remaining[1:]
    stock = [replace(card, face_up=False) for card in remaining]

    logger.info(
        "Dealt %d cards to %d players; turnup %s; stock %d",
        cards_per_player,
        num_players,
        turnup.id if turnup else "none",
        len(stock),
    )
    return DealResult(hands=hands, stock=stock, turnup=turnup)


def determine_trump(turnup: Optional[Card], trump_allowed: bool = True) -> Optional[Suit]:
    if not trump_allowed or turnup is None or turnup.is_joker():
        return None
    return turnup.suit
