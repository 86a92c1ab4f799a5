"""Card-related data structures and helpers for Ninety-Nine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Mapping, Optional


class Suit(Enum):
    CLUBS = auto()
    DIAMONDS = auto()
    HEARTS = auto()
    SPADES = auto()
    JOKER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class Rank(Enum):
    TWO = auto()
    THREE = auto()
    FOUR = auto()
    FIVE = auto()
    SIX = auto()
    SEVEN = auto()
    EIGHT = auto()
    NINE = auto()
    TEN = auto()
    JACK = auto()
    QUEEN = auto()
    KING = auto()
    ACE = auto()
    JOKER = auto()

    def __str__(self) -> str:
        return self.name.lower()


# The one rank table every comparison in the engine goes through.
RANK_STRENGTH: dict[Rank, int] = {
    Rank.TWO: 2,
    Rank.THREE: 3,
    Rank.FOUR: 4,
    Rank.FIVE: 5,
    Rank.SIX: 6,
    Rank.SEVEN: 7,
    Rank.EIGHT: 8,
    Rank.NINE: 9,
    Rank.TEN: 10,
    Rank.JACK: 11,
    Rank.QUEEN: 12,
    Rank.KING: 13,
    Rank.ACE: 14,
    Rank.JOKER: 15,
}

STANDARD_SUITS: list[Suit] = [Suit.CLUBS, Suit.DIAMONDS, Suit.HEARTS, Suit.SPADES]

STANDARD_RANKS: list[Rank] = [rank for rank in Rank if rank is not Rank.JOKER]

NINETY_NINE_RANKS: list[Rank] = [rank for rank in STANDARD_RANKS if RANK_STRENGTH[rank] >= 6]

SUIT_LETTERS: dict[Suit, str] = {
    Suit.CLUBS: "C",
    Suit.DIAMONDS: "D",
    Suit.HEARTS: "H",
    Suit.SPADES: "S",
}

RANK_LABELS: dict[Rank, str] = {
    Rank.TWO: "2",
    Rank.THREE: "3",
    Rank.FOUR: "4",
    Rank.FIVE: "5",
    Rank.SIX: "6",
    Rank.SEVEN: "7",
    Rank.EIGHT: "8",
    Rank.NINE: "9",
    Rank.TEN: "10",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
    Rank.ACE: "A",
}

JOKER_CODE = "JOKER"


@dataclass(frozen=True)
class Card:
    """Immutable playing card.

    The id is derived from rank and suit, which is unique within any deck the
    engine builds. ``face_up`` is the only state that changes over a round and
    it does so by replacing the card in the round's card table.
    """

    rank: Rank
    suit: Suit
    face_up: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if (self.rank is Rank.JOKER) != (self.suit is Suit.JOKER):
            raise ValueError("The joker rank and joker suit only appear together.")

    @property
    def id(self) -> str:
        return card_code(self)

    def is_joker(self) -> bool:
        return self.rank is Rank.JOKER

    def strength(self) -> int:
        return RANK_STRENGTH[self.rank]

    def __str__(self) -> str:
        return card_code(self)


def card_strength(card: Card) -> int:
    """Return an integer strength used for ordering cards."""
    return RANK_STRENGTH[card.rank]


def card_code(card: Card) -> str:
    if card.is_joker():
        return JOKER_CODE
    return f"{RANK_LABELS[card.rank]}{SUIT_LETTERS[card.suit]}"


def card_from_code(code: str) -> Card:
    """Parse a short code such as ``"10C"``, ``"AH"`` or ``"JOKER"``."""
    text = code.strip().upper()
    if text == JOKER_CODE:
        return Card(Rank.JOKER, Suit.JOKER)
    if len(text) < 2:
        raise ValueError(f"Invalid card code: {code!r}")

    rank_text, suit_text = text[:-1], text[-1]
    suit = next((s for s, letter in SUIT_LETTERS.items() if letter == suit_text), None)
    rank = next((r for r, label in RANK_LABELS.items() if label == rank_text), None)
    if suit is None or rank is None:
        raise ValueError(f"Invalid card code: {code!r}")
    return Card(rank, suit)


def beats(candidate: Card, current: Card, lead_suit: Optional[Suit], trump: Optional[Suit]) -> bool:
    """Return True if candidate wins over current within the trick context."""
    if candidate == current:
        return False

    # The joker outranks everything regardless of suit.
    if candidate.is_joker():
        return True
    if current.is_joker():
        return False

    candidate_trump = trump is not None and candidate.suit is trump
    current_trump = trump is not None and current.suit is trump

    if candidate_trump and not current_trump:
        return True
    if current_trump and not candidate_trump:
        return False

    if candidate.suit is current.suit:
        return card_strength(candidate) > card_strength(current)

    if candidate.suit is lead_suit and current.suit is not lead_suit:
        return True

    return False


def serialize_card(card: Card) -> dict[str, object]:
    return {
        "id": card.id,
        "rank": card.rank.name.lower(),
        "suit": card.suit.name.lower(),
        "face_up": card.face_up,
    }


def deserialize_card(payload: Mapping[str, object]) -> Card:
    rank_name = str(payload["rank"]).upper()
    suit_name = str(payload["suit"]).upper()
    return Card(Rank[rank_name], Suit[suit_name], face_up=bool(payload.get("face_up", False)))


def card_label(card: Card) -> str:
    if card.is_joker():
        return "Joker"
    return f"{card.rank.name.title()} of {card.suit.name.title()}"
