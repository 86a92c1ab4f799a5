"""Trick representation and resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .cards import Card, Suit, beats, card_strength
from .errors import TrickError


@dataclass
class Trick:
    """One trick of a round.

    ``plays`` is keyed in play order starting with the leader; a value of
    ``None`` means that player has not played yet.
    """

    id: str
    round_number: int
    trick_number: int
    leader_id: str
    plays: Dict[str, Optional[str]]
    trump_suit: Optional[Suit] = None
    lead_suit: Optional[Suit] = None
    winner_id: Optional[str] = None
    complete: bool = False
    updated_at: float = 0.0

    def is_empty(self) -> bool:
        return all(card_id is None for card_id in self.plays.values())

    def is_full(self) -> bool:
        return all(card_id is not None for card_id in self.plays.values())

    def played(self) -> List[Tuple[str, str]]:
        return [(player_id, card_id) for player_id, card_id in self.plays.items() if card_id is not None]

    def next_player(self) -> Optional[str]:
        return next((player_id for player_id, card_id in self.plays.items() if card_id is None), None)


def open_trick(
    *,
    round_number: int,
    trick_number: int,
    leader_id: str,
    seating: Sequence[str],
    trump_suit: Optional[Suit],
    timestamp: float = 0.0,
) -> Trick:
    """Create an empty trick whose play order rotates from ``leader_id``."""
    if leader_id not in seating:
        raise TrickError(f"Leader {leader_id!r} is not seated in this trick.")
    start = list(seating).index(leader_id)
    rotation = list(seating[start:]) + list(seating[:start])
    return Trick(
        id=f"r{round_number}-t{trick_number}",
        round_number=round_number,
        trick_number=trick_number,
        leader_id=leader_id,
        plays={player_id: None for player_id in rotation},
        trump_suit=trump_suit,
        updated_at=timestamp,
    )


def resolve_trick(
    plays: Sequence[Tuple[str, Card]],
    lead_suit: Optional[Suit],
    trump_suit: Optional[Suit],
) -> str:
    """Return the id of the player whose card takes the trick.

    The joker wins outright. Otherwise the highest trump wins, and failing
    that the highest card of the lead suit. Cards of any other suit never win.
    """
    if not plays:
        raise TrickError("Cannot determine winner on empty trick.")

    for player_id, card in plays:
        if card.is_joker():
            return player_id

    if trump_suit is not None:
        trumps = [(player_id, card) for player_id, card in plays if card.suit is trump_suit]
        if trumps:
            return max(trumps, key=lambda play: card_strength(play[1]))[0]

    following = [(player_id, card) for player_id, card in plays if card.suit is lead_suit]
    if not following:
        raise TrickError(f"No card of the lead suit {lead_suit} was played.")
    return max(following, key=lambda play: card_strength(play[1]))[0]


def winning_play(
    plays: Sequence[Tuple[str, Card]],
    lead_suit: Optional[Suit],
    trump_suit: Optional[Suit],
) -> Tuple[str, Card]:
    """Return the play currently taking a possibly unfinished trick."""
    if not plays:
        raise TrickError("Cannot determine winner on empty trick.")
    winning_player, winning_card = plays[0]
    for player_id, card in plays[1:]:
        if beats(card, winning_card, lead_suit, trump_suit):
            winning_player, winning_card = player_id, card
    return winning_player, winning_card
