"""Plain-data snapshots of a game and last-write-wins merging of remote state.

Exports a :class:`GameState` to a JSON-compatible dict and restores it after
checking the structure with pydantic, so a snapshot coming back from storage
or a sync layer is rejected as a whole instead of producing a broken game.
"""

from __future__ import annotations

import copy
from collections import Counter
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

from pydantic import (
    BaseModel,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
    model_validator,
)

from .cards import Rank, Suit, card_code, deserialize_card, serialize_card
from .config import GameSettings
from .errors import SnapshotError
from .phases import Phase
from .scoring import Combination, PlayerRoundScore, RoundResult
from .state import AILevel, Bid, GameState, PlayerState, RoundState
from .trick import Trick

SCHEMA_VERSION = 1

RANK_NAMES = tuple(rank.name.lower() for rank in Rank)
SUIT_NAMES = tuple(suit.name.lower() for suit in Suit)


def _validate_suit(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = value.lower()
    if normalized not in SUIT_NAMES:
        raise ValueError(f"Unknown suit: {value!r}")
    return normalized


def _suit(value: Optional[str]) -> Optional[Suit]:
    return None if value is None else Suit[value.upper()]


class CardRecord(BaseModel):
    rank: StrictStr
    suit: StrictStr
    face_up: StrictBool = False

    @field_validator("rank")
    @classmethod
    def validate_rank(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in RANK_NAMES:
            raise ValueError(f"Unknown rank: {value!r}")
        return normalized

    @field_validator("suit")
    @classmethod
    def validate_suit(cls, value: str) -> str:
        return _validate_suit(value)


class PlayerRecord(BaseModel):
    id: StrictStr
    name: StrictStr
    hand: List[StrictStr] = Field(default_factory=list)
    bid_card_ids: List[StrictStr] = Field(default_factory=list)
    bid_value: Optional[StrictInt] = Field(None, ge=0)
    reveal_bid: StrictBool = False
    tricks_won: StrictInt = Field(0, ge=0)
    score: StrictInt = 0
    is_active: StrictBool = True
    is_ai: StrictBool = False
    ai_level: Optional[AILevel] = None
    updated_at: StrictFloat = 0.0


class TrickRecord(BaseModel):
    id: StrictStr
    round_number: StrictInt = Field(..., ge=1)
    trick_number: StrictInt = Field(..., ge=1)
    leader_id: StrictStr
    plays: Dict[str, Optional[StrictStr]]
    trump_suit: Optional[StrictStr] = None
    lead_suit: Optional[StrictStr] = None
    winner_id: Optional[StrictStr] = None
    complete: StrictBool = False
    updated_at: StrictFloat = 0.0

    @field_validator("trump_suit", "lead_suit")
    @classmethod
    def validate_suits(cls, value: Optional[str]) -> Optional[str]:
        return _validate_suit(value)


class BidRecord(BaseModel):
    player_id: StrictStr
    card_ids: List[StrictStr] = Field(default_factory=list)
    value: StrictInt = Field(..., ge=0)
    round_number: StrictInt = Field(..., ge=1)
    revealed: StrictBool = False
    timestamp: StrictFloat = 0.0


class RoundRecord(BaseModel):
    number: StrictInt = Field(..., ge=1)
    cards: Dict[str, CardRecord]
    stock: List[StrictStr] = Field(default_factory=list)
    turnup_card_id: Optional[StrictStr] = None
    trump_suit: Optional[StrictStr] = None
    tricks: Dict[str, TrickRecord] = Field(default_factory=dict)
    trick_history: List[StrictStr] = Field(default_factory=list)
    current_trick_id: Optional[StrictStr] = None
    bids: Dict[str, BidRecord] = Field(default_factory=dict)
    bid_phase_complete: StrictBool = False
    tricks_played: StrictInt = Field(0, ge=0)

    @field_validator("trump_suit")
    @classmethod
    def validate_trump(cls, value: Optional[str]) -> Optional[str]:
        return _validate_suit(value)

    @model_validator(mode="after")
    def check_references(self) -> "RoundRecord":
        for key, record in self.cards.items():
            expected = card_code(deserialize_card(record.model_dump()))
            if key != expected:
                raise ValueError(f"Card key {key!r} does not match card {expected!r}.")
        known = set(self.cards)
        referenced = list(self.stock)
        if self.turnup_card_id is not None:
            referenced.append(self.turnup_card_id)
        for trick in self.tricks.values():
            referenced.extend(card_id for card_id in trick.plays.values() if card_id is not None)
        for bid in self.bids.values():
            referenced.extend(bid.card_ids)
        unknown = sorted(set(referenced) - known)
        if unknown:
            raise ValueError(f"Unknown card ids: {', '.join(unknown)}.")
        if self.current_trick_id is not None and self.current_trick_id not in self.tricks:
            raise ValueError(f"Current trick {self.current_trick_id!r} is missing.")
        missing = [trick_id for trick_id in self.trick_history if trick_id not in self.tricks]
        if missing:
            raise ValueError(f"Archived tricks missing: {', '.join(missing)}.")
        return self

    def placed_cards(self) -> List[str]:
        """Card ids held by the stock, the turnup slot and the tricks."""
        placed = list(self.stock)
        if self.turnup_card_id is not None:
            placed.append(self.turnup_card_id)
        for trick in self.tricks.values():
            placed.extend(card_id for card_id in trick.plays.values() if card_id is not None)
        return placed


class ScoreRecord(BaseModel):
    player_id: StrictStr
    bid: StrictInt
    tricks_won: StrictInt
    combination: Optional[Combination] = None
    delta: StrictInt
    total: StrictInt


class RoundResultRecord(BaseModel):
    round_number: StrictInt
    scores: List[ScoreRecord]


class GameSnapshot(BaseModel):
    schema_version: StrictInt = SCHEMA_VERSION
    settings: GameSettings = Field(default_factory=GameSettings)
    phase: Phase
    round_number: StrictInt = Field(0, ge=0)
    player_order: List[StrictStr]
    players: Dict[str, PlayerRecord]
    current_player_index: Optional[StrictInt] = None
    current_bidder_index: Optional[StrictInt] = None
    round: Optional[RoundRecord] = None
    round_results: List[RoundResultRecord] = Field(default_factory=list)
    last_action: Optional[StrictStr] = None
    last_action_at: Optional[StrictFloat] = None

    @model_validator(mode="after")
    def check_players(self) -> "GameSnapshot":
        if self.schema_version != SCHEMA_VERSION:
            raise ValueError(f"Unsupported schema version {self.schema_version}.")
        if len(set(self.player_order)) != len(self.player_order):
            raise ValueError("player_order contains duplicates.")
        if set(self.player_order) != set(self.players):
            raise ValueError("player_order and players must name the same ids.")
        for key, record in self.players.items():
            if record.id != key:
                raise ValueError(f"Player key {key!r} does not match id {record.id!r}.")
        for index in (self.current_player_index, self.current_bidder_index):
            if index is not None and not 0 <= index < len(self.player_order):
                raise ValueError(f"Player index {index} is out of range.")
        if self.round is not None:
            self._check_card_locations(self.round)
        return self

    def _check_card_locations(self, round_record: RoundRecord) -> None:
        # Each card is in the stock, the turnup slot, one hand or one trick.
        placed = round_record.placed_cards()
        for record in self.players.values():
            unknown = [card_id for card_id in record.hand if card_id not in round_record.cards]
            if unknown:
                raise ValueError(f"{record.id} holds unknown cards: {', '.join(unknown)}.")
            placed.extend(record.hand)
        duplicated = sorted(card_id for card_id, count in Counter(placed).items() if count > 1)
        if duplicated:
            raise ValueError(f"Cards placed more than once: {', '.join(duplicated)}.")


def _trick_to_dict(trick: Trick) -> Dict[str, Any]:
    return {
        "id": trick.id,
        "round_number": trick.round_number,
        "trick_number": trick.trick_number,
        "leader_id": trick.leader_id,
        "plays": dict(trick.plays),
        "trump_suit": str(trick.trump_suit) if trick.trump_suit else None,
        "lead_suit": str(trick.lead_suit) if trick.lead_suit else None,
        "winner_id": trick.winner_id,
        "complete": trick.complete,
        "updated_at": trick.updated_at,
    }


def _player_to_dict(player: PlayerState) -> Dict[str, Any]:
    return {
        "id": player.id,
        "name": player.name,
        "hand": list(player.hand),
        "bid_card_ids": list(player.bid_card_ids),
        "bid_value": player.bid_value,
        "reveal_bid": player.reveal_bid,
        "tricks_won": player.tricks_won,
        "score": player.score,
        "is_active": player.is_active,
        "is_ai": player.is_ai,
        "ai_level": player.ai_level.value if player.ai_level else None,
        "updated_at": player.updated_at,
    }


def _round_to_dict(round_state: RoundState) -> Dict[str, Any]:
    return {
        "number": round_state.number,
        "cards": {card_id: serialize_card(card) for card_id, card in round_state.cards.items()},
        "stock": list(round_state.stock),
        "turnup_card_id": round_state.turnup_card_id,
        "trump_suit": str(round_state.trump_suit) if round_state.trump_suit else None,
        "tricks": {trick_id: _trick_to_dict(trick) for trick_id, trick in round_state.tricks.items()},
        "trick_history": list(round_state.trick_history),
        "current_trick_id": round_state.current_trick_id,
        "bids": {
            player_id: {
                "player_id": bid.player_id,
                "card_ids": list(bid.card_ids),
                "value": bid.value,
                "round_number": bid.round_number,
                "revealed": bid.revealed,
                "timestamp": bid.timestamp,
            }
            for player_id, bid in round_state.bids.items()
        },
        "bid_phase_complete": round_state.bid_phase_complete,
        "tricks_played": round_state.tricks_played,
    }


def _result_to_dict(result: RoundResult) -> Dict[str, Any]:
    return {
        "round_number": result.round_number,
        "scores": [
            {
                "player_id": score.player_id,
                "bid": score.bid,
                "tricks_won": score.tricks_won,
                "combination": score.combination.value if score.combination else None,
                "delta": score.delta,
                "total": score.total,
            }
            for score in result.scores
        ],
    }


def to_snapshot(state: GameState) -> Dict[str, Any]:
    """Serialize the game to plain data."""
    return {
        "schema_version": SCHEMA_VERSION,
        "settings": state.settings.model_dump(mode="json"),
        "phase": state.phase.value,
        "round_number": state.round_number,
        "player_order": list(state.player_order),
        "players": {player_id: _player_to_dict(player) for player_id, player in state.players.items()},
        "current_player_index": state.current_player_index,
        "current_bidder_index": state.current_bidder_index,
        "round": _round_to_dict(state.round) if state.round is not None else None,
        "round_results": [_result_to_dict(result) for result in state.round_results],
        "last_action": state.last_action,
        "last_action_at": state.last_action_at,
    }


def _round_from_record(record: RoundRecord) -> RoundState:
    return RoundState(
        number=record.number,
        cards={card_id: deserialize_card(card.model_dump()) for card_id, card in record.cards.items()},
        stock=list(record.stock),
        turnup_card_id=record.turnup_card_id,
        trump_suit=_suit(record.trump_suit),
        tricks={
            trick_id: Trick(
                id=trick.id,
                round_number=trick.round_number,
                trick_number=trick.trick_number,
                leader_id=trick.leader_id,
                plays=dict(trick.plays),
                trump_suit=_suit(trick.trump_suit),
                lead_suit=_suit(trick.lead_suit),
                winner_id=trick.winner_id,
                complete=trick.complete,
                updated_at=trick.updated_at,
            )
            for trick_id, trick in record.tricks.items()
        },
        trick_history=list(record.trick_history),
        current_trick_id=record.current_trick_id,
        bids={
            player_id: Bid(
                player_id=bid.player_id,
                card_ids=tuple(bid.card_ids),
                value=bid.value,
                round_number=bid.round_number,
                revealed=bid.revealed,
                timestamp=bid.timestamp,
            )
            for player_id, bid in record.bids.items()
        },
        bid_phase_complete=record.bid_phase_complete,
        tricks_played=record.tricks_played,
    )


def from_snapshot(data: Mapping[str, Any]) -> GameState:
    """Restore a game from :func:`to_snapshot` output.

    Raises:
        SnapshotError: a field is missing or mistyped, or ids do not line up.
    """
    try:
        snapshot = GameSnapshot.model_validate(data)
    except ValidationError as exc:
        raise SnapshotError(f"Invalid game snapshot: {exc}") from exc

    players = {
        player_id: PlayerState(**record.model_dump()) for player_id, record in snapshot.players.items()
    }
    results = [
        RoundResult(
            round_number=result.round_number,
            scores=tuple(PlayerRoundScore(**score.model_dump()) for score in result.scores),
        )
        for result in snapshot.round_results
    ]
    return GameState(
        settings=snapshot.settings,
        phase=snapshot.phase,
        round_number=snapshot.round_number,
        player_order=list(snapshot.player_order),
        players=players,
        current_player_index=snapshot.current_player_index,
        current_bidder_index=snapshot.current_bidder_index,
        round=_round_from_record(snapshot.round) if snapshot.round is not None else None,
        round_results=results,
        last_action=snapshot.last_action,
        last_action_at=snapshot.last_action_at,
    )


EntityT = TypeVar("EntityT")


def _merge_entities(
    local: Mapping[str, EntityT],
    remote: Mapping[str, EntityT],
    stamp: Callable[[EntityT], float],
) -> Dict[str, EntityT]:
    merged = {entity_id: copy.deepcopy(entity) for entity_id, entity in local.items()}
    for entity_id, entity in remote.items():
        current = merged.get(entity_id)
        # Ties keep the local copy.
        if current is None or stamp(entity) > stamp(current):
            merged[entity_id] = copy.deepcopy(entity)
    return merged


def merge_remote_state(local: GameState, remote: GameState) -> GameState:
    """Reconcile state received from a sync layer with the local game.

    Game-level fields come from whichever side acted last. Players, tricks
    and bids are merged per id, each keeping its more recently updated copy.
    Neither input is modified.
    """
    remote_newer = (remote.last_action_at or 0.0) > (local.last_action_at or 0.0)
    merged = copy.deepcopy(remote if remote_newer else local)
    other = local if remote_newer else remote

    merged.players = _merge_entities(local.players, remote.players, lambda player: player.updated_at)
    merged.player_order = list(merged.player_order) + [
        player_id for player_id in other.player_order if player_id not in merged.player_order
    ]

    if (
        merged.round is not None
        and local.round is not None
        and remote.round is not None
        and local.round.number == remote.round.number
    ):
        merged.round.tricks = _merge_entities(local.round.tricks, remote.round.tricks, lambda trick: trick.updated_at)
        merged.round.bids = _merge_entities(local.round.bids, remote.round.bids, lambda bid: bid.timestamp)
    return merged
