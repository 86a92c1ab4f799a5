"""Convenience service layer for UI, sync and agents."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from random import Random
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from .bidding import BidInput, place_bid, reveal_bid, reveal_order
from .cards import card_label, serialize_card
from .config import GameSettings
from .errors import GameStateError, InvalidMove
from .game import add_player, create_game, score_round, start_game, start_new_round, winners
from .mechanics import legal_cards, play_card, suggest_play
from .phases import Phase
from .scoring import RoundResult
from .snapshot import from_snapshot, merge_remote_state, to_snapshot
from .state import AILevel, Bid, GameState, PlayerState
from .trick import Trick

logger = logging.getLogger(__name__)

AITurn = Callable[[GameState, str, Random], str]


@dataclass
class GameEvent:
    action: str
    phase: str
    player_id: Optional[str] = None
    payload: dict[str, Any] = field(default_factory=dict)


Listener = Callable[[GameEvent], None]


@dataclass
class TrickPlayView:
    player_id: str
    card: dict
    label: str


@dataclass
class TrickView:
    id: str
    leader_id: str
    lead_suit: Optional[str]
    trump_suit: Optional[str]
    plays: list[TrickPlayView]
    winner_id: Optional[str]
    complete: bool


@dataclass
class PlayerView:
    id: str
    name: str
    score: int
    tricks_won: int
    hand_size: int
    bid: Optional[int]
    bid_revealed: bool
    is_active: bool
    is_ai: bool
    ai_level: Optional[str]


@dataclass
class GameView:
    phase: str
    round_number: int
    trump: Optional[str]
    turnup: Optional[dict]
    current_player: Optional[str]
    current_bidder: Optional[str]
    players: list[PlayerView]
    hand: list[dict]
    hand_labels: list[str]
    legal_moves: list[str]
    suggested_move: Optional[str]
    trick: Optional[TrickView]
    trick_history: list[TrickView]
    reveal_order: list[str]
    round_results: list[dict]
    winners: list[str]


class GameService:
    """Facade around a GameState for UI, sync and bot consumers.

    Every successful action notifies subscribers with a :class:`GameEvent`.
    A rejected action raises and notifies nobody.
    """

    def __init__(
        self,
        state: Optional[GameState] = None,
        *,
        settings: Optional[GameSettings] = None,
        seed: Optional[int] = None,
        ai_turn: Optional[AITurn] = None,
    ) -> None:
        self.state = state if state is not None else create_game(settings)
        self.rng = Random(seed)
        self._ai_turn = ai_turn
        self._listeners: list[Listener] = []

    # Subscriptions -----------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, action: str, player_id: Optional[str] = None, **payload: Any) -> None:
        event = GameEvent(action=action, phase=self.state.phase.value, player_id=player_id, payload=payload)
        for listener in list(self._listeners):
            listener(event)

    # Setup -------------------------------------------------------------

    def add_player(
        self,
        name: str,
        *,
        player_id: Optional[str] = None,
        is_ai: bool = False,
        ai_level: Optional[Union[AILevel, str]] = None,
    ) -> PlayerState:
        level = ai_level
        if isinstance(ai_level, str):
            try:
                level = AILevel(ai_level.strip().lower())
            except ValueError:
                raise InvalidMove(f"Unknown AI level {ai_level!r}.") from None
        player = add_player(self.state, name, player_id=player_id, is_ai=is_ai, ai_level=level)
        self._emit("add_player", player.id, name=name)
        return player

    def start_game(self, *, deck: Optional[Sequence] = None) -> GameView:
        start_game(self.state, self.rng, deck=deck)
        self._emit("start_game", round_number=self.state.round_number)
        return self.get_view()

    def start_new_round(self, *, deck: Optional[Sequence] = None) -> GameView:
        start_new_round(self.state, self.rng, deck=deck)
        self._emit("start_new_round", round_number=self.state.round_number)
        return self.get_view()

    # Actions -----------------------------------------------------------

    def place_bid(self, player_id: str, bid: BidInput) -> GameView:
        place_bid(self.state, player_id, bid)
        self._emit("place_bid", player_id)
        return self.get_view(player_id)

    def reveal_bid(self, player_id: str) -> GameView:
        reveal_bid(self.state, player_id)
        bid = self.get_bid(player_id)
        self._emit("reveal_bid", player_id, value=bid.value if bid else None)
        return self.get_view(player_id)

    def play_card(self, player_id: str, card_id: str) -> GameView:
        trick = self.get_current_trick()
        play_card(self.state, player_id, card_id)
        payload: dict[str, Any] = {"card_id": card_id}
        if trick is not None and trick.complete:
            payload["trick_id"] = trick.id
            payload["winner_id"] = trick.winner_id
        self._emit("play_card", player_id, **payload)
        return self.get_view(player_id)

    def score_round(self) -> RoundResult:
        result = score_round(self.state)
        self._emit("score_round", round_number=result.round_number, deltas=result.deltas())
        return result

    def run_ai_turn(self, player_id: str) -> str:
        """Let the configured AI act once for ``player_id`` and return the action taken."""
        if self._ai_turn is None:
            raise GameStateError("No AI driver is configured for this service.")
        action = self._ai_turn(self.state, player_id, self.rng)
        self._emit(action, player_id, ai=True)
        return action

    # Sync --------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        return to_snapshot(self.state)

    def restore(self, data: Mapping[str, Any]) -> GameView:
        self.state = from_snapshot(data)
        self._emit("restore")
        return self.get_view()

    def on_remote_state_change(self, remote: Union[GameState, Mapping[str, Any]]) -> GameView:
        remote_state = remote if isinstance(remote, GameState) else from_snapshot(remote)
        self.state = merge_remote_state(self.state, remote_state)
        logger.info("Merged remote state; phase now %s", self.state.phase.value)
        self._emit("remote_state_change")
        return self.get_view()

    # Queries -----------------------------------------------------------

    def get_player_order(self) -> list[str]:
        return list(self.state.player_order)

    def get_player(self, player_id: str) -> Optional[PlayerState]:
        return self.state.players.get(player_id)

    def get_bid(self, player_id: str) -> Optional[Bid]:
        if self.state.round is None:
            return None
        return self.state.round.bids.get(player_id)

    def get_current_trick(self) -> Optional[Trick]:
        return self.state.current_trick()

    def get_round_results(self) -> list[RoundResult]:
        return list(self.state.round_results)

    def is_finished(self) -> bool:
        return self.state.phase is Phase.FINISHED

    # Views -------------------------------------------------------------

    def _trick_view(self, trick: Trick) -> TrickView:
        cards = self.state.require_round().cards
        return TrickView(
            id=trick.id,
            leader_id=trick.leader_id,
            lead_suit=str(trick.lead_suit) if trick.lead_suit else None,
            trump_suit=str(trick.trump_suit) if trick.trump_suit else None,
            plays=[
                TrickPlayView(player_id=player_id, card=serialize_card(cards[card_id]), label=card_label(cards[card_id]))
                for player_id, card_id in trick.played()
            ],
            winner_id=trick.winner_id,
            complete=trick.complete,
        )

    def _player_view(self, player: PlayerState, perspective: Optional[str]) -> PlayerView:
        bid = self.get_bid(player.id)
        visible = bid is not None and (bid.revealed or player.id == perspective)
        return PlayerView(
            id=player.id,
            name=player.name,
            score=player.score,
            tricks_won=player.tricks_won,
            hand_size=len(player.hand),
            bid=bid.value if visible else None,
            bid_revealed=bid.revealed if bid else False,
            is_active=player.is_active,
            is_ai=player.is_ai,
            ai_level=player.ai_level.value if player.ai_level else None,
        )

    def get_view(self, perspective: Optional[str] = None) -> GameView:
        """Build a read-only view; bids stay hidden from other players until revealed."""
        state = self.state
        round_state = state.round
        if perspective is None:
            perspective = state.current_player_id() or state.current_bidder_id()

        hand: list[dict] = []
        hand_labels: list[str] = []
        legal: list[str] = []
        suggested = None
        trump = None
        turnup = None
        trick_view = None
        history: list[TrickView] = []
        order: list[str] = []

        if round_state is not None:
            trump = str(round_state.trump_suit) if round_state.trump_suit else None
            if round_state.turnup_card_id is not None:
                turnup = serialize_card(round_state.cards[round_state.turnup_card_id])
            if perspective in state.players:
                cards = [round_state.cards[card_id] for card_id in state.players[perspective].hand]
                hand = [serialize_card(card) for card in cards]
                hand_labels = [card_label(card) for card in cards]
                if state.current_player_id() == perspective:
                    legal = legal_cards(state, perspective)
                    trick = state.current_trick()
                    suggested = suggest_play(legal, round_state.cards, trick.lead_suit if trick else None)
            current = round_state.current_trick()
            if current is not None and not current.is_empty():
                trick_view = self._trick_view(current)
            history = [self._trick_view(trick) for trick in round_state.archived_tricks()]
            if round_state.bid_phase_complete:
                order = reveal_order(state)

        return GameView(
            phase=state.phase.value,
            round_number=state.round_number,
            trump=trump,
            turnup=turnup,
            current_player=state.current_player_id(),
            current_bidder=state.current_bidder_id(),
            players=[self._player_view(state.players[player_id], perspective) for player_id in state.player_order],
            hand=hand,
            hand_labels=hand_labels,
            legal_moves=legal,
            suggested_move=suggested,
            trick=trick_view,
            trick_history=history,
            reveal_order=order,
            round_results=[
                {"round_number": result.round_number, "deltas": result.deltas()} for result in state.round_results
            ],
            winners=winners(state) if state.phase is Phase.FINISHED else [],
        )
