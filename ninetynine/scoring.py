"""Round scoring helpers for Ninety-Nine."""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Tuple

from .cards import Card, Rank, Suit, card_strength
from .config import ScoringConfig
from .errors import GameStateError

if TYPE_CHECKING:
    from .state import GameState, PlayerState


class Combination(Enum):
    MARRIAGE = "marriage"
    RUN = "run"
    THREE_OF_A_KIND = "three_of_a_kind"


@dataclass(frozen=True)
class PlayerRoundScore:
    player_id: str
    bid: int
    tricks_won: int
    combination: Optional[Combination]
    delta: int
    total: int

    @property
    def made_bid(self) -> bool:
        return self.bid == self.tricks_won


@dataclass(frozen=True)
class RoundResult:
    round_number: int
    scores: Tuple[PlayerRoundScore, ...]

    def for_player(self, player_id: str) -> PlayerRoundScore:
        for score in self.scores:
            if score.player_id == player_id:
                return score
        raise KeyError(player_id)

    def deltas(self) -> dict[str, int]:
        return {score.player_id: score.delta for score in self.scores}


def _has_marriage(cards: Sequence[Card]) -> bool:
    ranks_by_suit: dict[Suit, set[Rank]] = defaultdict(set)
    for card in cards:
        ranks_by_suit[card.suit].add(card.rank)
    return any({Rank.KING, Rank.QUEEN} <= ranks for suit, ranks in ranks_by_suit.items() if suit is not Suit.JOKER)


def _has_run(cards: Sequence[Card]) -> bool:
    strengths_by_suit: dict[Suit, set[int]] = defaultdict(set)
    for card in cards:
        if not card.is_joker():
            strengths_by_suit[card.suit].add(card_strength(card))
    for strengths in strengths_by_suit.values():
        if any(value + 1 in strengths and value + 2 in strengths for value in strengths):
            return True
    return False


def _has_three_of_a_kind(cards: Sequence[Card]) -> bool:
    counts = Counter(card.rank for card in cards if not card.is_joker())
    return any(count >= 3 for count in counts.values())


def detect_combination(cards: Sequence[Card]) -> Optional[Combination]:
    """Return the special combination among bid cards, checked marriage first."""
    if len(cards) < 2:
        return None
    if _has_marriage(cards):
        return Combination.MARRIAGE
    if _has_run(cards):
        return Combination.RUN
    if _has_three_of_a_kind(cards):
        return Combination.THREE_OF_A_KIND
    return None


def combination_bonus(combination: Optional[Combination], config: ScoringConfig) -> int:
    if combination is Combination.MARRIAGE:
        return config.marriage_bonus
    if combination is Combination.RUN:
        return config.run_bonus
    if combination is Combination.THREE_OF_A_KIND:
        return config.three_of_a_kind_bonus
    return 0


def score_player(
    *,
    bid: int,
    tricks_won: int,
    combination: Optional[Combination] = None,
    config: Optional[ScoringConfig] = None,
) -> int:
    """Return the score delta for one player's round.

    A made zero bid earns the zero-bid bonus, any other exact bid earns trick
    points plus the exact-bid bonus, and a miss costs a penalty per trick of
    difference. A combination bonus is added on top either way.
    """
    if config is None:
        config = ScoringConfig()

    if bid == 0 and tricks_won == 0:
        delta = config.zero_bid_bonus
    elif tricks_won == bid:
        delta = config.points_per_trick * tricks_won + config.exact_bid_bonus
    else:
        delta = -config.miss_penalty_per_trick * abs(tricks_won - bid)
    return delta + combination_bonus(combination, config)


def compute_round_result(state: "GameState") -> RoundResult:
    """Score the finished round without mutating the state."""
    round_state = state.require_round()
    config = state.settings.scoring

    scores = []
    for player_id in state.active_player_ids():
        bid = round_state.bids.get(player_id)
        if bid is None:
            raise GameStateError(f"Player {player_id!r} has no bid to score.")
        player = state.players[player_id]
        combination = detect_combination([round_state.cards[card_id] for card_id in bid.card_ids])
        delta = score_player(
            bid=bid.value,
            tricks_won=player.tricks_won,
            combination=combination,
            config=config,
        )
        scores.append(
            PlayerRoundScore(
                player_id=player_id,
                bid=bid.value,
                tricks_won=player.tricks_won,
                combination=combination,
                delta=delta,
                total=player.score + delta,
            )
        )
    return RoundResult(round_number=round_state.number, scores=tuple(scores))


def is_game_over(players: Iterable["PlayerState"], threshold: int = 100) -> bool:
    return any(player.score >= threshold for player in players)
