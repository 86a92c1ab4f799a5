import pytest

from ninetynine.cards import card_from_code
from ninetynine.config import ScoringConfig
from ninetynine.scoring import Combination, detect_combination, is_game_over, score_player
from ninetynine.state import PlayerState


def cards(*codes):
    return [card_from_code(code) for code in codes]


@pytest.mark.parametrize(
    "bid, tricks, expected",
    [
        (3, 3, 60),
        (0, 0, 50),
        (4, 2, -20),
        (0, 1, -10),
        (1, 5, -40),
    ],
)
def test_score_player_table(bid, tricks, expected):
    assert score_player(bid=bid, tricks_won=tricks) == expected


def test_combination_bonus_applies_made_or_missed():
    assert score_player(bid=2, tricks_won=2, combination=Combination.MARRIAGE) == 70
    assert score_player(bid=2, tricks_won=0, combination=Combination.THREE_OF_A_KIND) == 20
    assert score_player(bid=0, tricks_won=0, combination=Combination.RUN) == 80


def test_custom_scoring_config():
    config = ScoringConfig(points_per_trick=5, exact_bid_bonus=0, zero_bid_bonus=25)

    assert score_player(bid=2, tricks_won=2, config=config) == 10
    assert score_player(bid=0, tricks_won=0, config=config) == 25


def test_detect_combinations():
    assert detect_combination(cards("KC", "QC", "6D")) is Combination.MARRIAGE
    assert detect_combination(cards("7H", "8H", "9H")) is Combination.RUN
    assert detect_combination(cards("9C", "9D", "9H")) is Combination.THREE_OF_A_KIND
    assert detect_combination(cards("KC", "QD", "9H")) is None
    assert detect_combination(cards("7H", "8H", "10H")) is None
    assert detect_combination(cards("AC")) is None


def test_marriage_takes_precedence_over_run():
    assert detect_combination(cards("JH", "QH", "KH")) is Combination.MARRIAGE


def test_is_game_over_threshold():
    players = [PlayerState(id="a", name="A", score=99), PlayerState(id="b", name="B", score=40)]

    assert not is_game_over(players)
    players[0].score = 100
    assert is_game_over(players)
    assert is_game_over([PlayerState(id="c", name="C", score=30)], threshold=30)
