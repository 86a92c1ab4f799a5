from random import Random

import pytest
from pydantic import ValidationError

from ninetynine.bidding import place_bid, reveal_bid
from ninetynine.cards import card_from_code
from ninetynine.config import GameSettings, ScoringConfig
from ninetynine.deck import build_deck
from ninetynine.errors import GameStateError, InvalidMove, SetupError, WrongPhase
from ninetynine.game import add_player, create_game, score_round, start_game, start_new_round, winners
from ninetynine.mechanics import play_card
from ninetynine.phases import Phase, transition


def stack_deck(hands, turnup=None, variant="standard"):
    chosen = [card_from_code(code) for deal_pass in zip(*hands) for code in deal_pass]
    if turnup is not None:
        chosen.append(card_from_code(turnup))
    used = {card.id for card in chosen}
    return chosen + [card for card in build_deck(variant) if card.id not in used]


def two_player_game(**overrides):
    settings = GameSettings(deck_variant="standard", cards_per_player=1, bid_card_count=1, **overrides)
    state = create_game(settings)
    add_player(state, "Ada", player_id="a")
    add_player(state, "Bo", player_id="b")
    return state


def play_one_card_round(state, bids=(1, 0)):
    place_bid(state, "a", bids[0])
    place_bid(state, "b", bids[1])
    reveal_bid(state, "a")
    reveal_bid(state, "b")
    play_card(state, "a", "AS")
    play_card(state, "b", "2S")


def test_settings_validation():
    with pytest.raises(ValidationError):
        GameSettings(min_players=5, max_players=3)
    with pytest.raises(ValidationError):
        GameSettings(cards_per_player=5, tricks_per_round=6)
    with pytest.raises(ValidationError):
        GameSettings(deck_variant="pinochle")
    assert GameSettings(deck_variant="NINETY_NINE").deck_size == 37
    assert GameSettings().round_tricks == 12


def test_setup_requires_player_count():
    state = create_game()
    add_player(state, "Solo")

    with pytest.raises(InvalidMove):
        start_game(state)
    assert state.phase is Phase.SETUP


def test_table_limits_and_duplicate_ids():
    state = create_game(GameSettings(max_players=2))
    add_player(state, "A", player_id="a")

    with pytest.raises(InvalidMove):
        add_player(state, "Again", player_id="a")
    add_player(state, "B")
    with pytest.raises(InvalidMove):
        add_player(state, "C")


def test_start_game_deals_and_opens_bidding():
    state = create_game()
    for name in ("A", "B", "C"):
        add_player(state, name)

    start_game(state, Random(5))

    assert state.phase is Phase.BIDDING
    assert state.round_number == 1
    assert all(len(player.hand) == 12 for player in state.players.values())
    assert state.round.turnup_card_id is not None
    turnup = state.round.cards[state.round.turnup_card_id]
    expected_trump = None if turnup.is_joker() else turnup.suit
    assert state.round.trump_suit is expected_trump
    assert state.current_bidder_id() == "player-1"
    with pytest.raises(WrongPhase):
        add_player(state, "Late")


def test_short_deck_falls_back_to_setup():
    state = create_game()
    for name in ("A", "B", "C", "D"):
        add_player(state, name)

    with pytest.raises(SetupError):
        start_game(state, Random(1))

    assert state.phase is Phase.SETUP
    assert state.round is None
    assert state.round_number == 0


def test_round_cycle_keeps_scores_and_resets_round():
    state = two_player_game()
    start_game(state, deck=stack_deck([["AS"], ["2S"]], "3D"))
    play_one_card_round(state)

    assert state.phase is Phase.SCORING
    result = score_round(state)

    assert result.deltas() == {"a": 40, "b": 50}
    assert state.players["a"].score == 40
    assert state.players["b"].score == 50
    assert state.phase is Phase.DEALING

    with pytest.raises(WrongPhase):
        start_game(state)
    start_new_round(state, deck=stack_deck([["AS"], ["2S"]], "3D"))

    assert state.phase is Phase.BIDDING
    assert state.round_number == 2
    assert state.round.bids == {}
    assert state.round.tricks == {}
    assert state.players["a"].tricks_won == 0
    assert state.players["a"].bid_value is None
    assert state.players["a"].hand == ["AS"]
    assert state.players["a"].score == 40
    assert len(state.round_results) == 1


def test_max_rounds_finishes_game():
    state = two_player_game(max_rounds=1)
    start_game(state, deck=stack_deck([["AS"], ["2S"]], "3D"))
    play_one_card_round(state)

    score_round(state)

    assert state.phase is Phase.FINISHED
    with pytest.raises(WrongPhase):
        start_new_round(state)


def test_threshold_finishes_game():
    state = two_player_game(scoring=ScoringConfig(game_over_threshold=45))
    start_game(state, deck=stack_deck([["AS"], ["2S"]], "3D"))
    play_one_card_round(state)

    score_round(state)

    assert state.phase is Phase.FINISHED


def test_score_round_only_in_scoring():
    state = two_player_game()
    start_game(state, deck=stack_deck([["AS"], ["2S"]], "3D"))

    with pytest.raises(WrongPhase):
        score_round(state)


def test_illegal_transition_is_rejected():
    state = create_game()

    with pytest.raises(GameStateError):
        transition(state, Phase.PLAYING)
    assert state.phase is Phase.SETUP


def test_inactive_seat_is_not_a_winner():
    state = two_player_game(max_rounds=1)
    add_player(state, "Sitter", player_id="s", is_active=False)
    start_game(state, deck=stack_deck([["AS"], ["2S"]], "3D"))
    play_one_card_round(state, bids=(0, 1))

    score_round(state)

    assert state.phase is Phase.FINISHED
    assert state.players["a"].score == state.players["b"].score == -10
    assert state.players["s"].score == 0
    assert winners(state) == ["a", "b"]


def test_failed_deal_mid_game_resets_round_state_and_keeps_numbering():
    state = two_player_game(max_rounds=2)
    start_game(state, deck=stack_deck([["AS"], ["2S"]], "3D"))
    play_one_card_round(state)
    score_round(state)

    with pytest.raises(SetupError):
        start_new_round(state, deck=build_deck("standard")[:10])

    assert state.phase is Phase.SETUP
    assert state.round is None
    assert state.players["a"].tricks_won == 0
    assert state.players["a"].bid_value is None
    assert state.players["b"].hand == []
    assert state.players["a"].score == 40

    start_game(state, deck=stack_deck([["AS"], ["2S"]], "3D"))
    assert state.round_number == 2
    play_one_card_round(state)
    score_round(state)

    assert len(state.round_results) == 2
    assert state.phase is Phase.FINISHED
