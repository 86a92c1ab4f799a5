import pytest

from ninetynine.bidding import place_bid
from ninetynine.cards import Suit, card_from_code
from ninetynine.config import GameSettings
from ninetynine.deck import build_deck
from ninetynine.errors import CardNotInHand, MustFollowSuit, NotYourTurn, WrongPhase
from ninetynine.game import add_player, create_game, start_game
from ninetynine.mechanics import check_play, follow_suit_cards, is_legal_play, legal_cards, play_card, suggest_play
from ninetynine.phases import Phase
from ninetynine.snapshot import to_snapshot


def stack_deck(hands, turnup=None, variant="ninety-nine"):
    chosen = [card_from_code(code) for deal_pass in zip(*hands) for code in deal_pass]
    if turnup is not None:
        chosen.append(card_from_code(turnup))
    used = {card.id for card in chosen}
    return chosen + [card for card in build_deck(variant) if card.id not in used]


def playing_game(hands, turnup, *, bids, variant="ninety-nine", **overrides):
    settings = GameSettings(
        deck_variant=variant,
        cards_per_player=len(hands[0]),
        bid_card_count=1,
        require_reveal=False,
        **overrides,
    )
    state = create_game(settings)
    for index in range(len(hands)):
        add_player(state, f"P{index + 1}", player_id=f"p{index + 1}")
    start_game(state, deck=stack_deck(hands, turnup, variant))
    for index, bid in enumerate(bids):
        place_bid(state, f"p{index + 1}", bid)
    return state


def test_follow_suit_cards():
    hand = ["9H", "6S", "9D", "7C"]
    cards = {code: card_from_code(code) for code in hand}

    assert follow_suit_cards(hand, cards, None) == hand
    assert follow_suit_cards(hand, cards, Suit.SPADES) == ["6S"]
    assert follow_suit_cards(["9H", "9D"], cards, Suit.SPADES) == ["9H", "9D"]


def test_rejected_plays_leave_state_unchanged():
    state = playing_game(
        [["9H", "6S"], ["JH", "8D"], ["AS", "7D"]],
        "6C",
        bids=[1, 1, 0],
    )
    before = to_snapshot(state)

    with pytest.raises(NotYourTurn):
        play_card(state, "p2", "JH")
    with pytest.raises(CardNotInHand):
        play_card(state, "p1", "JH")
    assert to_snapshot(state) == before

    play_card(state, "p1", "9H")
    before = to_snapshot(state)
    with pytest.raises(MustFollowSuit):
        play_card(state, "p2", "8D")
    assert to_snapshot(state) == before
    assert not is_legal_play(state, "p2", "8D")
    assert is_legal_play(state, "p2", "JH")


def test_play_outside_playing_phase():
    settings = GameSettings(cards_per_player=2, bid_card_count=1)
    state = create_game(settings)
    add_player(state, "A", player_id="a")
    add_player(state, "B", player_id="b")
    start_game(state)

    assert state.phase is Phase.BIDDING
    with pytest.raises(WrongPhase):
        check_play(state, "a", state.players["a"].hand[0])


def test_play_moves_card_and_advances_turn():
    state = playing_game(
        [["9H", "6S"], ["JH", "8D"], ["AS", "7D"]],
        "6C",
        bids=[1, 1, 0],
    )

    play_card(state, "p1", "9H")

    trick = state.current_trick()
    assert trick.lead_suit is Suit.HEARTS
    assert trick.plays["p1"] == "9H"
    assert "9H" not in state.players["p1"].hand
    assert state.round.cards["9H"].face_up
    assert state.current_player_id() == "p2"
    assert legal_cards(state, "p2") == ["JH"]
    assert legal_cards(state, "p3") == ["AS", "7D"]


def test_hearts_two_trumps_clubs_lead_in_play():
    state = playing_game(
        [["10C", "3D"], ["2H", "4D"], ["AC", "5D"], ["KS", "6D"]],
        "9H",
        bids=[1, 1, 0, 0],
        variant="standard",
    )
    assert state.round.trump_suit is Suit.HEARTS

    for player_id, card_id in (("p1", "10C"), ("p2", "2H"), ("p3", "AC"), ("p4", "KS")):
        play_card(state, player_id, card_id)

    first = state.round.tricks["r1-t1"]
    assert first.complete
    assert first.winner_id == "p2"
    assert state.players["p2"].tricks_won == 1
    assert state.round.trick_history == ["r1-t1"]
    assert state.current_player_id() == "p2"
    assert state.current_trick().leader_id == "p2"

    for player_id, card_id in (("p2", "4D"), ("p3", "5D"), ("p4", "6D"), ("p1", "3D")):
        play_card(state, player_id, card_id)

    assert state.round.tricks["r1-t2"].winner_id == "p4"
    assert state.phase is Phase.SCORING
    assert state.current_player_id() is None


def test_no_trump_king_of_spades_wins():
    state = playing_game(
        [["9S"], ["KS"], ["AD"]],
        "2H",
        bids=[0, 1, 0],
        variant="standard",
        trump_allowed=False,
    )
    assert state.round.trump_suit is None

    for player_id, card_id in (("p1", "9S"), ("p2", "KS"), ("p3", "AD")):
        play_card(state, player_id, card_id)

    assert state.round.tricks["r1-t1"].winner_id == "p2"


def test_suggest_play_natural_choices():
    cards = {code: card_from_code(code) for code in ("9H", "6S", "9D", "7C", "JH", "KH")}

    assert suggest_play(["9H", "6S", "9D", "7C"], cards, None) == "9H"
    assert suggest_play(["JH", "KH", "9H"], cards, Suit.HEARTS) == "9H"
    assert suggest_play(["6S", "9D", "7C"], cards, Suit.HEARTS) == "6S"
    assert suggest_play([], cards, None) is None
