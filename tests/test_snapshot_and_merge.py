import copy

import pytest

from ninetynine.bidding import place_bid, reveal_bid
from ninetynine.cards import card_from_code
from ninetynine.config import GameSettings
from ninetynine.deck import build_deck
from ninetynine.errors import SnapshotError
from ninetynine.game import add_player, create_game, score_round, start_game
from ninetynine.mechanics import play_card
from ninetynine.phases import Phase
from ninetynine.snapshot import from_snapshot, merge_remote_state, to_snapshot

HANDS = [
    ["KH", "QH", "9D", "6S"],
    ["JH", "9H", "7H", "8D"],
    ["AS", "QD", "8C", "7D"],
]


def stack_deck(hands, turnup=None):
    chosen = [card_from_code(code) for deal_pass in zip(*hands) for code in deal_pass]
    if turnup is not None:
        chosen.append(card_from_code(turnup))
    used = {card.id for card in chosen}
    return chosen + [card for card in build_deck() if card.id not in used]


def game_in_play():
    state = create_game(GameSettings(cards_per_player=4))
    for player_id in ("p1", "p2", "p3"):
        add_player(state, player_id.upper(), player_id=player_id)
    start_game(state, deck=stack_deck(HANDS, "6C"))
    place_bid(state, "p1", ["KH", "QH", "9D"])
    place_bid(state, "p2", 1)
    place_bid(state, "p3", 1)
    for player_id in ("p1", "p2", "p3"):
        reveal_bid(state, player_id)
    play_card(state, "p1", "KH")
    return state


def test_snapshot_round_trip_mid_trick():
    state = game_in_play()

    snapshot = to_snapshot(state)
    restored = from_snapshot(snapshot)

    assert to_snapshot(restored) == snapshot
    assert restored.phase is Phase.PLAYING
    assert restored.current_player_id() == "p2"
    assert restored.round.bids["p1"].card_ids == ("KH", "QH", "9D")
    assert restored.round.cards["KH"].face_up

    play_card(restored, "p2", "JH")
    assert restored.current_player_id() == "p3"


def test_restored_game_keeps_scoring_in_step():
    state = game_in_play()
    restored = from_snapshot(copy.deepcopy(to_snapshot(state)))

    for game in (state, restored):
        play_card(game, "p2", "9H")
        play_card(game, "p3", "AS")
        for player_id, card_id in (("p1", "QH"), ("p2", "JH"), ("p3", "7D")):
            play_card(game, player_id, card_id)

    assert state.players["p1"].tricks_won == restored.players["p1"].tricks_won == 2


def test_marriage_bid_scores_through_the_round():
    state = game_in_play()
    for player_id, card_id in (
        ("p2", "9H"), ("p3", "AS"),
        ("p1", "QH"), ("p2", "JH"), ("p3", "7D"),
        ("p1", "6S"), ("p2", "7H"), ("p3", "QD"),
        ("p1", "9D"), ("p2", "8D"), ("p3", "8C"),
    ):
        play_card(state, player_id, card_id)

    result = score_round(state)

    p1 = result.for_player("p1")
    assert p1.bid == 4
    assert p1.combination is not None and p1.combination.value == "marriage"
    assert p1.tricks_won == 3
    assert p1.delta == -10 + 20
    snapshot = to_snapshot(state)
    assert snapshot["round_results"][0]["scores"][0]["combination"] == "marriage"
    assert from_snapshot(snapshot).round_results == state.round_results


@pytest.mark.parametrize(
    "mutate",
    [
        lambda data: data.pop("phase"),
        lambda data: data.update(phase="napping"),
        lambda data: data["players"]["p1"].update(tricks_won="many"),
        lambda data: data["round"]["cards"]["KH"].update(suit="stars"),
        lambda data: data["players"]["p2"]["hand"].append("ZZ"),
        lambda data: data.update(player_order=["p1", "p2"]),
        lambda data: data["round"].update(current_trick_id="r9-t9"),
        lambda data: data.update(current_player_index=7),
        lambda data: data.update(current_player_index="1"),
        lambda data: data["players"]["p1"].update(tricks_won="1"),
        lambda data: data["players"]["p2"].update(is_ai="yes"),
        lambda data: data["round"]["bids"]["p2"].update(value="1"),
        lambda data: data["round"]["cards"]["QD"].update(face_up=1),
        lambda data: data["players"]["p2"]["hand"].append("AS"),
        lambda data: data["round"]["stock"].append("AS"),
        lambda data: data["players"]["p1"]["hand"].append("KH"),
        lambda data: data["round"]["stock"].append(data["round"]["turnup_card_id"]),
    ],
)
def test_malformed_snapshots_are_rejected(mutate):
    data = to_snapshot(game_in_play())
    mutate(data)

    with pytest.raises(SnapshotError):
        from_snapshot(data)


def test_merge_prefers_newer_entities_and_keeps_local_on_ties():
    local = game_in_play()
    remote = from_snapshot(to_snapshot(local))

    remote.players["p2"].score = 77
    remote.players["p2"].updated_at = local.players["p2"].updated_at + 5
    remote.players["p3"].score = 55
    remote.players["p3"].updated_at = local.players["p3"].updated_at
    remote_trick = remote.current_trick()
    remote_trick.plays["p2"] = "JH"
    remote_trick.updated_at = local.current_trick().updated_at - 5

    merged = merge_remote_state(local, remote)

    assert merged.players["p2"].score == 77
    assert merged.players["p3"].score == local.players["p3"].score
    assert merged.current_trick().plays["p2"] is None
    assert merged is not local
    assert local.players["p2"].score == 0


def test_merge_takes_newer_bid_and_game_fields():
    local = game_in_play()
    remote = from_snapshot(to_snapshot(local))

    remote.round.bids["p3"].value = 4
    remote.round.bids["p3"].timestamp = local.round.bids["p3"].timestamp + 1
    remote.last_action = "remote_action"
    remote.last_action_at = (local.last_action_at or 0) + 1

    merged = merge_remote_state(local, remote)

    assert merged.round.bids["p3"].value == 4
    assert merged.last_action == "remote_action"
    assert local.round.bids["p3"].value == 1
