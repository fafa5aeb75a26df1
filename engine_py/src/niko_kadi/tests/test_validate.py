"""
Test move validation: matching, penalties, questions and multi-card plays.
"""

import pytest

from niko_kadi.errors import GameError
from niko_kadi.models import AwaitingAnswer
from niko_kadi.rules import create_rules


def test_matching_suit_play_passes_turn(table):
    """A 7 of hearts on a 7 of diamonds is played and the turn moves on."""
    engine = table({"p0": ["hearts-7", "clubs-9"], "p1": ["spades-5"]}, top="diamonds-7")

    move = engine.play_card("p0", ["hearts-7"])

    state = engine.get_game_state()
    assert move.action == 'play'
    assert engine.get_top_card().id == 'hearts-7'
    assert state.current_player.id == "p1"
    assert state.turn_number == 2
    assert [c.id for c in state.players[0].hand] == ["clubs-9"]


def test_penalty_must_match_to_start(table):
    """A 2 of spades cannot start a penalty on a 3 of clubs."""
    engine = table({"p0": ["spades-2", "hearts-9"], "p1": ["spades-5"]}, top="clubs-3")

    result = engine.validate_move("p0", ["spades-2"])
    assert not result.valid
    assert result.error_code == 'SUIT_RANK_MISMATCH'

    before = engine.get_game_state()
    with pytest.raises(GameError) as exc:
        engine.play_card("p0", ["spades-2"])
    assert exc.value.code == 'SUIT_RANK_MISMATCH'
    after = engine.get_game_state()
    assert [c.id for c in after.players[0].hand] == [c.id for c in before.players[0].hand]
    assert after.turn_number == before.turn_number


def test_wild_declares_suit(table):
    """After an Ace declaring hearts, a clubs/diamonds hand has nothing to play."""
    engine = table(
        {"p0": ["spades-A", "hearts-9"], "p1": ["clubs-5", "diamonds-7", "clubs-J"]},
        top="spades-6",
    )

    engine.play_card("p0", ["spades-A"], declared_suit="hearts")

    state = engine.get_game_state()
    assert state.required_suit == "hearts"
    assert state.current_player.id == "p1"
    assert engine.get_valid_cards(state.players[1].hand) == []

    engine.draw_card("p1")
    assert engine.get_game_state().required_suit is None


def test_wild_requires_declared_suit(table):
    """Test Wild suit declaration checks."""
    engine = table({"p0": ["spades-A", "hearts-9"], "p1": ["clubs-5"]}, top="hearts-6")

    with pytest.raises(GameError) as exc:
        engine.play_card("p0", ["spades-A"])
    assert exc.value.code == 'SUIT_REQUIRED'

    with pytest.raises(GameError) as exc:
        engine.play_card("p0", ["spades-A"], declared_suit="joker")
    assert exc.value.code == 'SUIT_REQUIRED'

    with pytest.raises(GameError) as exc:
        engine.play_card("p0", ["hearts-9"], declared_suit="clubs")
    assert exc.value.code == 'UNEXPECTED_SUIT'

    assert len(engine.get_game_state().players[0].hand) == 2


def test_wild_is_always_playable(table):
    """A Wild beats an active penalty and a pending question."""
    engine = table(
        {"p0": ["clubs-A", "hearts-9"], "p1": ["clubs-5"]},
        top="diamonds-2",
        active_penalty_stack=2,
        active_penalty_rank='2',
    )
    assert engine.validate_move("p0", ["clubs-A"]).valid

    engine.play_card("p0", ["clubs-A"], declared_suit="clubs")
    state = engine.get_game_state()
    assert state.active_penalty_stack == 0
    assert state.active_penalty_rank is None


def test_turn_and_ownership_checks(table):
    """Test the precondition and ownership error codes."""
    engine = table({"p0": ["hearts-7", "hearts-9"], "p1": ["hearts-5"]}, top="hearts-4")

    assert engine.validate_move("p1", ["hearts-5"]).error_code == 'NOT_YOUR_TURN'
    assert engine.validate_move("ghost", ["hearts-5"]).error_code == 'PLAYER_NOT_FOUND'
    assert engine.validate_move("p0", []).error_code == 'NO_CARDS'
    assert engine.validate_move("p0", ["hearts-7", "hearts-7"]).error_code == 'DUPLICATE_CARDS'
    assert engine.validate_move("p0", ["hearts-5"]).error_code == 'OWNERSHIP_MISMATCH'
    assert engine.validate_move("p0", ["hearts-7", "hearts-9"]).error_code == 'RANK_MISMATCH'


def test_validation_is_idempotent(table):
    """Validating twice gives the same answer and changes nothing."""
    engine = table({"p0": ["hearts-7"], "p1": ["hearts-5"]}, top="hearts-4")
    before = engine.export_game_state()

    first = engine.validate_move("p0", ["hearts-7"])
    second = engine.validate_move("p0", ["hearts-7"])

    assert first == second
    assert first.effect == 'Answer'
    assert first.pattern == {'rank': '7', 'count': 1, 'cards': ['hearts-7']}
    state = engine.get_game_state()
    assert [c.id for c in state.players[0].hand] == ["hearts-7"]
    assert len(engine.export_game_state()) == len(before)


def test_penalty_counter_requires_same_rank(table):
    """Under an active penalty only the same penalty rank may be played."""
    engine = table(
        {"p0": ["clubs-2", "clubs-3", "clubs-7"], "p1": ["hearts-5"]},
        top="hearts-2",
        active_penalty_stack=2,
        active_penalty_rank='2',
    )

    assert engine.validate_move("p0", ["clubs-2"]).valid
    assert engine.validate_move("p0", ["clubs-3"]).error_code == 'PENALTY_ACTIVE'
    assert engine.validate_move("p0", ["clubs-7"]).error_code == 'PENALTY_ACTIVE'
    assert [c.id for c in engine.get_valid_cards(engine.get_game_state().players[0].hand)] == ["clubs-2"]


def test_awaiting_answer_rules(table):
    """A questioner must answer in the question's suit, a Wild, or draw."""
    engine = table(
        {"p0": ["hearts-5", "clubs-5", "hearts-J", "spades-A"], "p1": ["hearts-6"]},
        top="hearts-8",
        awaiting_answer=AwaitingAnswer(player_id="p0", suit="hearts"),
    )

    assert engine.validate_move("p0", ["hearts-5"]).valid
    assert engine.validate_move("p0", ["spades-A"]).valid
    assert engine.validate_move("p0", ["clubs-5"]).error_code == 'AWAITING_ANSWER'
    assert engine.validate_move("p0", ["hearts-J"]).error_code == 'AWAITING_ANSWER'
    assert engine.validate_move("p0", ["hearts-5", "clubs-5"]).error_code == 'AWAITING_ANSWER'

    valid = {c.id for c in engine.get_valid_cards(engine.get_game_state().players[0].hand)}
    assert valid == {"hearts-5", "spades-A"}


def test_jokers_match_only_jokers_by_default(table):
    """A joker has no suit, so by default it only matches another joker."""
    engine = table({"p0": ["joker-1", "clubs-9"], "p1": ["spades-5"]}, top="hearts-4")
    assert engine.validate_move("p0", ["joker-1"]).error_code == 'SUIT_RANK_MISMATCH'

    engine = table({"p0": ["clubs-9"], "p1": ["spades-5"]}, top="joker-2")
    assert engine.validate_move("p0", ["clubs-9"]).error_code == 'SUIT_RANK_MISMATCH'

    engine = table({"p0": ["joker-1", "clubs-9"], "p1": ["spades-5"]}, top="joker-2")
    assert engine.validate_move("p0", ["joker-1"]).valid


def test_jokers_match_anything_when_enabled(table):
    """With jokers_match_any, jokers start on any card and anything may follow them."""
    rules = create_rules(jokers_match_any=True)
    engine = table({"p0": ["joker-1", "clubs-9"], "p1": ["spades-5"]}, top="hearts-4", rules=rules)
    assert engine.validate_move("p0", ["joker-1"]).valid

    engine = table({"p0": ["clubs-9"], "p1": ["spades-5"]}, top="joker-2", rules=rules)
    assert engine.validate_move("p0", ["clubs-9"]).valid


def test_mixed_wild_group_is_rejected(table):
    """Multi-card plays must share a rank even when a Wild leads."""
    engine = table({"p0": ["spades-A", "hearts-7"], "p1": ["spades-5"]}, top="hearts-4")
    assert engine.validate_move("p0", ["spades-A", "hearts-7"]).error_code == 'RANK_MISMATCH'


def test_multi_card_helpers(table, card):
    """Test multi-card combination helpers."""
    engine = table(
        {"p0": ["clubs-7", "hearts-7", "spades-7", "clubs-9", "diamonds-9"], "p1": ["spades-5"]},
        top="hearts-4",
    )

    combos = engine.get_valid_multi_card_combinations("p0")
    assert len(combos) == 1
    assert combos[0][0].id == "hearts-7"
    assert {c.id for c in combos[0]} == {"clubs-7", "hearts-7", "spades-7"}
    assert engine.validate_move("p0", [c.id for c in combos[0]]).valid

    added = engine.get_cards_that_can_be_added("p0", [card("hearts-7")])
    assert {c.id for c in added} == {"clubs-7", "spades-7"}

    assert engine.is_valid_multi_card_combination([card("clubs-9"), card("diamonds-9")])
    assert not engine.is_valid_multi_card_combination([card("clubs-9")])
    assert not engine.is_valid_multi_card_combination([card("clubs-9"), card("clubs-7")])


def test_finished_game_rejects_moves(table):
    """Test that nothing can be played once a winner is set."""
    engine = table({"p0": ["hearts-7"], "p1": ["hearts-5"]}, top="hearts-4", status='finished', winner="p1")
    assert engine.validate_move("p0", ["hearts-7"]).error_code == 'GAME_FINISHED'
    with pytest.raises(GameError) as exc:
        engine.pass_turn("p0")
    assert exc.value.code == 'GAME_FINISHED'


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
