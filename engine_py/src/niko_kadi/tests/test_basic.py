"""
Basic tests for the Niko Kadi deck, rules and game setup.
"""

import random

import pytest
from pydantic import ValidationError

from niko_kadi.constants import DECK_SIZE, STATUS_ACTIVE, TYPE_ANSWER, game_phase_for_turn
from niko_kadi.engine import NikoKadiEngine
from niko_kadi.errors import GameError
from niko_kadi.models import AIConfig, Player
from niko_kadi.rules import RuleConfig, create_rules, default_rules
from niko_kadi.shuffle import create_deck, find_starting_card, shuffle_deck


def make_players(n, ai=False):
    return [Player(id=f"p{i}", name=f"Player {i}", is_ai=ai) for i in range(n)]


def test_create_deck():
    """Test deck creation."""
    deck = create_deck()
    assert len(deck) == DECK_SIZE
    assert len({c.id for c in deck}) == DECK_SIZE

    by_id = {c.id: c for c in deck}
    assert by_id['spades-A'].type == 'Wild'
    assert by_id['hearts-2'].type == 'Penalty'
    assert by_id['clubs-3'].type == 'Penalty'
    assert by_id['joker-1'].type == 'Penalty'
    assert by_id['diamonds-J'].type == 'Jump'
    assert by_id['diamonds-K'].type == 'Kickback'
    assert by_id['hearts-8'].type == 'Question'
    assert by_id['hearts-Q'].type == 'Question'
    assert by_id['hearts-7'].type == 'Answer'
    assert by_id['hearts-10'].type == 'Answer'


def test_shuffle_is_deterministic_with_seed():
    """Test that the same seed yields the same permutation."""
    deck = create_deck()
    first = shuffle_deck(deck, random.Random(3))
    second = shuffle_deck(deck, random.Random(3))
    assert [c.id for c in first] == [c.id for c in second]
    assert sorted(c.id for c in first) == sorted(c.id for c in deck)


def test_find_starting_card_skips_special_cards():
    """Test that special cards are put back until an Answer card turns up."""
    by_id = {c.id: c for c in create_deck()}
    pile = [by_id['hearts-7'], by_id['clubs-5'], by_id['spades-A'], by_id['joker-1']]
    card = find_starting_card(pile)
    assert card.id == 'clubs-5'
    assert card.type == TYPE_ANSWER
    assert {c.id for c in pile} == {'hearts-7', 'spades-A', 'joker-1'}


def test_find_starting_card_without_answers():
    """Test that a pile with no Answer cards fails cleanly."""
    by_id = {c.id: c for c in create_deck()}
    pile = [by_id['spades-A'], by_id['joker-1'], by_id['hearts-2']]
    with pytest.raises(GameError) as exc:
        find_starting_card(pile)
    assert exc.value.code == 'NO_STARTING_CARD'


@pytest.mark.parametrize("n, hand_size", [(2, 4), (3, 4), (4, 3), (6, 3)])
def test_initialize_game(n, hand_size):
    """Test dealing for different table sizes."""
    engine = NikoKadiEngine(seed=42)
    engine.initialize_game(make_players(n))
    state = engine.get_game_state()

    assert state.status == STATUS_ACTIVE
    assert state.current_player_index == 0
    assert state.direction == 1
    assert state.turn_number == 1
    assert all(len(p.hand) == hand_size for p in state.players)
    assert len(state.discard_pile) == 1
    assert state.top_card.type == TYPE_ANSWER
    assert state.total_cards == DECK_SIZE


def test_initialize_game_player_count_limits():
    """Test player count validation."""
    engine = NikoKadiEngine(seed=1)
    with pytest.raises(GameError) as exc:
        engine.initialize_game(make_players(1))
    assert exc.value.code == 'NOT_ENOUGH_PLAYERS'

    with pytest.raises(GameError) as exc:
        engine.initialize_game(make_players(7))
    assert exc.value.code == 'TOO_MANY_PLAYERS'

    duplicates = [Player(id="p0", name="A"), Player(id="p0", name="B")]
    with pytest.raises(GameError) as exc:
        engine.initialize_game(duplicates)
    assert exc.value.code == 'DUPLICATE_PLAYER'
    assert engine.get_game_state() is None


def test_same_seed_same_deal():
    """Test that seeded engines deal identical games."""
    a = NikoKadiEngine(seed=99)
    b = NikoKadiEngine(seed=99)
    a.initialize_game(make_players(4))
    b.initialize_game(make_players(4))
    assert a.export_game_state() != b''
    hands_a = [[c.id for c in p.hand] for p in a.get_game_state().players]
    hands_b = [[c.id for c in p.hand] for p in b.get_game_state().players]
    assert hands_a == hands_b


def test_snapshots_are_copies():
    """Test that mutating a snapshot does not affect the game."""
    engine = NikoKadiEngine(seed=5)
    engine.initialize_game(make_players(2))
    snapshot = engine.get_game_state()
    snapshot.players[0].hand.clear()
    snapshot.turn_number = 99

    state = engine.get_game_state()
    assert len(state.players[0].hand) == 4
    assert state.turn_number == 1

    current = engine.get_current_player()
    current.hand.clear()
    assert len(engine.get_current_player().hand) == 4


def test_operations_before_initialization():
    """Test that an uninitialized engine rejects moves."""
    engine = NikoKadiEngine()
    assert engine.get_top_card() is None
    assert engine.get_current_player() is None
    assert not engine.validate_move("p0", ["hearts-7"]).valid

    with pytest.raises(GameError) as exc:
        engine.draw_card("p0")
    assert exc.value.code == 'GAME_NOT_INITIALIZED'

    with pytest.raises(GameError):
        engine.export_game_state()


def test_rule_config_validation():
    """Test rule configuration constraints."""
    with pytest.raises(ValidationError):
        RuleConfig(min_players=4, max_players=3)

    with pytest.raises(ValidationError):
        RuleConfig(jump_ranks=['J', 'K'])  # K is already a Kickback

    with pytest.raises(ValidationError):
        RuleConfig(penalty_values={'2': 2})  # jokers must stay penalties

    rules = create_rules(penalty_values={'2': 2, '3': 3, 'JOKER': 4})
    assert rules.penalty_for_rank('JOKER') == 4
    assert default_rules.penalty_for_rank('JOKER') == 5
    assert rules.hand_size_for(2) == 4
    assert rules.hand_size_for(5) == 3


def test_ai_config_validation():
    """Test AI config bounds."""
    AIConfig(aggression=1.0, card_counting_skill=0.0)
    with pytest.raises(ValueError):
        AIConfig(aggression=1.5)
    with pytest.raises(ValueError):
        AIConfig(play_style='reckless')


def test_game_phases():
    """Test turn to phase bucketing."""
    assert game_phase_for_turn(1) == 'early'
    assert game_phase_for_turn(8) == 'early'
    assert game_phase_for_turn(9) == 'mid'
    assert game_phase_for_turn(20) == 'mid'
    assert game_phase_for_turn(36) == 'late'
    assert game_phase_for_turn(37) == 'endgame'


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
