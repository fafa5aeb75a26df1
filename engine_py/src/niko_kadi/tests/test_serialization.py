"""
Test game export/import and per-viewer sanitization.
"""

import json

import pytest

from niko_kadi.engine import NikoKadiEngine
from niko_kadi.errors import GameError, InvalidGameStateError
from niko_kadi.events import GameEventType
from niko_kadi.models import Player
from niko_kadi.serialization import sanitize_state


def started_engine(seed=21):
    engine = NikoKadiEngine(seed=seed)
    engine.initialize_game([Player(id=f"p{i}", name=f"Player {i}") for i in range(3)])
    return engine


def test_export_import_round_trip():
    """An imported game continues exactly like the original."""
    engine = started_engine()
    engine.draw_card("p0")
    blob = engine.export_game_state()

    restored = NikoKadiEngine(seed=0)
    restored.import_game_state(blob)

    original = engine.get_game_state()
    copy = restored.get_game_state()
    assert copy == original
    assert len(restored.move_history) == 1
    assert restored.move_history[0].action == 'draw'
    assert restored.move_history[0].cards_drawn == engine.move_history[0].cards_drawn
    assert restored.export_game_state() == blob


def test_export_is_json():
    engine = started_engine()
    data = json.loads(engine.export_game_state())
    assert data['format_version'] == 1
    assert len(data['state']['players']) == 3
    assert data['rules']['penalty_values']['JOKER'] == 5


def _mutated(blob, mutate):
    data = json.loads(blob)
    mutate(data)
    return json.dumps(data).encode('utf-8')


@pytest.mark.parametrize("mutate", [
    lambda d: d['state'].update(current_player_index=9),
    lambda d: d['state'].update(direction=2),
    lambda d: d['state']['draw_pile'].pop(),
    lambda d: d['state']['draw_pile'].append(d['state']['discard_pile'][0]),
    lambda d: d['state']['players'][1].update(id='p0'),
    lambda d: d['state'].update(winner='ghost'),
    lambda d: d['state'].update(status='paused'),
    lambda d: d.update(format_version=99),
    lambda d: d['state']['discard_pile'][0].update(type='Wild'),
    lambda d: d['state'].update(required_suit='stars'),
    lambda d: d['state'].update(awaiting_answer={'player_id': 'p0', 'suit': 'stars'}),
    lambda d: d['state'].update(active_penalty_rank='Z', active_penalty_stack=2),
    lambda d: d['state'].update(active_penalty_rank='7', active_penalty_stack=2),
    lambda d: d['state'].update(active_penalty_stack=2),
    lambda d: d['state'].update(niko_declared_by='p0'),
    lambda d: d['state'].update(niko_declared_round=1),
])
def test_import_rejects_invalid_data(mutate):
    """Broken data raises InvalidGameStateError and keeps the current game."""
    engine = started_engine()
    blob = engine.export_game_state()

    target = started_engine(seed=5)
    before = target.get_game_state()
    with pytest.raises(InvalidGameStateError) as exc:
        target.import_game_state(_mutated(blob, mutate))
    assert exc.value.code == 'INVALID_STATE_DATA'
    assert target.get_game_state() == before


def test_import_rejects_garbage():
    engine = NikoKadiEngine()
    with pytest.raises(GameError) as exc:
        engine.import_game_state(b"not json")
    assert exc.value.code == 'INVALID_STATE_DATA'
    assert engine.get_game_state() is None


def test_import_emits_event():
    blob = started_engine().export_game_state()
    events = []
    engine = NikoKadiEngine(on_event=events.append)
    engine.import_game_state(blob)
    assert events[-1].type == GameEventType.STATE_IMPORTED


def test_sanitize_hides_other_hands():
    """Viewers see their own hand and only counts for everyone else."""
    state = started_engine().get_game_state()
    view = sanitize_state(state, "p1")

    assert view['current_player'] == "p0"
    assert view['top_card']['id'] == state.top_card.id
    by_id = {p['id']: p for p in view['players']}
    assert 'hand' in by_id['p1']
    assert len(by_id['p1']['hand']) == 4
    assert 'hand' not in by_id['p0']
    assert by_id['p0']['hand_count'] == 4
    assert view['draw_pile_count'] == len(state.draw_pile)

    spectator = sanitize_state(state)
    assert all('hand' not in p for p in spectator['players'])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
