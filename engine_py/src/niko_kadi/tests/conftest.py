"""
Shared fixtures for building hand-crafted game positions.
"""

from typing import Dict, Iterable, List, Optional, Union

import pytest

from niko_kadi.constants import STATUS_ACTIVE
from niko_kadi.engine import NikoKadiEngine
from niko_kadi.models import AIConfig, Card, GameState, Player
from niko_kadi.rules import RuleConfig
from niko_kadi.shuffle import create_deck

DECK: Dict[str, Card] = {c.id: c for c in create_deck()}


@pytest.fixture
def card():
    """Look up a standard deck card by id, e.g. card('hearts-7')."""
    def make(card_id: str) -> Card:
        return DECK[card_id]
    return make


@pytest.fixture
def table():
    """
    Build an engine holding a hand-crafted active game.

    Every card not placed in a hand, on the discard pile or in an explicit
    draw pile goes to the draw pile (or under the discard pile when the
    draw pile is given), so positions always hold the full deck.
    """
    def build(
        hands: Dict[str, List[str]],
        top: Union[str, List[str]],
        draw: Optional[List[str]] = None,
        ai: Iterable[str] = (),
        seed: int = 7,
        events: Optional[list] = None,
        rules: Optional[RuleConfig] = None,
        **overrides,
    ) -> NikoKadiEngine:
        top_ids = [top] if isinstance(top, str) else list(top)
        ai = set(ai)
        players = [
            Player(
                id=pid,
                name=pid.title(),
                hand=[DECK[c] for c in ids],
                is_ai=pid in ai,
                ai_config=AIConfig() if pid in ai else None,
            )
            for pid, ids in hands.items()
        ]

        used = set(top_ids) | {c for ids in hands.values() for c in ids} | set(draw or [])
        leftovers = [c for cid, c in DECK.items() if cid not in used]
        discard = [DECK[c] for c in top_ids]
        if draw is None:
            draw_pile = leftovers
        else:
            draw_pile = [DECK[c] for c in draw]
            discard = leftovers + discard

        fields = {'status': STATUS_ACTIVE, **overrides}
        state = GameState(players=players, draw_pile=draw_pile, discard_pile=discard, **fields)
        engine = NikoKadiEngine(
            rules=rules,
            seed=seed,
            on_event=events.append if events is not None else None,
        )
        engine.set_game_state(state)
        return engine
    return build
