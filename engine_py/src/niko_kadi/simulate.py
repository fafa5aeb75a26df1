#!/usr/bin/env python3
"""Run all-AI games through the public engine surface"""

import logging
import os
import random
from dataclasses import dataclass, field
from typing import List, Optional

from .constants import PLAY_STYLES, STATUS_ACTIVE
from .engine import NikoKadiEngine
from .events import GameEvent
from .models import AIConfig, Player
from .rules import RuleConfig

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    winner: Optional[str]
    moves: int
    status: str
    events: List[GameEvent] = field(default_factory=list)


def make_ai_players(player_count: int, rng: random.Random) -> List[Player]:
    return [
        Player(
            id=f"ai-{i + 1}",
            name=f"AI {i + 1}",
            is_ai=True,
            ai_config=AIConfig(play_style=rng.choice(PLAY_STYLES)),
        )
        for i in range(player_count)
    ]


def play_ai_game(
    player_count: int = 4,
    seed: Optional[int] = None,
    max_moves: int = 2000,
    rules: Optional[RuleConfig] = None,
) -> SimulationResult:
    """
    Play one game between heuristic bots.

    Args:
        player_count: Number of AI players
        seed: Seed for dealing, shuffling and AI choices
        max_moves: Give up after this many actions
        rules: Rule configuration

    Returns:
        SimulationResult; status stays active when max_moves ran out
    """
    rng = random.Random(seed)
    events: List[GameEvent] = []
    engine = NikoKadiEngine(rules=rules, rng=rng, on_event=events.append)
    engine.initialize_game(make_ai_players(player_count, rng))

    moves = 0
    while engine.state.status == STATUS_ACTIVE and moves < max_moves:
        current = engine.get_current_player()
        engine.get_ai_move(current.id)
        moves += 1

    state = engine.get_game_state()
    if state.winner:
        logger.info(f"{state.winner} won after {moves} actions ({len(engine.move_history)} moves recorded)")
    else:
        logger.info(f"No winner after {moves} actions")
    return SimulationResult(winner=state.winner, moves=len(engine.move_history), status=state.status, events=events)


def main():
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    seed = os.getenv("SEED")
    players = int(os.getenv("PLAYERS", 4))

    print(f"🃏 Simulating Niko Kadi with {players} AI players")
    result = play_ai_game(player_count=players, seed=int(seed) if seed else None)
    print(f"🏁 Status: {result.status}, winner: {result.winner}, moves: {result.moves}")


if __name__ == "__main__":
    main()
