"""
Engine event models.

The engine reports what happens through an optional sink callable; it never
prints or writes anywhere on its own.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, Field


class GameEventType(str, Enum):
    """Events emitted by the engine."""
    GAME_STARTED = "game_started"
    CARD_PLAYED = "card_played"
    EFFECT_APPLIED = "effect_applied"
    CARDS_DRAWN = "cards_drawn"
    DECK_RESHUFFLED = "deck_reshuffled"
    TURN_ADVANCED = "turn_advanced"
    TURN_PASSED = "turn_passed"
    NIKO_DECLARED = "niko_declared"
    WIN_DENIED = "win_denied"
    GAME_WON = "game_won"
    STATE_IMPORTED = "state_imported"


class GameEvent(BaseModel):
    """A single engine event."""
    type: GameEventType
    player_id: Optional[str] = None
    turn_number: int = 0
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


EventSink = Callable[[GameEvent], None]
