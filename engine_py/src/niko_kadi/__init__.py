"""Rules engine for Niko Kadi, a Kenyan Kadi-family shedding card game."""

from .engine import NikoKadiEngine
from .errors import GameError, InvalidGameStateError
from .events import GameEvent, GameEventType
from .models import AIConfig, Card, GameMove, GameState, Player
from .rules import RuleConfig, create_rules, default_rules
from .validate import ValidationResult

__all__ = [
    "NikoKadiEngine",
    "GameError",
    "InvalidGameStateError",
    "GameEvent",
    "GameEventType",
    "AIConfig",
    "Card",
    "GameMove",
    "GameState",
    "Player",
    "RuleConfig",
    "create_rules",
    "default_rules",
    "ValidationResult",
]
