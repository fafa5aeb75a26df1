"""
Base bot interface and utilities.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

from ..constants import ACTION_DECLARE, ACTION_DRAW, ACTION_PASS, ACTION_PLAY, STATUS_ACTIVE, SUITS
from ..models import Card, GameMove, GameState, Player

if TYPE_CHECKING:
    from ..engine import NikoKadiEngine


class BotAction:
    """Represents a bot action."""

    def __init__(self, action_type: str, **kwargs):
        self.type = action_type
        self.data = kwargs

    @classmethod
    def play(cls, cards: List[str], declared_suit: Optional[str] = None) -> 'BotAction':
        """Create a play action."""
        return cls(ACTION_PLAY, cards=cards, declared_suit=declared_suit)

    @classmethod
    def draw(cls) -> 'BotAction':
        """Create a draw action."""
        return cls(ACTION_DRAW)

    @classmethod
    def declare(cls) -> 'BotAction':
        """Create a Niko Kadi declaration."""
        return cls(ACTION_DECLARE)

    @classmethod
    def pass_turn(cls) -> 'BotAction':
        """Create a pass action."""
        return cls(ACTION_PASS)

    def __repr__(self) -> str:
        return f"BotAction({self.type!r}, {self.data!r})"


class BaseBot(ABC):
    """
    Abstract base class for bot players.

    Bots read the game only through engine snapshots and act only through
    the engine's public operations.
    """

    def __init__(self, player_id: str):
        self.player_id = player_id

    @abstractmethod
    def choose_action(self, engine: 'NikoKadiEngine') -> Optional[BotAction]:
        """
        Choose an action based on the current game state.

        Args:
            engine: Engine running the game

        Returns:
            BotAction to take, or None if it is not this bot's turn
        """
        pass

    def execute(self, engine: 'NikoKadiEngine', action: BotAction) -> GameMove:
        """Carry out an action through the engine."""
        if action.type == ACTION_PLAY:
            return engine.play_card(self.player_id, action.data['cards'], action.data.get('declared_suit'))
        if action.type == ACTION_DRAW:
            return engine.draw_card(self.player_id)
        if action.type == ACTION_DECLARE:
            return engine.declare_niko_kadi(self.player_id)
        if action.type == ACTION_PASS:
            return engine.pass_turn(self.player_id)
        raise ValueError(f"Unknown bot action: {action.type}")

    def get_player(self, state: GameState) -> Optional[Player]:
        return state.get_player(self.player_id)

    def is_my_turn(self, state: Optional[GameState]) -> bool:
        """Check if it's this bot's turn in a running game."""
        if state is None or state.status != STATUS_ACTIVE:
            return False
        current = state.current_player
        return current is not None and current.id == self.player_id

    def get_other_players(self, state: GameState) -> List[Player]:
        return [p for p in state.players if p.id != self.player_id]

    @staticmethod
    def choose_suit(hand: List[Card], played: List[Card]) -> str:
        """
        Suit to declare with a Wild: the most common suit left in hand.

        Ties go to the suit listed first in SUITS.
        """
        played_ids = {c.id for c in played}
        counts = {suit: 0 for suit in SUITS}
        for card in hand:
            if card.id not in played_ids and card.suit in counts:
                counts[card.suit] += 1
        return max(SUITS, key=lambda suit: counts[suit])
