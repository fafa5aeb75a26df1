"""Game models and data structures"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from .constants import (
    CLOCKWISE, PLAY_STYLES, DIFFICULTIES, RANK_VALUES, STATUS_WAITING, SUIT_COLORS,
    TYPE_ANSWER, TYPE_JUMP, TYPE_KICKBACK, TYPE_PENALTY, TYPE_QUESTION, TYPE_WILD,
    format_card, game_phase_for_turn,
)


@dataclass(frozen=True)
class Card:
    id: str
    suit: str  # hearts|diamonds|clubs|spades|joker
    rank: str
    type: str  # Penalty|Jump|Kickback|Question|Wild|Answer

    @property
    def value(self) -> int:
        return RANK_VALUES[self.rank]

    @property
    def color(self) -> str:
        return SUIT_COLORS[self.suit]

    @property
    def is_wild(self) -> bool:
        return self.type == TYPE_WILD

    @property
    def is_penalty(self) -> bool:
        return self.type == TYPE_PENALTY

    @property
    def is_question(self) -> bool:
        return self.type == TYPE_QUESTION

    @property
    def is_answer(self) -> bool:
        return self.type == TYPE_ANSWER

    @property
    def is_defensive(self) -> bool:
        return self.type in (TYPE_JUMP, TYPE_KICKBACK)

    def __str__(self) -> str:
        return format_card(self.suit, self.rank)


@dataclass
class AIConfig:
    difficulty: str = 'medium'
    play_style: str = 'balanced'
    aggression: float = 0.5
    card_counting_skill: float = 0.5
    bluffing_tendency: float = 0.0

    def __post_init__(self):
        if self.difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {self.difficulty}")
        if self.play_style not in PLAY_STYLES:
            raise ValueError(f"Unknown play style: {self.play_style}")
        for name in ('aggression', 'card_counting_skill', 'bluffing_tendency'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")


@dataclass
class Player:
    id: str
    name: str
    hand: List[Card] = field(default_factory=list)
    is_ai: bool = False
    rating: int = 1000  # presentation metadata, unused by the rules
    coins: int = 0  # presentation metadata, unused by the rules
    ai_config: Optional[AIConfig] = None

    @property
    def hand_count(self) -> int:
        return len(self.hand)

    def find_card(self, card_id: str) -> Optional[Card]:
        return next((c for c in self.hand if c.id == card_id), None)


@dataclass
class AwaitingAnswer:
    player_id: str
    suit: str


@dataclass
class GameState:
    players: List[Player] = field(default_factory=list)
    draw_pile: List[Card] = field(default_factory=list)  # top of pile is the end of the list
    discard_pile: List[Card] = field(default_factory=list)  # top of pile is the end of the list
    current_player_index: int = 0
    direction: int = CLOCKWISE
    active_penalty_stack: int = 0
    active_penalty_rank: Optional[str] = None
    required_suit: Optional[str] = None
    pending_skip_count: int = 0
    must_draw_next_turn: Optional[str] = None
    awaiting_answer: Optional[AwaitingAnswer] = None
    niko_declared_by: Optional[str] = None
    niko_declared_round: Optional[int] = None
    turn_number: int = 1
    status: str = STATUS_WAITING  # waiting|active|finished
    winner: Optional[str] = None

    @property
    def current_player(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.current_player_index]

    @property
    def top_card(self) -> Optional[Card]:
        return self.discard_pile[-1] if self.discard_pile else None

    @property
    def current_round(self) -> int:
        if not self.players:
            return 1
        return (self.turn_number - 1) // len(self.players) + 1

    @property
    def game_phase(self) -> str:
        return game_phase_for_turn(self.turn_number)

    @property
    def total_cards(self) -> int:
        return len(self.draw_pile) + len(self.discard_pile) + sum(len(p.hand) for p in self.players)

    def get_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    def player_index(self, player_id: str) -> Optional[int]:
        return next((i for i, p in enumerate(self.players) if p.id == player_id), None)

    def has_declared(self, player_id: str) -> bool:
        return self.niko_declared_by == player_id


@dataclass(frozen=True)
class GameMove:
    player_id: str
    action: str  # play|draw|declare|pass
    cards_played: Tuple[Card, ...] = ()
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    declared_suit: Optional[str] = None
    cards_drawn: Tuple[Card, ...] = ()
