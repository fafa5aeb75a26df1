"""Game constants and utilities"""

from typing import Dict, List, Literal

Suit = Literal['hearts', 'diamonds', 'clubs', 'spades']
Rank = Literal['A', '2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K', 'JOKER']
CardType = Literal['Penalty', 'Jump', 'Kickback', 'Question', 'Wild', 'Answer']

SUITS: List[str] = ['hearts', 'diamonds', 'clubs', 'spades']
JOKER_SUIT = 'joker'
RANKS: List[str] = ['A', '2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K']
JOKER_RANK = 'JOKER'
JOKER_CARDS = ['joker-1', 'joker-2']
DECK_SIZE = 54

# Card types
TYPE_PENALTY = 'Penalty'
TYPE_JUMP = 'Jump'
TYPE_KICKBACK = 'Kickback'
TYPE_QUESTION = 'Question'
TYPE_WILD = 'Wild'
TYPE_ANSWER = 'Answer'

RANK_VALUES: Dict[str, int] = {
    '2': 2, '3': 3, '4': 4, '5': 5, '6': 6, '7': 7, '8': 8, '9': 9, '10': 10,
    'J': 11, 'Q': 12, 'K': 13, 'A': 14, 'JOKER': 15,
}

SUIT_COLORS: Dict[str, str] = {
    'hearts': 'red',
    'diamonds': 'red',
    'clubs': 'black',
    'spades': 'black',
    'joker': 'joker',
}

SUIT_SYMBOLS: Dict[str, str] = {
    'hearts': '♥', 'diamonds': '♦', 'clubs': '♣', 'spades': '♠', 'joker': '🃏',
}

# Game status
STATUS_WAITING = 'waiting'
STATUS_ACTIVE = 'active'
STATUS_FINISHED = 'finished'

# Game phases (AI heuristics only), upper turn bounds inclusive
PHASE_EARLY = 'early'
PHASE_MID = 'mid'
PHASE_LATE = 'late'
PHASE_ENDGAME = 'endgame'
PHASE_TURN_LIMITS = [
    (8, PHASE_EARLY),
    (20, PHASE_MID),
    (36, PHASE_LATE),
]

# Move actions
ACTION_PLAY = 'play'
ACTION_DRAW = 'draw'
ACTION_DECLARE = 'declare'
ACTION_PASS = 'pass'

# Directions
CLOCKWISE = 1
COUNTERCLOCKWISE = -1

# AI play styles and difficulties
PLAY_STYLES = ['aggressive', 'defensive', 'balanced']
DIFFICULTIES = ['easy', 'medium', 'hard', 'expert']

# Risk levels
RISK_LOW = 'low'
RISK_MEDIUM = 'medium'
RISK_HIGH = 'high'


def card_id_for(suit: str, rank: str) -> str:
    return f"{suit}-{rank}"


def game_phase_for_turn(turn_number: int) -> str:
    """Bucket a turn number into early/mid/late/endgame."""
    for limit, phase in PHASE_TURN_LIMITS:
        if turn_number <= limit:
            return phase
    return PHASE_ENDGAME


def format_card(suit: str, rank: str) -> str:
    if rank == JOKER_RANK:
        return SUIT_SYMBOLS[JOKER_SUIT]
    return f"{rank}{SUIT_SYMBOLS.get(suit, '?')}"
