"""
Read-only game analysis: move hints, risk estimates and card counting.

Used by presentation layers for hints and by the heuristic bot.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .constants import (
    JOKER_CARDS, JOKER_RANK, RISK_HIGH, RISK_LOW, RISK_MEDIUM, SUITS, TYPE_ANSWER,
)
from .effects import has_pending_effects
from .models import Card, GameState, Player
from .rules import RuleConfig, default_rules
from .validate import get_valid_cards, get_valid_multi_card_combinations, validate_move, validate_win_condition


def win_probability(hand_size: int) -> float:
    """Naive chance of winning soon, from hand size alone."""
    if hand_size <= 0:
        return 1.0
    if hand_size == 1:
        return 0.8
    if hand_size == 2:
        return 0.5
    return max(0.05, 1 - hand_size / 10)


def risk_level(hand_size: int, penalty: int = 0) -> str:
    if hand_size <= 2 or penalty >= 5:
        return RISK_HIGH
    if hand_size <= 4 or penalty >= 3:
        return RISK_MEDIUM
    return RISK_LOW


def strategic_score(state: GameState, player: Player) -> float:
    """
    Score a player's position; higher is better.

    Rewards being ahead of the table on hand size, holding special cards
    and holding same-rank groups that can be shed together.
    """
    opponents = [p for p in state.players if p.id != player.id]
    mean_opponent = sum(p.hand_count for p in opponents) / len(opponents) if opponents else 0.0

    score = 2.0 * (mean_opponent - player.hand_count)
    for card in player.hand:
        score += 1.0 if card.type == TYPE_ANSWER else 1.5

    groups = Counter(card.rank for card in player.hand)
    score += 0.5 * sum(size - 1 for size in groups.values())
    return score


@dataclass
class MoveValidation:
    can_play: bool
    valid_cards: List[Card]
    penalties: int
    counters: List[Card]
    message: str
    multi_card_options: List[List[Card]] = field(default_factory=list)
    winning_moves: List[Card] = field(default_factory=list)
    defensive_moves: List[Card] = field(default_factory=list)
    aggressive_moves: List[Card] = field(default_factory=list)
    strategic_score: float = 0.0
    risk_level: str = RISK_LOW


def _winning_moves(state: GameState, player: Player, valid_cards: List[Card], rules: RuleConfig) -> List[Card]:
    """Playable cards whose same-rank group is a legal play that empties the hand and wins."""
    winners = []
    for card in valid_cards:
        group = [card] + [c for c in player.hand if c.rank == card.rank and c.id != card.id]
        if len(group) != player.hand_count:
            continue
        if not validate_move(state, player.id, [c.id for c in group], rules).valid:
            continue
        if validate_win_condition(state, player, group).valid:
            winners.append(card)
    return winners


def _hint_message(state: GameState, player_id: str, valid_cards: List[Card]) -> str:
    if state.must_draw_next_turn == player_id:
        return "You finished on a Wild card and must draw"
    if state.awaiting_answer is not None and state.awaiting_answer.player_id == player_id:
        if valid_cards:
            return f"Answer with a {state.awaiting_answer.suit} card or a Wild"
        return "No answer in hand - draw a card"
    if state.active_penalty_stack > 0:
        if valid_cards:
            return f"Penalty of {state.active_penalty_stack} pending - counter or draw"
        return f"Penalty of {state.active_penalty_stack} pending - draw"
    if not valid_cards:
        return "No playable cards - draw a card"
    return f"{len(valid_cards)} playable card(s)"


def build_move_validation(
    state: GameState,
    player_id: str,
    rules: Optional[RuleConfig] = None
) -> MoveValidation:
    """
    Collect move hints for a player.

    Args:
        state: Current game state
        player_id: Player to advise
        rules: Rule configuration

    Returns:
        MoveValidation; can_play is False for an unknown player, a finished
        game or a forced draw
    """
    rules = rules or default_rules
    player = state.get_player(player_id)
    if player is None:
        return MoveValidation(False, [], 0, [], f"Player not found: {player_id}")

    if state.must_draw_next_turn == player_id:
        valid_cards = []
    else:
        valid_cards = get_valid_cards(state, player.hand, rules)

    counters = [c for c in valid_cards if c.is_penalty] if state.active_penalty_stack > 0 else []

    return MoveValidation(
        can_play=bool(valid_cards),
        valid_cards=valid_cards,
        penalties=state.active_penalty_stack,
        counters=counters,
        message=_hint_message(state, player_id, valid_cards),
        multi_card_options=get_valid_multi_card_combinations(state, player, rules) if valid_cards else [],
        winning_moves=_winning_moves(state, player, valid_cards, rules),
        defensive_moves=[c for c in valid_cards if c.is_defensive],
        aggressive_moves=[c for c in valid_cards if c.is_answer],
        strategic_score=strategic_score(state, player),
        risk_level=risk_level(player.hand_count, state.active_penalty_stack),
    )


@dataclass
class PlayerAnalysis:
    player_id: str
    hand_size: int
    winning_probability: float
    threat_assessment: str


@dataclass
class GameAnalysis:
    players: List[PlayerAnalysis]
    leader_player_id: Optional[str]
    average_hand_size: float
    suits_in_play: Dict[str, int]
    special_cards_remaining: Dict[str, int]
    game_phase: str
    critical_moment: bool
    pending_effects: bool


def count_special_cards_remaining(state: GameState, rules: Optional[RuleConfig] = None) -> Dict[str, int]:
    """Special-rank cards not yet seen on the discard pile, by rank."""
    rules = rules or default_rules
    seen = Counter(card.rank for card in state.discard_pile)
    remaining = {}
    special_ranks = (
        list(rules.penalty_values) + rules.jump_ranks + rules.kickback_ranks
        + rules.wild_ranks + rules.question_ranks
    )
    for rank in special_ranks:
        total = len(JOKER_CARDS) if rank == JOKER_RANK else len(SUITS)
        remaining[rank] = max(0, total - seen[rank])
    return remaining


def analyze_game(state: GameState, rules: Optional[RuleConfig] = None) -> GameAnalysis:
    players = [
        PlayerAnalysis(
            player_id=p.id,
            hand_size=p.hand_count,
            winning_probability=win_probability(p.hand_count),
            threat_assessment=risk_level(p.hand_count),
        )
        for p in state.players
    ]

    leader = min(state.players, key=lambda p: p.hand_count) if state.players else None
    average = sum(p.hand_count for p in state.players) / len(state.players) if state.players else 0.0
    suits = Counter(card.suit for card in state.discard_pile if card.suit in SUITS)

    return GameAnalysis(
        players=players,
        leader_player_id=leader.id if leader else None,
        average_hand_size=average,
        suits_in_play={suit: suits[suit] for suit in SUITS},
        special_cards_remaining=count_special_cards_remaining(state, rules),
        game_phase=state.game_phase,
        critical_moment=(
            any(p.hand_count <= 1 for p in state.players)
            or state.active_penalty_stack >= 5
        ),
        pending_effects=has_pending_effects(state),
    )
