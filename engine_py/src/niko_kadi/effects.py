"""
Special card effects implementation.

Each handler mutates the state in place and returns True when the turn
should advance afterwards.
"""

from typing import Callable, Dict, Optional, Sequence

from .constants import TYPE_ANSWER, TYPE_JUMP, TYPE_KICKBACK, TYPE_PENALTY, TYPE_QUESTION, TYPE_WILD
from .models import AwaitingAnswer, Card, GameState
from .rules import RuleConfig, default_rules


def apply_penalty(state: GameState, player_id: str, cards: Sequence[Card],
                  rules: RuleConfig, declared_suit: Optional[str] = None) -> bool:
    """
    Apply a Penalty play - stack draws for the next player.

    Args:
        state: Current game state
        player_id: Player who played the penalty cards
        cards: Penalty cards played (all the same rank)
        rules: Rule configuration holding the per-rank penalty values

    Returns:
        True, the turn advances
    """
    rank = cards[0].rank
    state.active_penalty_stack += rules.penalty_for_rank(rank) * len(cards)
    state.active_penalty_rank = rank
    state.required_suit = None
    return True


def apply_wild(state: GameState, player_id: str, cards: Sequence[Card],
               rules: RuleConfig, declared_suit: Optional[str] = None) -> bool:
    """
    Apply a Wild play - cancel penalties and declare the suit to follow.

    A player who empties their hand with a Wild cannot win on it and must
    draw on their next turn instead.
    """
    state.active_penalty_stack = 0
    state.active_penalty_rank = None
    state.awaiting_answer = None
    state.required_suit = declared_suit

    player = state.get_player(player_id)
    if player is not None and not player.hand:
        state.must_draw_next_turn = player_id
    return True


def apply_jump(state: GameState, player_id: str, cards: Sequence[Card],
               rules: RuleConfig, declared_suit: Optional[str] = None) -> bool:
    """Apply a Jump play - skip one player per card at the next turn advance."""
    state.pending_skip_count += len(cards)
    state.required_suit = None
    return True


def apply_kickback(state: GameState, player_id: str, cards: Sequence[Card],
                   rules: RuleConfig, declared_suit: Optional[str] = None) -> bool:
    """Apply a Kickback play - reverse direction once per card."""
    if len(cards) % 2 == 1:
        state.direction = -state.direction
    state.required_suit = None
    return True


def apply_question(state: GameState, player_id: str, cards: Sequence[Card],
                   rules: RuleConfig, declared_suit: Optional[str] = None) -> bool:
    """
    Apply a Question play - the same player owes an answer in the suit of
    the card now on top of the discard pile.

    Returns:
        False, the turn stays with the questioner
    """
    state.awaiting_answer = AwaitingAnswer(player_id=player_id, suit=cards[-1].suit)
    state.required_suit = None
    return False


def apply_answer(state: GameState, player_id: str, cards: Sequence[Card],
                 rules: RuleConfig, declared_suit: Optional[str] = None) -> bool:
    state.required_suit = None
    state.awaiting_answer = None
    return True


EffectHandler = Callable[[GameState, str, Sequence[Card], RuleConfig, Optional[str]], bool]

EFFECT_HANDLERS: Dict[str, EffectHandler] = {
    TYPE_PENALTY: apply_penalty,
    TYPE_WILD: apply_wild,
    TYPE_JUMP: apply_jump,
    TYPE_KICKBACK: apply_kickback,
    TYPE_QUESTION: apply_question,
    TYPE_ANSWER: apply_answer,
}


def process_effect(state: GameState, effect: str, player_id: str, cards: Sequence[Card],
                   rules: Optional[RuleConfig] = None, declared_suit: Optional[str] = None) -> bool:
    """
    Process a special effect based on the card type played.

    Args:
        state: Current game state
        effect: Card type of the play
        player_id: Player who triggered the effect
        cards: Cards played, all of the same rank
        rules: Rule configuration
        declared_suit: Suit declared with a Wild

    Returns:
        True if the turn should advance
    """
    handler = EFFECT_HANDLERS.get(effect, apply_answer)
    return handler(state, player_id, cards, rules or default_rules, declared_suit)


def has_pending_effects(state: GameState) -> bool:
    """
    Check if there are any pending effects that constrain the next play.
    """
    return (
        state.active_penalty_stack > 0
        or state.awaiting_answer is not None
        or state.must_draw_next_turn is not None
        or state.required_suit is not None
    )
