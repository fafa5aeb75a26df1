"""
Move validation for card plays, draws, declarations and passes.

Everything in this module is read-only with respect to GameState.
"""

import dataclasses
from typing import Dict, List, Optional, Sequence

from .constants import JOKER_RANK, STATUS_ACTIVE, STATUS_FINISHED, TYPE_ANSWER, TYPE_QUESTION
from .errors import (
    ALREADY_DECLARED, AWAITING_ANSWER, DUPLICATE_CARDS, GAME_FINISHED, GAME_NOT_INITIALIZED,
    INVALID_FINISHING_CARD, MUST_DRAW, NIKO_NOT_DECLARED, NIKO_WRONG_ROUND, NO_ACE_OUT, NO_CARDS,
    NOT_YOUR_TURN, OWNERSHIP_MISMATCH, PENALTY_ACTIVE, PLAYER_NOT_FOUND, RANK_MISMATCH,
    SUIT_RANK_MISMATCH,
)
from .models import Card, GameState, Player
from .rules import RuleConfig, default_rules


class ValidationResult:
    """Result of move validation."""

    def __init__(
        self,
        valid: bool,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        pattern: Optional[Dict] = None,
        effect: Optional[str] = None
    ):
        self.valid = valid
        self.error_code = error_code
        self.error_message = error_message
        self.pattern = pattern
        self.effect = effect

    @classmethod
    def success(cls, pattern: Optional[Dict] = None, effect: Optional[str] = None) -> 'ValidationResult':
        """Create a successful validation result."""
        return cls(valid=True, pattern=pattern, effect=effect)

    @classmethod
    def error(cls, error_code: str, error_message: str) -> 'ValidationResult':
        """Create an error validation result."""
        return cls(valid=False, error_code=error_code, error_message=error_message)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ValidationResult):
            return NotImplemented
        return (self.valid, self.error_code, self.error_message, self.pattern, self.effect) == (
            other.valid, other.error_code, other.error_message, other.pattern, other.effect
        )

    def __repr__(self) -> str:
        if self.valid:
            return f"ValidationResult(valid=True, effect={self.effect!r})"
        return f"ValidationResult(valid=False, error_code={self.error_code!r})"


def check_game_active(state: Optional[GameState]) -> Optional[ValidationResult]:
    """Return an error result when no game is running, else None."""
    if state is None or not state.players:
        return ValidationResult.error(GAME_NOT_INITIALIZED, "Game not initialized")
    if state.status == STATUS_FINISHED:
        return ValidationResult.error(GAME_FINISHED, "Game is already finished")
    if state.status != STATUS_ACTIVE:
        return ValidationResult.error(GAME_NOT_INITIALIZED, f"Game is not active (status: {state.status})")
    return None


def check_turn(state: GameState, player_id: str) -> Optional[ValidationResult]:
    """Return an error result unless player_id exists and holds the turn."""
    if state.get_player(player_id) is None:
        return ValidationResult.error(PLAYER_NOT_FOUND, f"Player not found: {player_id}")
    current = state.current_player
    if current is None or current.id != player_id:
        return ValidationResult.error(
            NOT_YOUR_TURN,
            f"It's not your turn (current turn: {current.id if current else None})"
        )
    return None


def effective_top_card(state: GameState) -> Optional[Card]:
    """Top of the discard pile, with its suit replaced by a pending Wild suit."""
    top = state.top_card
    if top is None:
        return None
    if state.required_suit:
        return dataclasses.replace(top, suit=state.required_suit)
    return top


def matches_top(state: GameState, card: Card, rules: Optional[RuleConfig] = None) -> bool:
    """Standard suit-or-rank match against the effective top card."""
    rules = rules or default_rules
    top = effective_top_card(state)
    if top is None:
        return True
    if rules.jokers_match_any and (card.rank == JOKER_RANK or top.rank == JOKER_RANK):
        return True
    return card.suit == top.suit or card.rank == top.rank


def is_card_playable(state: GameState, card: Card, rules: Optional[RuleConfig] = None) -> bool:
    """Whether a single card could lead a legal play right now."""
    if card.is_wild:
        return True
    if state.awaiting_answer is not None:
        return card.is_answer and card.suit == state.awaiting_answer.suit
    if state.active_penalty_stack > 0:
        return card.is_penalty and card.rank == state.active_penalty_rank
    return matches_top(state, card, rules)


def get_valid_cards(state: GameState, hand: Sequence[Card], rules: Optional[RuleConfig] = None) -> List[Card]:
    """Cards from hand that may be played on their own."""
    if not state.discard_pile:
        return list(hand)
    return [card for card in hand if is_card_playable(state, card, rules)]


def validate_move(
    state: Optional[GameState],
    player_id: str,
    card_ids: Sequence[str],
    rules: Optional[RuleConfig] = None
) -> ValidationResult:
    """
    Validate a card play attempt.

    Args:
        state: Current game state
        player_id: ID of player attempting the play
        card_ids: IDs of the cards being played, in play order
        rules: Rule configuration

    Returns:
        ValidationResult describing the first failed check, or success with
        the play pattern and the effect (card type) to resolve
    """
    failure = check_game_active(state)
    if failure:
        return failure

    if state.must_draw_next_turn == player_id:
        return ValidationResult.error(
            MUST_DRAW,
            "You finished on a Wild card and must draw this turn"
        )

    failure = check_turn(state, player_id)
    if failure:
        return failure

    player = state.get_player(player_id)

    if not card_ids:
        return ValidationResult.error(NO_CARDS, "No cards to play")

    if len(set(card_ids)) != len(card_ids):
        return ValidationResult.error(DUPLICATE_CARDS, "Cannot play the same card twice")

    cards = []
    for card_id in card_ids:
        card = player.find_card(card_id)
        if card is None:
            return ValidationResult.error(OWNERSHIP_MISMATCH, f"You don't own {card_id}")
        cards.append(card)

    # Multi-card plays must share a rank
    lead = cards[0]
    if any(card.rank != lead.rank for card in cards[1:]):
        return ValidationResult.error(RANK_MISMATCH, "All cards in a multi-card play must share a rank")

    pattern = {
        'rank': lead.rank,
        'count': len(cards),
        'cards': list(card_ids),
    }

    # Wild cards may always be played
    if lead.is_wild:
        return ValidationResult.success(pattern, lead.type)

    awaiting = state.awaiting_answer
    if awaiting is not None:
        if awaiting.player_id != player_id:
            return ValidationResult.error(
                AWAITING_ANSWER,
                f"Waiting for {awaiting.player_id} to answer a question"
            )
        if len(cards) != 1 or not lead.is_answer or lead.suit != awaiting.suit:
            return ValidationResult.error(
                AWAITING_ANSWER,
                f"You must answer with a single {awaiting.suit} answer card, a Wild, or draw"
            )
        return ValidationResult.success(pattern, lead.type)

    if state.active_penalty_stack > 0:
        if not lead.is_penalty or lead.rank != state.active_penalty_rank:
            return ValidationResult.error(
                PENALTY_ACTIVE,
                f"Penalty of {state.active_penalty_stack} pending: counter with "
                f"{state.active_penalty_rank} or draw"
            )
        return ValidationResult.success(pattern, lead.type)

    if not matches_top(state, lead, rules):
        top = effective_top_card(state)
        return ValidationResult.error(
            SUIT_RANK_MISMATCH,
            f"{lead} does not match {top.rank} of {top.suit}"
        )

    return ValidationResult.success(pattern, lead.type)


def validate_win_condition(state: GameState, player: Player, cards: Sequence[Card]) -> ValidationResult:
    """
    Decide whether emptying a hand with the given final cards wins the game.

    Args:
        state: Current game state
        player: Player whose hand is being emptied
        cards: The final cards played

    Returns:
        ValidationResult; failure does not make the play illegal, it only
        withholds the win
    """
    if any(card.is_wild for card in cards):
        return ValidationResult.error(NO_ACE_OUT, "Cannot finish on a Wild card")
    if any(card.type not in (TYPE_ANSWER, TYPE_QUESTION) for card in cards):
        return ValidationResult.error(INVALID_FINISHING_CARD, "Final cards must be Answer or Question cards")
    if not state.has_declared(player.id):
        return ValidationResult.error(NIKO_NOT_DECLARED, "Niko Kadi was not declared")
    if state.niko_declared_round != state.current_round - 1:
        return ValidationResult.error(
            NIKO_WRONG_ROUND,
            f"Niko Kadi declared in round {state.niko_declared_round}, "
            f"a win is only possible in round {(state.niko_declared_round or 0) + 1}"
        )
    return ValidationResult.success({'winner': player.id})


def declaration_outstanding(state: GameState) -> bool:
    """A declaration stays outstanding until its winning round has passed."""
    if state.niko_declared_by is None or state.niko_declared_round is None:
        return False
    return state.current_round <= state.niko_declared_round + 1


def validate_draw(state: Optional[GameState], player_id: str) -> ValidationResult:
    failure = check_game_active(state) or check_turn(state, player_id)
    if failure:
        return failure
    return ValidationResult.success({'action': 'draw'})


def validate_pass(state: Optional[GameState], player_id: str) -> ValidationResult:
    failure = check_game_active(state) or check_turn(state, player_id)
    if failure:
        return failure
    return ValidationResult.success({'action': 'pass'})


def validate_declare(state: Optional[GameState], player_id: str) -> ValidationResult:
    failure = check_game_active(state) or check_turn(state, player_id)
    if failure:
        return failure
    if declaration_outstanding(state):
        return ValidationResult.error(
            ALREADY_DECLARED,
            f"Niko Kadi already declared by {state.niko_declared_by}"
        )
    return ValidationResult.success({'action': 'declare'})


def is_valid_multi_card_combination(cards: Sequence[Card]) -> bool:
    if len(cards) < 2:
        return False
    return all(card.rank == cards[0].rank for card in cards)


def get_valid_multi_card_combinations(
    state: GameState,
    player: Player,
    rules: Optional[RuleConfig] = None
) -> List[List[Card]]:
    """
    Same-rank groups of two or more cards that could be played together.

    Each group is ordered so that a playable card leads it.
    """
    groups: Dict[str, List[Card]] = {}
    for card in player.hand:
        groups.setdefault(card.rank, []).append(card)

    combinations = []
    for cards in groups.values():
        if len(cards) < 2:
            continue
        leaders = [c for c in cards if is_card_playable(state, c, rules)]
        if not leaders:
            continue
        lead = leaders[0]
        combinations.append([lead] + [c for c in cards if c.id != lead.id])
    return combinations


def get_cards_that_can_be_added(
    state: GameState,
    player: Player,
    current_selection: Sequence[Card],
    rules: Optional[RuleConfig] = None
) -> List[Card]:
    """Cards that may join the current selection without breaking the play."""
    if not current_selection:
        return get_valid_cards(state, player.hand, rules)
    selected = {c.id for c in current_selection}
    first_rank = current_selection[0].rank
    return [c for c in player.hand if c.rank == first_rank and c.id not in selected]
