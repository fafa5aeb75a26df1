"""
Heuristic bot driven by phase-dependent strategy tables.
"""

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from .base import BaseBot, BotAction
from ..analysis import MoveValidation, build_move_validation, win_probability
from ..constants import PHASE_EARLY, PHASE_LATE, PHASE_MID
from ..errors import GameError
from ..models import Card, GameMove, GameState, Player
from ..validate import validate_declare

if TYPE_CHECKING:
    from ..engine import NikoKadiEngine

logger = logging.getLogger(__name__)

# Move categories
WINNING = 'winning'
MULTI = 'multi'
ANSWER = 'answer'
DEFENSIVE = 'defensive'
PENALTY = 'penalty'
QUESTION = 'question'
WILD = 'wild'
ANY = 'any'


@dataclass(frozen=True)
class Strategy:
    name: str
    priorities: Tuple[str, ...]
    declares_niko: bool = False


STRATEGIES: Dict[str, Strategy] = {
    'early_conservative': Strategy(
        'early_conservative',
        (ANSWER, DEFENSIVE, PENALTY, QUESTION, WILD, ANY),
    ),
    'early_aggressive': Strategy(
        'early_aggressive',
        (MULTI, PENALTY, ANSWER, DEFENSIVE, QUESTION, WILD, ANY),
    ),
    'mid_balanced': Strategy(
        'mid_balanced',
        (WINNING, MULTI, ANSWER, DEFENSIVE, PENALTY, QUESTION, WILD, ANY),
        declares_niko=True,
    ),
    'late_aggressive': Strategy(
        'late_aggressive',
        (WINNING, PENALTY, MULTI, ANSWER, DEFENSIVE, QUESTION, WILD, ANY),
        declares_niko=True,
    ),
    'late_defensive': Strategy(
        'late_defensive',
        (WINNING, DEFENSIVE, PENALTY, ANSWER, MULTI, QUESTION, WILD, ANY),
        declares_niko=True,
    ),
    'endgame_desperate': Strategy(
        'endgame_desperate',
        (WINNING, MULTI, PENALTY, WILD, ANSWER, DEFENSIVE, QUESTION, ANY),
        declares_niko=True,
    ),
}

NIKO_MAX_HAND = 3
NIKO_MIN_WIN_PROBABILITY = 0.7


def select_strategy(phase: str, play_style: str) -> Strategy:
    """Pick a strategy for a game phase and play style."""
    if phase == PHASE_EARLY:
        name = 'early_aggressive' if play_style == 'aggressive' else 'early_conservative'
    elif phase == PHASE_MID:
        name = 'mid_balanced'
    elif phase == PHASE_LATE:
        name = 'late_defensive' if play_style == 'defensive' else 'late_aggressive'
    else:
        name = 'endgame_desperate'
    return STRATEGIES[name]


class HeuristicBot(BaseBot):
    """
    Bot that walks a priority list of move categories.

    Strategy:
    - Take a winning move whenever one exists (from mid game on)
    - Otherwise play the first non-empty category of the phase's strategy
    - Declare Niko Kadi with a short hand once declarations are allowed
    - Draw when nothing is playable
    """

    def __init__(self, player_id: str, rng: Optional[random.Random] = None):
        super().__init__(player_id)
        self.rng = rng or random.Random()

    def play_turn(self, engine: 'NikoKadiEngine') -> Optional[GameMove]:
        """
        Choose and execute one action.

        Returns:
            The executed move, or None when it is not this bot's turn
        """
        try:
            action = self.choose_action(engine)
            if action is None:
                return None
            logger.debug(f"{self.player_id} chose {action}")
            return self.execute(engine, action)
        except Exception:
            logger.exception(f"Strategy failed for {self.player_id}, falling back")
            return self._fallback(engine)

    def choose_action(self, engine: 'NikoKadiEngine') -> Optional[BotAction]:
        state = engine.get_game_state()
        if not self.is_my_turn(state):
            return None
        player = self.get_player(state)

        if state.must_draw_next_turn == self.player_id:
            return BotAction.draw()

        hints = build_move_validation(state, self.player_id, engine.rules)
        if not hints.valid_cards:
            return BotAction.draw()

        play_style = player.ai_config.play_style if player.ai_config else 'balanced'
        strategy = select_strategy(state.game_phase, play_style)

        if strategy.declares_niko and self._should_declare(state, player):
            return BotAction.declare()

        cards = self._select_cards(strategy, state, player, hints)
        declared_suit = self.choose_suit(player.hand, cards) if cards[0].is_wild else None
        return BotAction.play([c.id for c in cards], declared_suit)

    def _should_declare(self, state: GameState, player: Player) -> bool:
        if player.hand_count > NIKO_MAX_HAND:
            return False
        if win_probability(player.hand_count) <= NIKO_MIN_WIN_PROBABILITY:
            return False
        return validate_declare(state, self.player_id).valid

    def _select_cards(self, strategy: Strategy, state: GameState, player: Player,
                      hints: MoveValidation) -> List[Card]:
        for category in strategy.priorities:
            cards = self._candidates(category, state, player, hints)
            if cards:
                logger.debug(f"{self.player_id} [{strategy.name}] plays {category}")
                return cards
        return [hints.valid_cards[0]]

    def _candidates(self, category: str, state: GameState, player: Player,
                    hints: MoveValidation) -> List[Card]:
        """Cards to play for a category, or an empty list when it has none."""
        if category == WINNING:
            if not hints.winning_moves:
                return []
            lead = hints.winning_moves[0]
            return [lead] + [c for c in player.hand if c.rank == lead.rank and c.id != lead.id]

        if category == MULTI:
            if state.awaiting_answer is not None or not hints.multi_card_options:
                return []
            return max(hints.multi_card_options, key=len)

        if category == ANSWER:
            options = hints.aggressive_moves
        elif category == DEFENSIVE:
            options = hints.defensive_moves
        elif category == PENALTY:
            options = [c for c in hints.valid_cards if c.is_penalty]
        elif category == QUESTION:
            options = [c for c in hints.valid_cards if c.is_question and self._has_follow_up(player, c)]
        elif category == WILD:
            options = [c for c in hints.valid_cards if c.is_wild]
        else:
            options = hints.valid_cards

        if not options:
            return []
        if player.ai_config is not None and player.ai_config.difficulty == 'easy':
            return [self.rng.choice(options)]
        return [options[0]]

    @staticmethod
    def _has_follow_up(player: Player, question: Card) -> bool:
        return any(c.is_answer and c.suit == question.suit for c in player.hand)

    def _fallback(self, engine: 'NikoKadiEngine') -> Optional[GameMove]:
        """Play the first valid card, or draw."""
        state = engine.get_game_state()
        if not self.is_my_turn(state):
            return None
        player = self.get_player(state)

        if state.must_draw_next_turn != self.player_id:
            valid = engine.get_valid_cards(player.hand)
            if valid:
                card = valid[0]
                suit = self.choose_suit(player.hand, [card]) if card.is_wild else None
                try:
                    return engine.play_card(self.player_id, [card.id], suit)
                except GameError as e:
                    logger.debug(f"Fallback play rejected for {self.player_id}: {e}")

        return engine.draw_card(self.player_id)
