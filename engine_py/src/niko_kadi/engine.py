"""Main game engine: public operations and the turn state machine"""

import copy
import logging
import random
from contextlib import contextmanager
from typing import List, Optional, Sequence, Tuple

from .constants import (
    ACTION_DECLARE, ACTION_DRAW, ACTION_PASS, ACTION_PLAY, CLOCKWISE, STATUS_ACTIVE,
    STATUS_FINISHED, SUITS,
)
from .errors import (
    DUPLICATE_PLAYER, GAME_NOT_INITIALIZED, NOT_ENOUGH_PLAYERS, SUIT_REQUIRED,
    TOO_MANY_PLAYERS, UNEXPECTED_SUIT, GameError, raise_error,
)
from .events import EventSink, GameEvent, GameEventType
from .effects import process_effect
from .models import Card, GameMove, GameState, Player
from .rules import RuleConfig, default_rules
from .shuffle import create_deck, deal_cards, find_starting_card, reshuffle_discard_into_draw, shuffle_deck
from .validate import (
    ValidationResult, get_cards_that_can_be_added, get_valid_cards,
    get_valid_multi_card_combinations, is_valid_multi_card_combination, validate_declare,
    validate_draw, validate_move, validate_pass, validate_win_condition,
)

logger = logging.getLogger(__name__)


class NikoKadiEngine:
    """
    Rules engine for a single game of Niko Kadi.

    Every mutating operation validates completely before touching the state,
    so a rejected move leaves the game exactly as it was. Concurrent games
    need separate engine instances.
    """

    def __init__(
        self,
        rules: Optional[RuleConfig] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        on_event: Optional[EventSink] = None,
    ):
        self.rules = rules or default_rules
        self.rng = rng or random.Random(seed)
        self.on_event = on_event
        self.state: Optional[GameState] = None
        self._history: List[GameMove] = []
        self._pending_events: List[GameEvent] = []
        self._in_operation = False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _emit(self, event_type: GameEventType, player_id: Optional[str] = None, **data) -> None:
        if self.on_event is None:
            return
        turn = self.state.turn_number if self.state else 0
        self._pending_events.append(GameEvent(type=event_type, player_id=player_id, turn_number=turn, data=data))

    @contextmanager
    def _operation(self):
        """
        Hold emitted events until the outermost operation has finished
        changing the state, then hand them to the sink in order.

        An exception raised by the sink propagates to the caller, but the
        state change it reports is already complete.
        """
        outermost = not self._in_operation
        self._in_operation = True
        try:
            yield
        except Exception:
            if outermost:
                self._pending_events = []
            raise
        finally:
            if outermost:
                self._in_operation = False

        if outermost:
            events, self._pending_events = self._pending_events, []
            for event in events:
                self.on_event(event)

    @staticmethod
    def _require(result: ValidationResult) -> None:
        if not result.valid:
            raise_error(result.error_code, result.error_message)

    def _assert_game(self) -> GameState:
        if self.state is None:
            raise GameError(GAME_NOT_INITIALIZED, "Game not initialized")
        return self.state

    def _record(self, move: GameMove) -> GameMove:
        self._history.append(move)
        return move

    def _draw_cards(self, player: Player, count: int) -> List[Card]:
        """Draw up to count cards, recycling the discard pile when the draw pile runs dry."""
        state = self.state
        drawn = []
        for _ in range(count):
            if not state.draw_pile:
                moved = reshuffle_discard_into_draw(state, self.rng)
                if moved:
                    logger.debug(f"Reshuffled {moved} discards into the draw pile")
                    self._emit(GameEventType.DECK_RESHUFFLED, cards=moved)
            if not state.draw_pile:
                logger.debug(f"No cards left to draw for {player.id} ({len(drawn)}/{count} drawn)")
                break
            card = state.draw_pile.pop()
            player.hand.append(card)
            drawn.append(card)
        return drawn

    def _advance_turn(self) -> None:
        state = self.state
        n = len(state.players)
        steps = 1 + state.pending_skip_count
        previous = state.current_player_index
        state.current_player_index = (previous + state.direction * steps) % n
        state.pending_skip_count = 0
        state.turn_number += 1

        nxt = state.current_player
        logger.debug(f"Turn {state.turn_number}: {nxt.id} (skipped {steps - 1}, direction {state.direction})")
        self._emit(GameEventType.TURN_ADVANCED, nxt.id, previous_index=previous,
                   current_index=state.current_player_index, skipped=steps - 1)

        if self.rules.auto_draw_for_ai and nxt.is_ai and state.must_draw_next_turn == nxt.id:
            logger.debug(f"Executing forced draw for AI player {nxt.id}")
            self.draw_card(nxt.id)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def initialize_game(self, players: Sequence[Player]) -> None:
        """
        Deal a fresh game for the given players.

        Raises:
            GameError: on an invalid player count, duplicate ids, or when no
                starting card can be found
        """
        if len(players) < self.rules.min_players:
            raise GameError(NOT_ENOUGH_PLAYERS, f"Need at least {self.rules.min_players} players")
        if len(players) > self.rules.max_players:
            raise GameError(TOO_MANY_PLAYERS, f"At most {self.rules.max_players} players allowed")
        if len({p.id for p in players}) != len(players):
            raise GameError(DUPLICATE_PLAYER, "Player ids must be unique")

        with self._operation():
            seated = [copy.deepcopy(p) for p in players]
            for player in seated:
                player.hand = []

            draw_pile = shuffle_deck(create_deck(self.rules), self.rng)
            deal_cards(draw_pile, seated, self.rules.hand_size_for(len(seated)))
            starting_card = find_starting_card(draw_pile)

            self.state = GameState(
                players=seated,
                draw_pile=draw_pile,
                discard_pile=[starting_card],
                current_player_index=0,
                direction=CLOCKWISE,
                turn_number=1,
                status=STATUS_ACTIVE,
            )
            self._history = []

            logger.info(f"Game started with {len(seated)} players, starting card {starting_card}")
            self._emit(GameEventType.GAME_STARTED, seated[0].id,
                       players=[p.id for p in seated], starting_card=starting_card.id)

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def play_card(self, player_id: str, card_ids: Sequence[str], declared_suit: Optional[str] = None) -> GameMove:
        """
        Play one or more same-rank cards.

        Args:
            player_id: Player making the play
            card_ids: Cards to play, in the order they land on the discard pile
            declared_suit: Suit to follow; required when playing a Wild

        Returns:
            The recorded GameMove

        Raises:
            GameError: with the code of the first failed validation check
        """
        with self._operation():
            self._require(validate_move(self.state, player_id, card_ids, self.rules))
            state = self.state
            player = state.get_player(player_id)
            cards = [player.find_card(card_id) for card_id in card_ids]
            lead = cards[0]

            if lead.is_wild:
                if declared_suit not in SUITS:
                    raise GameError(SUIT_REQUIRED, f"Declare one of {', '.join(SUITS)} when playing a Wild")
            elif declared_suit is not None:
                raise GameError(UNEXPECTED_SUIT, "Only a Wild card declares a suit")

            played = set(card_ids)
            player.hand = [c for c in player.hand if c.id not in played]
            state.discard_pile.extend(cards)
            logger.debug(f"{player_id} played {', '.join(str(c) for c in cards)}")
            self._emit(GameEventType.CARD_PLAYED, player_id, cards=list(card_ids), declared_suit=declared_suit)

            advances = process_effect(state, lead.type, player_id, cards, self.rules, declared_suit)
            self._emit(GameEventType.EFFECT_APPLIED, player_id, effect=lead.type, count=len(cards),
                       penalty_stack=state.active_penalty_stack, direction=state.direction,
                       pending_skips=state.pending_skip_count, required_suit=state.required_suit)

            move = self._record(GameMove(
                player_id=player_id,
                action=ACTION_PLAY,
                cards_played=tuple(cards),
                declared_suit=declared_suit,
            ))

            if not player.hand:
                win = validate_win_condition(state, player, cards)
                if win.valid:
                    state.status = STATUS_FINISHED
                    state.winner = player_id
                    logger.info(f"{player_id} won on turn {state.turn_number}")
                    self._emit(GameEventType.GAME_WON, player_id)
                    return move
                logger.debug(f"{player_id} emptied their hand without winning: {win.error_code}")
                self._emit(GameEventType.WIN_DENIED, player_id, reason=win.error_code)

            if advances:
                self._advance_turn()
            return move

    def draw_card(self, player_id: str) -> GameMove:
        """
        Draw for the current player.

        A forced No-Ace-Out draw or a forfeited question draws one card;
        otherwise the player draws the whole pending penalty, or one card.
        """
        with self._operation():
            self._require(validate_draw(self.state, player_id))
            state = self.state
            player = state.get_player(player_id)

            if state.must_draw_next_turn == player_id:
                state.must_draw_next_turn = None
                count, reason = 1, 'forced'
            elif state.awaiting_answer is not None and state.awaiting_answer.player_id == player_id:
                state.awaiting_answer = None
                count, reason = 1, 'question_forfeited'
            else:
                count = max(1, state.active_penalty_stack)
                reason = 'penalty' if state.active_penalty_stack > 0 else 'normal'
                state.active_penalty_stack = 0
                state.active_penalty_rank = None
            state.required_suit = None

            drawn = self._draw_cards(player, count)
            logger.debug(f"{player_id} drew {len(drawn)} card(s) ({reason})")
            self._emit(GameEventType.CARDS_DRAWN, player_id, requested=count, drawn=len(drawn), reason=reason)

            move = self._record(GameMove(player_id=player_id, action=ACTION_DRAW, cards_drawn=tuple(drawn)))
            self._advance_turn()
            return move

    def declare_niko_kadi(self, player_id: str) -> GameMove:
        """Announce a win attempt for the next round. The turn does not advance."""
        with self._operation():
            self._require(validate_declare(self.state, player_id))
            state = self.state
            state.niko_declared_by = player_id
            state.niko_declared_round = state.current_round
            logger.debug(f"{player_id} declared Niko Kadi in round {state.current_round}")
            self._emit(GameEventType.NIKO_DECLARED, player_id, round=state.current_round)
            return self._record(GameMove(player_id=player_id, action=ACTION_DECLARE))

    def pass_turn(self, player_id: str) -> GameMove:
        with self._operation():
            self._require(validate_pass(self.state, player_id))
            state = self.state
            if state.awaiting_answer is not None and state.awaiting_answer.player_id == player_id:
                state.awaiting_answer = None
            self._emit(GameEventType.TURN_PASSED, player_id)
            move = self._record(GameMove(player_id=player_id, action=ACTION_PASS))
            self._advance_turn()
            return move

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def validate_move(self, player_id: str, card_ids: Sequence[str]) -> ValidationResult:
        return validate_move(self.state, player_id, card_ids, self.rules)

    def validate_win_condition(self, player: Player, cards: Sequence[Card]) -> ValidationResult:
        return validate_win_condition(self._assert_game(), player, cards)

    def get_valid_cards(self, hand: Sequence[Card]) -> List[Card]:
        return get_valid_cards(self._assert_game(), hand, self.rules)

    def get_valid_multi_card_combinations(self, player_id: str) -> List[List[Card]]:
        state = self._assert_game()
        player = state.get_player(player_id)
        if player is None:
            return []
        return get_valid_multi_card_combinations(state, player, self.rules)

    def get_cards_that_can_be_added(self, player_id: str, current_selection: Sequence[Card]) -> List[Card]:
        state = self._assert_game()
        player = state.get_player(player_id)
        if player is None:
            return []
        return get_cards_that_can_be_added(state, player, current_selection, self.rules)

    @staticmethod
    def is_valid_multi_card_combination(cards: Sequence[Card]) -> bool:
        return is_valid_multi_card_combination(cards)

    def get_move_validation(self, player_id: str):
        """Hints for the UI and the AI; see analysis.build_move_validation."""
        from .analysis import build_move_validation
        return build_move_validation(self._assert_game(), player_id, self.rules)

    def analyze(self):
        from .analysis import analyze_game
        return analyze_game(self._assert_game(), self.rules)

    def get_game_state(self) -> Optional[GameState]:
        """A deep copy of the current state; changes to it do not affect the game."""
        return copy.deepcopy(self.state)

    def set_game_state(self, state: GameState) -> None:
        self.state = copy.deepcopy(state)

    def get_top_card(self) -> Optional[Card]:
        if self.state is None:
            return None
        return self.state.top_card

    def get_current_player(self) -> Optional[Player]:
        if self.state is None:
            return None
        return copy.deepcopy(self.state.current_player)

    @property
    def move_history(self) -> Tuple[GameMove, ...]:
        return tuple(self._history)

    # ------------------------------------------------------------------
    # AI and persistence
    # ------------------------------------------------------------------

    def get_ai_move(self, player_id: str) -> Optional[GameMove]:
        """
        Let the heuristic AI take one action for player_id.

        Returns None, without changing anything, when it is not that
        player's turn or no game is running.
        """
        from .bots.heuristic import HeuristicBot
        return HeuristicBot(player_id, rng=self.rng).play_turn(self)

    def export_game_state(self) -> bytes:
        from .serialization import export_state
        return export_state(self._assert_game(), self._history, self.rules)

    def import_game_state(self, blob: bytes) -> None:
        """
        Replace the current game with a previously exported one.

        Raises:
            InvalidGameStateError: on malformed data; the current game is kept
        """
        from .serialization import import_state
        state, history, rules = import_state(blob)
        with self._operation():
            self.state = state
            self._history = history
            self.rules = rules
            self._emit(GameEventType.STATE_IMPORTED, moves=len(history))
