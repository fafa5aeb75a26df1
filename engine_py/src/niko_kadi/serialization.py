"""
State serialization and sanitization utilities.
"""

import dataclasses
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import CLOCKWISE, COUNTERCLOCKWISE, DECK_SIZE, SUITS
from .errors import InvalidGameStateError
from .models import AIConfig, AwaitingAnswer, Card, GameMove, GameState, Player
from .rules import RuleConfig
from .shuffle import create_deck

FORMAT_VERSION = 1


class CardModel(BaseModel):
    id: str
    suit: str
    rank: str
    type: str


class AIConfigModel(BaseModel):
    difficulty: str = 'medium'
    play_style: str = 'balanced'
    aggression: float = Field(default=0.5, ge=0.0, le=1.0)
    card_counting_skill: float = Field(default=0.5, ge=0.0, le=1.0)
    bluffing_tendency: float = Field(default=0.0, ge=0.0, le=1.0)


class PlayerModel(BaseModel):
    id: str
    name: str
    hand: List[CardModel] = Field(default_factory=list)
    is_ai: bool = False
    rating: int = 1000
    coins: int = 0
    ai_config: Optional[AIConfigModel] = None


class AwaitingAnswerModel(BaseModel):
    player_id: str
    suit: str


class GameStateModel(BaseModel):
    players: List[PlayerModel]
    draw_pile: List[CardModel]
    discard_pile: List[CardModel]
    current_player_index: int = Field(ge=0)
    direction: int = CLOCKWISE
    active_penalty_stack: int = Field(default=0, ge=0)
    active_penalty_rank: Optional[str] = None
    required_suit: Optional[str] = None
    pending_skip_count: int = Field(default=0, ge=0)
    must_draw_next_turn: Optional[str] = None
    awaiting_answer: Optional[AwaitingAnswerModel] = None
    niko_declared_by: Optional[str] = None
    niko_declared_round: Optional[int] = None
    turn_number: int = Field(default=1, ge=1)
    status: Literal['waiting', 'active', 'finished']
    winner: Optional[str] = None

    @field_validator('direction')
    @classmethod
    def validate_direction(cls, v):
        if v not in (CLOCKWISE, COUNTERCLOCKWISE):
            raise ValueError(f'direction must be {CLOCKWISE} or {COUNTERCLOCKWISE}, got {v}')
        return v


class GameMoveModel(BaseModel):
    player_id: str
    action: Literal['play', 'draw', 'declare', 'pass']
    cards_played: List[CardModel] = Field(default_factory=list)
    timestamp: datetime
    declared_suit: Optional[str] = None
    cards_drawn: List[CardModel] = Field(default_factory=list)


class SavedGame(BaseModel):
    """Versioned envelope for an exported game."""
    format_version: int = FORMAT_VERSION
    state: GameStateModel
    history: List[GameMoveModel] = Field(default_factory=list)
    rules: RuleConfig = Field(default_factory=RuleConfig)


def export_state(state: GameState, history: List[GameMove], rules: RuleConfig) -> bytes:
    """Serialize a game to UTF-8 JSON."""
    saved = SavedGame(
        state=GameStateModel.model_validate(dataclasses.asdict(state)),
        history=[GameMoveModel.model_validate(dataclasses.asdict(move)) for move in history],
        rules=rules,
    )
    return saved.model_dump_json().encode('utf-8')


def _card(model: CardModel) -> Card:
    return Card(id=model.id, suit=model.suit, rank=model.rank, type=model.type)


def _player(model: PlayerModel) -> Player:
    try:
        ai_config = AIConfig(**model.ai_config.model_dump()) if model.ai_config else None
    except ValueError as e:
        raise InvalidGameStateError(f"Invalid AI config for {model.id}: {e}") from e
    return Player(
        id=model.id,
        name=model.name,
        hand=[_card(c) for c in model.hand],
        is_ai=model.is_ai,
        rating=model.rating,
        coins=model.coins,
        ai_config=ai_config,
    )


def _build_state(model: GameStateModel) -> GameState:
    awaiting = model.awaiting_answer
    return GameState(
        players=[_player(p) for p in model.players],
        draw_pile=[_card(c) for c in model.draw_pile],
        discard_pile=[_card(c) for c in model.discard_pile],
        current_player_index=model.current_player_index,
        direction=model.direction,
        active_penalty_stack=model.active_penalty_stack,
        active_penalty_rank=model.active_penalty_rank,
        required_suit=model.required_suit,
        pending_skip_count=model.pending_skip_count,
        must_draw_next_turn=model.must_draw_next_turn,
        awaiting_answer=AwaitingAnswer(awaiting.player_id, awaiting.suit) if awaiting else None,
        niko_declared_by=model.niko_declared_by,
        niko_declared_round=model.niko_declared_round,
        turn_number=model.turn_number,
        status=model.status,
        winner=model.winner,
    )


def _build_move(model: GameMoveModel) -> GameMove:
    return GameMove(
        player_id=model.player_id,
        action=model.action,
        cards_played=tuple(_card(c) for c in model.cards_played),
        timestamp=model.timestamp,
        declared_suit=model.declared_suit,
        cards_drawn=tuple(_card(c) for c in model.cards_drawn),
    )


def check_state_invariants(state: GameState, rules: RuleConfig) -> None:
    """
    Structural checks for an imported state.

    Raises:
        InvalidGameStateError: describing the first violation found
    """
    if not state.players:
        raise InvalidGameStateError("No players")

    player_ids = [p.id for p in state.players]
    if len(set(player_ids)) != len(player_ids):
        raise InvalidGameStateError("Duplicate player ids")

    if state.current_player_index >= len(state.players):
        raise InvalidGameStateError(
            f"current_player_index {state.current_player_index} out of range for {len(state.players)} players"
        )

    cards = state.draw_pile + state.discard_pile + [c for p in state.players for c in p.hand]
    card_ids = [c.id for c in cards]
    if len(card_ids) != DECK_SIZE:
        raise InvalidGameStateError(f"Expected {DECK_SIZE} cards, found {len(card_ids)}")
    if len(set(card_ids)) != DECK_SIZE:
        raise InvalidGameStateError("Duplicate card ids")

    deck = {c.id: c for c in create_deck(rules)}
    for card in cards:
        if deck.get(card.id) != card:
            raise InvalidGameStateError(f"Unknown or altered card: {card.id}")

    if state.required_suit is not None and state.required_suit not in SUITS:
        raise InvalidGameStateError(f"Unknown required suit: {state.required_suit}")
    if state.awaiting_answer is not None and state.awaiting_answer.suit not in SUITS:
        raise InvalidGameStateError(f"Unknown awaited suit: {state.awaiting_answer.suit}")

    if state.active_penalty_rank is not None and state.active_penalty_rank not in rules.penalty_values:
        raise InvalidGameStateError(f"Not a penalty rank: {state.active_penalty_rank}")
    if state.active_penalty_stack > 0 and state.active_penalty_rank is None:
        raise InvalidGameStateError("Penalty stack without a penalty rank")

    if (state.niko_declared_by is None) != (state.niko_declared_round is None):
        raise InvalidGameStateError("Niko Kadi declarer and round must be set together")

    referenced = [
        state.must_draw_next_turn,
        state.niko_declared_by,
        state.winner,
        state.awaiting_answer.player_id if state.awaiting_answer else None,
    ]
    for player_id in referenced:
        if player_id is not None and player_id not in player_ids:
            raise InvalidGameStateError(f"Unknown player referenced: {player_id}")


def import_state(blob: bytes) -> Tuple[GameState, List[GameMove], RuleConfig]:
    """
    Parse and check an exported game.

    Raises:
        InvalidGameStateError: on malformed JSON, schema violations, an
            unsupported format version or broken invariants
    """
    try:
        saved = SavedGame.model_validate_json(blob)
    except ValidationError as e:
        raise InvalidGameStateError(f"Malformed game data: {e.error_count()} error(s)") from e

    if saved.format_version != FORMAT_VERSION:
        raise InvalidGameStateError(f"Unsupported format version: {saved.format_version}")

    state = _build_state(saved.state)
    check_state_invariants(state, saved.rules)
    history = [_build_move(m) for m in saved.history]
    return state, history, saved.rules


def sanitize_state(state: GameState, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Sanitize game state for presentation to one viewer.

    Args:
        state: Game state to sanitize
        viewer_id: ID of the player viewing the state (to show their cards)

    Returns:
        Dictionary safe to show the viewer; other players' hands are
        reduced to counts
    """
    top = state.top_card
    sanitized = {
        "status": state.status,
        "turn_number": state.turn_number,
        "round": state.current_round,
        "current_player": state.current_player.id if state.current_player else None,
        "direction": state.direction,
        "top_card": dataclasses.asdict(top) if top else None,
        "required_suit": state.required_suit,
        "draw_pile_count": len(state.draw_pile),
        "discard_pile_count": len(state.discard_pile),
        "players": [],
        "pending_effects": {},
        "niko_declared_by": state.niko_declared_by,
        "winner": state.winner,
    }

    for player in state.players:
        sanitized_player = {
            "id": player.id,
            "name": player.name,
            "is_ai": player.is_ai,
            "hand_count": player.hand_count,
        }

        # Show full hand only to the viewer
        if player.id == viewer_id:
            sanitized_player["hand"] = [dataclasses.asdict(c) for c in player.hand]

        sanitized["players"].append(sanitized_player)

    if state.active_penalty_stack:
        sanitized["pending_effects"]["penalty"] = {
            "stack": state.active_penalty_stack,
            "rank": state.active_penalty_rank,
        }
    if state.pending_skip_count:
        sanitized["pending_effects"]["skip"] = state.pending_skip_count
    if state.awaiting_answer:
        sanitized["pending_effects"]["awaiting_answer"] = {
            "player_id": state.awaiting_answer.player_id,
            "suit": state.awaiting_answer.suit,
        }
    if state.must_draw_next_turn:
        sanitized["pending_effects"]["must_draw"] = state.must_draw_next_turn

    return sanitized
