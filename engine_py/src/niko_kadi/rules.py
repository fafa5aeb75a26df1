"""
Game rule configuration and validation.
"""

from typing import Dict, List

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import (
    JOKER_RANK, RANKS, TYPE_ANSWER, TYPE_JUMP, TYPE_KICKBACK, TYPE_PENALTY,
    TYPE_QUESTION, TYPE_WILD,
)

KNOWN_RANKS = RANKS + [JOKER_RANK]


class RuleConfig(BaseModel):
    """Configuration for game rules and settings."""

    penalty_values: Dict[str, int] = Field(
        default_factory=lambda: {'2': 2, '3': 3, 'JOKER': 5},
        description="Cards drawn per penalty card, keyed by rank"
    )
    jump_ranks: List[str] = Field(
        default_factory=lambda: ['J'],
        description="Ranks that skip the next player"
    )
    kickback_ranks: List[str] = Field(
        default_factory=lambda: ['K'],
        description="Ranks that reverse the direction of play"
    )
    wild_ranks: List[str] = Field(
        default_factory=lambda: ['A'],
        description="Ranks that may always be played and declare a suit"
    )
    question_ranks: List[str] = Field(
        default_factory=lambda: ['8', 'Q'],
        description="Ranks that oblige the same player to follow with an answer"
    )
    min_players: int = Field(
        default=2,
        ge=2,
        le=6,
        description="Minimum number of players required to start"
    )
    max_players: int = Field(
        default=6,
        ge=2,
        le=6,
        description="Maximum number of players allowed"
    )
    small_table_max_players: int = Field(
        default=3,
        ge=2,
        le=6,
        description="Largest table that still gets the small-table hand size"
    )
    small_table_hand_size: int = Field(
        default=4,
        ge=1,
        le=8,
        description="Cards dealt to each player at a small table"
    )
    large_table_hand_size: int = Field(
        default=3,
        ge=1,
        le=8,
        description="Cards dealt to each player at a larger table"
    )
    jokers_match_any: bool = Field(
        default=False,
        description="Let a Joker start a penalty on any card and any card follow a Joker. When off, a Joker matches only another Joker"
    )
    auto_draw_for_ai: bool = Field(
        default=True,
        description="Execute an AI player's forced No-Ace-Out draw as soon as their turn starts"
    )

    @field_validator('max_players')
    @classmethod
    def validate_max_players(cls, v, info):
        """Validate maximum players doesn't go below minimum."""
        min_players = info.data.get('min_players', 2)
        if v < min_players:
            raise ValueError(f'max_players ({v}) must be >= min_players ({min_players})')
        return v

    @field_validator('penalty_values')
    @classmethod
    def validate_penalty_values(cls, v):
        for rank, amount in v.items():
            if rank not in KNOWN_RANKS:
                raise ValueError(f'Unknown penalty rank: {rank}')
            if amount < 1:
                raise ValueError(f'Penalty for {rank} must be positive')
        return v

    @model_validator(mode='after')
    def validate_rank_roles(self):
        """Every rank may carry at most one special role."""
        groups = [
            list(self.penalty_values), self.jump_ranks, self.kickback_ranks,
            self.wild_ranks, self.question_ranks,
        ]
        seen = set()
        for group in groups:
            for rank in group:
                if rank not in KNOWN_RANKS:
                    raise ValueError(f'Unknown rank: {rank}')
                if rank in seen:
                    raise ValueError(f'Rank {rank} is assigned more than one role')
                seen.add(rank)
        if JOKER_RANK not in self.penalty_values:
            raise ValueError('Jokers must be penalty cards')
        return self

    def validate_player_count(self, player_count: int) -> bool:
        """Check if a player count is valid for this configuration."""
        return self.min_players <= player_count <= self.max_players

    def hand_size_for(self, player_count: int) -> int:
        """Cards dealt to each player for a table of the given size."""
        if player_count <= self.small_table_max_players:
            return self.small_table_hand_size
        return self.large_table_hand_size

    def card_type_for_rank(self, rank: str) -> str:
        if rank in self.penalty_values:
            return TYPE_PENALTY
        if rank in self.wild_ranks:
            return TYPE_WILD
        if rank in self.jump_ranks:
            return TYPE_JUMP
        if rank in self.kickback_ranks:
            return TYPE_KICKBACK
        if rank in self.question_ranks:
            return TYPE_QUESTION
        return TYPE_ANSWER

    def penalty_for_rank(self, rank: str) -> int:
        return self.penalty_values.get(rank, 0)


# Default configuration instance
default_rules = RuleConfig()


def create_rules(**overrides) -> RuleConfig:
    """Create a RuleConfig with optional overrides."""
    config_dict = default_rules.model_dump()
    config_dict.update(overrides)
    return RuleConfig(**config_dict)
