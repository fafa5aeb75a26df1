"""
Card shuffling and dealing utilities.
"""

import random
from typing import List, Optional

from .constants import JOKER_CARDS, JOKER_RANK, JOKER_SUIT, RANKS, SUITS, card_id_for
from .errors import NO_STARTING_CARD, GameError
from .models import Card, GameState, Player
from .rules import RuleConfig, default_rules


def create_deck(rules: Optional[RuleConfig] = None) -> List[Card]:
    """Create the 54-card Kadi deck: 4 suits x 13 ranks plus two jokers."""
    rules = rules or default_rules
    deck = []

    for suit in SUITS:
        for rank in RANKS:
            deck.append(Card(
                id=card_id_for(suit, rank),
                suit=suit,
                rank=rank,
                type=rules.card_type_for_rank(rank),
            ))

    for joker_id in JOKER_CARDS:
        deck.append(Card(
            id=joker_id,
            suit=JOKER_SUIT,
            rank=JOKER_RANK,
            type=rules.card_type_for_rank(JOKER_RANK),
        ))

    return deck


def shuffle_deck(deck: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    Shuffle a deck with a uniform Fisher-Yates permutation.

    Args:
        deck: Cards to shuffle
        rng: Random source; pass a seeded random.Random for deterministic tests

    Returns:
        Shuffled copy of the deck
    """
    deck_copy = deck.copy()
    (rng or random.Random()).shuffle(deck_copy)
    return deck_copy


def deal_cards(draw_pile: List[Card], players: List[Player], hand_size: int) -> None:
    """
    Deal hand_size cards to every player round-robin from the top of the draw pile.

    The draw pile is consumed in place.
    """
    for _ in range(hand_size):
        for player in players:
            if not draw_pile:
                return
            player.hand.append(draw_pile.pop())


def find_starting_card(draw_pile: List[Card]) -> Card:
    """
    Pop cards until an Answer card turns up.

    Non-Answer cards are put back into the middle of the pile so they are
    not drawn again straight away.

    Raises:
        GameError: if the pile runs out before an Answer card is found
    """
    attempts = len(draw_pile)
    for _ in range(attempts):
        if not draw_pile:
            break
        card = draw_pile.pop()
        if card.is_answer:
            return card
        draw_pile.insert(len(draw_pile) // 2, card)
    raise GameError(NO_STARTING_CARD, "No valid starting card found")


def reshuffle_discard_into_draw(state: GameState, rng: Optional[random.Random] = None) -> int:
    """
    Recycle the discard pile into the draw pile, keeping its top card in play.

    Args:
        state: Game state to mutate
        rng: Random source for the shuffle

    Returns:
        Number of cards moved into the draw pile (0 when there was nothing to recycle)
    """
    if len(state.discard_pile) <= 1:
        return 0
    top = state.discard_pile.pop()
    recycled = shuffle_deck(state.discard_pile, rng)
    state.draw_pile = recycled + state.draw_pile
    state.discard_pile = [top]
    return len(recycled)
