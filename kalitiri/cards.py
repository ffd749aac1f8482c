from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

SUITS = ("spades", "hearts", "diamonds", "clubs")
RANKS = ("A", "K", "Q", "J", "10", "9", "8", "7", "6", "5", "4", "3", "2")

# Higher value wins a trick.
RANK_VALUE: Dict[str, int] = {rank: len(RANKS) - idx for idx, rank in enumerate(RANKS)}

HONOURS = frozenset({"A", "K", "Q", "J", "10"})

# 2s go first, 5s last since they carry points.
REMOVAL_ORDER = ("2", "3", "4", "6", "7", "8", "9", "10", "J", "Q", "K", "A", "5")


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def points(self) -> int:
        if self.rank == "3" and self.suit == "spades":
            return 30
        if self.rank in HONOURS:
            return 10
        if self.rank == "5":
            return 5
        return 0

    @property
    def value(self) -> int:
        return RANK_VALUE[self.rank]


def build_deck() -> List[Card]:
    """Return the full 52-card deck, suit by suit, ace first."""
    return [Card(rank, suit) for suit in SUITS for rank in RANKS]


def reduce_deck_to_divisible(deck: Sequence[Card], seat_count: int) -> List[Card]:
    """Drop low-impact cards until the deck splits evenly across ``seat_count`` seats.

    Ranks are removed in ``REMOVAL_ORDER``; within a rank the scan runs from the
    back of the deck to the front, so the result is deterministic for a given
    deck order.
    """
    if seat_count < 1:
        raise ValueError("seat_count must be positive")
    working = list(deck)
    if len(working) % seat_count == 0:
        return working
    for rank in REMOVAL_ORDER:
        for idx in range(len(working) - 1, -1, -1):
            if len(working) % seat_count == 0:
                return working
            if working[idx].rank == rank:
                del working[idx]
    return working


def shuffle_deck(deck: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    (rng or random.Random()).shuffle(deck)
    return deck


def deal_hands(deck: Sequence[Card], seat_count: int) -> List[List[Card]]:
    if seat_count < 1 or len(deck) % seat_count != 0:
        raise RuntimeError(f"Cannot deal {len(deck)} cards to {seat_count} seats")
    per_player = len(deck) // seat_count
    return [list(deck[idx * per_player:(idx + 1) * per_player]) for idx in range(seat_count)]


def card_payload(card: Card) -> Dict[str, object]:
    return {"rank": card.rank, "suit": card.suit, "points": card.points}


def cards_payload(cards: Sequence[Card]) -> List[Dict[str, object]]:
    return [card_payload(card) for card in cards]


def parse_card(payload: Mapping[str, object]) -> Card:
    if not isinstance(payload, Mapping):
        raise ValueError("Card payload must be an object")
    rank = payload.get("rank")
    suit = payload.get("suit")
    if not isinstance(rank, str) or not isinstance(suit, str):
        raise ValueError("Card requires rank and suit")
    return Card(rank.strip().upper(), suit.strip().lower())
