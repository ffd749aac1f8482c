from __future__ import annotations

from typing import List, Optional, Sequence

from .cards import Card
from .models import TrickPlay

NOT_YOUR_TURN = "not your turn"
NO_HAND = "no hand"
CARD_NOT_IN_HAND = "card not in hand"
BAD_CARD = "bad card"


class InvalidMove(ValueError):
    """Raised when a seated player submits a play the rules do not allow."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def led_suit(trick: Sequence[TrickPlay]) -> Optional[str]:
    return trick[0].card.suit if trick else None


def check_seat(player_id: str, *, turn_id: Optional[str], hand: Optional[List[Card]]) -> None:
    """Turn and hand checks, which come before anything about the card itself."""
    if player_id != turn_id:
        raise InvalidMove(NOT_YOUR_TURN)
    if hand is None:
        raise InvalidMove(NO_HAND)


def validate_play(
    player_id: str,
    card: Card,
    *,
    turn_id: Optional[str],
    hand: Optional[List[Card]],
    trick: Sequence[TrickPlay],
    led: Optional[str] = None,
) -> None:
    """Raise InvalidMove with the first failing check; return None when legal.

    ``led`` overrides the suit of the first card in ``trick``. Rooms pass it
    so the lead survives the leading player leaving mid-trick.
    """
    check_seat(player_id, turn_id=turn_id, hand=hand)
    assert hand is not None
    if card not in hand:
        raise InvalidMove(CARD_NOT_IN_HAND)
    suit = led or led_suit(trick)
    if suit is not None and card.suit != suit and any(held.suit == suit for held in hand):
        raise InvalidMove(f"must follow suit {suit}")


def legal_cards(hand: Sequence[Card], trick: Sequence[TrickPlay], led: Optional[str] = None) -> List[Card]:
    suit = led or led_suit(trick)
    if suit is None:
        return list(hand)
    following = [card for card in hand if card.suit == suit]
    return following or list(hand)


def trick_winner(trick: Sequence[TrickPlay], powerhouse: Optional[str], led: Optional[str] = None) -> TrickPlay:
    """Highest trump wins if any trump was played, else highest card of the led suit."""
    if not trick:
        raise RuntimeError("Cannot determine winner on empty trick")
    candidates: List[TrickPlay] = []
    if powerhouse:
        candidates = [play for play in trick if play.card.suit == powerhouse]
    if not candidates and led:
        candidates = [play for play in trick if play.card.suit == led]
    if not candidates:
        # Nobody left in the trick followed the lead; the earliest remaining card leads.
        suit = trick[0].card.suit
        candidates = [play for play in trick if play.card.suit == suit]
    return max(candidates, key=lambda play: play.card.value)


def trick_points(trick: Sequence[TrickPlay]) -> int:
    return sum(play.card.points for play in trick)
