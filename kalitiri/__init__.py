"""KaliTiri game engine shared by the host server and tooling."""

from .cards import RANKS, SUITS, Card, build_deck, parse_card, reduce_deck_to_divisible, shuffle_deck
from .game import Room
from .models import Command, CommandType, Event, PlayerSeat, RoomConfig, TrickPlay
from .registry import RoomRegistry
from .rules import InvalidMove, trick_points, trick_winner, validate_play

__all__ = [
    "Card",
    "RANKS",
    "SUITS",
    "build_deck",
    "parse_card",
    "reduce_deck_to_divisible",
    "shuffle_deck",
    "Room",
    "Command",
    "CommandType",
    "Event",
    "PlayerSeat",
    "RoomConfig",
    "TrickPlay",
    "RoomRegistry",
    "InvalidMove",
    "trick_points",
    "trick_winner",
    "validate_play",
]
