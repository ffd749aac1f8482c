from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from .cards import Card, card_payload


class CommandType(str, Enum):
    JOIN = "join_room"
    LEAVE = "leave_room"
    SELECT_POWERHOUSE = "select_powerhouse"
    PLAY_CARD = "play_card"


@dataclass
class RoomConfig:
    min_players: int = 4
    max_players: int = 8
    seed: Optional[int] = None


@dataclass
class PlayerSeat:
    player_id: str
    name: str

    def payload(self) -> Dict[str, object]:
        return {"id": self.player_id, "name": self.name}


@dataclass(frozen=True)
class TrickPlay:
    player_id: str
    card: Card

    def payload(self) -> Dict[str, object]:
        return {"player_id": self.player_id, "card": card_payload(self.card)}


@dataclass
class Command:
    type: CommandType
    room_id: str
    requester: str
    data: Dict[str, object] = field(default_factory=dict)


@dataclass
class Event:
    # ``to`` names a single recipient; None means everyone seated in the room.
    ev: str
    data: Dict[str, object] = field(default_factory=dict)
    to: Optional[str] = None

    @property
    def private(self) -> bool:
        return self.to is not None
