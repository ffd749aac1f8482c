from __future__ import annotations

import random
from typing import Dict, List, Mapping, Optional, Set

from .cards import parse_card
from .game import Room
from .models import Command, CommandType, Event, RoomConfig
from .rules import BAD_CARD, InvalidMove, check_seat

# RoomRegistry owns every live room. The host builds exactly one and routes
# each inbound command through handle(); the registry turns rule violations
# into private invalid_move events so callers only ever see event lists.


class RoomRegistry:
    def __init__(self, config: Optional[RoomConfig] = None) -> None:
        self.config = config or RoomConfig()
        self.rooms: Dict[str, Room] = {}
        self.player_rooms: Dict[str, Set[str]] = {}
        self.rng = random.Random(self.config.seed)

    def get(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def rooms_for(self, player_id: str) -> List[str]:
        return sorted(self.player_rooms.get(player_id, ()))

    def members(self, room_id: str) -> List[str]:
        room = self.rooms.get(room_id)
        if room is None:
            return []
        return [seat.player_id for seat in room.seats]

    def handle(self, command: Command) -> List[Event]:
        data = command.data
        if command.type == CommandType.JOIN:
            name = data.get("name")
            return self.join(command.room_id, command.requester, name if isinstance(name, str) else "")
        if command.type == CommandType.LEAVE:
            return self.leave(command.room_id, command.requester)
        if command.type == CommandType.SELECT_POWERHOUSE:
            suit = data.get("suit")
            return self.select_powerhouse(command.room_id, command.requester, suit if isinstance(suit, str) else None)
        if command.type == CommandType.PLAY_CARD:
            return self.play_card(command.room_id, command.requester, data.get("card"))
        return []

    # Room lifecycle --------------------------------------------------

    def join(self, room_id: str, player_id: str, name: str = "") -> List[Event]:
        if not room_id:
            return []
        room = self.rooms.get(room_id)
        if room is None:
            room = Room(room_id, self.config, rng=self.rng)
            self.rooms[room_id] = room
        self.player_rooms.setdefault(player_id, set()).add(room_id)
        return room.add_seat(player_id, name)

    def leave(self, room_id: str, player_id: str) -> List[Event]:
        room = self.rooms.get(room_id)
        if room is None:
            return []
        events = room.remove_seat(player_id)
        joined = self.player_rooms.get(player_id)
        if joined is not None:
            joined.discard(room_id)
            if not joined:
                del self.player_rooms[player_id]
        if room.is_empty():
            del self.rooms[room_id]
        return events

    def disconnect(self, player_id: str) -> Dict[str, List[Event]]:
        return {room_id: self.leave(room_id, player_id) for room_id in self.rooms_for(player_id)}

    # Game actions ----------------------------------------------------

    def select_powerhouse(self, room_id: str, player_id: str, suit: Optional[str]) -> List[Event]:
        room = self.rooms.get(room_id)
        if room is None:
            return []
        return room.select_powerhouse(player_id, suit)

    def play_card(self, room_id: str, player_id: str, card_data: Optional[Mapping[str, object]]) -> List[Event]:
        room = self.rooms.get(room_id)
        if room is None or not room.is_seated(player_id):
            return []
        try:
            check_seat(player_id, turn_id=room.turn_id, hand=room.hands.get(player_id))
        except InvalidMove as exc:
            return [Event("invalid_move", {"reason": exc.reason}, to=player_id)]
        try:
            card = parse_card(card_data)  # type: ignore[arg-type]
        except ValueError:
            return [Event("invalid_move", {"reason": BAD_CARD}, to=player_id)]
        try:
            return room.play_card(player_id, card)
        except InvalidMove as exc:
            return [Event("invalid_move", {"reason": exc.reason}, to=player_id)]
