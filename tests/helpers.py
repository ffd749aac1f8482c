from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from kalitiri.cards import Card
from kalitiri.game import Room
from kalitiri.models import Event, RoomConfig
from kalitiri.rules import legal_cards


def pid(idx: int) -> str:
    return f"p{idx}"


def create_room(players: int = 4, *, seed: int = 7) -> Room:
    """Seat ``players`` players (4-8) and deal the first round once everyone is in."""
    room = Room("R-1", RoomConfig(min_players=players, seed=seed))
    for idx in range(players):
        room.add_seat(pid(idx), f"Player{idx}")
    room.config = RoomConfig(seed=seed)
    assert room.round_active()
    return room


def rig_hands(room: Room, hands: Dict[str, Sequence[Card]], *, turn: Optional[str] = None) -> None:
    """Replace the dealt hands with known cards so trick outcomes are predictable."""
    room.hands = {player_id: list(cards) for player_id, cards in hands.items()}
    room.dealt_size = sum(len(cards) for cards in hands.values())
    room.played_cards = []
    room.current_trick = []
    room.led_suit = None
    if turn is not None:
        room.turn_id = turn


def play_turn(room: Room) -> List[Event]:
    """Play the first legal card for whoever holds the turn."""
    player_id = room.turn_id
    assert player_id is not None
    card = legal_cards(room.hands[player_id], room.current_trick, room.led_suit)[0]
    return room.play_card(player_id, card)


def play_trick(room: Room) -> List[Event]:
    events: List[Event] = []
    for _ in range(len(room.participants())):
        events.extend(play_turn(room))
    return events


def play_round(room: Room) -> List[Event]:
    events: List[Event] = []
    current = room.round_number
    while room.round_number == current and room.round_active():
        events.extend(play_turn(room))
    return events


def events_named(events: Sequence[Event], name: str) -> List[Event]:
    return [event for event in events if event.ev == name]
