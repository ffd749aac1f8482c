from __future__ import annotations

import random
from typing import Dict, List, Optional

from .cards import SUITS, Card, build_deck, card_payload, cards_payload, deal_hands, reduce_deck_to_divisible, shuffle_deck
from .models import Event, PlayerSeat, RoomConfig, TrickPlay
from .rules import trick_points, trick_winner, validate_play

# Room keeps all game state for one table in memory. No networking lives
# here, only seating, dealing, turn order and scoring. Every mutating call
# returns the events the transport should deliver.

NO_TRUMP = ("", "none", "null")


class Room:
    """One KaliTiri table: seats, hands, the trick in progress and the scoreboard."""

    def __init__(self, room_id: str, config: Optional[RoomConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.room_id = room_id
        self.config = config or RoomConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.seats: List[PlayerSeat] = []
        self.hands: Dict[str, List[Card]] = {}
        self.scores: Dict[str, int] = {}
        self.current_trick: List[TrickPlay] = []
        self.led_suit: Optional[str] = None
        self.played_cards: List[Card] = []
        self.powerhouse: Optional[str] = None
        # Turn and leader are tracked by player id and resolved to an index on use,
        # so removing a seat never leaves them pointing at the wrong player.
        self.turn_id: Optional[str] = None
        self.leader_id: Optional[str] = None
        self.round_number = 0
        self.dealt_size = 0
        self.last_trick: Optional[Dict[str, object]] = None

    # Seat management -------------------------------------------------

    def seat_index(self, player_id: Optional[str]) -> Optional[int]:
        for idx, seat in enumerate(self.seats):
            if seat.player_id == player_id:
                return idx
        return None

    def is_seated(self, player_id: str) -> bool:
        return self.seat_index(player_id) is not None

    def is_empty(self) -> bool:
        return not self.seats

    @property
    def turn_index(self) -> Optional[int]:
        return self.seat_index(self.turn_id)

    @property
    def leader_index(self) -> Optional[int]:
        return self.seat_index(self.leader_id)

    def round_active(self) -> bool:
        return bool(self.hands)

    def participants(self) -> List[PlayerSeat]:
        """Seats dealt into the current round, in seat order."""
        return [seat for seat in self.seats if seat.player_id in self.hands]

    def add_seat(self, player_id: str, name: str = "") -> List[Event]:
        if not self.is_seated(player_id):
            display = name.strip() if isinstance(name, str) else ""
            self.seats.append(PlayerSeat(player_id=player_id, name=display or player_id))
            self.scores[player_id] = 0
            if self.turn_id is None:
                self.turn_id = player_id
            if self.leader_id is None:
                self.leader_id = player_id

        events = [self.room_update_event()]
        if self.round_active():
            hand = self.hands.get(player_id)
            if hand is not None:
                events.append(self._deal_event(player_id))
            events.append(Event("game_state", self.snapshot(), to=player_id))
        elif len(self.seats) >= self.config.min_players:
            events.extend(self.start_round())
        return events

    def remove_seat(self, player_id: str) -> List[Event]:
        idx = self.seat_index(player_id)
        if idx is None:
            return []
        del self.seats[idx]
        self.hands.pop(player_id, None)
        self.scores.pop(player_id, None)
        self.current_trick = [play for play in self.current_trick if play.player_id != player_id]
        if not self.current_trick:
            self.led_suit = None

        if not self.seats:
            self.turn_id = None
            self.leader_id = None
            self._clear_round()
            return []

        if self.leader_id == player_id:
            self.leader_id = self.seats[idx % len(self.seats)].player_id
        if self.turn_id == player_id:
            self.turn_id = self._first_participant_from(idx % len(self.seats))

        events = [self.room_update_event()]
        if self.round_active():
            if len(self.seats) < self.config.min_players:
                self._clear_round()
                events.append(self._info(f"Need at least {self.config.min_players} players to start"))
                events.append(Event("game_state", self.snapshot()))
            elif not self.participants():
                self._clear_round()
                events.extend(self.start_round())
            elif len(self.current_trick) == len(self.participants()):
                events.extend(self._complete_trick())
            else:
                events.append(Event("game_state", self.snapshot()))
        elif self.can_start_round():
            events.extend(self.start_round())
        return events

    # Round lifecycle -------------------------------------------------

    def can_start_round(self) -> bool:
        return self.config.min_players <= len(self.seats) <= self.config.max_players

    def start_round(self) -> List[Event]:
        count = len(self.seats)
        if count < self.config.min_players:
            return [self._info(f"Need at least {self.config.min_players} players to start")]
        if count > self.config.max_players:
            return [self._info(f"Max {self.config.max_players} players allowed")]

        deck = reduce_deck_to_divisible(build_deck(), count)
        shuffle_deck(deck, self.rng)
        dealt = deal_hands(deck, count)
        self.hands = {seat.player_id: hand for seat, hand in zip(self.seats, dealt)}
        self.dealt_size = len(deck)
        self.played_cards = []
        self.current_trick = []
        self.led_suit = None
        self.powerhouse = None
        self.last_trick = None
        if self.leader_index is None:
            self.leader_id = self.seats[0].player_id
        self.turn_id = self.leader_id
        self.round_number += 1

        events = [
            Event(
                "round_started",
                {
                    "hand_counts": self.hand_counts(),
                    "leader_id": self.leader_id,
                    "round": self.round_number,
                },
            )
        ]
        events.extend(self._deal_event(seat.player_id) for seat in self.seats)
        events.append(Event("game_state", self.snapshot()))
        return events

    def select_powerhouse(self, player_id: str, suit: Optional[str]) -> List[Event]:
        if self.leader_id is None or player_id != self.leader_id:
            return []
        if suit is None:
            choice = None
        elif isinstance(suit, str) and suit.strip().lower() in NO_TRUMP:
            choice = None
        elif isinstance(suit, str) and suit.strip().lower() in SUITS:
            choice = suit.strip().lower()
        else:
            return []
        self.powerhouse = choice
        return [Event("powerhouse_set", {"powerhouse": self.powerhouse})]

    # Play handling ---------------------------------------------------

    def play_card(self, player_id: str, card: Card) -> List[Event]:
        """Apply one play; raises InvalidMove without touching state when illegal."""
        if not self.is_seated(player_id):
            return []
        hand = self.hands.get(player_id)
        validate_play(
            player_id,
            card,
            turn_id=self.turn_id,
            hand=hand,
            trick=self.current_trick,
            led=self.led_suit,
        )
        assert hand is not None

        if not self.current_trick:
            self.led_suit = card.suit
        hand.remove(card)
        self.current_trick.append(TrickPlay(player_id=player_id, card=card))
        self.played_cards.append(card)
        events = [
            Event(
                "card_played",
                {
                    "player_id": player_id,
                    "card": card_payload(card),
                    "trick_count": len(self.current_trick),
                },
            )
        ]
        self._advance_turn()

        if len(self.current_trick) >= len(self.participants()):
            events.extend(self._complete_trick())
        else:
            events.append(Event("game_state", self.snapshot()))
        return events

    def _advance_turn(self) -> None:
        idx = self.turn_index
        if idx is None:
            return
        self.turn_id = self._first_participant_from((idx + 1) % len(self.seats))

    def _first_participant_from(self, start: int) -> str:
        count = len(self.seats)
        for step in range(count):
            seat = self.seats[(start + step) % count]
            if not self.hands or seat.player_id in self.hands:
                return seat.player_id
        return self.seats[start % count].player_id

    def _complete_trick(self) -> List[Event]:
        trick = list(self.current_trick)
        winner = trick_winner(trick, self.powerhouse, self.led_suit)
        points = trick_points(trick)
        self.scores[winner.player_id] += points

        trick_payload = [play.payload() for play in trick]
        self.last_trick = {"winner_id": winner.player_id, "trick": trick_payload, "trick_points": points}
        self.current_trick = []
        self.led_suit = None
        self.turn_id = winner.player_id

        events = [
            Event(
                "trick_complete",
                {
                    "winner_id": winner.player_id,
                    "trick": trick_payload,
                    "trick_points": points,
                    "scores": dict(self.scores),
                },
            )
        ]

        if any(self.hands.values()):
            events.append(Event("game_state", self.snapshot()))
            return events

        events.append(Event("round_over", {"scores": dict(self.scores)}))
        idx = self.leader_index
        if idx is None:
            idx = -1
        self.leader_id = self.seats[(idx + 1) % len(self.seats)].player_id
        self._clear_round()
        events.extend(self.start_round())
        return events

    def _clear_round(self) -> None:
        self.hands = {}
        self.current_trick = []
        self.led_suit = None
        self.played_cards = []
        self.powerhouse = None

    # Public/Snapshot helpers -----------------------------------------

    def hand_counts(self) -> Dict[str, int]:
        return {seat.player_id: len(self.hands.get(seat.player_id, [])) for seat in self.seats}

    def room_update_event(self) -> Event:
        return Event(
            "room_update",
            {
                "players": [seat.payload() for seat in self.seats],
                "scores": dict(self.scores),
            },
        )

    def snapshot(self) -> Dict[str, object]:
        return {
            "room_id": self.room_id,
            "players": [seat.payload() for seat in self.seats],
            "scores": dict(self.scores),
            "hand_counts": self.hand_counts(),
            "turn_index": self.turn_index,
            "turn_id": self.turn_id,
            "leader_index": self.leader_index,
            "powerhouse": self.powerhouse,
            "current_trick": [play.payload() for play in self.current_trick],
            "led_suit": self.led_suit,
            "last_trick": self.last_trick,
            "round": self.round_number,
        }

    def _deal_event(self, player_id: str) -> Event:
        return Event(
            "deal_hand",
            {
                "hand": cards_payload(self.hands.get(player_id, [])),
                "your_id": player_id,
                "powerhouse": self.powerhouse,
            },
            to=player_id,
        )

    def _info(self, msg: str) -> Event:
        return Event("info", {"msg": msg})
