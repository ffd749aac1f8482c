import random

import pytest

from kalitiri.cards import SUITS
from kalitiri.rules import legal_cards

from .helpers import create_room


@pytest.mark.parametrize("players", [4, 5, 6, 7, 8])
def test_random_rounds_keep_invariants(players):
    room = create_room(players, seed=1_000 + players)
    rng = random.Random(players)
    rounds_to_play = 6
    previous_scores = dict(room.scores)

    while room.round_number <= rounds_to_play:
        if not room.played_cards and room.leader_id is not None:
            room.select_powerhouse(room.leader_id, rng.choice(SUITS + ("none",)))

        player_id = room.turn_id
        card = rng.choice(legal_cards(room.hands[player_id], room.current_trick, room.led_suit))
        round_before = room.round_number
        events = room.play_card(player_id, card)

        assert len(room.current_trick) < len(room.participants())
        assert 0 <= room.turn_index < len(room.seats)
        for seat in room.seats:
            assert room.scores[seat.player_id] >= previous_scores[seat.player_id]
        previous_scores = dict(room.scores)
        held = sum(len(hand) for hand in room.hands.values())
        assert held + len(room.played_cards) == room.dealt_size

        completed = [event for event in events if event.ev == "trick_complete"]
        if completed and room.round_number == round_before:
            assert room.turn_id == completed[0].data["winner_id"]
        if room.round_number != round_before:
            assert sum(room.scores.values()) == 250 * round_before
            assert room.leader_index == round_before % players
            assert room.turn_id == room.leader_id

    assert sum(room.scores.values()) == 250 * rounds_to_play
