import random

import pytest

from kalitiri.cards import (
    RANKS,
    SUITS,
    Card,
    build_deck,
    card_payload,
    deal_hands,
    parse_card,
    reduce_deck_to_divisible,
    shuffle_deck,
)


def test_build_deck_has_every_card_once():
    deck = build_deck()
    assert len(deck) == 52
    assert len(set(deck)) == 52
    assert deck[0] == Card("A", "spades")
    assert deck[-1] == Card("2", "clubs")


@pytest.mark.parametrize(
    "card, points",
    [
        (Card("3", "spades"), 30),
        (Card("3", "hearts"), 0),
        (Card("A", "clubs"), 10),
        (Card("K", "hearts"), 10),
        (Card("Q", "diamonds"), 10),
        (Card("J", "spades"), 10),
        (Card("10", "hearts"), 10),
        (Card("5", "diamonds"), 5),
        (Card("9", "clubs"), 0),
        (Card("2", "spades"), 0),
    ],
)
def test_card_points(card, points):
    assert card.points == points


def test_deck_carries_250_points():
    assert sum(card.points for card in build_deck()) == 250


def test_rank_order_is_ace_high():
    values = [Card(rank, "hearts").value for rank in RANKS]
    assert values == sorted(values, reverse=True)
    assert Card("A", "hearts").value > Card("K", "hearts").value > Card("2", "hearts").value


def test_card_rejects_unknown_rank_and_suit():
    with pytest.raises(ValueError, match="Invalid rank"):
        Card("1", "hearts")
    with pytest.raises(ValueError, match="Invalid suit"):
        Card("A", "stars")


@pytest.mark.parametrize("seats", [4, 5, 6, 7, 8])
def test_reduce_deck_divisible_for_supported_tables(seats):
    reduced = reduce_deck_to_divisible(build_deck(), seats)
    assert len(reduced) % seats == 0
    assert len(reduced) <= 52
    # Only 2s are needed to even out a 4-8 player table.
    removed = set(build_deck()) - set(reduced)
    assert all(card.rank == "2" for card in removed)
    assert sum(card.points for card in reduced) == 250


def test_reduce_deck_unchanged_when_already_divisible():
    deck = build_deck()
    assert reduce_deck_to_divisible(deck, 4) == deck


def test_reduce_deck_removes_from_the_back_first():
    reduced = reduce_deck_to_divisible(build_deck(), 5)
    assert len(reduced) == 50
    assert set(build_deck()) - set(reduced) == {Card("2", "clubs"), Card("2", "diamonds")}

    reduced = reduce_deck_to_divisible(build_deck(), 7)
    assert set(build_deck()) - set(reduced) == {Card("2", "clubs"), Card("2", "diamonds"), Card("2", "hearts")}


def test_reduce_deck_moves_on_to_threes_but_keeps_three_of_spades():
    reduced = reduce_deck_to_divisible(build_deck(), 9)
    assert len(reduced) == 45
    assert Card("3", "spades") in reduced
    assert not any(card.rank == "2" for card in reduced)
    assert Card("3", "hearts") not in reduced


def test_reduce_deck_is_deterministic():
    first = reduce_deck_to_divisible(build_deck(), 6)
    second = reduce_deck_to_divisible(build_deck(), 6)
    assert first == second


def test_reduce_deck_rejects_empty_table():
    with pytest.raises(ValueError):
        reduce_deck_to_divisible(build_deck(), 0)


def test_shuffle_is_a_permutation():
    deck = build_deck()
    shuffled = shuffle_deck(list(deck), random.Random(3))
    assert sorted(shuffled, key=lambda c: (c.suit, c.rank)) == sorted(deck, key=lambda c: (c.suit, c.rank))
    assert shuffled != deck


def test_shuffle_with_same_seed_repeats():
    assert shuffle_deck(build_deck(), random.Random(11)) == shuffle_deck(build_deck(), random.Random(11))


def test_deal_hands_splits_evenly():
    deck = reduce_deck_to_divisible(build_deck(), 6)
    hands = deal_hands(deck, 6)
    assert [len(hand) for hand in hands] == [8] * 6
    assert [card for hand in hands for card in hand] == deck


def test_deal_hands_refuses_uneven_split():
    with pytest.raises(RuntimeError, match="Cannot deal"):
        deal_hands(build_deck(), 5)


def test_card_payload_and_parse():
    payload = card_payload(Card("10", "hearts"))
    assert payload == {"rank": "10", "suit": "hearts", "points": 10}
    assert parse_card(payload) == Card("10", "hearts")
    assert parse_card({"rank": "q", "suit": " Spades "}) == Card("Q", "spades")


@pytest.mark.parametrize(
    "payload",
    [
        {"rank": "A"},
        {"suit": "hearts"},
        {"rank": "1", "suit": "hearts"},
        {"rank": 10, "suit": "hearts"},
        "A-hearts",
        None,
    ],
)
def test_parse_card_rejects_bad_payloads(payload):
    with pytest.raises(ValueError):
        parse_card(payload)


def test_suits_and_ranks_cover_the_deck():
    assert len(SUITS) * len(RANKS) == 52
