#!/usr/bin/env python3
"""
Starter bot template for KaliTiri rooms.

Usage:
    pip install websockets
    python sample_bot.py --name NAME --room ROOM_ID --url ws://127.0.0.1:3000/

This script shows the core loop:
  * join a room
  * keep the private hand in sync with `deal_hand` and `card_played`
  * pick a trump suit when this seat leads the round
  * play a card whenever `game_state` says it is our turn

The `TurnContext` passed to `choose_card` includes:
  * Your hand (ctx.hand)
  * The cards already played in this trick (ctx.trick)
  * The current trump suit (ctx.powerhouse)
  * The suit this trick was led in (ctx.led_suit)
  * The scoreboard (ctx.scores)

Replace `choose_card` and `choose_powerhouse` with your own strategy.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import websockets

LOGGER = logging.getLogger("sample_bot")
STREAM_HANDLER = logging.StreamHandler()
STREAM_HANDLER.setFormatter(logging.Formatter("%(message)s"))
if not LOGGER.handlers:
    LOGGER.addHandler(STREAM_HANDLER)
LOGGER.propagate = False

USE_UNICODE_CARDS = True
SUIT_SYMBOLS = {"spades": "♠", "hearts": "♥", "diamonds": "♦", "clubs": "♣"}
RANK_VALUE = {"A": 13, "K": 12, "Q": 11, "J": 10, "10": 9, "9": 8, "8": 7, "7": 6, "6": 5, "5": 4, "4": 3, "3": 2, "2": 1}


@dataclass
class TurnContext:
    player_id: str
    hand: list[dict[str, Any]]  # e.g. [{"rank": "A", "suit": "hearts", "points": 10}, ...]
    trick: list[dict[str, Any]]  # [{"player_id": ..., "card": {...}}, ...] in play order
    powerhouse: Optional[str]  # trump suit, or None
    led_suit: Optional[str]  # suit the trick was led in, or None before the lead
    scores: dict[str, int]


def legal_cards(ctx: TurnContext) -> list[dict[str, Any]]:
    """Cards the host will accept: the led suit when we hold it, else anything."""

    led = ctx.led_suit or (ctx.trick[0]["card"]["suit"] if ctx.trick else None)
    if led is None:
        return list(ctx.hand)
    following = [card for card in ctx.hand if card["suit"] == led]
    return following or list(ctx.hand)


def choose_card(ctx: TurnContext) -> dict[str, Any]:
    """
    Very simple strategy used as a starting point.

    Follow suit with the lowest card, otherwise dump the lowest card that
    carries no points. Replace this function with your custom strategy!
    """

    options = legal_cards(ctx)
    return min(options, key=lambda card: (card.get("points", 0), RANK_VALUE.get(card["rank"], 0)))


def choose_powerhouse(hand: list[dict[str, Any]]) -> Optional[str]:
    """Call trump in the suit we hold most of."""

    if not hand:
        return None
    counts = Counter(card["suit"] for card in hand)
    return counts.most_common(1)[0][0]


async def play_room(websocket: websockets.ClientConnection, room_id: str) -> None:
    """Listen for host messages and play whenever the snapshot points at us."""

    state: Dict[str, Any] = {
        "player_id": None,
        "hand": [],
        "powerhouse": None,
        "names": {},
        "leader_id": None,
        "last_turn": None,
    }

    def name_of(player_id: Optional[str]) -> str:
        if player_id is None:
            return "--"
        return state["names"].get(player_id, player_id[:6])

    async for raw in websocket:
        message = json.loads(raw)
        msg_type = message.get("type")

        if msg_type == "welcome":
            state["player_id"] = message.get("player_id")
            continue

        if msg_type == "room_update":
            state["names"] = {player["id"]: player["name"] for player in message.get("players", [])}
            LOGGER.info("[room %s] players: %s", room_id, ", ".join(state["names"].values()))
            continue

        if msg_type == "round_started":
            state["leader_id"] = message.get("leader_id")
            LOGGER.info("[round %s] leader=%s", message.get("round"), name_of(state["leader_id"]))
            continue

        if msg_type == "deal_hand":
            state["hand"] = list(message.get("hand", []))
            state["last_turn"] = None
            LOGGER.info("[deal] %s", render_cards(state["hand"]))
            # Hands arrive right after round_started, so the leader picks trump here.
            if state["leader_id"] == state["player_id"]:
                suit = choose_powerhouse(state["hand"])
                await websocket.send(json.dumps({"type": "select_powerhouse", "room_id": room_id, "suit": suit}))
                state["leader_id"] = None
            continue

        if msg_type == "powerhouse_set":
            state["powerhouse"] = message.get("powerhouse")
            LOGGER.info("[trump] %s", state["powerhouse"] or "none")
            continue

        if msg_type == "card_played":
            if message.get("player_id") == state["player_id"]:
                played = message.get("card", {})
                state["hand"] = [
                    card
                    for card in state["hand"]
                    if (card["rank"], card["suit"]) != (played.get("rank"), played.get("suit"))
                ]
            continue

        if msg_type == "trick_complete":
            LOGGER.info(
                "[trick] %s wins %s | %s",
                name_of(message.get("winner_id")),
                message.get("trick_points"),
                render_cards([play["card"] for play in message.get("trick", [])]),
            )
            continue

        if msg_type == "round_over":
            LOGGER.info("[round over] scores %s", format_scores(message.get("scores", {}), name_of))
            LOGGER.info("")
            continue

        if msg_type == "invalid_move":
            LOGGER.warning("[invalid] %s", message.get("reason"))
            state["last_turn"] = None
            continue

        if msg_type == "game_state":
            turn_key = (message.get("round"), len(state["hand"]), len(message.get("current_trick", [])))
            if message.get("turn_id") != state["player_id"] or not state["hand"]:
                continue
            if state["last_turn"] == turn_key:
                continue
            state["last_turn"] = turn_key
            ctx = TurnContext(
                player_id=state["player_id"],
                hand=state["hand"],
                trick=list(message.get("current_trick", [])),
                powerhouse=message.get("powerhouse"),
                led_suit=message.get("led_suit"),
                scores=dict(message.get("scores", {})),
            )
            card = choose_card(ctx)
            await websocket.send(
                json.dumps(
                    {
                        "type": "play_card",
                        "room_id": room_id,
                        "card": {"rank": card["rank"], "suit": card["suit"]},
                    }
                )
            )
            continue

        if msg_type in ("info", "error"):
            LOGGER.info("[%s] %s", msg_type, message.get("msg"))
            continue

        LOGGER.debug("Ignoring message type=%s", msg_type)


async def run_bot(name: str, room_id: str, url: str) -> None:
    async with websockets.connect(url) as ws:
        await ws.send(json.dumps({"type": "join_room", "room_id": room_id, "name": name}))
        LOGGER.info("[connect] %s as %s in room %s", url, name, room_id)
        await play_room(ws, room_id)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sample KaliTiri bot client")
    parser.add_argument("--name", required=True, help="Display name shown to the room")
    parser.add_argument("--room", required=True, help="Room to join (created on first join)")
    parser.add_argument("--url", default="ws://127.0.0.1:3000/", help="WebSocket URL")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    LOGGER.setLevel(getattr(logging, args.log_level.upper(), logging.INFO))
    asyncio.run(run_bot(args.name, args.room, args.url))


# ---------------------------------------------------------------------------
# Helper utilities
# ---------------------------------------------------------------------------


def render_card(card: dict[str, Any]) -> str:
    """Return a card such as {'rank': 'A', 'suit': 'hearts'} as 'A♥' when enabled."""

    suit = card.get("suit", "")
    if USE_UNICODE_CARDS and suit in SUIT_SYMBOLS:
        return f"{card.get('rank')}{SUIT_SYMBOLS[suit]}"
    return f"{card.get('rank')}-{suit}"


def render_cards(cards: List[dict[str, Any]]) -> str:
    if not cards:
        return "--"
    return " ".join(render_card(card) for card in cards)


def format_scores(scores: Dict[str, int], name_of) -> str:
    return ", ".join(f"{name_of(player_id)}={points}" for player_id, points in scores.items())


if __name__ == "__main__":
    main()
