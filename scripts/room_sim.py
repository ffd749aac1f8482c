#!/usr/bin/env python3
"""Simulate a KaliTiri room with randomly behaved bots.

This script spins up the host in-process and connects a handful of toy bots
to one room. Each bot plays a random legal card (and now and then an illegal
one, to exercise rejection) until the requested number of rounds is over.

Example:
    python scripts/room_sim.py --players 5 --rounds 3
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import websockets

from kalitiri.models import RoomConfig
from host.server import HostServer

LOGGER = logging.getLogger("room_sim")


@dataclass
class BotProfile:
    name: str
    rng: random.Random
    mischief: float = 0.05
    led: Optional[str] = None


def choose_card(hand: List[Dict[str, Any]], led: Optional[str], profile: BotProfile) -> Dict[str, Any]:
    """Pick a random legal card, or occasionally any card at all."""

    if led and profile.rng.random() >= profile.mischief:
        following = [card for card in hand if card["suit"] == led]
        if following:
            return profile.rng.choice(following)
    return profile.rng.choice(hand)


async def run_bot(profile: BotProfile, url: str, room_id: str, rounds: int, stop_event: asyncio.Event) -> None:
    """Connect a single random bot and play until enough rounds have finished."""

    try:
        async with websockets.connect(url) as ws:
            await ws.send(json.dumps({"type": "join_room", "room_id": room_id, "name": profile.name}))

            player_id: Optional[str] = None
            hand: List[Dict[str, Any]] = []
            rounds_seen = 0
            while not stop_event.is_set():
                try:
                    raw = await asyncio.wait_for(ws.recv(), timeout=1.0)
                except asyncio.TimeoutError:
                    continue
                except websockets.ConnectionClosed:
                    break

                message = json.loads(raw)
                msg_type = message.get("type")

                if msg_type == "welcome":
                    player_id = message["player_id"]

                elif msg_type == "deal_hand":
                    hand = list(message.get("hand", []))

                elif msg_type == "round_started" and message.get("leader_id") == player_id:
                    suit = profile.rng.choice(["spades", "hearts", "diamonds", "clubs", "none"])
                    await ws.send(json.dumps({"type": "select_powerhouse", "room_id": room_id, "suit": suit}))

                elif msg_type == "card_played" and message.get("player_id") == player_id:
                    played = message["card"]
                    hand = [c for c in hand if (c["rank"], c["suit"]) != (played["rank"], played["suit"])]

                elif msg_type in ("game_state", "invalid_move") and hand:
                    if msg_type == "game_state":
                        if message.get("turn_id") != player_id:
                            continue
                        profile.led = message.get("led_suit")
                    else:
                        LOGGER.info("%s rejected: %s", profile.name, message.get("reason"))
                        profile.mischief = 0.0
                    card = choose_card(hand, profile.led, profile)
                    await ws.send(
                        json.dumps(
                            {
                                "type": "play_card",
                                "room_id": room_id,
                                "card": {"rank": card["rank"], "suit": card["suit"]},
                            }
                        )
                    )

                elif msg_type == "round_over":
                    rounds_seen += 1
                    profile.mischief = 0.05
                    LOGGER.info("%s saw round %s end: %s", profile.name, rounds_seen, message.get("scores"))
                    if rounds_seen >= rounds:
                        stop_event.set()
                        break

    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Bot %s crashed: %s", profile.name, exc)


async def run_simulation(args: argparse.Namespace) -> None:
    host = HostServer(RoomConfig(seed=args.seed))

    server_task = asyncio.create_task(host.start(args.host, args.port))
    await asyncio.sleep(0.5)  # give the socket time to bind

    stop_event = asyncio.Event()
    profiles = [BotProfile(name=f"SimBot{i}", rng=random.Random(args.seed + i)) for i in range(args.players)]
    url = f"ws://{args.host}:{args.port}/"

    bot_tasks = [
        asyncio.create_task(run_bot(profile, url, args.room, args.rounds, stop_event))
        for profile in profiles
    ]

    try:
        await asyncio.wait_for(stop_event.wait(), timeout=args.timeout)
    except asyncio.TimeoutError:
        LOGGER.warning("Simulation timed out; stopping bots")
    finally:
        stop_event.set()
        for task in bot_tasks:
            task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await asyncio.gather(*bot_tasks, return_exceptions=True)
        server_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await server_task


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a local KaliTiri room with random bots")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=9001)
    parser.add_argument("--room", default="sim")
    parser.add_argument("--players", type=int, default=4)
    parser.add_argument("--rounds", type=int, default=2)
    parser.add_argument("--timeout", type=float, default=60.0, help="max seconds to run before stopping")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    try:
        asyncio.run(run_simulation(args))
    except KeyboardInterrupt:
        LOGGER.info("Simulation interrupted; shutting down")


if __name__ == "__main__":
    main()
