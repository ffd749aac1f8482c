from __future__ import annotations

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

import websockets
from websockets.asyncio.server import ServerConnection

from kalitiri.models import Command, CommandType, Event, RoomConfig
from kalitiri.registry import RoomRegistry

LOGGER = logging.getLogger("kalitiri_host")

# HostServer glues the room registry to WebSocket clients.
# Every network concern lives here; the registry and rooms stay pure.

MESSAGE_TYPES = {command.value: command for command in CommandType}


@dataclass
class ClientSession:
    player_id: str
    websocket: ServerConnection


class HostServer:
    def __init__(self, config: Optional[RoomConfig] = None, registry: Optional[RoomRegistry] = None) -> None:
        # RoomRegistry handles game state; this class handles sockets and ordering.
        self.registry = registry or RoomRegistry(config)
        self.sessions: Dict[str, ClientSession] = {}
        self.locks: Dict[str, asyncio.Lock] = {}
        # Dispatches holding or waiting on each room lock; the lock is dropped at zero.
        self.pending: Dict[str, int] = {}

    async def start(self, host: str = "0.0.0.0", port: int = 3000) -> None:
        # websockets.serve keeps accepting clients until the process stops.
        async with websockets.serve(self._handle_connection, host, port):
            LOGGER.info("KaliTiri host listening on %s:%s", host, port)
            await asyncio.Future()

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        session = ClientSession(player_id=uuid.uuid4().hex, websocket=websocket)
        self.sessions[session.player_id] = session
        LOGGER.info("Player connected: %s", session.player_id)
        await self._send_json(websocket, "welcome", {"player_id": session.player_id})

        try:
            async for raw in websocket:
                message = self._decode(raw)
                if not message:
                    continue
                await self._handle_message(session, message)
        except websockets.ConnectionClosed:
            pass
        finally:
            await self._handle_disconnect(session)

    async def _handle_message(self, session: ClientSession, message: Dict[str, object]) -> None:
        command_type = MESSAGE_TYPES.get(str(message.get("type")))
        if command_type is None:
            await self._send_error(session.websocket, code="UNKNOWN_TYPE", msg="Unsupported message type")
            return
        room_id = message.get("room_id")
        if not isinstance(room_id, str) or not room_id.strip():
            await self._send_error(session.websocket, code="BAD_SCHEMA", msg="room_id required")
            return

        data = {key: value for key, value in message.items() if key not in ("type", "room_id", "v")}
        command = Command(type=command_type, room_id=room_id.strip(), requester=session.player_id, data=data)
        await self.dispatch(command)

    async def _handle_disconnect(self, session: ClientSession) -> None:
        LOGGER.info("Player disconnected: %s", session.player_id)
        for room_id in self.registry.rooms_for(session.player_id):
            await self.dispatch(Command(type=CommandType.LEAVE, room_id=room_id, requester=session.player_id))
        self.sessions.pop(session.player_id, None)

    async def dispatch(self, command: Command) -> List[Event]:
        """Run one command under its room lock and deliver the resulting events in order."""
        room_id = command.room_id
        lock = self.locks.setdefault(room_id, asyncio.Lock())
        self.pending[room_id] = self.pending.get(room_id, 0) + 1
        try:
            async with lock:
                created = room_id not in self.registry.rooms
                events = self.registry.handle(command)
                if created and room_id in self.registry.rooms:
                    LOGGER.info("Room %s created", room_id)
                for event in events:
                    self._log_event(command, event)
                await self._deliver(room_id, events)
        finally:
            self.pending[room_id] -= 1
            if not self.pending[room_id]:
                del self.pending[room_id]
                if room_id not in self.registry.rooms and self.locks.pop(room_id, None) is not None:
                    LOGGER.info("Room %s closed", room_id)
        return events

    async def _deliver(self, room_id: str, events: List[Event]) -> None:
        for event in events:
            if event.private:
                session = self.sessions.get(event.to) if event.to else None
                if session is not None:
                    await self._send_json(session.websocket, event.ev, event.data)
                continue
            await self._broadcast(room_id, event.ev, event.data)

    async def _broadcast(self, room_id: str, msg_type: str, payload: Dict[str, object]) -> None:
        targets = [
            self.sessions[player_id].websocket
            for player_id in self.registry.members(room_id)
            if player_id in self.sessions
        ]
        if not targets:
            return
        message = self._envelope(msg_type, payload)
        await asyncio.gather(*(socket.send(message) for socket in targets), return_exceptions=True)

    def _log_event(self, command: Command, event: Event) -> None:
        room_id = command.room_id
        if event.ev == "invalid_move":
            LOGGER.warning(
                "Rejected play room=%s player=%s card=%s reason=%s",
                room_id,
                command.requester,
                command.data.get("card"),
                event.data.get("reason"),
            )
        elif event.ev == "round_started":
            counts = event.data.get("hand_counts", {})
            per_player = next(iter(counts.values()), 0) if isinstance(counts, dict) else 0
            LOGGER.info(
                "Round %s started in %s players=%s per_player=%s",
                event.data.get("round"),
                room_id,
                len(counts) if isinstance(counts, dict) else 0,
                per_player,
            )
        elif event.ev == "powerhouse_set":
            LOGGER.info("PowerHouse set to %s in %s", event.data.get("powerhouse"), room_id)
        elif event.ev == "trick_complete":
            LOGGER.debug(
                "Trick in %s won by %s for %s points",
                room_id,
                event.data.get("winner_id"),
                event.data.get("trick_points"),
            )
        elif event.ev == "round_over":
            LOGGER.info("Round over in %s; scores=%s", room_id, event.data.get("scores"))
        elif event.ev == "info":
            LOGGER.info("Room %s: %s", room_id, event.data.get("msg"))

    async def _send_json(self, websocket: ServerConnection, msg_type: str, payload: Dict[str, object]) -> None:
        try:
            await websocket.send(self._envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            pass

    async def _send_error(self, websocket: ServerConnection, code: str, msg: str) -> None:
        await self._send_json(websocket, "error", {"code": code, "msg": msg})

    def _envelope(self, msg_type: str, payload: Dict[str, object]) -> str:
        body = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body)

    def _decode(self, raw: str) -> Dict[str, object]:
        try:
            message = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            return {}
        return message if isinstance(message, dict) else {}
