"""The game server: accepts clients, keeps rooms and routes messages."""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import string
import time
from typing import Any, Callable, Optional

from tictactue.countdowntimer import CountdownTimer
from tictactue.gameroom import GameRoom
from tictactue.player import Message, Player
from tictactue.protocol import FrameDecoder, encode_message

logger = logging.getLogger(__name__)

DEFAULT_PORT = 12345
ID_LENGTH = 6
_READ_SIZE = 4096


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


class TicTacTueServer:
    """Keeps connected players by id and game rooms by room id."""

    ID_CHARS = string.ascii_uppercase + string.digits
    TICK_SECONDS = CountdownTimer.UPDATE_INTERVAL_MS / 1000

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self.clients: dict[str, Player] = {}
        self.rooms: dict[str, GameRoom] = {}
        self._server: Optional[asyncio.AbstractServer] = None
        self._clock: Optional[asyncio.Task[None]] = None

    async def start_server(self, port: int, host: Optional[str] = None) -> int:
        """Listen on ``host`` (all interfaces by default); return the bound port.

        Raises OSError when the port cannot be bound.
        """
        try:
            self._server = await asyncio.start_server(
                self._handle_connection, host, port
            )
        except OSError as exc:
            logger.critical("Server could not start: %s", exc)
            raise
        bound = self._server.sockets[0].getsockname()[1]
        self._clock = asyncio.create_task(self._run_clock())
        logger.info("Server started on port %d", bound)
        return bound

    async def serve_forever(self) -> None:
        if self._server is None:
            raise RuntimeError("server not started")
        await self._server.serve_forever()

    def close(self) -> None:
        """Stop listening and stop the game clocks."""
        if self._clock is not None:
            self._clock.cancel()
            self._clock = None
        if self._server is not None:
            self._server.close()
            self._server = None

    async def _run_clock(self) -> None:
        while True:
            await asyncio.sleep(self.TICK_SECONDS)
            for room in list(self.rooms.values()):
                room.tick()

    async def _handle_connection(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        def send(message: Message) -> None:
            if writer.is_closing():
                return
            writer.write(encode_message(message))
            logger.debug("Server SENT: %s", message)

        player_id = self.connect_client(send)
        logger.info(
            "Client connected: %s assigned ID %s",
            writer.get_extra_info("peername"),
            player_id,
        )
        decoder = FrameDecoder()
        try:
            while data := await reader.read(_READ_SIZE):
                for message in decoder.feed(data):
                    logger.debug("Server RCV from %s: %s", player_id, message)
                    self.process_message(player_id, message)
        except ConnectionError:
            pass
        finally:
            self.disconnect_client(player_id)
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass

    def connect_client(self, send: Callable[[Message], None]) -> str:
        """Register a new client that receives messages through ``send``."""
        player_id = self.generate_unique_id(ID_LENGTH)
        while player_id in self.clients:
            player_id = self.generate_unique_id(ID_LENGTH)
        player = Player(player_id, send=send)
        self.clients[player_id] = player
        player.send_message({"CID": player_id, "CMD": "A_ID"})
        return player_id

    def disconnect_client(self, player_id: str) -> None:
        """Forget a client, taking it out of any room it is in."""
        player = self.clients.pop(player_id, None)
        if player is None:
            return
        logger.info("Client %s disconnected.", player_id)
        room = self.rooms.get(player.game_id) if player.game_id else None
        if room is not None:
            room.remove_player(player)
        player.send = None

    def process_message(self, player_id: str, message: Message) -> None:
        """Handle one message received from the client ``player_id``."""
        player = self.clients.get(player_id)
        if player is None:
            logger.warning("Message from unknown client %s", player_id)
            return

        if _text(message.get("CMD")) == "PING":
            response: Message = {"CMD": "PONG", "S_SENT": int(time.time() * 1000)}
            if "CID" in message:
                response["CID"] = message["CID"]
            player.send_message(response)

        if message.get("INGAME") is True:
            room_id = _text(message.get("RID"))
            room = self.rooms.get(room_id)
            if room is None:
                logger.warning(
                    "Server: Received INGAME message for non-existent room %s",
                    room_id,
                )
                return
            room.receive_message(message)
            return

        handlers = {
            "CR": self._create_room,
            "JR": self._join_room,
            "LR": self._leave_room,
            "USRNAME": self._assign_username,
        }
        handler = handlers.get(_text(message.get("CMD")))
        if handler is not None:
            handler(player, message)

    def _create_room(self, player: Player, message: Message) -> None:
        room_id = _text(message.get("RID"))
        response: Message = {"CID": player.id, "INGAME": False}
        if room_id in self.rooms:
            response["CMD"] = "ERR"
            response["MSG"] = "Room already exists."
            logger.warning(
                "Player %s failed to create room %s - already exists.",
                player.id,
                room_id,
            )
        else:
            room = GameRoom(room_id, on_empty=self._on_room_emptied)
            self.rooms[room_id] = room
            room.add_player(player)
            response["CMD"] = "CR_OK"
            response["RID"] = room_id
            logger.info("Player %s created room %s", player.id, room_id)
        player.send_message(response)

    def _join_room(self, player: Player, message: Message) -> None:
        room_id = _text(message.get("RID"))
        response: Message = {"CID": player.id, "INGAME": False}
        room = self.rooms.get(room_id)
        if room is not None and not room.is_full():
            response["CMD"] = "JR_OK"
            response["RID"] = room_id
            logger.info("Player %s joined room %s", player.id, room_id)
            player.send_message(response)
            room.add_player(player)
        else:
            response["CMD"] = "ERR"
            response["MSG"] = "Can't join room. It might be full or non-existent."
            logger.warning("Player %s failed to join room %s", player.id, room_id)
            player.send_message(response)

    def _leave_room(self, player: Player, message: Message) -> None:
        room_id = _text(message.get("RID"))
        room = self.rooms.get(room_id)
        if player.game_id == room_id and room is not None:
            room.remove_player(player)
        else:
            logger.warning(
                "Player %s tried to leave a room they are not in: %s",
                player.id,
                room_id,
            )

    def _assign_username(self, player: Player, message: Message) -> None:
        player.name = _text(message.get("USRNAME"))

    def _on_room_emptied(self, room_id: str) -> None:
        if self.rooms.pop(room_id, None) is not None:
            logger.info("Room %s is now empty and being deleted.", room_id)

    def generate_unique_id(self, length: int) -> str:
        """Return a random id of upper-case letters and digits not used by a room."""
        while True:
            new_id = "".join(self._rng.choice(self.ID_CHARS) for _ in range(length))
            if new_id not in self.rooms:
                return new_id


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="tictactue-server", description="Run the tic-tac-toe game server."
    )
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--host", default=None)
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    async def run() -> int:
        server = TicTacTueServer()
        try:
            await server.start_server(args.port, args.host)
        except OSError:
            return 1
        try:
            await server.serve_forever()
        finally:
            server.close()
        return 0

    try:
        return asyncio.run(run())
    except KeyboardInterrupt:
        return 0