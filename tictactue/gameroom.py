"""A room where two players play one game."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from tictactue.game import Game, GameState
from tictactue.player import Message, Player

logger = logging.getLogger(__name__)

MAX_PLAYERS = 2

_STATE_CODES = {
    GameState.XWON: "X",
    GameState.OWON: "O",
    GameState.DRAW: "D",
    GameState.BEGIN: "B",
}


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return default


class GameRoom:
    """Holds up to two players and relays their game to both of them.

    ``on_empty`` is called with the room id once the last player has left.
    """

    def __init__(
        self, room_id: str, on_empty: Optional[Callable[[str], None]] = None
    ) -> None:
        self.room_id = room_id
        self.on_empty = on_empty
        self.game = Game(on_board_changed=self._on_board_changed)
        self.players: list[Player] = []
        self.rematch_votes: dict[Player, bool] = {}

    def add_player(self, player: Player) -> bool:
        """Seat a player; return False if the room is full."""
        if len(self.players) >= MAX_PLAYERS:
            return False
        self.players.append(player)
        player.game_id = self.room_id
        self.rematch_votes[player] = False
        logger.info("Player %s joined room %s", player.id, self.room_id)
        if len(self.players) == MAX_PLAYERS:
            self._assign_symbols_and_start()
        return True

    def remove_player(self, player: Player) -> None:
        """Take a player out; tell the other one, or report the room empty."""
        self.players = [p for p in self.players if p is not player]
        self.rematch_votes.pop(player, None)
        player.game_id = ""
        logger.info("Player %s left room %s", player.id, self.room_id)

        if self.players:
            remaining = self.players[0]
            remaining.send_message(
                {
                    "CID": remaining.id,
                    "CMD": "OPP_LEFT",
                    "INGAME": True,
                    "RID": self.room_id,
                }
            )
            self.game.reset()
        elif self.on_empty is not None:
            self.on_empty(self.room_id)

    def is_full(self) -> bool:
        return len(self.players) >= MAX_PLAYERS

    def receive_message(self, message: Message) -> None:
        """Handle an in-game command from one of the players."""
        command = _text(message.get("CMD"))
        handlers = {
            "MOVE": self._process_move,
            "REMATCH": self._process_rematch,
            "CHAT": self._process_chat,
        }
        handler = handlers.get(command)
        if handler is None:
            logger.warning(
                "GameRoom %s received unknown command: %s", self.room_id, command
            )
            return
        handler(message)

    def tick(self) -> None:
        """Let one clock interval pass in this room's game."""
        self.game.tick()

    def _find_player(self, message: Message) -> Optional[Player]:
        player_id = _text(message.get("CID"))
        return next((p for p in self.players if p.id == player_id), None)

    def _symbol_of(self, player: Player) -> str:
        for symbol, seated in zip("XO", self.players):
            if seated is player:
                return symbol
        return " "

    def _assign_symbols_and_start(self) -> None:
        if len(self.players) != MAX_PLAYERS:
            return
        logger.info(
            "Two players in room %s. Assigning symbols and starting game.",
            self.room_id,
        )
        self.game.reset()

        for position, player in enumerate(self.players):
            player.send_message(
                {
                    "CID": player.id,
                    "CMD": "ASN",
                    "ISX": position == 0,
                    "INGAME": True,
                    "RID": self.room_id,
                }
            )

        x_player, o_player = self.players
        self._broadcast(
            {
                "CMD": "ASN",
                "INGAME": False,
                "X_NAME": x_player.name,
                "X_WIN": x_player.won_time,
                "X_LOSE": x_player.lost_time,
                "O_NAME": o_player.name,
                "O_WIN": o_player.won_time,
                "O_LOSE": o_player.lost_time,
            }
        )
        self._on_board_changed()

    def _process_move(self, message: Message) -> None:
        player = self._find_player(message)
        if player is None:
            logger.warning("Move request from unknown player %s", message.get("CID"))
            return
        expected = "X" if self.game.x_turn else "O"
        if self._symbol_of(player) != expected:
            logger.warning("Player %s tried to move out of turn.", player.id)
            return
        index = _int(message.get("AT"), -1)
        if 0 <= index <= 8:
            self.game.move(index // 3, index % 3)
        else:
            logger.warning("Invalid move index: %d", index)

    def _process_chat(self, message: Message) -> None:
        player = self._find_player(message)
        if player is None:
            logger.warning("Chat from unknown player %s", message.get("CID"))
            return
        self._broadcast(
            {
                "RID": self.room_id,
                "INGAME": True,
                "CMD": message.get("CMD"),
                "MSG": f"{player.name}: {_text(message.get('MSG'))}",
            }
        )

    def _process_rematch(self, message: Message) -> None:
        player = self._find_player(message)
        if player is None:
            return
        self.rematch_votes[player] = True
        logger.info(
            "Player %s voted for a rematch in room %s", player.id, self.room_id
        )
        all_voted = len(self.players) >= MAX_PLAYERS and all(
            self.rematch_votes.values()
        )
        if all_voted:
            logger.info(
                "All players agreed to a rematch in room %s. Resetting game.",
                self.room_id,
            )
            for seated in self.players:
                self.rematch_votes[seated] = False
            self._assign_symbols_and_start()

    def _on_board_changed(self) -> None:
        state = self.game.state
        if len(self.players) == MAX_PLAYERS:
            x_player, o_player = self.players
            if state == GameState.XWON:
                x_player.won_time += 1
                o_player.lost_time += 1
                logger.debug("%s won and scored 1 point!", x_player.name)
            elif state == GameState.OWON:
                o_player.won_time += 1
                x_player.lost_time += 1
                logger.debug("%s won and scored 1 point!", o_player.name)
        self._broadcast(
            {
                "INGAME": True,
                "RID": self.room_id,
                "CMD": "UPD",
                "SEQ": self.game.board_sequence,
                "X_T": self.game.x_timer.current_time,
                "O_T": self.game.o_timer.current_time,
                "GS": _STATE_CODES.get(state, "N"),
            }
        )

    def _broadcast(self, message: Message) -> None:
        for player in self.players:
            player.send_message({**message, "CID": player.id})