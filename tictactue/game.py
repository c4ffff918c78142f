"""A single game of tic-tac-toe with a chess clock for each side."""

from __future__ import annotations

import enum
import logging
from typing import Callable, Optional

from tictactue.board import EMPTY, Board
from tictactue.countdowntimer import CountdownTimer

logger = logging.getLogger(__name__)

PLAYER_TIME_MS = 30_000


class GameState(enum.Enum):
    BEGIN = "begin"
    STARTED = "started"
    XWON = "xwon"
    OWON = "owon"
    DRAW = "draw"


Callback = Optional[Callable[[], None]]


class Game:
    """Board, turn and clocks of one game.

    ``on_board_changed`` is called after every accepted move, board load and
    time-out; ``on_state_changed`` whenever the game state changes.
    """

    def __init__(
        self,
        on_board_changed: Callback = None,
        on_state_changed: Callback = None,
    ) -> None:
        self.on_board_changed = on_board_changed
        self.on_state_changed = on_state_changed
        self.board = Board()
        self.x_turn = True
        self._state = GameState.BEGIN
        self.x_timer = CountdownTimer(PLAYER_TIME_MS, on_expired=self._x_times_up)
        self.o_timer = CountdownTimer(PLAYER_TIME_MS, on_expired=self._o_times_up)
        logger.debug("Game created")

    @property
    def state(self) -> GameState:
        return self._state

    @state.setter
    def state(self, new_state: GameState) -> None:
        if self._state == new_state:
            return
        self._state = new_state
        if self.on_state_changed is not None:
            self.on_state_changed()

    @property
    def board_sequence(self) -> str:
        """The board as a nine-character string."""
        return self.board.sequence

    @property
    def x_timer_text(self) -> str:
        return self.x_timer.current_time_text

    @property
    def o_timer_text(self) -> str:
        return self.o_timer.current_time_text

    def _board_changed(self) -> None:
        if self.on_board_changed is not None:
            self.on_board_changed()

    def _x_times_up(self) -> None:
        self.state = GameState.OWON
        self._board_changed()

    def _o_times_up(self) -> None:
        self.state = GameState.XWON
        self._board_changed()

    def reset(self) -> None:
        """Return to an empty board with X to move and full clocks."""
        self.state = GameState.BEGIN
        self.board.clear()
        self.x_turn = True
        self.x_timer.reset()
        self.o_timer.reset()

    def move(self, x: int, y: int) -> bool:
        """Place the current player's mark at row ``x``, column ``y``.

        Returns False when the game is over or the cell cannot take a mark.
        """
        if self.state == GameState.BEGIN:
            self.state = GameState.STARTED
        elif self.state != GameState.STARTED:
            return False
        if not self.board.place_mark(x, y, self.x_turn):
            logger.info("Invalid move! Try again.")
            return False
        if self.x_turn:
            self.x_timer.start()
            self.o_timer.pause()
        else:
            self.x_timer.pause()
            self.o_timer.start()
        self._check_win()
        self._board_changed()
        logger.debug("%s", self.board.render())
        self.x_turn = not self.x_turn
        return True

    def _check_win(self) -> None:
        winner = self.board.check_winner()
        if winner != EMPTY:
            logger.info("%s wins!", winner)
            self.state = GameState.XWON if self.x_turn else GameState.OWON
        elif self.board.is_full():
            self.state = GameState.DRAW
        else:
            return
        self.x_timer.pause()
        self.o_timer.pause()

    def tick(self) -> None:
        """Let one clock interval pass for both players."""
        self.x_timer.tick()
        self.o_timer.tick()

    def set_board_sequence(self, seq: str) -> None:
        """Load the board from a nine-character string."""
        self.board.set_sequence(seq)
        self._board_changed()