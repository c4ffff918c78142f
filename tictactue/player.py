"""A connected player."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

Message = dict[str, Any]


@dataclass(eq=False)
class Player:
    """A client identified by ``id``; messages go out through ``send``.

    Players compare and hash by identity, so they can key per-player state.
    """

    id: str
    send: Optional[Callable[[Message], None]] = None
    name: str = "Guest"
    game_id: str = ""
    won_time: int = 0
    lost_time: int = 0

    def send_message(self, message: Message) -> None:
        """Deliver a message to the client; dropped when there is no connection."""
        if self.send is not None:
            self.send(message)