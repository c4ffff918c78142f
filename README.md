# tictactue

A small asyncio server for two-player tic-tac-toe over TCP. Players connect,
choose a username, create or join a named room, and play with a 30-second
clock each. A player whose clock runs out loses. Rooms support chat and
rematches, and each player's wins and losses are counted for as long as the
player stays connected.

## Installing

```
pip install .
```

The package has no dependencies outside the standard library. To run the
tests:

```
pip install ".[test]"
pytest
```

## Running the server

```
tictactue-server
```

Options:

- `--port PORT`: port to listen on (default 12345)
- `--host HOST`: address to listen on (default: all interfaces)

The command exits with status 1 if the port cannot be bound.

## Protocol

Each message is a JSON object, sent in compact form and prefixed with its
length in bytes as a 4-byte big-endian unsigned integer.
`tictactue.protocol.encode_message` builds such a frame.
`tictactue.protocol.FrameDecoder.feed` takes received bytes and returns the
complete messages available so far; frames that do not hold a JSON object are
dropped.

When a client connects, it receives `{"CID": <id>, "CMD": "A_ID"}` with its
six-character player id (upper-case letters and digits). In-game commands
must carry this `CID` so the room can tell which player sent them.

Commands sent outside a game (`INGAME` not `true`):

| `CMD`     | Fields    | Effect                                      |
|-----------|-----------|---------------------------------------------|
| `USRNAME` | `USRNAME` | Set the player's display name               |
| `CR`      | `RID`     | Create a room and join it (`CR_OK` / `ERR`) |
| `JR`      | `RID`     | Join a room (`JR_OK` / `ERR`)               |
| `LR`      | `RID`     | Leave the room                              |
| `PING`    |           | Server replies `PONG` with `S_SENT` in ms   |

Commands sent inside a game (`"INGAME": true`, with `RID` set):

| `CMD`     | Fields | Effect                                          |
|-----------|--------|-------------------------------------------------|
| `MOVE`    | `AT`   | Place a mark on cell 0–8, row by row, in turn   |
| `CHAT`    | `MSG`  | Send `"<name>: <MSG>"` to both players          |
| `REMATCH` |        | Vote for a rematch; it starts once both vote    |

A room holds two players. The first to enter plays X. When the second player
joins, each player receives `ASN` with `ISX` telling whether they play X,
followed by an `ASN` with the names (`X_NAME`, `O_NAME`) and scores
(`X_WIN`, `X_LOSE`, `O_WIN`, `O_LOSE`) of both players.

After every accepted move, at the start of each game and when a clock runs
out, the server sends `UPD` with the board as a nine-character sequence
(`SEQ`, cells `x`, `o` or space), the clocks in milliseconds (`X_T`, `O_T`)
and the state `GS`: `B` (begin), `N` (in progress), `X` or `O` (winner), or
`D` (draw). After each move, the clock of the player who made it runs and the
other is paused; clocks advance in 100 ms steps.

If a player leaves or disconnects, the one still in the room receives
`OPP_LEFT` and the game is reset. A room is deleted when its last player
leaves.

## Using the package directly

The game logic can be used without the network:

```python
from tictactue.game import Game, GameState

game = Game()
game.move(0, 0)   # X
game.move(1, 1)   # O
game.move(0, 1)   # X
game.move(2, 2)   # O
game.move(0, 2)   # X completes the top row
assert game.state is GameState.XWON
```

`Game.tick()` lets one 100 ms clock interval pass for both players.
`tictactue.board.Board` holds the grid by itself; `Board.render()` returns it
as text. `tictactue.countdowntimer.CountdownTimer` is the clock, advanced by
`tick()`.

`tictactue.server.TicTacTueServer` can also be driven without sockets:
`connect_client(send)` registers a client whose messages go to the `send`
callable and returns its id, `process_message(player_id, message)` handles a
decoded message, and `disconnect_client(player_id)` removes the client.

## What it does not do

- There is no client: players need a program of their own that speaks the
  protocol above.
- Nothing is stored. Names and scores live in memory and are lost when a
  player disconnects or the server stops.