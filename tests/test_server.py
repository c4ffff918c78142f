import asyncio
import random
import socket
import struct
import time

import pytest

from tictactue.protocol import FrameDecoder, encode_message
from tictactue.server import TicTacTueServer, main


class _Scripted:
    def __init__(self, letters):
        self._letters = iter(letters)

    def choice(self, seq):
        return next(self._letters)


def _client(server):
    outbox = []
    player_id = server.connect_client(outbox.append)
    return player_id, outbox


def _room_with_two(server, room_id="r1"):
    a, outbox_a = _client(server)
    b, outbox_b = _client(server)
    server.process_message(a, {"CMD": "CR", "RID": room_id, "CID": a})
    server.process_message(b, {"CMD": "JR", "RID": room_id, "CID": b})
    return a, outbox_a, b, outbox_b


def test_connect_sends_assigned_id():
    server = TicTacTueServer(rng=random.Random(7))
    player_id, outbox = _client(server)
    assert outbox == [{"CID": player_id, "CMD": "A_ID"}]
    assert len(player_id) == 6
    assert set(player_id) <= set(TicTacTueServer.ID_CHARS)
    assert server.clients[player_id].name == "Guest"


def test_generate_unique_id_is_deterministic_for_a_seed():
    first = TicTacTueServer(rng=random.Random(3)).generate_unique_id(8)
    second = TicTacTueServer(rng=random.Random(3)).generate_unique_id(8)
    assert first == second
    assert len(first) == 8


def test_generate_unique_id_skips_room_ids():
    server = TicTacTueServer(rng=_Scripted("ZZZZZZ" + "AAAAAA" + "BBBBBB"))
    player_id, _ = _client(server)
    server.process_message(player_id, {"CMD": "CR", "RID": "AAAAAA"})
    assert server.generate_unique_id(6) == "BBBBBB"


def test_ping_answers_pong_with_server_time():
    server = TicTacTueServer()
    player_id, outbox = _client(server)
    before = int(time.time() * 1000)
    server.process_message(player_id, {"CMD": "PING", "CID": player_id})
    after = int(time.time() * 1000)
    pong = outbox[-1]
    assert pong["CMD"] == "PONG"
    assert pong["CID"] == player_id
    assert before <= pong["S_SENT"] <= after


def test_create_room():
    server = TicTacTueServer()
    player_id, outbox = _client(server)
    server.process_message(player_id, {"CMD": "CR", "RID": "r1"})
    assert outbox[-1] == {
        "CID": player_id,
        "INGAME": False,
        "CMD": "CR_OK",
        "RID": "r1",
    }
    assert server.clients[player_id].game_id == "r1"
    assert server.rooms["r1"].players == [server.clients[player_id]]


def test_create_existing_room_fails():
    server = TicTacTueServer()
    a, _ = _client(server)
    b, outbox_b = _client(server)
    server.process_message(a, {"CMD": "CR", "RID": "r1"})
    server.process_message(b, {"CMD": "CR", "RID": "r1"})
    assert outbox_b[-1]["CMD"] == "ERR"
    assert outbox_b[-1]["MSG"] == "Room already exists."
    assert server.clients[b].game_id == ""


def test_join_room_starts_game():
    server = TicTacTueServer()
    a, outbox_a, b, outbox_b = _room_with_two(server)
    assert outbox_b[1] == {"CID": b, "INGAME": False, "CMD": "JR_OK", "RID": "r1"}
    assign_a = [m for m in outbox_a if m["CMD"] == "ASN" and m["INGAME"]]
    assign_b = [m for m in outbox_b if m["CMD"] == "ASN" and m["INGAME"]]
    assert assign_a[0]["ISX"] is True
    assert assign_b[0]["ISX"] is False
    assert outbox_a[-1]["CMD"] == "UPD"
    assert outbox_b[-1]["GS"] == "B"
    assert server.rooms["r1"].is_full()


def test_join_missing_or_full_room_fails():
    server = TicTacTueServer()
    _room_with_two(server)
    c, outbox_c = _client(server)
    server.process_message(c, {"CMD": "JR", "RID": "r1"})
    assert outbox_c[-1]["CMD"] == "ERR"
    server.process_message(c, {"CMD": "JR", "RID": "nowhere"})
    assert outbox_c[-1]["MSG"] == "Can't join room. It might be full or non-existent."
    assert server.clients[c].game_id == ""


def test_in_game_move_is_routed_to_room():
    server = TicTacTueServer()
    a, outbox_a, b, outbox_b = _room_with_two(server)
    server.process_message(
        a, {"CMD": "MOVE", "INGAME": True, "RID": "r1", "CID": a, "AT": 4}
    )
    assert outbox_b[-1]["SEQ"] == "    x    "
    assert outbox_b[-1]["GS"] == "N"
    assert outbox_a[-1]["SEQ"] == server.rooms["r1"].game.board_sequence


def test_in_game_message_for_missing_room_is_ignored():
    server = TicTacTueServer()
    player_id, outbox = _client(server)
    server.process_message(
        player_id, {"CMD": "MOVE", "INGAME": True, "RID": "ghost", "AT": 0}
    )
    assert outbox == [{"CID": player_id, "CMD": "A_ID"}]


def test_username_is_used_in_assignment():
    server = TicTacTueServer()
    a, outbox_a = _client(server)
    server.process_message(a, {"CMD": "USRNAME", "USRNAME": "alice"})
    assert server.clients[a].name == "alice"
    b, _ = _client(server)
    server.process_message(a, {"CMD": "CR", "RID": "r1"})
    server.process_message(b, {"CMD": "JR", "RID": "r1"})
    names = [m for m in outbox_a if m["CMD"] == "ASN" and not m["INGAME"]]
    assert names[0]["X_NAME"] == "alice"
    assert names[0]["O_NAME"] == "Guest"


def test_leave_room_notifies_opponent_and_empties():
    server = TicTacTueServer()
    a, _, b, outbox_b = _room_with_two(server)
    server.process_message(a, {"CMD": "LR", "RID": "r1"})
    assert outbox_b[-1] == {"CID": b, "CMD": "OPP_LEFT", "INGAME": True, "RID": "r1"}
    assert server.clients[a].game_id == ""
    server.process_message(b, {"CMD": "LR", "RID": "r1"})
    assert "r1" not in server.rooms


def test_leave_room_not_joined_is_ignored():
    server = TicTacTueServer()
    a, _, b, _ = _room_with_two(server)
    c, _ = _client(server)
    server.process_message(c, {"CMD": "LR", "RID": "r1"})
    assert len(server.rooms["r1"].players) == 2


def test_disconnect_removes_player_and_room():
    server = TicTacTueServer()
    a, _, b, outbox_b = _room_with_two(server)
    server.disconnect_client(a)
    assert a not in server.clients
    assert outbox_b[-1]["CMD"] == "OPP_LEFT"
    assert "r1" in server.rooms
    server.disconnect_client(b)
    assert server.clients == {}
    assert server.rooms == {}


def test_message_from_unknown_client_changes_nothing():
    server = TicTacTueServer()
    server.process_message("NOBODY", {"CMD": "CR", "RID": "r1"})
    assert server.rooms == {}


async def _read(reader, decoder):
    header = await reader.readexactly(4)
    (size,) = struct.unpack(">I", header)
    body = await reader.readexactly(size)
    return decoder.feed(header + body)[0]


@pytest.mark.asyncio
async def test_tcp_round_trip():
    server = TicTacTueServer()
    port = await server.start_server(0, "127.0.0.1")
    try:
        reader, writer = await asyncio.open_connection("127.0.0.1", port)
        decoder = FrameDecoder()
        hello = await asyncio.wait_for(_read(reader, decoder), 5)
        assert hello["CMD"] == "A_ID"
        assert hello["CID"] in server.clients

        writer.write(encode_message({"CMD": "PING", "CID": hello["CID"]}))
        await writer.drain()
        pong = await asyncio.wait_for(_read(reader, decoder), 5)
        assert pong["CMD"] == "PONG"
        assert pong["CID"] == hello["CID"]

        writer.close()
        await writer.wait_closed()
        for _ in range(100):
            if not server.clients:
                break
            await asyncio.sleep(0.01)
        assert server.clients == {}
    finally:
        server.close()


@pytest.mark.asyncio
async def test_serve_forever_requires_start():
    with pytest.raises(RuntimeError):
        await TicTacTueServer().serve_forever()


def test_main_returns_error_when_port_taken():
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        blocker.bind(("127.0.0.1", 0))
        blocker.listen()
        port = blocker.getsockname()[1]
        assert main(["--port", str(port), "--host", "127.0.0.1"]) == 1
    finally:
        blocker.close()