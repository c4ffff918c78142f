"""Wire format: JSON objects framed by a big-endian 32-bit length."""

from __future__ import annotations

import json
import logging
import struct
from typing import Any

logger = logging.getLogger(__name__)

_HEADER = struct.Struct(">I")


def encode_message(message: dict[str, Any]) -> bytes:
    """Serialise a message as compact JSON behind its byte length."""
    body = json.dumps(
        message, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")
    return _HEADER.pack(len(body)) + body


class FrameDecoder:
    """Collects stream data and splits it into framed JSON objects."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def feed(self, data: bytes) -> list[dict[str, Any]]:
        """Add received bytes; return every complete message now available.

        Frames whose payload is not a JSON object are logged and dropped.
        """
        self._buffer.extend(data)
        messages: list[dict[str, Any]] = []
        while len(self._buffer) >= _HEADER.size:
            (size,) = _HEADER.unpack_from(self._buffer)
            end = _HEADER.size + size
            if len(self._buffer) < end:
                break
            payload = bytes(self._buffer[_HEADER.size : end])
            del self._buffer[:end]
            try:
                document = json.loads(payload)
            except ValueError as exc:
                logger.warning("Invalid JSON received: %s", exc)
                continue
            if isinstance(document, dict):
                messages.append(document)
            else:
                logger.warning("Invalid JSON received: not an object")
        return messages