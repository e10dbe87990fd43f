"""Length-prefixed message framing over asyncio streams."""

from __future__ import annotations

import asyncio
import struct

IO_TIMEOUT = 30.0
MAX_MESSAGE_SIZE = 10 * 1024 * 1024

_LEN = struct.Struct(">I")


class FramingError(Exception):
    """A framed message could not be read or written."""


class FramingTimeoutError(FramingError):
    """The stream did not complete an operation within the I/O timeout."""

    def __init__(self) -> None:
        super().__init__("IO timeout")


class MessageTooLargeError(FramingError):
    """A message exceeds the maximum permitted size."""

    def __init__(self, size: int) -> None:
        super().__init__(f"Message too large: {size} bytes")
        self.size = size


async def _read_exactly(reader: asyncio.StreamReader, n: int) -> bytes:
    try:
        return await asyncio.wait_for(reader.readexactly(n), IO_TIMEOUT)
    except asyncio.TimeoutError:
        raise FramingTimeoutError() from None
    except (asyncio.IncompleteReadError, OSError) as exc:
        raise FramingError(f"IO error: {exc}") from exc


async def read_message(reader: asyncio.StreamReader) -> bytes:
    """Read one message prefixed by its length as a big-endian u32."""
    (length,) = _LEN.unpack(await _read_exactly(reader, _LEN.size))
    if length > MAX_MESSAGE_SIZE:
        raise MessageTooLargeError(length)
    return await _read_exactly(reader, length)


async def write_message(writer: asyncio.StreamWriter, payload: bytes) -> None:
    """Write ``payload`` prefixed by its length as a big-endian u32."""
    payload = bytes(payload)
    if len(payload) > MAX_MESSAGE_SIZE:
        raise MessageTooLargeError(len(payload))
    try:
        writer.write(_LEN.pack(len(payload)) + payload)
        await asyncio.wait_for(writer.drain(), IO_TIMEOUT)
    except asyncio.TimeoutError:
        raise FramingTimeoutError() from None
    except OSError as exc:
        raise FramingError(f"IO error: {exc}") from exc