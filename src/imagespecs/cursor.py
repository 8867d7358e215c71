"""Bounds-checked positional reader over an in-memory byte buffer.

Every decoder is written as straight-line code of tentative reads against
untrusted, possibly truncated input. All capacity checks live here so a read
past the end raises :class:`~imagespecs.errors.OutOfRangeError` instead of
returning partial data.
"""

from __future__ import annotations

from typing import Literal

from imagespecs.errors import ERROR_MSG_INVALID_SEEK, ERROR_MSG_READ_PAST_END, OutOfRangeError

type ByteOrder = Literal["big", "little"]


class ByteCursor:
    """Positioned reader with a fixed byte order."""

    __slots__ = ("_buf", "_byteorder", "_pos")

    def __init__(self, data: bytes | bytearray | memoryview, byteorder: ByteOrder = "big") -> None:
        self._buf = bytes(data)
        self._byteorder: ByteOrder = byteorder
        self._pos = 0

    def __len__(self) -> int:
        return len(self._buf)

    def __repr__(self) -> str:
        return f"ByteCursor(len={len(self._buf)}, position={self._pos}, byteorder={self._byteorder!r})"

    @property
    def data(self) -> bytes:
        return self._buf

    @property
    def byteorder(self) -> ByteOrder:
        return self._byteorder

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._buf) - self._pos

    def can_read(self, n: int) -> bool:
        """Return True iff ``n`` more bytes are available."""
        return self._pos + n <= len(self._buf)

    def _take(self, n: int) -> bytes:
        if n < 0 or not self.can_read(n):
            raise OutOfRangeError(ERROR_MSG_READ_PAST_END)
        chunk = self._buf[self._pos : self._pos + n]
        self._pos += n
        return chunk

    def _read_int(self, width: int, *, signed: bool = False) -> int:
        return int.from_bytes(self._take(width), self._byteorder, signed=signed)

    def read_uint8(self) -> int:
        return self._read_int(1)

    def read_uint16(self) -> int:
        return self._read_int(2)

    def read_uint32(self) -> int:
        return self._read_int(4)

    def read_int32(self) -> int:
        return self._read_int(4, signed=True)

    def read_string(self, length: int, encoding: str = "utf-8") -> str:
        """Consume ``length`` bytes and decode them as text."""
        return self._take(length).decode(encoding, errors="replace")

    def read_null_terminated_string(self, max_length: int | None = None, encoding: str = "utf-8") -> str:
        """Read up to a NUL byte (bounded by ``max_length``) and step past it if found."""
        start = self._pos
        limit = len(self._buf) if max_length is None else min(start + max_length, len(self._buf))
        end = self._buf.find(b"\x00", start, limit)
        if end == -1:
            self._pos = limit
            return self._buf[start:limit].decode(encoding, errors="replace")
        self._pos = end + 1
        return self._buf[start:end].decode(encoding, errors="replace")

    def read_bytes(self, length: int) -> bytes:
        return self._take(length)

    def skip(self, n: int) -> None:
        """Advance by ``n`` bytes, clamped to the end of the buffer."""
        self._pos = min(self._pos + n, len(self._buf))

    def seek(self, position: int) -> None:
        if position < 0 or position > len(self._buf):
            raise OutOfRangeError(ERROR_MSG_INVALID_SEEK)
        self._pos = position

    def peek_uint8(self) -> int:
        if self._pos >= len(self._buf):
            raise OutOfRangeError(ERROR_MSG_READ_PAST_END)
        return self._buf[self._pos]

    def fork(self, byteorder: ByteOrder) -> ByteCursor:
        """Return a cursor over the same buffer at the same position with another byte order."""
        other = ByteCursor(self._buf, byteorder)
        other._pos = self._pos  # noqa: SLF001
        return other
