"""
This module contains bounds-checked primitives for decoding little-endian ints and byte spans from an in-memory
buffer at an explicit offset, as well as the `BufferReader` class, a cursor that wraps them.

All primitives follow the same convention: they take the buffer and an offset, and return a tuple of the decoded
value and the offset immediately past it. If the requested span would extend past the end of the buffer, an
`OverrunError` is raised instead and nothing is returned.
"""

from typing import Optional, Tuple, Union

from .errors import OverrunError


Buffer = Union[bytes, bytearray, memoryview]


def read_bytes(data: Buffer, offset: int, n_bytes: int, meaning: Optional[str] = None) -> Tuple[bytes, int]:
    """
    Reads exactly `n_bytes` of raw data from `data`, starting at `offset`.

    Args:
        data: The buffer to read from.
        offset: The position at which the span starts.
        n_bytes: The length of the span.
        meaning: An indication as to the meaning of the data being read (e.g. "extra field"). It is used in the text
            of any exceptions that may be thrown.

    Returns:
        A tuple of the data (always an independent `bytes` copy, even if `data` is a `bytearray` or `memoryview`) and
        the offset immediately after it.

    Raises:
        OverrunError: If the span extends past the end of the buffer.
    """

    if offset < 0:
        raise ValueError(f"Offset cannot be negative (is: {offset})")
    if n_bytes < 0:
        raise ValueError(f"The number of bytes to read cannot be negative (is: {n_bytes})")

    end = offset + n_bytes
    if end > len(data):
        raise OverrunError(offset, n_bytes, max(len(data) - offset, 0), meaning)

    return bytes(data[offset:end]), end


def read_text(data: Buffer, offset: int, n_bytes: int, meaning: Optional[str] = None) -> Tuple[str, int]:
    """
    Like `read_bytes`, but interprets the span as UTF-8 text.

    No validation is performed: undecodable bytes are mapped to lone surrogates (the ``surrogateescape`` scheme), so
    the original bytes can always be recovered with ``text.encode('utf-8', 'surrogateescape')``.
    """
    raw, end = read_bytes(data, offset, n_bytes, meaning)

    return raw.decode('utf-8', 'surrogateescape'), end


def read_uint16(data: Buffer, offset: int, meaning: Optional[str] = None) -> Tuple[int, int]:
    return _read_uint(data, offset, 2, meaning)


def read_uint32(data: Buffer, offset: int, meaning: Optional[str] = None) -> Tuple[int, int]:
    return _read_uint(data, offset, 4, meaning)


def _read_uint(data: Buffer, offset: int, n_bytes: int, meaning: Optional[str]) -> Tuple[int, int]:
    raw, end = read_bytes(data, offset, n_bytes, meaning or f"{n_bytes * 8}-bit int")

    return int.from_bytes(raw, byteorder='little', signed=False), end


class BufferReader:
    """
    A cursor over an in-memory buffer that offers the functions in this module as methods, keeping track of the
    current position by itself.

    A failed read leaves the position unchanged.
    """

    _data: Buffer
    _position: int

    def __init__(self, data: Buffer, position: int = 0):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError("Input to BufferReader must be a bytes-like object")
        if position < 0:
            raise ValueError(f"Position cannot be negative (is: {position})")

        self._data = data
        self._position = position

    def tell(self) -> int:
        return self._position

    def bytes_remaining(self) -> int:
        return max(len(self._data) - self._position, 0)

    def eof(self) -> bool:
        return self.bytes_remaining() == 0

    def read_bytes(self, n_bytes: int, meaning: Optional[str] = None) -> bytes:
        value, self._position = read_bytes(self._data, self._position, n_bytes, meaning)
        return value

    def read_text(self, n_bytes: int, meaning: Optional[str] = None) -> str:
        value, self._position = read_text(self._data, self._position, n_bytes, meaning)
        return value

    def read_uint16(self, meaning: Optional[str] = None) -> int:
        value, self._position = read_uint16(self._data, self._position, meaning)
        return value

    def read_uint32(self, meaning: Optional[str] = None) -> int:
        value, self._position = read_uint32(self._data, self._position, meaning)
        return value
