"""
A minimal, streaming-style reader for ZIP archives held entirely in memory.

Unlike `zipfile`, this package ignores the central directory altogether. Instead, it discovers entries by walking the
local file headers back-to-back from the start of the archive, decoding each one along with its payload (stored or
DEFLATE-compressed), until it runs into something that is not a local header (normally, the central directory).

The main entry point is `iter_zip_local_entries`::

    for entry in iter_zip_local_entries(data):
        print(entry.last_modified, entry.file_name, entry.contents)

The lower-level `decode_zip_local_header` decodes a single record at a given offset and can be used for building
alternative walkers.

Limitations: no support for encryption, Zip64, multi-disk archives, or compression methods other than STORE and
DEFLATE. CRC-32 values are reported but not verified. Archives whose entries use a data descriptor (i.e. the sizes
are only recorded after the data) cannot be walked this way.
"""

import logging
import zlib

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum, IntFlag
from os import PathLike
from typing import AnyStr, Iterator, List, Tuple, Type, TypeVar, Union

from .BufferReader import Buffer, BufferReader
from .dos_time import decode_dos_timestamp
from .errors import ZipLocalReaderError, OverrunError, NotAZipError, DecompressionError, \
    UnsupportedCompressionError


__version__ = '1.0.0'


LOG = logging.getLogger(__name__)


ZIP_LOCAL_HEADER_MAGIC = b'PK\x03\x04'
ZIP_LOCAL_HEADER_SIGNATURE = 0x04034b50


class ZipEntryFlags(IntFlag):
    ENCRYPTED = 1 << 0
    DEFLATE_MAX_COMPRESSION = 1 << 1
    DEFLATE_FAST_COMPRESSION = 1 << 2
    DEFLATE_SUPERFAST_COMPRESSION = (1 << 1) | (1 << 2)
    DEFERRED_CRC32 = 1 << 3
    ENHANCED_DEFLATE = 1 << 4
    PATCHED_DATA = 1 << 5
    STRONG_ENCRYPTION = 1 << 6
    UTF8 = 1 << 11
    ENHANCED_COMPRESSION = 1 << 12
    LOCAL_HEADER_MASKED = 1 << 13


class ZipCompressionMethod(IntEnum):
    STORE = 0
    SHRINK = 1
    REDUCE1 = 2
    REDUCE2 = 3
    REDUCE3 = 4
    REDUCE4 = 5
    IMPLODE = 6
    TOKENIZE = 7
    DEFLATE = 8
    DEFLATE64 = 9
    DCL_IMPLODE = 10
    BZIP2 = 12
    LZMA = 14
    ZOS_CMPSC = 16
    IBM_TERSE_NEW = 18
    IBM_LZ77 = 19
    ZSTANDARD_OLD = 20
    ZSTANDARD = 93
    MP3 = 94
    XZ = 95
    JPEG_VARIANT = 96
    WAVPACK = 97
    PPMD = 98
    AE_X_ENCRYPTION = 99


class ZipEntryCompression(Enum):
    """
    The way an entry's payload is actually decoded. Note that there are only two choices, see
    `decode_zip_local_header` for how the raw method codes map onto them.
    """
    STORE = 'store'
    DEFLATE = 'deflate'


@dataclass(frozen=True)
class ZipLocalEntry:
    """
    An object containing the data decoded from a ZIP local file header and its payload.

    Objects of this type are inert data containers. They do not reference the buffer they were decoded from in any
    way, so the caller is free to reuse or discard it.

    Attributes:
        signature: The header signature, which is always `ZIP_LOCAL_HEADER_SIGNATURE` for a successfully decoded
            entry.
        version_needed: The "version needed to extract" field, as a raw int.
        flags: A `ZipEntryFlags` enum containing the general purpose flags. These are not interpreted by the decoder.
        compression: A `ZipEntryCompression` enum specifying how the payload was decoded.
        raw_compression_method: The compression method code exactly as found in the header.
        last_modified: The last modification time, as a naive `datetime` (in the local time of the archiver).
        raw_dos_time: The raw DOS time word the above was decoded from.
        raw_dos_date: The raw DOS date word the above was decoded from.
        crc32: The declared CRC-32 of the uncompressed data. It is NOT verified.
        compressed_size: The declared size of the payload as stored in the archive.
        uncompressed_size: The declared size of the payload after decompression.
        file_name: The file name, as a string. Bytes that are not valid UTF-8 are preserved as lone surrogates.
        raw_file_name: The file name, as found in the header.
        extra_field: The content of the extra field, as raw bytes.
        contents: The decoded payload.
        header_offset: The offset, in bytes, at which the header starts in the archive.
        data_offset: The offset, in bytes, at which the payload starts in the archive.
        next_offset: The offset immediately after the payload, i.e. where the next header is expected to start.
    """

    signature: int
    version_needed: int
    flags: ZipEntryFlags
    compression: ZipEntryCompression
    raw_compression_method: int

    last_modified: datetime
    raw_dos_time: int
    raw_dos_date: int

    crc32: int
    compressed_size: int
    uncompressed_size: int

    file_name: str
    raw_file_name: bytes
    extra_field: bytes

    contents: bytes

    header_offset: int
    data_offset: int
    next_offset: int

    @property
    def total_size(self) -> int:
        return self.next_offset - self.header_offset

    @property
    def is_directory(self) -> bool:
        return self.file_name.endswith('/')

    @property
    def compression_method_name(self) -> str:
        method = _as_enum(self.raw_compression_method, ZipCompressionMethod)

        return method.name if isinstance(method, ZipCompressionMethod) else str(method)


def decode_zip_local_header(
    data: Buffer, offset: int = 0, strict_compression: bool = False
) -> Tuple[ZipLocalEntry, int]:
    """
    Decodes a single ZIP local file header and its payload.

    Args:
        data: A buffer containing the archive (or at least the complete record).
        offset: The position at which the record starts.
        strict_compression: By default, any compression method other than DEFLATE (8) is treated like STORE, which
            matches the behavior of the simplest ZIP readers. Set this to True to raise an
            `UnsupportedCompressionError` for methods other than STORE and DEFLATE instead.

    Returns:
        A tuple of the decoded entry and the offset immediately after the record. Note that the latter is advanced by
        the size of the data as stored in the archive, which for compressed entries differs from the size of the
        decoded contents.

    Raises:
        NotAZipError: If there is no local header signature at `offset` (including when fewer than 4 bytes remain).
        OverrunError: If the record is truncated, i.e. any of its fields extends past the end of the buffer.
        DecompressionError: If the DEFLATE stream is malformed, or ends before the compressed data does.
        UnsupportedCompressionError: In strict mode only, see above. This is checked once the fixed-size part of the
            header has been read, so a record truncated before that point raises `OverrunError` instead.
        ValueError: If the record is complete, but its DOS date/time fields do not form a valid `datetime`.
    """

    reader = BufferReader(data, offset)

    magic = bytes(data[offset:offset + len(ZIP_LOCAL_HEADER_MAGIC)])
    if magic != ZIP_LOCAL_HEADER_MAGIC:
        raise NotAZipError(offset, magic)

    signature = reader.read_uint32('local header signature')
    version_needed = reader.read_uint16('version needed')
    flags = reader.read_uint16('general purpose flags')
    raw_method = reader.read_uint16('compression method')

    compression = ZipEntryCompression.DEFLATE if raw_method == ZipCompressionMethod.DEFLATE \
        else ZipEntryCompression.STORE

    raw_dos_time = reader.read_uint16('last modified time')
    raw_dos_date = reader.read_uint16('last modified date')

    crc32 = reader.read_uint32('CRC-32')
    compressed_size = reader.read_uint32('compressed size')
    uncompressed_size = reader.read_uint32('uncompressed size')

    file_name_length = reader.read_uint16('file name length')
    extra_field_length = reader.read_uint16('extra field length')

    if strict_compression and (raw_method not in (ZipCompressionMethod.STORE, ZipCompressionMethod.DEFLATE)):
        method = _as_enum(raw_method, ZipCompressionMethod)
        raise UnsupportedCompressionError(offset, raw_method, method.name if isinstance(method, Enum) else None)

    raw_file_name = reader.read_bytes(file_name_length, 'file name')
    file_name = raw_file_name.decode('utf-8', 'surrogateescape')
    extra_field = reader.read_bytes(extra_field_length, 'extra field')

    data_offset = reader.tell()

    if compression == ZipEntryCompression.STORE:
        contents = reader.read_bytes(uncompressed_size, 'stored data')
    else:
        contents = _inflate(reader.read_bytes(compressed_size, 'compressed data'), data_offset, file_name)

    # Decoded last: a truncated record must raise OverrunError whatever its date word
    last_modified = decode_dos_timestamp(raw_dos_date, raw_dos_time)

    entry = ZipLocalEntry(
        signature=signature,
        version_needed=version_needed,
        flags=ZipEntryFlags(flags),
        compression=compression,
        raw_compression_method=raw_method,
        last_modified=last_modified,
        raw_dos_time=raw_dos_time,
        raw_dos_date=raw_dos_date,
        crc32=crc32,
        compressed_size=compressed_size,
        uncompressed_size=uncompressed_size,
        file_name=file_name,
        raw_file_name=raw_file_name,
        extra_field=extra_field,
        contents=contents,
        header_offset=offset,
        data_offset=data_offset,
        next_offset=reader.tell(),
    )

    return entry, reader.tell()


def _inflate(compressed_data: bytes, position: int, file_name: str) -> bytes:
    decompressor = zlib.decompressobj(-zlib.MAX_WBITS)

    try:
        result = decompressor.decompress(compressed_data)
        result += decompressor.flush()
    except zlib.error as e:
        raise DecompressionError(position, file_name, str(e)) from e

    if not decompressor.eof:
        raise DecompressionError(position, file_name, "compressed data ends in the middle of the stream")

    return result


def iter_zip_local_entries(data: Buffer, strict_compression: bool = False) -> Iterator[ZipLocalEntry]:
    """
    Walks the local file headers in a ZIP archive, yielding each entry in turn.

    The walk starts at offset 0 and stops cleanly at the end of the data, or at the first position (other than the
    very start) where no local header signature is found.

    Args:
        data: A buffer containing the entire archive.
        strict_compression: See `decode_zip_local_header`.

    Raises:
        NotAZipError: If the data does not start with a local header at all.
        OverrunError: If a record is truncated.
        DecompressionError: If a DEFLATE stream is corrupt.

    Errors occurring after some entries have been yielded are still raised, i.e. a corrupt record is never skipped.
    """

    position = 0

    while position < len(data):
        try:
            entry, next_position = decode_zip_local_header(data, position, strict_compression=strict_compression)
        except NotAZipError as e:
            if position == 0:
                raise

            LOG.debug("Stopping at position %d, no more local headers (found 0x%s)", position, e.found_signature.hex())
            return

        LOG.debug(
            "Decoded entry '%s' at position %d (%s, %d -> %d bytes)",
            entry.file_name, position, entry.compression.name, entry.compressed_size, len(entry.contents)
        )

        position = next_position

        yield entry


def read_zip_local_entries(data: Buffer, strict_compression: bool = False) -> List[ZipLocalEntry]:
    """
    Like `iter_zip_local_entries`, but returns all entries at once, as a list.
    """
    return list(iter_zip_local_entries(data, strict_compression=strict_compression))


def read_zip_local_entries_from_file(
    path: Union[PathLike, AnyStr], strict_compression: bool = False
) -> List[ZipLocalEntry]:
    """
    Loads an entire ZIP archive from a file into memory, then returns its entries as per `read_zip_local_entries`.
    """
    with open(path, 'rb') as f:
        data = f.read()

    LOG.debug("Loaded %d bytes from %s", len(data), path)

    return read_zip_local_entries(data, strict_compression=strict_compression)


T = TypeVar('T')


def _as_enum(raw_value: int, enum: Type[T]) -> Union[T, int]:
    try:
        return enum(raw_value)
    except ValueError:
        return raw_value
