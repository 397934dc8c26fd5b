"""
Utilities for decoding the MS-DOS date/time pairs used for timestamps throughout the ZIP format.

The encoding packs a local (timezone-less) timestamp with a 2-second resolution into two 16-bit words:

- time: bits 0-4 = seconds / 2, bits 5-10 = minutes, bits 11-15 = hours
- date: bits 0-4 = day, bits 5-8 = month (1-12), bits 9-15 = years since 1980
"""

from datetime import datetime
from typing import NewType


ISOTimestamp = NewType('ISOTimestamp', str)


def decode_dos_timestamp(dos_date: int, dos_time: int) -> datetime:
    """
    Converts a DOS date/time pair to a naive `datetime` (which should be interpreted as local time).

    Nothing is validated beyond what `datetime` itself validates, so e.g. month 0 or February 31 will raise the usual
    `ValueError`.
    """
    seconds = (dos_time & 0x1F) * 2
    minutes = (dos_time >> 5) & 0x3F
    hours = dos_time >> 11

    day = dos_date & 0x1F
    month = (dos_date >> 5) & 0x0F
    year = ((dos_date >> 9) & 0x7F) + 1980

    return datetime(year, month, day, hours, minutes, seconds)


def iso_from_dos_timestamp(dos_date: int, dos_time: int) -> ISOTimestamp:
    """
    Like `decode_dos_timestamp`, but renders the result as a naive ``yyyy-mm-dd hh:mm:ss`` timestamp.
    """
    return iso_from_datetime(decode_dos_timestamp(dos_date, dos_time))


def iso_from_datetime(py_datetime: datetime) -> ISOTimestamp:
    """
    Converts a `datetime` to a canonical ISO timestamp (no trailing zero decimals, no timezone if naive).
    """
    base_ts = py_datetime.isoformat(sep=' ', timespec='seconds')
    decimals = f".{py_datetime.microsecond:06}".rstrip('0.')

    return ISOTimestamp(f"{base_ts[:19]}{decimals}{base_ts[19:]}")
