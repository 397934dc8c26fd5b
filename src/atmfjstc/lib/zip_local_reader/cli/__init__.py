"""
Command-line front end: lists the entries of a ZIP archive (timestamp, name and contents) by walking its local headers.
"""

import logging

from argparse import ArgumentParser, Namespace
from typing import List, Optional

import colorama

from .. import ZipLocalEntry, ZipLocalReaderError, iter_zip_local_entries
from ..dos_time import iso_from_datetime
from .console import console
from .errors import descriptive_errors, pretty_unhandled


@pretty_unhandled
def main(argv: Optional[List[str]] = None):
    args = _parse_args(argv)

    colorama.just_fix_windows_console()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    with descriptive_errors(OSError):
        with open(args.archive, 'rb') as f:
            data = f.read()

    n_entries = 0

    with descriptive_errors(ZipLocalReaderError):
        for entry in iter_zip_local_entries(data, strict_compression=args.strict_compression):
            console.print_info(_format_entry(entry, show_contents=not args.no_contents))
            n_entries += 1

    console.print_success(f"{n_entries} {'entry' if n_entries == 1 else 'entries'}")


def _parse_args(argv: Optional[List[str]]) -> Namespace:
    parser = ArgumentParser(
        prog='zip-local-reader',
        description="Lists the entries in a ZIP archive by walking its local file headers",
    )

    parser.add_argument('archive', help="The ZIP file to read")
    parser.add_argument(
        '--strict-compression', action='store_true',
        help="Fail on entries compressed with anything other than STORE or DEFLATE, instead of treating them as "
             "stored"
    )
    parser.add_argument(
        '--no-contents', action='store_true', help="Only show the metadata for each entry, not the contents"
    )
    parser.add_argument('-v', '--verbose', action='store_true', help="Show debug messages")

    return parser.parse_args(argv)


def _format_entry(entry: ZipLocalEntry, show_contents: bool) -> str:
    name = entry.raw_file_name.decode('utf-8', 'replace')
    timestamp = iso_from_datetime(entry.last_modified)

    if not show_contents:
        return (
            f"{timestamp} {name} ({entry.compression_method_name}, {entry.compressed_size} -> "
            f"{len(entry.contents)} bytes)"
        )

    return f"{timestamp} {name} {entry.contents.decode('utf-8', 'replace')}"
