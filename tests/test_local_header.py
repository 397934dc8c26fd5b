import unittest

from datetime import datetime

from atmfjstc.lib.zip_local_reader import decode_zip_local_header, ZipEntryCompression, ZipEntryFlags, \
    ZIP_LOCAL_HEADER_SIGNATURE
from atmfjstc.lib.zip_local_reader.errors import ZipLocalReaderError, OverrunError, NotAZipError, \
    DecompressionError, UnsupportedCompressionError

from zip_samples import make_local_record, deflate_raw, dos_date, dos_time


class DecodeStoredTest(unittest.TestCase):
    def test_hello(self):
        record = make_local_record(name=b'hello.txt', contents=b'hi', method=0)

        entry, next_offset = decode_zip_local_header(record, 0)

        self.assertEqual(entry.signature, ZIP_LOCAL_HEADER_SIGNATURE)
        self.assertEqual(entry.file_name, 'hello.txt')
        self.assertEqual(entry.contents, b'hi')
        self.assertEqual(entry.uncompressed_size, 2)
        self.assertEqual(entry.compression, ZipEntryCompression.STORE)
        self.assertEqual(entry.last_modified, datetime(1980, 1, 1))
        self.assertEqual(next_offset, 30 + 9 + 2)
        self.assertEqual(entry.next_offset, next_offset)
        self.assertEqual(entry.data_offset, 30 + 9)
        self.assertEqual(entry.total_size, len(record))

    def test_passthrough_fields(self):
        record = make_local_record(
            name=b'dir/', contents=b'', flags=0x0808, extra=b'\x55\x54\x01\x00\x00', crc32=0xdeadbeef,
            raw_time=dos_time(12, 30, 45), raw_date=dos_date(2020, 2, 29),
        )

        entry, _ = decode_zip_local_header(record)

        self.assertEqual(entry.version_needed, 20)
        self.assertEqual(entry.flags, ZipEntryFlags.UTF8 | ZipEntryFlags.DEFERRED_CRC32)
        self.assertEqual(entry.crc32, 0xdeadbeef)
        self.assertEqual(entry.extra_field, b'\x55\x54\x01\x00\x00')
        self.assertEqual(entry.last_modified, datetime(2020, 2, 29, 12, 30, 44))
        self.assertEqual(entry.raw_dos_time, dos_time(12, 30, 45))
        self.assertEqual(entry.raw_dos_date, dos_date(2020, 2, 29))
        self.assertTrue(entry.is_directory)

    def test_at_offset(self):
        first = make_local_record(name=b'a', contents=b'first')
        second = make_local_record(name=b'b', contents=b'second')

        entry, next_offset = decode_zip_local_header(first + second, len(first))

        self.assertEqual(entry.file_name, 'b')
        self.assertEqual(entry.header_offset, len(first))
        self.assertEqual(next_offset, len(first) + len(second))

    def test_non_utf8_name(self):
        entry, _ = decode_zip_local_header(make_local_record(name=b'caf\xe9.txt'))

        self.assertEqual(entry.raw_file_name, b'caf\xe9.txt')
        self.assertEqual(entry.file_name.encode('utf-8', 'surrogateescape'), b'caf\xe9.txt')

    def test_contents_do_not_alias_buffer(self):
        buffer = bytearray(make_local_record(name=b'x', contents=b'data'))

        entry, _ = decode_zip_local_header(buffer)
        buffer[:] = b'\x00' * len(buffer)

        self.assertEqual(entry.contents, b'data')
        self.assertEqual(entry.file_name, 'x')


class DecodeDeflatedTest(unittest.TestCase):
    def test_round_trip(self):
        contents = b'The quick brown fox jumps over the lazy dog. ' * 40
        record = make_local_record(name=b'fox.txt', contents=contents, method=8)

        entry, next_offset = decode_zip_local_header(record)

        self.assertEqual(entry.compression, ZipEntryCompression.DEFLATE)
        self.assertEqual(entry.contents, contents)
        self.assertEqual(entry.uncompressed_size, len(contents))
        self.assertLess(entry.compressed_size, len(contents))
        self.assertEqual(next_offset, len(record))
        self.assertEqual(entry.compression_method_name, 'DEFLATE')

    def test_advances_by_compressed_size(self):
        record = make_local_record(name=b'zeros', contents=b'\x00' * 10000, method=8)
        trailer = make_local_record(name=b'next')

        _, next_offset = decode_zip_local_header(record + trailer)

        self.assertEqual(next_offset, 30 + 5 + len(deflate_raw(b'\x00' * 10000)))
        self.assertEqual(next_offset, len(record))

    def test_empty_file(self):
        entry, _ = decode_zip_local_header(make_local_record(contents=b'', method=8))

        self.assertEqual(entry.contents, b'')

    def test_corrupt_stream(self):
        record = make_local_record(contents=b'hello', method=8, payload=b'\xff\xff\xff\xff')

        with self.assertRaises(DecompressionError) as cm:
            decode_zip_local_header(record)

        self.assertEqual(cm.exception.file_name, 'hello.txt')
        self.assertEqual(cm.exception.position, 30 + 9)

    def test_stream_cut_short(self):
        full = deflate_raw(b'hello world, ' * 50)
        record = make_local_record(contents=b'hello world, ' * 50, method=8, payload=full[:len(full) // 2])

        with self.assertRaises(DecompressionError):
            decode_zip_local_header(record)

    def test_no_compressed_data(self):
        with self.assertRaises(DecompressionError):
            decode_zip_local_header(make_local_record(contents=b'abc', method=8, payload=b''))


class DecodeMethodTest(unittest.TestCase):
    def test_unknown_method_treated_as_stored(self):
        entry, _ = decode_zip_local_header(make_local_record(contents=b'raw bytes', method=12))

        self.assertEqual(entry.compression, ZipEntryCompression.STORE)
        self.assertEqual(entry.raw_compression_method, 12)
        self.assertEqual(entry.contents, b'raw bytes')
        self.assertEqual(entry.compression_method_name, 'BZIP2')

    def test_unknown_method_strict(self):
        with self.assertRaises(UnsupportedCompressionError) as cm:
            decode_zip_local_header(make_local_record(contents=b'raw bytes', method=12), strict_compression=True)

        self.assertEqual(cm.exception.method, 12)
        self.assertIn('BZIP2', str(cm.exception))

    def test_unnamed_method_strict(self):
        with self.assertRaises(UnsupportedCompressionError) as cm:
            decode_zip_local_header(make_local_record(method=77), strict_compression=True)

        self.assertEqual(cm.exception.method, 77)

    def test_supported_methods_strict(self):
        for method in (0, 8):
            with self.subTest(method=method):
                entry, _ = decode_zip_local_header(make_local_record(method=method), strict_compression=True)

                self.assertEqual(entry.contents, b'hi')


class DecodeErrorsTest(unittest.TestCase):
    def test_bad_signature(self):
        with self.assertRaises(NotAZipError) as cm:
            decode_zip_local_header(make_local_record(signature=b'PK\x01\x02'))

        self.assertEqual(cm.exception.found_signature, b'PK\x01\x02')
        self.assertEqual(cm.exception.position, 0)

    def test_short_signature(self):
        with self.assertRaises(NotAZipError):
            decode_zip_local_header(b'PK\x03')

    def test_stored_truncations(self):
        record = make_local_record(name=b'hello.txt', contents=b'hi', extra=b'\x01\x02')

        for cut in range(4, len(record)):
            with self.subTest(cut=cut):
                with self.assertRaises(OverrunError):
                    decode_zip_local_header(record[:cut])

    def test_deflated_truncations(self):
        record = make_local_record(contents=b'some text, some text, some text', method=8)

        for cut in range(4, len(record)):
            with self.subTest(cut=cut):
                with self.assertRaises(OverrunError):
                    decode_zip_local_header(record[:cut])

    def test_truncations_with_invalid_date(self):
        record = make_local_record(name=b'hello.txt', contents=b'hi', raw_date=0)

        for cut in range(4, len(record)):
            with self.subTest(cut=cut):
                with self.assertRaises(OverrunError):
                    decode_zip_local_header(record[:cut])

    def test_invalid_date_in_complete_record(self):
        with self.assertRaises(ValueError):
            decode_zip_local_header(make_local_record(raw_date=0))

    def test_strict_truncations(self):
        record = make_local_record(contents=b'raw bytes', method=12)

        for cut in range(4, 30):
            with self.subTest(cut=cut):
                with self.assertRaises(OverrunError):
                    decode_zip_local_header(record[:cut], strict_compression=True)

        with self.assertRaises(UnsupportedCompressionError):
            decode_zip_local_header(record[:30], strict_compression=True)

    def test_declared_size_too_large(self):
        record = make_local_record(contents=b'hi', payload=b'h')

        with self.assertRaises(OverrunError):
            decode_zip_local_header(record)

    def test_common_base_class(self):
        for exc in (OverrunError, NotAZipError, DecompressionError, UnsupportedCompressionError):
            self.assertTrue(issubclass(exc, ZipLocalReaderError))
