from typing import Optional


class ZipLocalReaderError(Exception):
    """
    Base class for all errors signaling that the data does not match the expected ZIP local header format.
    """


class OverrunError(ZipLocalReaderError):
    position: int
    expected_length: int
    actual_length: int
    meaning: Optional[str]

    def __init__(self, position: int, expected_length: int, actual_length: int, meaning: Optional[str]):
        self.position = position
        self.expected_length = expected_length
        self.actual_length = actual_length
        self.meaning = meaning

        super().__init__(
            f"At position {position}, expected {expected_length} "
            f"bytes{f' for {meaning}' if meaning is not None else ''}"
            f", but only {actual_length} were found"
        )


class NotAZipError(ZipLocalReaderError):
    """
    Raised when the data at some position does not start with a ZIP local file header signature.

    When walking an archive, this is only an error if it happens for the very first record. Afterwards, it just marks
    the end of the local headers (normally the start of the central directory).
    """

    position: int
    found_signature: bytes

    def __init__(self, position: int, found_signature: bytes):
        self.position = position
        self.found_signature = found_signature

        super().__init__(
            f"At position {position}, expected a ZIP local file header signature, but found "
            f"{f'0x{found_signature.hex()}' if len(found_signature) > 0 else 'the end of the data'}"
        )


class DecompressionError(ZipLocalReaderError):
    position: int
    file_name: str

    def __init__(self, position: int, file_name: str, reason: str):
        self.position = position
        self.file_name = file_name

        super().__init__(f"Could not inflate the data for entry '{file_name}' at position {position}: {reason}")


class UnsupportedCompressionError(ZipLocalReaderError):
    position: int
    method: int

    def __init__(self, position: int, method: int, method_name: Optional[str]):
        self.position = position
        self.method = method

        super().__init__(
            f"Entry at position {position} uses compression method {method}"
            f"{f' ({method_name})' if method_name is not None else ''}, only STORE and DEFLATE are supported"
        )
