"""Exceptions raised by the BIN codec."""


class BinError(Exception):
    """Base class for all BIN codec errors."""


class FormatError(BinError, ValueError):
    """Input is not a BIN archive, or a tree cannot be written as one."""


class UnrecognizedFormatError(FormatError):
    """The header magic matches no known variant in either byte order."""

    def __init__(self, magic: int):
        super().__init__(f"Unrecognized file magic number: {magic:08X}")
        self.magic = magic


class ChunkIntegrityError(BinError):
    """A chunk stream inflated to a different length than it declares."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Result size doesn't match with expected size: {actual} != {expected}")
        self.expected = expected
        self.actual = actual


class UnsupportedTypeError(BinError):
    """A leaf carries a type tag the writer cannot encode."""

    def __init__(self, file_type, reason: str = ""):
        message = f"Unsupported file type: {file_type!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.file_type = file_type


class NotFoundError(BinError, LookupError):
    """An update references a path that does not exist in the archive."""

    def __init__(self, path: str):
        super().__init__(f"Not found in archive: {path}")
        self.path = path
