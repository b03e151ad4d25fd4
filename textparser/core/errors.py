from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    INVALID_FILENAME = "invalid_filename"
    FILE_NOT_FOUND = "file_not_found"
    FILE_NOT_READABLE = "file_not_readable"
    FILE_CANT_OPEN = "file_cant_open"
    INVALID_FILEHANDLE = "invalid_filehandle"
    BAD_READ_INPUT = "bad_read_input"
    PARSING = "parsing"


INPUT_RESOLUTION_KINDS = frozenset(
    {
        ErrorKind.INVALID_FILENAME,
        ErrorKind.FILE_NOT_FOUND,
        ErrorKind.FILE_NOT_READABLE,
        ErrorKind.FILE_CANT_OPEN,
        ErrorKind.INVALID_FILEHANDLE,
    }
)


class TextParserError(Exception):
    """Base class for every error raised by textparser.

    Each error carries a ``kind`` from :class:`ErrorKind` and a readable
    ``message``. Callers that need finer detail than the exception class
    should match on ``kind``.
    """

    kind: ErrorKind = ErrorKind.PARSING

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    def __str__(self) -> str:
        return self.message


class ConfigurationError(TextParserError):
    kind = ErrorKind.CONFIGURATION


class InputResolutionError(TextParserError):
    kind = ErrorKind.FILE_NOT_READABLE

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        if kind is not None and kind not in INPUT_RESOLUTION_KINDS:
            raise ValueError(f"{kind!r} is not an input resolution error kind")
        super().__init__(message, kind)


class BadReadInput(TextParserError):
    kind = ErrorKind.BAD_READ_INPUT


class ParsingError(TextParserError):
    kind = ErrorKind.PARSING
