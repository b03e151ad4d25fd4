from __future__ import annotations

import codecs
import io
import os
from pathlib import Path
from typing import IO, Iterator, Optional, Union

import chardet  # type: ignore

from .errors import ErrorKind, InputResolutionError

BINARY_BYTES = bytes(range(0, 32)) + b"\x7f"
HEAD_BYTES = 4096
FALLBACK_ENCODING = "utf-8"

PathArg = Union[str, "os.PathLike[str]"]


def is_likely_binary(data: bytes, control_threshold: float = 0.30) -> bool:
    if not data:
        return False
    if 0 in data:
        return True
    control = sum(1 for b in data if b in BINARY_BYTES and b not in (9, 10, 12, 13))
    return (control / len(data)) > control_threshold


def detect_encoding(head: bytes) -> str:
    enc = chardet.detect(head).get("encoding")
    # ASCII heads are common for files that turn to UTF-8 further down
    if not enc or enc.lower() == "ascii":
        return FALLBACK_ENCODING
    try:
        codecs.lookup(enc)
    except LookupError:
        return FALLBACK_ENCODING
    return enc


def check_filename(path: object) -> Path:
    if not isinstance(path, (str, os.PathLike)):
        raise InputResolutionError(f"{path!r} is not a string", ErrorKind.INVALID_FILENAME)
    p = Path(path)
    if not p.is_file():
        raise InputResolutionError(f"{path} is not a file", ErrorKind.FILE_NOT_FOUND)
    if not os.access(p, os.R_OK):
        raise InputResolutionError(f"{path} is not readable", ErrorKind.FILE_NOT_READABLE)
    return p


def check_filehandle(handle: object) -> IO[str]:
    if isinstance(handle, (str, bytes, os.PathLike)) or not callable(getattr(handle, "readline", None)):
        raise InputResolutionError(f"{handle!r} is not a valid filehandle", ErrorKind.INVALID_FILEHANDLE)
    if getattr(handle, "closed", False):
        raise InputResolutionError(f"{handle!r} is a closed filehandle", ErrorKind.FILE_NOT_READABLE)
    readable = getattr(handle, "readable", None)
    if callable(readable) and not readable():
        raise InputResolutionError(f"The filehandle {handle!r} is not readable", ErrorKind.FILE_NOT_READABLE)
    mode = getattr(handle, "mode", "")
    if isinstance(handle, (io.RawIOBase, io.BufferedIOBase)) or (isinstance(mode, str) and "b" in mode):
        raise InputResolutionError(
            f"The filehandle {handle!r} is opened in binary mode; open it in text mode",
            ErrorKind.INVALID_FILEHANDLE,
        )
    return handle  # type: ignore[return-value]


def open_managed(path: PathArg, encoding: Optional[str] = None) -> IO[str]:
    """Open ``path`` for line reading.

    The encoding is sniffed from the head of the file with chardet unless one
    is given. Line terminators are left on the lines (``newline=""``) so that
    ``auto_chomp`` stays meaningful.
    """

    p = Path(path)
    try:
        with p.open("rb") as raw:
            head = raw.read(HEAD_BYTES)
    except OSError as exc:
        raise InputResolutionError(f"Error while opening file {p}: {exc}", ErrorKind.FILE_CANT_OPEN) from exc
    if is_likely_binary(head):
        raise InputResolutionError(f"{p} does not look like a text file", ErrorKind.FILE_NOT_READABLE)
    enc = encoding or detect_encoding(head)
    try:
        return p.open("r", encoding=enc, errors="replace", newline="")
    except (OSError, LookupError) as exc:
        raise InputResolutionError(f"Error while opening file {p}: {exc}", ErrorKind.FILE_CANT_OPEN) from exc


class Source:
    owned = False

    def __init__(self, handle: IO[str], name: str) -> None:
        self.handle = handle
        self.name = name

    def lines(self) -> Iterator[str]:
        # readline keeps a borrowed handle positioned right after the last line consumed
        return iter(self.handle.readline, "")

    def close(self) -> None:
        pass

    def __enter__(self) -> "Source":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ManagedSource(Source):
    owned = True

    def __init__(self, path: PathArg, encoding: Optional[str] = None) -> None:
        super().__init__(open_managed(path, encoding), str(path))

    def close(self) -> None:
        if not self.handle.closed:
            self.handle.close()


class BorrowedSource(Source):
    def __init__(self, handle: IO[str]) -> None:
        super().__init__(check_filehandle(handle), str(getattr(handle, "name", repr(handle))))
