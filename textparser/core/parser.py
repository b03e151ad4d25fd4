from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import IO, Any, Callable, Dict, List, Optional

from .errors import BadReadInput, ConfigurationError
from .multiline import ContinuationPolicy, MultilineType, coerce_multiline_type, policy_for
from .records import RecordStore
from .source import BorrowedSource, ManagedSource, Source, check_filehandle, check_filename


DEFAULT_LOGGER_NAME = "textparser"


def _coerce_auto_chomp(value: Any) -> bool:
    if type(value) in (bool, int) and value in (0, 1):
        return bool(value)
    raise ConfigurationError(f"auto_chomp must be a boolean (or 0/1); got {value!r}")


OPTION_CHECKS: Dict[str, Callable[[Any], Any]] = {
    "auto_chomp": _coerce_auto_chomp,
    "multiline_type": coerce_multiline_type,
}
DEFAULT_VALUES: Dict[str, Any] = {"auto_chomp": False, "multiline_type": None}


def check_options(options: Dict[str, Any]) -> Dict[str, Any]:
    """Validate constructor options and fill in defaults for the missing ones."""

    unknown = sorted(k for k in options if k not in OPTION_CHECKS)
    if unknown:
        raise ConfigurationError(f"Unknown option(s): {', '.join(unknown)}")
    settings = dict(DEFAULT_VALUES)
    for key, value in options.items():
        settings[key] = OPTION_CHECKS[key](value)
    return settings


def chomp(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith(("\n", "\r")):
        return line[:-1]
    return line


@dataclass
class ReadSession:
    """Per-call state of :meth:`TextParser.read`."""
    policy: ContinuationPolicy
    records: RecordStore = field(default_factory=RecordStore)
    lines_parsed: int = 0
    aborted: bool = False

    def reset(self) -> None:
        self.policy.reset()
        self.records.reset()
        self.lines_parsed = 0
        self.aborted = False


class TextParser:
    """
    Bare text parser. It opens and closes files, counts lines, joins
    continued lines and stores records, so that a format-specific parser only
    has to override :meth:`save_record` (and, for multi-line formats,
    :meth:`is_line_continued` and :meth:`join_last_line`).

    Settings live up top: subclasses may set DEFAULT_OPTIONS, which keyword
    arguments given to the constructor override.
    """
    NAME: str = "base"
    DESCRIPTION: str = "Stores every line as a record, unmodified."
    SUPPORTED_EXTENSIONS: List[str] = []  # override in subclasses
    DEFAULT_OPTIONS: Dict[str, Any] = {}

    def __init__(self, **options: Any) -> None:
        self._settings = check_options({**self.DEFAULT_OPTIONS, **options})
        self._filename: Optional[str] = None
        self._filehandle: Optional[IO[str]] = None
        self.logger = logging.getLogger(DEFAULT_LOGGER_NAME).getChild(self.__class__.__name__.lower())
        self._session = self._new_session()

    def setting(self, name: str) -> Any:
        return self._settings.get(name)

    # Source binding
    @property
    def filename(self) -> Optional[str]:
        return self._filename

    @filename.setter
    def filename(self, path: "str | os.PathLike[str]") -> None:
        check_filename(path)
        self._filename = os.fspath(path)
        self._filehandle = None

    @property
    def filehandle(self) -> Optional[IO[str]]:
        return self._filehandle

    @filehandle.setter
    def filehandle(self, handle: IO[str]) -> None:
        self._filehandle = check_filehandle(handle)
        self._filename = None

    def _bind(self, source: Any) -> bool:
        if source is None:
            return self._filename is not None or self._filehandle is not None
        if isinstance(source, (str, os.PathLike)):
            self.filename = source
            return True
        if callable(getattr(source, "readline", None)):
            self.filehandle = source
            return True
        raise BadReadInput(
            f"Unexpected {type(source).__name__} type input to read(); "
            "must be either a filename or a text file object"
        )

    def _open_source(self) -> Source:
        if self._filehandle is not None:
            return BorrowedSource(self._filehandle)
        path = check_filename(self._filename)
        return ManagedSource(path)

    # Reading
    def _new_session(self) -> ReadSession:
        policy = policy_for(self._settings["multiline_type"], self.is_line_continued, self.join_last_line)
        return ReadSession(policy=policy)

    def read(self, source: Any = None) -> None:
        """Read ``source`` line by line, replacing all records held so far.

        ``source`` may be a filename, an open text file object, or None to
        read the last bound source again. A file opened here is closed before
        returning, whether reading finished, was aborted or raised. A file
        object supplied by the caller is never closed.
        """

        if not self._bind(source):
            self.logger.warning("read() called without a source and none was bound before; nothing read")
            return
        with self._open_source() as src:
            session = self._session
            session.reset()
            self.logger.debug("Reading %s (%s)", src.name, "managed" if src.owned else "borrowed")
            self._read_lines(src, session)
        self.logger.debug(
            "Read %d line(s) from %s into %d record(s)%s",
            session.lines_parsed,
            src.name,
            len(session.records),
            " (aborted)" if session.aborted else "",
        )

    def _read_lines(self, src: Source, session: ReadSession) -> None:
        auto_chomp = self._settings["auto_chomp"]
        for line in src.lines():
            session.lines_parsed += 1
            if auto_chomp:
                line = chomp(line)
            logical = session.policy.feed(line)
            if logical is not None:
                self.save_record(logical)
            if session.aborted:
                # a partially joined line is dropped, not handed to save_record
                return
        tail = session.policy.flush()
        if tail is not None:
            self.save_record(tail)

    def lines_parsed(self) -> int:
        return self._session.lines_parsed

    def abort_reading(self) -> bool:
        self._session.aborted = True
        return True

    def has_aborted(self) -> bool:
        return self._session.aborted

    # Records
    def append_record(self, record: Any) -> None:
        """Store ``record`` as is. Overrides of save_record call this to store."""
        self._session.records.append(record)

    def get_records(self) -> List[Any]:
        return self._session.records.get_all()

    def last_record(self) -> Optional[Any]:
        return self._session.records.last()

    def pop_record(self) -> Optional[Any]:
        return self._session.records.pop()

    # Extension points
    def save_record(self, line: str) -> None:
        self.append_record(line)

    def is_line_continued(self, line: str) -> bool:
        multiline_type = self.setting("multiline_type")
        if multiline_type is None:
            return False
        if multiline_type == MultilineType.JOIN_LAST and self.lines_parsed() == 1:
            return False
        return True

    def join_last_line(self, last: str, line: str) -> str:
        return last + line
