from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Optional, Type, Union

from .errors import ConfigurationError


class MultilineType(str, Enum):
    JOIN_NEXT = "join_next"
    JOIN_LAST = "join_last"


ContinuationPredicate = Callable[[str], bool]
JoinFunction = Callable[[str, str], str]


def coerce_multiline_type(value: Union[None, str, MultilineType]) -> Optional[MultilineType]:
    if value is None:
        return None
    if isinstance(value, MultilineType):
        return value
    if isinstance(value, str):
        try:
            return MultilineType(value)
        except ValueError:
            pass
    allowed = ", ".join(repr(m.value) for m in MultilineType)
    raise ConfigurationError(f"multiline_type must be None or one of {allowed}; got {value!r}")


class ContinuationPolicy:
    """
    Assembles physical lines into logical lines. ``feed`` takes one physical
    line and returns a completed logical line or None while buffering.
    ``flush`` hands back whatever is still buffered at end of input.
    """
    def __init__(self, is_continued: ContinuationPredicate, join: JoinFunction) -> None:
        self._is_continued = is_continued
        self._join = join
        self._buffer: Optional[str] = None

    def reset(self) -> None:
        self._buffer = None

    def feed(self, line: str) -> Optional[str]:
        raise NotImplementedError("feed must be implemented in subclasses")

    def flush(self) -> Optional[str]:
        done, self._buffer = self._buffer, None
        return done


class NoContinuation(ContinuationPolicy):
    def feed(self, line: str) -> Optional[str]:
        return line


class JoinNext(ContinuationPolicy):
    # The buffered line keeps absorbing physical lines for as long as the
    # incoming line says it is continued.
    def feed(self, line: str) -> Optional[str]:
        if self._buffer is None:
            self._buffer = line
        else:
            self._buffer = self._join(self._buffer, line)
        if self._is_continued(line):
            return None
        return self.flush()


class JoinLast(ContinuationPolicy):
    # An incoming line either extends the buffered line or pushes it out.
    def feed(self, line: str) -> Optional[str]:
        if self._buffer is None:
            self._buffer = line
            return None
        if self._is_continued(line):
            self._buffer = self._join(self._buffer, line)
            return None
        done, self._buffer = self._buffer, line
        return done


POLICIES: Dict[Optional[MultilineType], Type[ContinuationPolicy]] = {
    None: NoContinuation,
    MultilineType.JOIN_NEXT: JoinNext,
    MultilineType.JOIN_LAST: JoinLast,
}


def policy_for(
    multiline_type: Union[None, str, MultilineType],
    is_continued: ContinuationPredicate,
    join: JoinFunction,
) -> ContinuationPolicy:
    return POLICIES[coerce_multiline_type(multiline_type)](is_continued, join)
