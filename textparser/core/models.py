from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ParseResult:
    source: str  # file path, or "<stdin>"
    parser: str
    records: List[Any] = field(default_factory=list)
    lines_parsed: int = 0
    aborted: bool = False
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "parser": self.parser,
            "lines_parsed": self.lines_parsed,
            "aborted": self.aborted,
            "error": self.error,
            "error_kind": self.error_kind,
            "records": self.records,
        }
