from __future__ import annotations

from typing import Any, List, Optional


class RecordStore:
    """Ordered container of the records produced during one read cycle."""

    def __init__(self) -> None:
        self._records: List[Any] = []

    def append(self, record: Any) -> None:
        self._records.append(record)

    def pop(self) -> Optional[Any]:
        if not self._records:
            return None
        return self._records.pop()

    def last(self) -> Optional[Any]:
        if not self._records:
            return None
        return self._records[-1]

    def get_all(self) -> List[Any]:
        return list(self._records)

    def reset(self) -> None:
        self._records = []

    def __len__(self) -> int:
        return len(self._records)
