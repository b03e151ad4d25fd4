from __future__ import annotations

from ..core.parser import TextParser


class AbortMarkerParser(TextParser):
    NAME = "abort_marker"
    DESCRIPTION = "Stores lines until one starts with the **ABORT marker."
    SUPPORTED_EXTENSIONS = []
    # Settings
    ABORT_MARKER = "**ABORT"

    def save_record(self, line: str) -> None:
        words = line.split(None, 1)
        if words and words[0] == self.ABORT_MARKER:
            self.abort_reading()
            return
        self.append_record(line)
