from __future__ import annotations

import re

from ..core.parser import TextParser

SPICE_LINE_CONTD = re.compile(r"^[+]\s*")
SPICE_END_FILE = re.compile(r"^\.end\b", re.IGNORECASE)


class SpiceParser(TextParser):
    """
    Line joiner for SPICE decks. A line starting with ``+`` continues the
    previous line; reading stops at the ``.end`` card.
    """
    NAME = "spice"
    DESCRIPTION = "Joins SPICE '+' continuation lines; stops at '.end'."
    SUPPORTED_EXTENSIONS = ["sp", "cir", "spi", "spice", "net"]
    DEFAULT_OPTIONS = {"auto_chomp": True, "multiline_type": "join_last"}

    def is_line_continued(self, line: str) -> bool:
        return SPICE_LINE_CONTD.match(line) is not None

    def join_last_line(self, last: str, line: str) -> str:
        return last + SPICE_LINE_CONTD.sub(" ", line, count=1)

    def save_record(self, line: str) -> None:
        if SPICE_END_FILE.match(line):
            self.abort_reading()
            return
        self.append_record(line)
