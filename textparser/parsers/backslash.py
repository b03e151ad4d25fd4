from __future__ import annotations

import re

from ..core.parser import TextParser

CONTINUATION_RE = re.compile(r"\\\s*$")


class BackslashParser(TextParser):
    """Shell style continuation: a trailing backslash joins the next line."""
    NAME = "backslash"
    DESCRIPTION = "Joins lines ending in a backslash with the line that follows."
    SUPPORTED_EXTENSIONS = ["sh", "bash", "mk"]
    DEFAULT_OPTIONS = {"auto_chomp": True, "multiline_type": "join_next"}

    def is_line_continued(self, line: str) -> bool:
        return CONTINUATION_RE.search(line) is not None

    def join_last_line(self, last: str, line: str) -> str:
        return CONTINUATION_RE.sub(" ", last, count=1) + line
