from __future__ import annotations

from ..core.parser import TextParser


class PlainTextParser(TextParser):
    NAME = "text"
    DESCRIPTION = "One record per line, line terminators removed."
    SUPPORTED_EXTENSIONS = ["txt", "md", "log", "cfg", "ini", "env", "yaml", "yml"]
    DEFAULT_OPTIONS = {"auto_chomp": True}
