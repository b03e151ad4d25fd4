from __future__ import annotations

import csv
from typing import Any, List, Optional

from ..core.errors import ParsingError
from ..core.parser import TextParser


class CSVParser(TextParser):
    """
    Splits every line into a list of fields. The first row is taken as the
    header; blank lines are skipped and a later row with more fields than the header is a parsing error.
    Quoted fields spanning several lines are not supported.
    """
    NAME = "csv"
    DESCRIPTION = "One list of fields per line; the first line is the header."
    SUPPORTED_EXTENSIONS = ["csv"]
    DEFAULT_OPTIONS = {"auto_chomp": True}
    # Settings
    DELIMITER = ","
    QUOTECHAR = '"'

    def __init__(self, **options: Any) -> None:
        super().__init__(**options)
        self.header: Optional[List[str]] = None

    def save_record(self, line: str) -> None:
        fields = next(csv.reader([line], delimiter=self.DELIMITER, quotechar=self.QUOTECHAR), [])
        if not fields:
            return
        if self.last_record() is None:
            self.header = fields
        elif len(fields) > len(self.header or []):
            raise ParsingError(
                f"Too many fields on line #{self.lines_parsed()}: "
                f"expected at most {len(self.header or [])}, got {len(fields)}"
            )
        self.append_record(fields)
