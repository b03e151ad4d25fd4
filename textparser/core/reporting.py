from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Set

from .models import ParseResult

INDEX_FILE = "index.json"


def _record_file_name(source: str, taken: Set[str]) -> str:
    if source == "<stdin>":
        base = "stdin"
    else:
        p = Path(source)
        base = p.name if p.is_absolute() else "__".join(p.parts)
    name = base + ".json"
    n = 2
    # flattened relative paths can clash with a file literally named that way
    while name in taken:
        name = f"{base}.{n}.json"
        n += 1
    taken.add(name)
    return name


def dump_records(records: List[Any]) -> str:
    return json.dumps(records, indent=2, default=str)


class Reporter:
    def __init__(self, out_dir: Path) -> None:
        self.out_dir = out_dir
        self._taken: Set[str] = {INDEX_FILE}

    def write_result(self, result: ParseResult) -> Dict[str, Any]:
        name = _record_file_name(result.source, self._taken)
        (self.out_dir / name).write_text(json.dumps(result.to_dict(), indent=2, default=str))
        return {
            "source": result.source,
            "parser": result.parser,
            "output": name,
            "lines_parsed": result.lines_parsed,
            "records": len(result.records),
            "aborted": result.aborted,
            "error": result.error,
        }

    def write_all(self, results: List[ParseResult]) -> None:
        self.out_dir.mkdir(parents=True, exist_ok=True)
        index = [self.write_result(r) for r in results]
        # write an index.json and a summary.md
        (self.out_dir / INDEX_FILE).write_text(json.dumps(index, indent=2))
        lines = ["# Parse Summary", ""]
        for item in index:
            lines.append(f"## {item['source']}")
            for k, v in item.items():
                if k == "source" or v is None:
                    continue
                lines.append(f"- {k}: {v}")
            lines.append("")
        (self.out_dir / "summary.md").write_text("\n".join(lines))
