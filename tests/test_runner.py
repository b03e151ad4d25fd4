import io
import json
import logging
from pathlib import Path

from textparser.core.loader import discover_parsers
from textparser.core.models import ParseResult
from textparser.core.reporting import Reporter
from textparser.core.runner import DirectoryRunner, SingleFileRunner, configure_logging, parse_source
from textparser.parsers.csv_parser import CSVParser
from textparser.parsers.text import PlainTextParser


def test_parse_source_records_errors_and_partial_records():
    result = parse_source(CSVParser, io.StringIO("a,b\n1,2\n1,2,3\n"), display_name="<stdin>")
    assert result.ok is False
    assert result.error_kind == "parsing"
    assert result.records == [["a", "b"], ["1", "2"]]
    assert result.lines_parsed == 3
    assert result.source == "<stdin>"
    assert result.parser == "csv"


def test_parse_source_missing_file(tmp_path: Path):
    result = parse_source(PlainTextParser, tmp_path / "missing.txt")
    assert result.error_kind == "file_not_found"
    assert result.records == []


def test_parse_source_applies_options(tmp_path: Path):
    path = tmp_path / "x.txt"
    path.write_text("a\nb\n")
    result = parse_source(PlainTextParser, path, {"multiline_type": "join_last"})
    assert result.records == ["ab"]


def test_directory_runner(tmp_path: Path):
    root = tmp_path / "data"
    (root / "nested").mkdir(parents=True)
    (root / "skip").mkdir()
    (root / "a.txt").write_text("one\ntwo\n")
    (root / "nested" / "b.csv").write_text("h1,h2\nx,y\n")
    (root / "skip" / "c.txt").write_text("hidden\n")
    (root / "bad.csv").write_text("h\n1,2\n")

    runner = DirectoryRunner(
        root=root,
        parsers=discover_parsers(),
        parser_cls=None,
        include_globs=["*"],
        exclude_dirs=["skip"],
        workers=2,
        show_progress=False,
    )
    results = {r.source: r for r in runner.run()}
    assert set(results) == {"a.txt", "bad.csv", str(Path("nested") / "b.csv")}
    assert results["a.txt"].records == ["one", "two"]
    assert results[str(Path("nested") / "b.csv")].records == [["h1", "h2"], ["x", "y"]]
    assert results["bad.csv"].error_kind == "parsing"
    assert results["bad.csv"].records == [["h"]]


def test_directory_runner_size_limit_and_globs(tmp_path: Path):
    (tmp_path / "small.txt").write_text("ok\n")
    (tmp_path / "big.txt").write_text("x" * 100 + "\n")
    (tmp_path / "other.log").write_text("log\n")
    runner = DirectoryRunner(
        root=tmp_path,
        parsers=discover_parsers(),
        parser_cls=PlainTextParser,
        include_globs=["*.txt"],
        exclude_dirs=[],
        max_file_size=50,
        workers=1,
        show_progress=False,
    )
    assert [r.source for r in runner.run()] == ["small.txt"]


def test_directory_runner_empty(tmp_path: Path):
    runner = DirectoryRunner(tmp_path, discover_parsers(), None, ["*"], [], show_progress=False)
    assert runner.run() == []


def test_single_file_runner_on_handle():
    runner = SingleFileRunner(io.StringIO("a\nb\n"), discover_parsers(), None)
    result = runner.run()
    assert result.source == "<stdin>"
    assert result.parser == "text"
    assert result.records == ["a", "b"]


def test_reporter_writes_records_index_and_summary(tmp_path: Path):
    out = tmp_path / "out"
    results = [
        ParseResult(source="a.txt", parser="text", records=["x"], lines_parsed=1),
        ParseResult(source=str(Path("sub") / "b.csv"), parser="csv", error="boom", error_kind="parsing"),
        ParseResult(source="<stdin>", parser="text", records=["y"], lines_parsed=1, aborted=True),
    ]
    Reporter(out).write_all(results)

    index = json.loads((out / "index.json").read_text())
    assert [item["output"] for item in index] == ["a.txt.json", "sub__b.csv.json", "stdin.json"]
    data = json.loads((out / "a.txt.json").read_text())
    assert data["records"] == ["x"]
    assert data["lines_parsed"] == 1
    assert json.loads((out / "sub__b.csv.json").read_text())["error"] == "boom"
    summary = (out / "summary.md").read_text()
    assert "# Parse Summary" in summary
    assert "- error: boom" in summary
    assert "- aborted: True" in summary


def test_configure_logging_levels():
    logger = configure_logging(verbose=True, logger_name="textparser-test")
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    configure_logging(verbose=False, logger_name="textparser-test")
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1


def test_reporter_keeps_clashing_output_names_apart(tmp_path: Path):
    out = tmp_path / "out"
    results = [
        ParseResult(source=str(Path("a") / "b.txt"), parser="text", records=["nested"]),
        ParseResult(source="a__b.txt", parser="text", records=["flat"]),
        ParseResult(source="index", parser="text", records=["named index"]),
    ]
    Reporter(out).write_all(results)

    index = json.loads((out / "index.json").read_text())
    assert [item["output"] for item in index] == ["a__b.txt.json", "a__b.txt.2.json", "index.2.json"]
    assert json.loads((out / "a__b.txt.json").read_text())["records"] == ["nested"]
    assert json.loads((out / "a__b.txt.2.json").read_text())["records"] == ["flat"]
    assert json.loads((out / "index.2.json").read_text())["records"] == ["named index"]
