from __future__ import annotations

import fnmatch
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import IO, Any, Dict, Iterator, List, Optional, Type, Union

from tqdm import tqdm

from .errors import TextParserError
from .loader import choose_parser
from .models import ParseResult
from .parser import DEFAULT_LOGGER_NAME, TextParser


SLOW_PARSE_THRESHOLD_SECONDS = 2.0


def configure_logging(verbose: bool = False, logger_name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """Configure and return the package logger.

    Makes sure parsers and runners have a handler even in script usage where
    ``logging.basicConfig`` was not called. ``verbose`` raises the level to
    INFO.
    """

    logger = logging.getLogger(logger_name)
    level = logging.INFO if verbose else logging.WARNING
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s")
        )
        logger.addHandler(handler)

    return logger


def parse_source(
    parser_cls: Type[TextParser],
    source: Union[Path, IO[str]],
    options: Optional[Dict[str, Any]] = None,
    display_name: Optional[str] = None,
) -> ParseResult:
    """Run one parser over one source with a fresh parser instance.

    Errors raised by textparser are recorded on the result together with the
    records stored before the failure; anything else propagates.
    """

    parser = parser_cls(**(options or {}))
    result = ParseResult(source=display_name or str(source), parser=parser_cls.NAME)
    try:
        parser.read(source)
    except TextParserError as exc:
        result.error = exc.message
        result.error_kind = exc.kind.value
    result.records = parser.get_records()
    result.lines_parsed = parser.lines_parsed()
    result.aborted = parser.has_aborted()
    return result


class DirectoryRunner:
    def __init__(
        self,
        root: Path,
        parsers: Dict[str, Type[TextParser]],
        parser_cls: Optional[Type[TextParser]],
        include_globs: List[str],
        exclude_dirs: List[str],
        max_file_size: int = 5_000_000,
        workers: int = 8,
        *,
        options: Optional[Dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
        verbose: bool = False,
        show_progress: bool = True,
        progress_desc: str = "Parsing files",
    ) -> None:
        self.root = root
        self.parsers = parsers
        self.parser_cls = parser_cls
        self.include_globs = include_globs
        self.exclude_dirs = set(exclude_dirs)
        self.max_file_size = max_file_size
        self.workers = workers
        self.options = dict(options or {})
        base_logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.logger = base_logger.getChild(self.__class__.__name__.lower())
        self.verbose = verbose
        if verbose:
            self.logger.setLevel(logging.INFO)
        self.show_progress = bool(show_progress)
        self.progress_desc = progress_desc
        self._progress_bar = None
        self._progress_lock = threading.Lock()
        self._slow_log_threshold = SLOW_PARSE_THRESHOLD_SECONDS

    def _iter_files(self) -> Iterator[Path]:
        for p in sorted(self.root.rglob("*")):
            if p.is_dir():
                continue
            rel_parts = p.relative_to(self.root).parts[:-1]
            if any(part in self.exclude_dirs for part in rel_parts):
                continue
            if any(fnmatch.fnmatch(p.name, pat) for pat in self.include_globs):
                try:
                    if p.stat().st_size <= self.max_file_size:
                        yield p
                    elif self.verbose:
                        self.logger.info("Skipping %s: larger than %d bytes", p, self.max_file_size)
                except OSError as exc:
                    if self.verbose:
                        self.logger.warning("Unable to stat %s: %s", p, exc)
                    continue

    def run(self) -> List[ParseResult]:
        files = list(self._iter_files())
        total_files = len(files)

        if self.verbose:
            self.logger.info("Discovered %d file(s) to parse", total_files)

        if not total_files:
            return []

        progress_bar = None
        if self.show_progress:
            progress_bar = tqdm(total=total_files, desc=self.progress_desc, unit="file")

        results: Dict[Path, ParseResult] = {}
        executor = ThreadPoolExecutor(max_workers=self.workers)
        try:
            self._progress_bar = progress_bar
            futures = {executor.submit(self._parse_file, path): path for path in files}
            for future in as_completed(futures):
                path = futures[future]
                try:
                    results[path] = future.result()
                except Exception as exc:
                    if self.verbose:
                        self.logger.exception("Error parsing %s", path)
                    else:
                        self.logger.warning("Error parsing %s: %s", path, exc)
                    results[path] = ParseResult(
                        source=self._format_display_path(path),
                        parser=self._parser_for(path).NAME,
                        error=str(exc),
                    )
                finally:
                    if progress_bar is not None:
                        progress_bar.update(1)
        except KeyboardInterrupt:
            if self.verbose:
                self.logger.info("Run interrupted by user; shutting down workers")
            raise
        finally:
            executor.shutdown(wait=True, cancel_futures=True)
            if progress_bar is not None:
                progress_bar.close()
            self._progress_bar = None

        # report in a stable order regardless of completion order
        return [results[p] for p in files if p in results]

    def _parser_for(self, path: Path) -> Type[TextParser]:
        return self.parser_cls or choose_parser(self.parsers, path)

    def _parse_file(self, path: Path) -> ParseResult:
        parser_cls = self._parser_for(path)
        display_path = self._format_display_path(path)
        self._update_current_file_display(display_path, parser_cls.NAME)

        start_time = time.perf_counter()
        result = parse_source(parser_cls, path, self.options, display_name=display_path)
        if result.error:
            self.logger.warning("Failed while parsing %s: %s", display_path, result.error)
        duration = time.perf_counter() - start_time
        self._maybe_log_slow_file(display_path, duration, result)
        return result

    def _format_display_path(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.root))
        except ValueError:
            return str(path)

    def _update_current_file_display(self, display_path: str, parser_name: str) -> None:
        label = display_path
        if len(label) > 60:
            label = f"...{label[-57:]}"
        if self._progress_bar is not None:
            with self._progress_lock:
                self._progress_bar.set_postfix_str(label, refresh=False)
                self._progress_bar.refresh()
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("Processing %s (parser=%s)", display_path, parser_name)
        elif self.verbose:
            self.logger.info("Processing %s", display_path)

    def _maybe_log_slow_file(self, display_path: str, duration: float, result: ParseResult) -> None:
        if not self.logger.isEnabledFor(logging.DEBUG):
            return
        if duration < self._slow_log_threshold:
            return
        self.logger.debug(
            "Slow parse for %s took %.2fs. lines=%d, records=%d, parser=%s",
            display_path,
            duration,
            result.lines_parsed,
            len(result.records),
            result.parser,
        )


class SingleFileRunner:
    def __init__(
        self,
        source: Union[Path, IO[str]],
        parsers: Dict[str, Type[TextParser]],
        parser_cls: Optional[Type[TextParser]],
        *,
        options: Optional[Dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
        verbose: bool = False,
    ) -> None:
        self.source = source
        self.parsers = parsers
        self.parser_cls = parser_cls
        self.options = dict(options or {})
        base_logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.logger = base_logger.getChild(self.__class__.__name__.lower())
        self.verbose = verbose
        if verbose:
            self.logger.setLevel(logging.INFO)

    def run(self) -> ParseResult:
        if isinstance(self.source, Path):
            parser_cls = self.parser_cls or choose_parser(self.parsers, self.source)
            display_name = str(self.source)
        else:
            parser_cls = self.parser_cls or self.parsers.get("text", TextParser)
            display_name = "<stdin>"

        if self.verbose:
            self.logger.info("Parsing %s with the %s parser", display_name, parser_cls.NAME)
        result = parse_source(parser_cls, self.source, self.options, display_name=display_name)
        if result.error:
            if self.verbose:
                self.logger.error("Failed while parsing %s: %s", display_name, result.error)
        elif self.verbose:
            self.logger.info(
                "Parsed %d line(s) into %d record(s)%s",
                result.lines_parsed,
                len(result.records),
                " (aborted)" if result.aborted else "",
            )
        return result
