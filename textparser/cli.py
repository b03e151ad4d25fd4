import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

from .core.loader import AUTO, discover_parsers, select_parser
from .core.multiline import MultilineType
from .core.parser import TextParser
from .core.reporting import Reporter, dump_records
from .core.runner import DirectoryRunner, SingleFileRunner, configure_logging


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="textparser",
        description="Line-oriented text parser with pluggable record extraction.",
    )
    sub = p.add_subparsers(dest="mode", required=True)

    def add_parser_options(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--parser", default=AUTO, help="Parser to use (see 'list'), or 'auto' to choose by file extension.")
        sp.add_argument("--auto-chomp", action="store_true", default=None, help="Strip line terminators before records are saved.")
        sp.add_argument(
            "--multiline-type",
            choices=[m.value for m in MultilineType],
            default=None,
            help="Override the parser's line continuation policy.",
        )
        sp.add_argument("--verbose", action="store_true", help="Enable verbose logging output.")

    # file mode
    f = sub.add_parser("file", help="Parse a single file ('-' reads standard input).")
    f.add_argument("path", help="File to parse, or '-' for standard input.")
    f.add_argument("--out", type=Path, default=None, help="Output directory. Records are printed as JSON when omitted.")
    add_parser_options(f)

    # dir mode
    d = sub.add_parser("dir", help="Parse every matching file under a directory.")
    d.add_argument("path", type=Path, help="Directory to walk recursively.")
    d.add_argument("--out", type=Path, default=Path("./parse_output"), help="Output directory.")
    d.add_argument("--workers", type=int, default=8, help="Number of worker threads.")
    d.add_argument("--include", default="*", help="Glob(s) to include, comma-separated.")
    d.add_argument("--exclude", default=".git,.venv,node_modules,venv,.tox,.mypy_cache,.pytest_cache,__pycache__", help="Dir names to exclude, comma-separated.")
    d.add_argument("--max-file-size", type=int, default=5_000_000, help="Max file size in bytes to parse (default 5MB).")
    d.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")
    add_parser_options(d)

    sub.add_parser("list", help="List the available parsers.")

    return p


def _parser_options(args: argparse.Namespace) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    if args.auto_chomp:
        options["auto_chomp"] = True
    if args.multiline_type:
        options["multiline_type"] = args.multiline_type
    return options


def _resolve_parser(parsers: Dict[str, Type[TextParser]], selector: str) -> Optional[Type[TextParser]]:
    if selector.strip().lower() == AUTO:
        return None
    return select_parser(parsers, selector)


def run_file(args: argparse.Namespace) -> int:
    parsers = discover_parsers()
    parser_cls = _resolve_parser(parsers, args.parser)
    if parser_cls is None and args.parser.strip().lower() != AUTO:
        print(f"Unknown parser '{args.parser}'. Exiting.", file=sys.stderr)
        return 2

    source = sys.stdin if args.path == "-" else Path(args.path)
    runner = SingleFileRunner(
        source=source,
        parsers=parsers,
        parser_cls=parser_cls,
        options=_parser_options(args),
        logger=configure_logging(verbose=args.verbose),
        verbose=args.verbose,
    )
    result = runner.run()

    if args.out is not None:
        Reporter(args.out).write_all([result])
    else:
        print(dump_records(result.records))

    if not result.ok:
        print(f"Error ({result.error_kind}): {result.error}", file=sys.stderr)
        return 1
    return 0


def run_dir(args: argparse.Namespace) -> int:
    out_dir = args.out
    out_dir.mkdir(parents=True, exist_ok=True)

    parsers = discover_parsers()
    parser_cls = _resolve_parser(parsers, args.parser)
    if parser_cls is None and args.parser.strip().lower() != AUTO:
        print(f"Unknown parser '{args.parser}'. Exiting.", file=sys.stderr)
        return 2

    runner = DirectoryRunner(
        root=args.path,
        parsers=parsers,
        parser_cls=parser_cls,
        include_globs=[g.strip() for g in args.include.split(",") if g.strip()],
        exclude_dirs=[e.strip() for e in args.exclude.split(",") if e.strip()],
        max_file_size=args.max_file_size,
        workers=args.workers,
        options=_parser_options(args),
        logger=configure_logging(verbose=args.verbose),
        verbose=args.verbose,
        show_progress=not args.no_progress,
    )
    Reporter(out_dir).write_all(runner.run())
    return 0


def run_list(args: argparse.Namespace) -> int:
    for name, cls in sorted(discover_parsers().items()):
        exts = ",".join(cls.SUPPORTED_EXTENSIONS) or "-"
        print(f"{name:<14} {exts:<24} {cls.DESCRIPTION}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.mode == "file":
        return run_file(args)
    elif args.mode == "dir":
        return run_dir(args)
    elif args.mode == "list":
        return run_list(args)
    else:
        parser.print_help()
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
