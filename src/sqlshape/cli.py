"""Command-line interface for sqlshape."""

from __future__ import annotations

import argparse
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlshape.dialect import Dialect, get_dialect
from sqlshape.errors import FormatError, LexError
from sqlshape.layout import CommaStyle

logger = logging.getLogger(__name__)

CONFIG_NAME = "sqlshape.toml"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path | None  # None reads stdin
    output_file: Path | None
    indent: str
    max_line_length: int
    comma_style: CommaStyle
    dialect: Dialect
    params: dict[str, str] | list[str] | None
    check: bool
    debug: bool
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="sqlshape",
        description="Reformat whitespace and indentation of SQL queries",
    )
    p.add_argument("input", nargs="?", help="Input .sql file (default: stdin)")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument("--indent", type=int, default=None, metavar="N", help="Spaces per level")
    p.add_argument("--tabs", action="store_true", help="Indent with tabs")
    p.add_argument(
        "--max-line-length",
        type=int,
        default=None,
        metavar="N",
        help="Wrap lines longer than N characters (default: 0, off)",
    )
    p.add_argument(
        "--comma-style",
        choices=("leading", "trailing"),
        default=None,
        help="Where commas go when a list is broken across lines",
    )
    p.add_argument(
        "-p",
        "--param",
        action="append",
        default=[],
        metavar="[NAME=]VALUE",
        help="Placeholder value, named or positional (repeatable)",
    )
    p.add_argument("--dialect", default=None, help="SQL dialect (default: sql)")
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    p.add_argument("--check", action="store_true", help="Exit 1 if input is not formatted")
    p.add_argument("--debug", action="store_true", help="Dump the token stream to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def parse_param_arg(s: str) -> tuple[str | None, str]:
    """Parse NAME=VALUE into (name, value); a bare VALUE gives (None, value)."""
    if "=" not in s:
        return None, s
    name, _, value = s.partition("=")
    if not name:
        raise argparse.ArgumentTypeError(f"invalid param format (empty name): {s}")
    return name, value


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def _indent_from_config(value: Any) -> str:
    if isinstance(value, bool):
        raise argparse.ArgumentTypeError(f"invalid indent in config: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise argparse.ArgumentTypeError(f"indent must be >= 0, got {value}")
        return " " * value
    if isinstance(value, str):
        return value
    raise argparse.ArgumentTypeError(f"invalid indent in config: {value!r}")


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input) if args.input and args.input != "-" else None
    input_dir = input_file.parent if input_file is not None else Path(".")
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    try:
        config = load_config(config_path, input_dir)
    except tomllib.TOMLDecodeError as exc:
        raise argparse.ArgumentTypeError(f"invalid config file: {exc}") from exc

    cfg_format = config.get("format")
    if not isinstance(cfg_format, dict):
        cfg_format = {}

    # Indent: config < CLI
    indent = "  "
    if "indent" in cfg_format:
        indent = _indent_from_config(cfg_format["indent"])
    if args.indent is not None:
        if args.indent < 0:
            raise argparse.ArgumentTypeError(f"--indent must be >= 0, got {args.indent}")
        indent = " " * args.indent
    if args.tabs:
        indent = "\t"

    # Max line length: config < CLI
    max_line_length = 0
    cfg_max = cfg_format.get("max_line_length")
    if isinstance(cfg_max, int) and not isinstance(cfg_max, bool):
        max_line_length = cfg_max
    if args.max_line_length is not None:
        max_line_length = args.max_line_length
    if max_line_length < 0:
        raise argparse.ArgumentTypeError(f"max line length must be >= 0, got {max_line_length}")

    # Comma style: config < CLI
    comma_style: CommaStyle = "leading"
    cfg_comma = cfg_format.get("comma_style")
    if cfg_comma is not None:
        if cfg_comma not in ("leading", "trailing"):
            raise argparse.ArgumentTypeError(f"invalid comma_style in config: {cfg_comma!r}")
        comma_style = cfg_comma
    if args.comma_style is not None:
        comma_style = args.comma_style

    # Dialect: config < CLI
    dialect_name = str(cfg_format.get("dialect", "sql"))
    if args.dialect is not None:
        dialect_name = args.dialect
    try:
        dialect = get_dialect(dialect_name)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc

    # Placeholder values: config < CLI
    named: dict[str, str] = {}
    positional: list[str] = []
    cfg_params = config.get("params")
    if isinstance(cfg_params, dict):
        for k, v in cfg_params.items():
            named[str(k)] = str(v)
    for raw in args.param:
        name, value = parse_param_arg(raw)
        if name is None:
            positional.append(value)
        else:
            named[name] = value
    if named and positional:
        raise argparse.ArgumentTypeError("cannot mix named and positional params")
    params: dict[str, str] | list[str] | None = named or positional or None

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        indent=indent,
        max_line_length=max_line_length,
        comma_style=comma_style,
        dialect=dialect,
        params=params,
        check=args.check,
        debug=args.debug,
        verbose=args.verbose,
    )


def read_source(options: CliOptions) -> str:
    if options.input_file is None:
        return sys.stdin.read()
    return options.input_file.read_text(encoding="utf-8")


def format_source(source: str, options: CliOptions) -> str:
    """Tokenize and format *source*, returning text with one trailing newline."""
    from sqlshape.debug import dump_tokens
    from sqlshape.layout import FormatOptions, format_tokens
    from sqlshape.lexer import tokenize

    filename = str(options.input_file) if options.input_file else "<stdin>"
    tokens = tokenize(source, options.dialect, filename)

    if options.debug:
        dump_tokens(tokens)

    fmt = FormatOptions(
        indent=options.indent,
        max_line_length=options.max_line_length,
        params=options.params,
        comma_style=options.comma_style,
        dialect=options.dialect,
    )
    formatted = format_tokens(tokens, fmt)
    logger.debug("formatted %d tokens from %s", len(tokens), filename)
    return formatted + "\n" if formatted else ""


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    filename = str(options.input_file) if options.input_file else "<stdin>"
    try:
        source = read_source(options)
    except OSError as exc:
        print(f"error: cannot read {filename}: {exc.strerror}", file=sys.stderr)
        return 2

    try:
        result = format_source(source, options)
    except LexError as exc:
        print(exc.format(filename), file=sys.stderr)
        return 1
    except FormatError as exc:
        print(exc.format(source, filename), file=sys.stderr)
        return 1

    if options.check:
        current = source.rstrip("\n") + "\n" if source.strip() else ""
        if current != result:
            logger.info("%s would be reformatted", filename)
            return 1
        return 0

    if options.output_file:
        options.output_file.write_text(result, encoding="utf-8")
    else:
        sys.stdout.write(result)

    return 0
