"""Command-line interface for Ginevra."""

from __future__ import annotations

import argparse
import io
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn, TextIO

from ginevra.errors import Diagnostic, PreprocessError, ScanError
from ginevra.tokens import is_ident_char, is_ident_start

DEFAULT_EXTENSIONS = (".h", ".cpp")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    defines: dict[str, str]
    extensions: tuple[str, ...]
    eager: bool
    debug: bool


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = _ArgumentParser(
        prog="ginevra",
        description="Single-pass #define preprocessor for .h and .cpp files",
    )
    p.add_argument("input", help="Input .h or .cpp file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-D",
        "--define",
        action="append",
        default=[],
        metavar="NAME[=VALUE]",
        help="Predefine a macro (repeatable; VALUE defaults to 1)",
    )
    p.add_argument(
        "--eager",
        action="store_true",
        help="Resolve already-defined names while recording a #define value",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover ginevra.toml)",
    )
    p.add_argument("--debug", action="store_true", help="Dump the token stream to stderr")
    return p


def parse_define_arg(s: str) -> tuple[str, str]:
    """Parse a NAME=VALUE (or bare NAME) string into (name, value)."""
    name, sep, value = s.partition("=")
    if not is_valid_name(name):
        raise argparse.ArgumentTypeError(f"invalid macro name in define: {s}")
    return name, value if sep else "1"


def is_valid_name(name: str) -> bool:
    """Return True if name would scan as a single identifier."""
    return bool(name) and is_ident_start(name[0]) and all(is_ident_char(c) for c in name[1:])


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "ginevra.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags. Accepted extensions default to
    .h and .cpp; an [options] extensions list in the config replaces them,
    so a project can opt in to other suffixes such as .c.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    # Predefined macros: config < CLI
    defines: dict[str, str] = {}
    cfg_defines = config.get("defines")
    if isinstance(cfg_defines, dict):
        for k, v in cfg_defines.items():
            if not is_valid_name(str(k)):
                raise argparse.ArgumentTypeError(f"invalid macro name in config: {k}")
            defines[str(k)] = str(v)
    for raw in args.define:
        name, value = parse_define_arg(raw)
        defines[name] = value

    extensions = DEFAULT_EXTENSIONS
    eager = False
    cfg_options = config.get("options")
    if isinstance(cfg_options, dict):
        cfg_ext = cfg_options.get("extensions")
        if isinstance(cfg_ext, list):
            extensions = tuple(str(e) for e in cfg_ext)
        cfg_eager = cfg_options.get("eager")
        if isinstance(cfg_eager, bool):
            eager = cfg_eager
    if args.eager:
        eager = True

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        defines=defines,
        extensions=extensions,
        eager=eager,
        debug=args.debug,
    )


def has_valid_extension(path: Path, extensions: tuple[str, ...]) -> bool:
    """Case-sensitive suffix check against the accepted extensions."""
    return any(path.name.endswith(ext) and path.name != ext for ext in extensions)


def preprocess_file(options: CliOptions, source: str, out: TextIO) -> bool:
    """Preprocess source into out, printing diagnostics as they occur.

    Returns False if a malformed token was reported. Fatal errors propagate.
    """
    from ginevra.debug import dump_tokens
    from ginevra.expand import MacroTable, Preprocessor
    from ginevra.scanner import Scanner

    filename = str(options.input_file)

    def report(diag: Diagnostic) -> None:
        print(diag.format(filename), file=sys.stderr)

    if options.debug:
        dump_tokens(source, file=sys.stderr)

    pre = Preprocessor(
        Scanner(io.StringIO(source)),
        out,
        MacroTable(options.defines),
        eager=options.eager,
        report=report,
    )
    pre.run()
    return not pre.failed


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except tomllib.TOMLDecodeError as exc:
        print(f"error: invalid config file: {exc}", file=sys.stderr)
        return 1

    if not has_valid_extension(options.input_file, options.extensions):
        accepted = ", ".join(options.extensions)
        print(
            f"error: invalid file extension: {options.input_file} (expected {accepted})",
            file=sys.stderr,
        )
        return 1

    try:
        source = options.input_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        print(f"error: could not open input file: {options.input_file}", file=sys.stderr)
        return 1

    if not source:
        return 1

    try:
        if options.output_file:
            with open(options.output_file, "w", encoding="utf-8") as out:
                ok = preprocess_file(options, source, out)
        else:
            ok = preprocess_file(options, source, sys.stdout)
    except (ScanError, PreprocessError) as exc:
        print(exc.format(str(options.input_file)), file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: could not write output: {exc}", file=sys.stderr)
        return 1

    return 0 if ok else 1
