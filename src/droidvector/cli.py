"""Command-line interface for droidvector convert/bundle/preview workflows."""
from __future__ import annotations

import argparse
import json
import logging
import os
import re
import sys
import traceback
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .archive import ArchiveBuilder
from .converter import ConversionResult, convert_svg, resource_name
from .diagnostics import Severity
from .errors import DroidVectorError
from .options import ConversionOptions
from .preview import DENSITIES, render_png
from .resources import load_codes

ENV_DEBUG = "DROIDVECTOR_DEBUG"

_VIEWPORT = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*[xX,]\s*(\d+(?:\.\d+)?)\s*$")

SUBCOMMANDS = "convert, bundle, preview, codes"


@dataclass
class CliError(Exception):
    code: str
    message: str
    hint: Optional[str] = None
    exit_code: int = 1
    file: Optional[str] = None
    retryable: bool = True


class UsageError(Exception):
    pass


class FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # pragma: no cover - argparse callback
        raise UsageError(message)


def _add_conversion_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--decimals", type=int, help="Path precision, 0-8 (default 2)")
    parser.add_argument("--convert-shapes", action="store_true", help="Convert rect/circle/... to paths")
    parser.add_argument("--viewport", help="Fallback viewport as WxH (default 24x24)")
    parser.add_argument("--size", type=float, help="Physical size of the longer side in dp (default 24)")
    parser.add_argument("--no-optimize", action="store_true", help="Skip the cleanup pass before parsing")
    parser.add_argument("--strict", action="store_true", help="Fail when any warn diagnostic is reported")
    parser.add_argument("--report", choices=["text", "json", "none"], default="text")


def _build_parser() -> argparse.ArgumentParser:
    parser = FriendlyArgumentParser(
        prog="droidvector",
        description="Convert SVG to Android VectorDrawable XML and bundle results.",
    )
    parser.add_argument("--error-format", choices=["text", "json"], default="text")
    parser.add_argument("--debug", action="store_true")

    subparsers = parser.add_subparsers(dest="command")

    convert_parser = subparsers.add_parser("convert", help="Convert one SVG to VectorDrawable XML")
    convert_parser.add_argument("input", nargs="?", help="Input .svg file")
    convert_parser.add_argument("--text", help="Raw SVG source")
    convert_parser.add_argument("--stdout", action="store_true", help="Write XML to stdout")
    convert_parser.add_argument("-o", "--output", help="Output .xml path")
    _add_conversion_args(convert_parser)

    bundle_parser = subparsers.add_parser("bundle", help="Convert several SVGs into one ZIP")
    bundle_parser.add_argument("inputs", nargs="+", help="Input .svg files")
    bundle_parser.add_argument("-o", "--output", default="vector-drawables.zip", help="Output .zip path")
    bundle_parser.add_argument("--prefix", default="drawable", help="Folder inside the archive")
    bundle_parser.add_argument("--timestamp", help="ISO timestamp for every entry (reproducible output)")
    _add_conversion_args(bundle_parser)

    preview_parser = subparsers.add_parser("preview", help="Render a converted SVG to PNG")
    preview_parser.add_argument("input", nargs="?", help="Input .svg file")
    preview_parser.add_argument("--text", help="Raw SVG source")
    preview_parser.add_argument("--stdout", action="store_true", help="Write PNG bytes to stdout")
    preview_parser.add_argument("-o", "--output", help="Output .png path")
    preview_parser.add_argument("--density", choices=list(DENSITIES), default="mdpi")
    preview_parser.add_argument("--theme", choices=["light", "dark"], default="light")
    preview_parser.add_argument("--grid", action="store_true")
    _add_conversion_args(preview_parser)

    subparsers.add_parser("codes", help="Print the diagnostic code reference")

    return parser


def _read_file(path: Path) -> str:
    if not path.exists():
        raise CliError(
            "E_IO_READ",
            f"input file not found: {path}",
            exit_code=2,
            file=str(path),
        )
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CliError(
            "E_IO_READ",
            f"failed to read input file: {path}",
            hint=str(exc),
            exit_code=2,
            file=str(path),
        )


def _read_input(path: Optional[str], text: Optional[str]) -> Tuple[str, str, Optional[Path]]:
    if path and text is not None:
        raise CliError(
            "E_ARGS",
            "--text cannot be combined with file input",
            hint="Use either FILE or --text.",
            exit_code=2,
        )

    if text is not None:
        return text, "<text>", None

    if path:
        input_path = Path(path)
        return _read_file(input_path), str(input_path), input_path

    if sys.stdin.isatty():
        raise CliError(
            "E_ARGS",
            "no input provided",
            hint="Use a subcommand with FILE, --text, or pipe stdin.",
            exit_code=2,
        )

    data = sys.stdin.read()
    if not data.strip():
        raise CliError(
            "E_ARGS",
            "stdin was empty",
            hint="Pipe SVG content into stdin.",
            exit_code=2,
        )
    return data, "<stdin>", None


def _parse_viewport(value: Optional[str]) -> Optional[Tuple[float, float]]:
    if value is None:
        return None
    match = _VIEWPORT.match(value)
    if not match or float(match.group(1)) <= 0 or float(match.group(2)) <= 0:
        raise CliError(
            "E_ARGS",
            f"invalid --viewport: {value}",
            hint="Use positive WIDTHxHEIGHT, e.g. 24x24.",
            exit_code=2,
        )
    return (float(match.group(1)), float(match.group(2)))


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise CliError(
            "E_ARGS",
            f"invalid --timestamp: {value}",
            hint="Use ISO format, e.g. 2024-01-31T12:00:00.",
            exit_code=2,
        )


def _options_from_args(args: argparse.Namespace) -> ConversionOptions:
    if args.size is not None and args.size <= 0:
        raise CliError("E_ARGS", "--size must be > 0", hint="Use a positive size like 24.", exit_code=2)
    try:
        return ConversionOptions.from_env(
            decimals=args.decimals,
            convert_shapes=True if args.convert_shapes else None,
            default_viewport=_parse_viewport(args.viewport),
            default_size=args.size,
        )
    except ValueError as exc:
        raise CliError("E_ARGS", str(exc), hint="Check DROIDVECTOR_* environment variables.", exit_code=2)


def _convert(source: str, args: argparse.Namespace, options: ConversionOptions) -> ConversionResult:
    if args.no_optimize:
        return convert_svg(source, options, optimizer=None)
    return convert_svg(source, options)


def _write_text(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise CliError(
            "E_IO_WRITE",
            f"failed to write output file: {path}",
            hint=str(exc),
            exit_code=4,
            file=str(path),
        )


def _write_bytes(path: Path, content: bytes) -> None:
    try:
        path.write_bytes(content)
    except OSError as exc:
        raise CliError(
            "E_IO_WRITE",
            f"failed to write output file: {path}",
            hint=str(exc),
            exit_code=4,
            file=str(path),
        )


def _emit_report(result: ConversionResult, source_name: str, report: str) -> None:
    if report == "none":
        return
    if report == "json":
        payload = {"file": source_name}
        payload.update(result.to_dict())
        sys.stderr.write(json.dumps(payload) + "\n")
        return
    for item in result.diagnostics:
        sys.stderr.write(f"{item.severity.label}[{item.code}]: {source_name}: {item.message}\n")


def _check_strict(results: List[Tuple[str, ConversionResult]], strict: bool) -> None:
    if not strict:
        return
    failing = [name for name, result in results if result.has_severity(Severity.WARN)]
    if failing:
        raise CliError(
            "E_STRICT",
            f"warn diagnostics reported for: {', '.join(failing)}",
            hint="Fix the reported issues or drop --strict.",
            exit_code=3,
            retryable=False,
        )


def _error_from_exception(exc: Exception) -> CliError:
    if isinstance(exc, CliError):
        return exc
    if isinstance(exc, DroidVectorError):
        return CliError(
            exc.code,
            exc.message,
            hint="Check the input structure and archive entry names.",
            exit_code=3,
            retryable=False,
        )
    if isinstance(exc, ValueError):
        msg = str(exc)
        if "parse" in msg.lower() or "xml" in msg.lower():
            return CliError(
                "E_PARSE_XML",
                msg,
                hint="Ensure input is well-formed SVG/XML.",
                exit_code=2,
                retryable=True,
            )
        return CliError(
            "E_INPUT",
            msg,
            hint="Check the input values.",
            exit_code=2,
            retryable=True,
        )
    return CliError(
        "E_INTERNAL",
        str(exc) or exc.__class__.__name__,
        hint="Re-run with --debug to see traceback.",
        exit_code=1,
        retryable=False,
    )


def _emit_error(err: CliError, *, error_format: str) -> None:
    if error_format == "json":
        payload = {
            "ok": False,
            "code": err.code,
            "message": err.message,
            "file": err.file,
            "hint": err.hint,
            "retryable": err.retryable,
        }
        sys.stderr.write(json.dumps(payload) + "\n")
        return

    sys.stderr.write(f"error[{err.code}]: {err.message}\n")
    if err.hint:
        sys.stderr.write(f"hint: {err.hint}\n")


def _handle_convert(args: argparse.Namespace) -> int:
    if args.stdout and args.output:
        raise CliError(
            "E_ARGS",
            "--stdout and --output are mutually exclusive",
            hint="Choose either --stdout or --output.",
            exit_code=2,
        )

    options = _options_from_args(args)
    source, source_name, source_path = _read_input(args.input, args.text)
    result = _convert(source, args, options)
    _emit_report(result, source_name, args.report)
    _check_strict([(source_name, result)], args.strict)

    if args.stdout or (source_path is None and not args.output):
        sys.stdout.write(result.xml)
        return 0

    output_path = Path(args.output) if args.output else source_path.with_suffix(".xml")
    _write_text(output_path, result.xml)
    print(f"Wrote {output_path} ({result.stats.path_count} paths, {result.stats.skipped_count} skipped)")
    return 0


def _handle_bundle(args: argparse.Namespace) -> int:
    options = _options_from_args(args)
    timestamp = _parse_timestamp(args.timestamp)
    prefix = args.prefix.strip("/\\")

    results: List[Tuple[str, ConversionResult]] = []
    builder = ArchiveBuilder()
    for raw in args.inputs:
        path = Path(raw)
        result = _convert(_read_file(path), args, options)
        _emit_report(result, str(path), args.report)
        results.append((str(path), result))
        name = f"{resource_name(path.name)}.xml"
        builder.add(f"{prefix}/{name}" if prefix else name, result.xml, timestamp)
    _check_strict(results, args.strict)

    blob = builder.build()
    output_path = Path(args.output)
    _write_bytes(output_path, blob)
    print(f"Wrote {output_path} ({len(builder.records)} entries, {len(blob)} bytes)")
    return 0


def _handle_preview(args: argparse.Namespace) -> int:
    if args.stdout and args.output:
        raise CliError(
            "E_ARGS",
            "--stdout and --output are mutually exclusive",
            hint="Choose either --stdout or --output.",
            exit_code=2,
        )

    options = _options_from_args(args)
    source, source_name, source_path = _read_input(args.input, args.text)
    result = _convert(source, args, options)
    _emit_report(result, source_name, args.report)
    _check_strict([(source_name, result)], args.strict)

    png_bytes = render_png(result.document, density=args.density, theme=args.theme, grid=args.grid)

    if args.stdout or (source_path is None and not args.output):
        sys.stdout.buffer.write(png_bytes)
        return 0

    output_path = Path(args.output) if args.output else source_path.with_suffix(".png")
    _write_bytes(output_path, png_bytes)
    print(f"Wrote {output_path}")
    return 0


def _configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format="%(name)s: %(message)s")


def main(argv: Optional[Iterable[str]] = None) -> int:
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    parser = _build_parser()

    if not raw_argv:
        err = CliError(
            "E_ARGS",
            "missing subcommand",
            hint=f"Use one of: {SUBCOMMANDS}.",
            exit_code=2,
        )
        _emit_error(err, error_format="text")
        return err.exit_code

    debug_enabled = "--debug" in raw_argv or os.getenv(ENV_DEBUG) == "1"
    _configure_logging(debug_enabled)
    error_format = "text"
    if "--error-format" in raw_argv:
        idx = raw_argv.index("--error-format")
        if idx + 1 < len(raw_argv):
            error_format = raw_argv[idx + 1]

    try:
        args = parser.parse_args(raw_argv)
        error_format = args.error_format

        if args.command == "convert":
            return _handle_convert(args)
        if args.command == "bundle":
            return _handle_bundle(args)
        if args.command == "preview":
            return _handle_preview(args)
        if args.command == "codes":
            print(load_codes())
            return 0

        raise CliError(
            "E_ARGS",
            "missing subcommand",
            hint=f"Use one of: {SUBCOMMANDS}.",
            exit_code=2,
        )
    except UsageError as exc:
        err = CliError(
            "E_ARGS",
            str(exc),
            hint=f"Use subcommands: {SUBCOMMANDS}.",
            exit_code=2,
        )
        _emit_error(err, error_format=error_format)
        return err.exit_code
    except Exception as exc:  # pragma: no cover - exercised in integration tests
        err = _error_from_exception(exc)
        _emit_error(err, error_format=error_format)
        if debug_enabled:
            traceback.print_exc(file=sys.stderr)
        return err.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
