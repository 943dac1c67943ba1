"""Command-line interface for filling and toggling figure template layers."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .document import Document
from .encoding import EncodedImage
from .errors import (
    EncodingError,
    FigureSecondError,
    IdentifierError,
    LayerParseError,
    MarkupError,
    MissingId,
    MissingLayer,
    SerializeError,
)
from .log import get_logger, set_level

logger = get_logger(__name__)

SUBCOMMANDS = "ids, dims, layers, fill"


@dataclass
class CliError(Exception):
    code: str
    message: str
    hint: Optional[str] = None
    exit_code: int = 1
    file: Optional[str] = None
    retryable: bool = False


class UsageError(Exception):
    pass


class FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # pragma: no cover - argparse callback
        raise UsageError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = FriendlyArgumentParser(
        prog="figure-second",
        description="Fill placeholder rectangles of an Inkscape figure with PNG images and toggle its layers.",
    )
    parser.add_argument("--error-format", choices=["text", "json"], default="text")
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--verbose", action="store_true", help="Log debug messages")

    subparsers = parser.add_subparsers(dest="command")

    ids_parser = subparsers.add_parser("ids", help="List placeholder ids in document order")
    ids_parser.add_argument("input", help="Input .svg file")

    dims_parser = subparsers.add_parser("dims", help="Print the width and height of a placeholder")
    dims_parser.add_argument("input", help="Input .svg file")
    dims_parser.add_argument("id", help="Placeholder id")

    layers_parser = subparsers.add_parser("layers", help="List layers or change their visibility")
    layers_parser.add_argument("input", help="Input .svg file")
    layers_parser.add_argument("--show", action="append", default=[], metavar="NAME", help="Layer to make visible")
    layers_parser.add_argument("--hide", action="append", default=[], metavar="NAME", help="Layer to hide")
    layers_parser.add_argument("-o", "--output", help="Output .svg path (stdout when omitted)")

    fill_parser = subparsers.add_parser("fill", help="Embed PNG images into placeholders")
    fill_parser.add_argument("input", help="Input .svg file")
    fill_parser.add_argument(
        "--image",
        action="append",
        default=[],
        metavar="ID=PNG",
        help="Placeholder id and PNG path (repeatable)",
    )
    fill_parser.add_argument("--manifest", help="JSON object mapping placeholder ids to PNG paths")
    fill_parser.add_argument("-o", "--output", help="Output .svg path (stdout when omitted)")

    return parser


def _read_document(path: str) -> Document:
    input_path = Path(path)
    if not input_path.exists():
        raise CliError(
            "E_IO_READ",
            f"input file not found: {input_path}",
            exit_code=4,
            file=str(input_path),
        )
    try:
        return Document.from_path(input_path)
    except OSError as exc:
        raise CliError(
            "E_IO_READ",
            f"failed to read input file: {input_path}",
            hint=str(exc),
            exit_code=4,
            file=str(input_path),
        )


def _write_document(document: Document, output: Optional[str]) -> None:
    if output is None:
        document.write_svg(sys.stdout.buffer)
        return
    try:
        document.write_path(output)
    except SerializeError:
        raise
    except OSError as exc:
        raise CliError(
            "E_IO_WRITE",
            f"failed to write output file: {output}",
            hint=str(exc),
            exit_code=4,
            file=output,
        )
    print(f"Wrote {output}")


def _load_manifest(path: str) -> list[tuple[str, Path]]:
    manifest_path = Path(path)
    try:
        data = json.loads(manifest_path.read_text())
    except OSError as exc:
        raise CliError(
            "E_IO_READ",
            f"failed to read manifest: {manifest_path}",
            hint=str(exc),
            exit_code=4,
            file=str(manifest_path),
        )
    except json.JSONDecodeError as exc:
        raise CliError(
            "E_MANIFEST",
            f"manifest is not valid JSON: {exc}",
            hint='Use an object like {"rect1": "plot.png"}.',
            exit_code=2,
            file=str(manifest_path),
        )
    if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
        raise CliError(
            "E_MANIFEST",
            "manifest must be a JSON object mapping ids to PNG paths",
            hint='Use an object like {"rect1": "plot.png"}.',
            exit_code=2,
            file=str(manifest_path),
        )
    return [(key, manifest_path.parent / value) for key, value in data.items()]


def _parse_image_args(values: list[str]) -> list[tuple[str, Path]]:
    pairs: list[tuple[str, Path]] = []
    for value in values:
        id, sep, path = value.partition("=")
        if not sep or not id or not path:
            raise CliError(
                "E_ARGS",
                f"invalid --image value: {value!r}",
                hint="Use --image ID=PATH.png",
                exit_code=2,
            )
        pairs.append((id, Path(path)))
    return pairs


def _error_from_exception(exc: Exception) -> CliError:
    if isinstance(exc, CliError):
        return exc
    if isinstance(exc, (MissingId, MissingLayer)):
        return CliError(
            exc.code,
            str(exc),
            hint="List available ids with `figure-second ids` or layers with `figure-second layers`.",
            exit_code=3,
        )
    if isinstance(exc, (MarkupError, LayerParseError, IdentifierError)):
        return CliError(
            exc.code,
            str(exc),
            hint="Every layer needs id and inkscape:label; every rect/image needs id, width and height.",
            exit_code=2,
        )
    if isinstance(exc, EncodingError):
        return CliError(
            exc.code,
            str(exc),
            exit_code=4,
            file=str(exc.path),
        )
    if isinstance(exc, FigureSecondError):
        return CliError(exc.code, str(exc), exit_code=4)
    return CliError(
        "E_INTERNAL",
        str(exc) or exc.__class__.__name__,
        hint="Re-run with --debug to see traceback.",
        exit_code=1,
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


def _handle_ids(args: argparse.Namespace) -> int:
    document = _read_document(args.input)
    for id in document.object_ids():
        print(id)
    return 0


def _handle_dims(args: argparse.Namespace) -> int:
    document = _read_document(args.input)
    width, height = document.dimensions(args.id)
    print(f"{width:g} {height:g}")
    return 0


def _handle_layers(args: argparse.Namespace) -> int:
    document = _read_document(args.input)

    if not args.show and not args.hide:
        for layer in document.layers:
            state = "hidden" if layer.hidden else "visible"
            print(f"{layer.id}\t{layer.name}\t{state}")
        return 0

    for name in args.show:
        document.layer(name).set_visible()
    for name in args.hide:
        document.layer(name).set_hidden()

    _write_document(document, args.output)
    return 0


def _handle_fill(args: argparse.Namespace) -> int:
    assignments = _load_manifest(args.manifest) if args.manifest else []
    assignments.extend(_parse_image_args(args.image))
    if not assignments:
        raise CliError(
            "E_ARGS",
            "no images to embed",
            hint="Pass --image ID=PATH.png or --manifest FILE.json.",
            exit_code=2,
        )

    document = _read_document(args.input)
    for id, path in assignments:
        width, height = document.dimensions(id)
        image = EncodedImage.from_path(path)
        if image.size and width and height:
            placeholder_ratio = width / height
            image_ratio = image.size[0] / image.size[1]
            if abs(placeholder_ratio - image_ratio) > 0.01 * placeholder_ratio:
                logger.warning(
                    "aspect ratio of %s (%.3f) differs from placeholder %s (%.3f)",
                    path,
                    image_ratio,
                    id,
                    placeholder_ratio,
                )
        document.assign_image(id, image)

    _write_document(document, args.output)
    return 0


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

    debug_enabled = "--debug" in raw_argv or os.getenv("FIGURE_SECOND_DEBUG") == "1"
    error_format = "text"
    if "--error-format" in raw_argv:
        idx = raw_argv.index("--error-format")
        if idx + 1 < len(raw_argv):
            error_format = raw_argv[idx + 1]

    try:
        args = parser.parse_args(raw_argv)
        error_format = args.error_format
        if args.verbose:
            set_level(logging.DEBUG)

        if args.command == "ids":
            return _handle_ids(args)
        if args.command == "dims":
            return _handle_dims(args)
        if args.command == "layers":
            return _handle_layers(args)
        if args.command == "fill":
            return _handle_fill(args)

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
