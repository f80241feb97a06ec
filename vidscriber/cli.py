"""Command-line interface for the vidscriber transcript compiler.

WHY: Editors and pipeline scripts need a simple way to compile a speech
transcript and a visual annotation into one timeline from the terminal.
The CLI wires together JSON loading, the compiler core, the pluggable
formatters and file saving behind a single command.

HOW: Uses argparse to accept the two input documents, segmentation
threshold overrides, output format selection and output directory.
Status messages go to stderr; output files are saved next to the speech
document (or to --output-dir). --stdout prints the compact JSON instead.

RULES:
- Positional arguments: speech JSON path, visual JSON path
- The visual path may be "-" to compile speech without visual annotation
- --formats: comma-separated formatter keys (default: compact_json)
- Output naming: {speech stem}{suffix}, numeric suffix for conflicts
  (-vidscriber-2.json)
- Status output goes to stderr (not stdout)
- Any input, option or schema error → "Error: ..." on stderr, exit 1
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from vidscriber import config
from vidscriber.core.compiler import compile_documents
from vidscriber.core.errors import SchemaViolation, VidscriberError
from vidscriber.core.segmenter import SegmenterConfig
from vidscriber.formatters import DEFAULT_FORMAT, FORMATTERS
from vidscriber.formatters.base import FormatterOutput
from vidscriber.formatters.compact_json import CompactJSONFormatter

logger = logging.getLogger(__name__)

NO_VISUAL = "-"


class CLIError(Exception):
    """A user-facing error that ends the run with exit code 1."""


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _load_json(path: Path, what: str) -> Any:
    """Read and parse a JSON document, turning failures into CLIError."""
    if not path.is_file():
        raise CLIError("{} file not found: {}".format(what, path))
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise CLIError("{} file is not valid JSON ({}): {}".format(what, path, e)) from e


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Pick a file name that does not clobber an earlier compilation.

    WHY: Editors re-run the compiler while tuning thresholds and compare
    the results side by side.

    RULES:
    - Free name: {stem}{suffix} (interview-vidscriber.json)
    - Taken: a counter from 2 goes before the extension
      (interview-vidscriber-2.json, interview-vidscriber-3.json, ...)
    """
    name, dot, ext = suffix.rpartition(".")
    if not dot or not name:
        name, ext = suffix, ""
    else:
        ext = "." + ext

    path = output_dir / (stem + suffix)
    attempt = 1
    while path.exists():
        attempt += 1
        path = output_dir / "{}{}-{}{}".format(stem, name, attempt, ext)
    return path


def _save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    target = _resolve_output_path(stem, output.suffix, output_dir)
    target.write_text(output.content, encoding="utf-8")
    return target


def _parse_formats(raw: Optional[str]) -> List[str]:
    if not raw:
        return [DEFAULT_FORMAT]
    keys = [f.strip() for f in raw.split(",") if f.strip()]
    for key in keys:
        if key not in FORMATTERS:
            raise CLIError("Unknown format '{}'. Available formats: {}".format(
                key, ", ".join(sorted(FORMATTERS))
            ))
    return keys


def _segmenter_config(args: argparse.Namespace) -> SegmenterConfig:
    try:
        return SegmenterConfig.from_mapping({
            "gap_threshold_ms": args.gap_threshold_ms,
            "min_words_per_segment": args.min_words_per_segment,
            "min_duration_ms": args.min_duration_ms,
            "max_duration_ms": args.max_duration_ms,
            "max_words_per_segment": args.max_words_per_segment,
        })
    except ValueError as e:
        raise CLIError(str(e)) from e


def run(args: argparse.Namespace) -> List[Path]:
    """Execute the compile pipeline for parsed arguments.

    Returns:
        Paths of the files written (empty with --stdout).

    Raises:
        CLIError: For any user-facing problem.
    """
    speech_path = Path(args.speech_file).resolve()
    format_keys = _parse_formats(args.formats)
    cfg = _segmenter_config(args)

    output_dir = Path(args.output_dir).resolve() if args.output_dir else speech_path.parent
    if not args.stdout and not output_dir.is_dir():
        raise CLIError("Output directory does not exist: {}".format(output_dir))

    _status("Loading {}...".format(speech_path.name))
    speech = _load_json(speech_path, "Speech")
    visual = None
    if args.visual_file != NO_VISUAL:
        visual_path = Path(args.visual_file).resolve()
        _status("Loading {}...".format(visual_path.name))
        visual = _load_json(visual_path, "Visual")

    _status("Compiling...")
    try:
        compilation = compile_documents(speech, visual, cfg)
    except SchemaViolation as e:
        for err in e.errors:
            logger.debug("Schema violation: %s", err)
        raise CLIError(str(e)) from e
    except VidscriberError as e:
        raise CLIError(str(e)) from e
    _status("  {} utterances, {} top-level visual nodes".format(
        len(compilation.segments), len(compilation.timeline),
    ))

    if args.stdout:
        output = CompactJSONFormatter().format(compilation)[0]
        sys.stdout.write(output.content + "\n")
        return []

    stem = speech_path.stem
    saved_files: List[Path] = []
    for key in format_keys:
        formatter = FORMATTERS[key]()
        _status("  Running {} formatter...".format(formatter.name))
        for output in formatter.format(compilation):
            saved = _save_output(output, stem, output_dir)
            saved_files.append(saved)
            _status("  Saved: {}".format(saved.name))

    _status("")
    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))
    return saved_files


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser; kept apart from main() for tests."""
    parser = argparse.ArgumentParser(
        prog="vidscriber",
        description="Compile a word-level speech transcript and a hierarchical "
                    "visual annotation into one time-aligned timeline.",
    )

    parser.add_argument(
        "speech_file",
        help="Path to the speech JSON ({\"words\": [...]} or a raw Soniox transcript).",
    )
    parser.add_argument(
        "visual_file",
        help="Path to the visual annotation JSON (hierarchy v1), "
             "or '-' to compile without one.",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: {}.".format(
                 ", ".join(sorted(FORMATTERS.keys())), DEFAULT_FORMAT),
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: next to the speech file).",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the compact JSON to stdout instead of writing files.",
    )

    thresholds = parser.add_argument_group("utterance segmentation")
    thresholds.add_argument(
        "--gap-threshold-ms", type=int, default=None,
        help="Split when the silence between words exceeds this (default: {}).".format(
            config.DEFAULT_GAP_THRESHOLD_MS),
    )
    thresholds.add_argument(
        "--min-words-per-segment", type=int, default=None,
        help="Words needed before punctuation may split (default: {}).".format(
            config.DEFAULT_MIN_WORDS_PER_SEGMENT),
    )
    thresholds.add_argument(
        "--min-duration-ms", type=int, default=None,
        help="Duration after which punctuation may split (default: {}).".format(
            config.DEFAULT_MIN_DURATION_MS),
    )
    thresholds.add_argument(
        "--max-duration-ms", type=int, default=None,
        help="Force a split once an utterance lasts this long (default: {}).".format(
            config.DEFAULT_MAX_DURATION_MS),
    )
    thresholds.add_argument(
        "--max-words-per-segment", type=int, default=None,
        help="Force a split once an utterance has this many words (default: {}).".format(
            config.DEFAULT_MAX_WORDS_PER_SEGMENT),
    )

    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging level for diagnostics on stderr (default: %(default)s).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Console script entry point. Pass ``argv`` to run without sys.argv."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        run(args)
    except CLIError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
