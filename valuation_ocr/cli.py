"""Command-line interface for valuation report extraction.

Provides subcommands for extracting a vehicle record from a report (PDF or
an OCR text dump) and for checking which external tools are available.
"""

import argparse
import json
import sys
from pathlib import Path

from valuation_ocr.ocr.document_processor import ExtractionError
from valuation_ocr.ocr.rasterizer import RasterizationError, Rasterizer
from valuation_ocr.pipeline import ValuationReportExtractor
from valuation_ocr.utils.config import AppConfig, load_config
from valuation_ocr.utils.logger import get_logger, setup_logging
from valuation_ocr.utils.system_check import check_system
from valuation_ocr.validation.confidence import is_usable

logger = get_logger(__name__)


def _print_progress(percent: int, message: str) -> None:
    print(f"[{percent:3d}%] {message}", file=sys.stderr)


def extract_file(
    file_path: Path,
    config: AppConfig,
    as_text: bool = False,
    system_fallback: bool = False,
    show_progress: bool = False,
) -> dict[str, object]:
    """Extract a vehicle record from a single file.

    Args:
        file_path: PDF report, or OCR text when ``as_text`` is set.
        config: Application configuration.
        as_text: Treat the file as already recognized text.
        system_fallback: Skip the bundled GraphicsMagick build.
        show_progress: Print progress updates to stderr.

    Returns:
        The record as a dict, plus a ``usable`` flag.
    """
    extractor = ValuationReportExtractor(config)
    if system_fallback:
        extractor.rasterizer.enable_system_fallback()

    if as_text:
        record = extractor.extract_from_text(file_path.read_text(encoding="utf-8"))
    else:
        record = extractor.extract(
            file_path.read_bytes(),
            _print_progress if show_progress else None,
        )

    result = record.to_dict()
    result["usable"] = is_usable(record)
    return result


def diagnose(config: AppConfig, system_fallback: bool = False) -> list[str]:
    """Describe tool availability and rasterizer fallback status.

    Args:
        config: Application configuration.
        system_fallback: Report the chain as it runs with the bundled
            GraphicsMagick build skipped.

    Returns:
        Report lines, one per tool plus the fallback status.
    """
    lines = []
    for status in check_system(config):
        state = "OK" if status.available else "MISSING"
        line = f"{status.name:<26} {state:<8} {status.location or ''}"
        if status.detail:
            line += f" ({status.detail})"
        lines.append(line.rstrip())

    rasterizer = Rasterizer(config.rasterizer)
    if system_fallback:
        rasterizer.enable_system_fallback()
    fallback = "on" if rasterizer.is_using_system_fallback() else "off"
    lines.append(f"{'System fallback forced':<26} {fallback}")
    return lines


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Total-loss valuation report extractor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c", "--config", type=Path, default=None, help="YAML configuration file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    extract_parser = subparsers.add_parser(
        "extract", help="Extract vehicle data from a report"
    )
    extract_parser.add_argument("file", type=Path, help="Report PDF (or text dump)")
    extract_parser.add_argument(
        "--text", action="store_true", help="Input is OCR text, not a PDF"
    )
    extract_parser.add_argument(
        "--system-fallback",
        action="store_true",
        help="Skip the bundled GraphicsMagick build",
    )
    extract_parser.add_argument(
        "-p", "--progress", action="store_true", help="Print progress to stderr"
    )
    extract_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    diagnose_parser = subparsers.add_parser(
        "diagnose", help="Check external tool availability"
    )
    diagnose_parser.add_argument(
        "--system-fallback",
        action="store_true",
        help="Report with the bundled GraphicsMagick build skipped",
    )

    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level)

    if args.command == "extract":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = extract_file(
                args.file, config, args.text, args.system_fallback, args.progress
            )
        except (RasterizationError, ExtractionError) as exc:
            logger.error("Extraction failed for %s: %s", args.file.name, exc)
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)

        output_str = json.dumps(result, indent=2)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str)
            print(f"Output written to {args.output}")
        else:
            print(output_str)
    elif args.command == "diagnose":
        for line in diagnose(config, args.system_fallback):
            print(line)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
