# -----------------------------------------------------------------------------
# Copyright (C) 2025 Jeff Luster, mailto:jeff.luster96@gmail.com
# License: GNU AFFERO GPL 3.0, https://www.gnu.org/licenses/agpl-3.0.html
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# Full license text can be found in the file "COPYING.txt".
# Full copyright text can be found in the file "main.py".
# -----------------------------------------------------------------------------

#!/usr/bin/env python3
"""
Command line interface: ``scan`` and ``strip`` over a file or directory.
"""

import argparse
import logging
import os
import sys
import time
from typing import Callable, Dict, List, Optional

from . import __version__
from .config import (
    DEFAULT_IMAGE_EXTENSIONS, DEFAULT_PDF_EXTENSIONS, DEFAULT_PRODUCER_SIGNATURE, DEFAULT_VIDEO_EXTENSIONS,
    EngineConfig, parse_extensions,
)
from .engine import MetadataEngine
from .errors import MetadataError
from .models import DirectoryStripSummary, DirectorySummary, Report, ScanResult, Severity, StripResult
from .report import STATUS_CLEAN, STATUS_HIGH, STATUS_LOW, STATUS_MEDIUM, overall_status, write_report
from .utils import setup_logging

logger = logging.getLogger(__name__)

SEPARATOR = "=" * 60
RULE = "-" * 60

STATUS_MESSAGES = {
    STATUS_CLEAN: "CLEAN - No metadata concerns found!",
    STATUS_HIGH: "ATTENTION NEEDED - High-priority concerns found!",
    STATUS_MEDIUM: "REVIEW RECOMMENDED - Medium-priority concerns found",
    STATUS_LOW: "LOW PRIORITY - Only minor concerns found",
}

SECTION_TITLES = {
    Severity.HIGH: "HIGH CONCERNS",
    Severity.MEDIUM: "MEDIUM CONCERNS",
    Severity.LOW: "LOW CONCERNS",
}

SCAN_SECTION_HINTS = {
    Severity.HIGH: "(Immediate Action Recommended)",
    Severity.MEDIUM: "(Review Recommended)",
    Severity.LOW: "(Optional Review)",
}


def _add_common_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("input", help="File or directory to process")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--backup", "-b", action="store_true", help="Create backup files before processing")
    parser.add_argument("--images", default=",".join(DEFAULT_IMAGE_EXTENSIONS),
                        help="Comma-separated list of image file extensions")
    parser.add_argument("--pdfs", default=",".join(DEFAULT_PDF_EXTENSIONS),
                        help="Comma-separated list of PDF file extensions")
    parser.add_argument("--videos", default=",".join(DEFAULT_VIDEO_EXTENSIONS),
                        help="Comma-separated list of video file extensions")
    parser.add_argument("--quiet", "-q", action="store_true", help="Hide the progress bar and console logs")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument("--timeout", type=int, default=30,
                        help="Timeout in seconds for analyzing each file, 0 disables (default: 30)")
    parser.add_argument("--producer-signature", default=DEFAULT_PRODUCER_SIGNATURE,
                        help="Producer written into stripped PDFs (default: %(default)s)")
    parser.add_argument("--report-output", help="Write the scan report as JSON to this file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="metastrip", description="Strip metadata from images, PDFs, and videos")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    strip_parser = subparsers.add_parser("strip", help="Strip metadata from files")
    _add_common_arguments(strip_parser)
    strip_parser.add_argument("--dry-run", action="store_true",
                              help="Show what would be processed without making changes")

    scan_parser = subparsers.add_parser("scan", help="Scan files for metadata concerns and optionally strip them")
    _add_common_arguments(scan_parser)
    scan_parser.add_argument("--interactive", action="store_true",
                             help="Interactive mode to select files for stripping")

    return parser


def build_config(args: argparse.Namespace) -> EngineConfig:
    return EngineConfig(
        image_extensions=parse_extensions(args.images),
        pdf_extensions=parse_extensions(args.pdfs),
        video_extensions=parse_extensions(args.videos),
        verbose=args.verbose,
        backup=args.backup,
        producer_signature=args.producer_signature,
        timeout_seconds=args.timeout or None,
        show_progress=not args.quiet,
    )


def _location(file_path: str) -> str:
    """``name (relative directory)`` for display."""
    directory = os.path.dirname(os.path.relpath(file_path)) or "."
    return f"{os.path.basename(file_path)} ({directory})"


def _print_header(title: str, input_path: str, engine: MetadataEngine, dry_run: bool = False):
    config = engine.config
    print(SEPARATOR)
    print(title)
    print(SEPARATOR)
    print(f"Input: {input_path}")
    print(f"Images: {', '.join(sorted(config.image_extensions))}")
    print(f"PDFs: {', '.join(sorted(config.pdf_extensions))}")
    print(f"Videos: {', '.join(sorted(config.video_extensions))}")
    if config.verbose:
        print("Libraries available:")
        for name, available in engine.capabilities.as_dict().items():
            print(f"  {name}: {'✓' if available else '✗'}")
        print(f"  {engine.transcoder.ffmpeg}: {'✓' if engine.transcoder.available() else '✗'}")
    if config.backup:
        print("Backup: Enabled")
    if dry_run:
        print("Dry run: Enabled (no changes will be made)")
    print()


def perform_dry_run(engine: MetadataEngine, input_path: str):
    """Print what a strip run would touch without invoking any stripper."""
    for action, path, category, depth in engine.plan(input_path):
        indent = "  " * depth
        name = os.path.basename(path)
        if action == "directory":
            print(f"{indent}Directory: {name}/")
        elif action == "process":
            print(f"{indent}Would process: {name} ({category.value})")
        else:
            print(f"{indent}Would skip: {name} (unsupported type)")


def _concern_sections(report: Report):
    return (
        (Severity.HIGH, report.high_concerns),
        (Severity.MEDIUM, report.medium_concerns),
        (Severity.LOW, report.low_concerns),
    )


def print_scan_results(report: Report, elapsed: float):
    summary = report.summary

    print("Scan Results:")
    print(STATUS_MESSAGES[overall_status(report)])
    print()

    print("Summary:")
    print(f"  Total files: {summary['totalFiles']}")
    print(f"  Successfully scanned: {summary['scannedFiles']}")
    if summary["filesWithMetadata"] > 0:
        print(f"  Files with metadata: {summary['filesWithMetadata']}")
        if summary["highConcerns"] > 0:
            print(f"  High-priority concerns: {summary['highConcerns']} (immediate action needed)")
        if summary["mediumConcerns"] > 0:
            print(f"  Medium-priority concerns: {summary['mediumConcerns']} (review recommended)")
        if summary["lowConcerns"] > 0:
            print(f"  Low-priority concerns: {summary['lowConcerns']} (optional review)")
    else:
        print("  Files with metadata: 0 (all clean!)")
    if summary["errors"] > 0:
        print(f"  Scan errors: {summary['errors']}")
    print(f"  Scan completed in: {elapsed:.2f}s")
    print()

    for severity, concerns in _concern_sections(report):
        if not concerns:
            continue
        print(f"{SECTION_TITLES[severity]} {SCAN_SECTION_HINTS[severity]}")
        print(SEPARATOR)
        for item in concerns:
            print(f"  {item.concern.value} - {item.concern.field} - {_location(item.file_path)}")
        print()

    if summary["filesWithMetadata"] == 0:
        print("Great! Your files are already clean.")
        return

    print("Next Steps:")
    print(RULE)
    if summary["highConcerns"] > 0:
        print(f"URGENT: {summary['highConcerns']} high-priority concerns need immediate attention")
        print("  These contain author info, GPS data, or other identifying metadata")
    if summary["mediumConcerns"] > 0:
        print(f"REVIEW: {summary['mediumConcerns']} medium-priority concerns should be reviewed")
        print("  These contain device info, software, or other potentially identifying data")
    if summary["lowConcerns"] > 0:
        print(f"OPTIONAL: {summary['lowConcerns']} low-priority concerns can be reviewed if desired")
        print("  These contain minor metadata like creation dates")
    print()
    print("To fix these issues:")
    print("  - Run with --interactive to selectively strip metadata")
    print("  - Add --backup to create backups before processing")


def print_strip_results(report: Report, strip_summary: DirectoryStripSummary):
    """Concerns found before stripping, each marked with its file's strip outcome."""
    if not strip_summary.files:
        return

    outcomes: Dict[str, StripResult] = {result.file_path: result for result in strip_summary.files}

    print("Detailed Results:")
    print(SEPARATOR)
    for severity, concerns in _concern_sections(report):
        if not concerns:
            continue
        print(f"{SECTION_TITLES[severity]} (Stripped)")
        print(RULE)
        for item in concerns:
            outcome = outcomes.get(item.file_path)
            mark = "✓" if outcome is not None and outcome.success else "✗"
            print(f"  {mark} {item.concern.value} - {item.concern.field} - {_location(item.file_path)}")
        print()

    failures = strip_summary.failures()
    if failures:
        print("ERRORS")
        print(RULE)
        for result in failures:
            print(f"  ✗ Error processing {_location(result.file_path)}: {result.error}")
        print()


def file_status(scan_result: Optional[ScanResult], strip_result: Optional[StripResult]) -> str:
    """Final per-file state: clean, stripped, or error (metadata when left untouched)."""
    if strip_result is not None:
        return "stripped" if strip_result.success else "error"
    if scan_result is not None and scan_result.error:
        return "error"
    if scan_result is not None and scan_result.has_metadata:
        return "metadata"
    return "clean"


def print_file_statuses(scan_summary: DirectorySummary, strip_summary: Optional[DirectoryStripSummary] = None):
    strip_results = {result.file_path: result for result in strip_summary.files} if strip_summary else {}
    scan_results = {result.file_path: result for result in scan_summary.files}

    paths = list(scan_results)
    paths.extend(path for path in strip_results if path not in scan_results)
    if not paths:
        return

    print("File status:")
    for path in paths:
        status = file_status(scan_results.get(path), strip_results.get(path))
        print(f"  {status.upper():<9} {os.path.relpath(path)}")
    print()


def interactive_select(report: Report, input_func: Callable[[str], str] = input) -> List[str]:
    """Ask per file with concerns whether to strip it.

    Answers: y (strip), n (skip), a (this and all remaining), q (stop).
    End of input counts as q.
    """
    print()
    print("Interactive Metadata Stripping")
    print(SEPARATOR)
    print("Select files to strip metadata from:")

    selected = []
    files = report.files_with_metadata

    for index, result in enumerate(files):
        name = os.path.basename(result.file_path)
        print()
        print(f"{index + 1}. {name}")
        print(f"   {os.path.relpath(result.file_path)}")
        print(f"   Concerns: {len(result.concerns)} total ({result.count(Severity.HIGH)} high, "
              f"{result.count(Severity.MEDIUM)} medium, {result.count(Severity.LOW)} low)")
        for concern in result.concerns[:2]:
            print(f"   [{concern.severity.value}] {concern.field}: {concern.value}")
        if len(result.concerns) > 2:
            print(f"   ... and {len(result.concerns) - 2} more concerns")

        try:
            answer = input_func(f"Strip metadata from {name}? (y/n/a for all/q to quit): ")
        except EOFError:
            answer = "q"
        answer = answer.strip().lower()

        if answer == "q":
            break
        if answer == "a":
            selected.extend(item.file_path for item in files[index:])
            break
        if answer == "y":
            selected.append(result.file_path)

    return selected


def print_selected_results(strip_summary: DirectoryStripSummary):
    print()
    print("Stripping Results:")
    print(SEPARATOR)
    print(f"Processed: {strip_summary.processed}")
    print(f"Errors: {strip_summary.errors}")

    failures = strip_summary.failures()
    if failures:
        print()
        print("ERRORS:")
        print(RULE)
        for result in failures:
            print(f"  {os.path.basename(result.file_path)}")
            print(f"  ✗ {result.error}")
    else:
        print()
        print("✓ All selected files processed successfully!")


def run_scan(engine: MetadataEngine, args: argparse.Namespace, input_path: str,
             input_func: Callable[[str], str] = input) -> int:
    _print_header("METADATA SCANNER", input_path, engine)

    start_time = time.time()
    scan_summary = engine.scan(input_path)
    elapsed = time.time() - start_time

    report = engine.build_report(scan_summary)
    print_scan_results(report, elapsed)
    print()

    strip_summary = None
    if args.interactive and report.files_with_metadata:
        selected = interactive_select(report, input_func)
        if selected:
            print()
            print("Stripping metadata from selected files...")
            strip_summary = engine.strip_selected(selected)
            print_selected_results(strip_summary)
        else:
            print()
            print("No files selected for metadata stripping.")
        print()
    elif report.files_with_metadata:
        print("Use --interactive to selectively strip metadata from files with concerns")
        print()

    print_file_statuses(scan_summary, strip_summary)

    if args.report_output:
        write_report(report, args.report_output, input_path)
    return 0


def run_strip(engine: MetadataEngine, args: argparse.Namespace, input_path: str) -> int:
    _print_header("METADATA STRIPPER", input_path, engine, dry_run=args.dry_run)

    if args.dry_run:
        perform_dry_run(engine, input_path)
        return 0

    print("Scanning files for metadata concerns...")
    scan_start = time.time()
    scan_summary = engine.scan(input_path)
    scan_elapsed = time.time() - scan_start
    report = engine.build_report(scan_summary)

    if args.report_output:
        write_report(report, args.report_output, input_path)

    if not report.files_with_metadata:
        print("No metadata concerns found. Files are already clean!")
        print()
        print_file_statuses(scan_summary)
        return 0

    print(f"Found {len(report.files_with_metadata)} files with metadata concerns")
    print(f"Scan completed in: {scan_elapsed:.2f}s")
    print()

    print("Stripping metadata from files...")
    start_time = time.time()
    strip_summary = engine.strip(input_path)
    elapsed = time.time() - start_time

    print()
    print("Stripping Results:")
    print(SEPARATOR)
    print(f"Processed: {strip_summary.processed}")
    print(f"Skipped: {strip_summary.skipped}")
    print(f"Errors: {strip_summary.errors}")
    print(f"Time: {elapsed:.2f}s")
    print()

    print_strip_results(report, strip_summary)
    print_file_statuses(scan_summary, strip_summary)

    if engine.config.backup and strip_summary.processed > 0:
        print(f"Backup files created with {engine.config.backup_suffix} extension")
    return 0


def main(argv: Optional[List[str]] = None, input_func: Callable[[str], str] = input,
         engine_factory: Callable[[EngineConfig], MetadataEngine] = MetadataEngine) -> int:
    """Main function."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    input_path = os.path.abspath(args.input)
    if not os.path.exists(input_path):
        print(f"Error: Cannot access {input_path}", file=sys.stderr)
        return 1

    try:
        engine = engine_factory(build_config(args))
        if args.command == "strip":
            return run_strip(engine, args, input_path)
        return run_scan(engine, args, input_path, input_func)
    except (MetadataError, OSError) as e:
        logger.error(f"Fatal error: {e}")
        print(f"Fatal error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
