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
Pre-commit gate: strips metadata from staged media files and re-stages them.

Exit code 0 lets the commit continue; 1 aborts it because at least one file
could not be cleaned.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional, Sequence

from .config import EngineConfig
from .engine import MetadataEngine
from .errors import MetadataError
from .models import ScanResult, Severity
from .tools import run_tool
from .utils import setup_logging

logger = logging.getLogger(__name__)


class GitStagingArea:
    """Staged file listing and re-staging through the git executable."""

    def __init__(self, git: str = "git", timeout: Optional[int] = 60):
        self.git = git
        self.timeout = timeout

    def staged_files(self) -> List[str]:
        """Added, copied, modified, and renamed paths in the index."""
        result = run_tool([self.git, "diff", "--cached", "--name-only", "--diff-filter=ACMR"], timeout=self.timeout)
        output = result.stdout.decode("utf-8", errors="replace")
        return [line for line in output.splitlines() if line.strip()]

    def add(self, path: str):
        run_tool([self.git, "add", "--", path], timeout=self.timeout)


def _print_concerns(result: ScanResult):
    """At most two concerns, high before medium."""
    high = [c for c in result.concerns if c.severity is Severity.HIGH]
    medium = [c for c in result.concerns if c.severity is Severity.MEDIUM]

    for concern in high[:2]:
        print(f"     [high] {concern.field}: {concern.value}")
    if len(high) > 2:
        print(f"     ... and {len(high) - 2} more high concerns")
    for concern in medium[:max(0, 2 - len(high))]:
        print(f"     [medium] {concern.field}: {concern.value}")


def run_pre_commit(engine: MetadataEngine, files: Sequence[str], git: Optional[GitStagingArea] = None) -> int:
    """Clean every supported file in ``files`` that carries metadata.

    A file whose scan failed is cleaned as well, since it cannot be shown to
    be clean. Each cleaned file is re-staged when ``git`` is given.
    """
    if not files:
        print("No staged files to check for metadata.")
        return 0

    supported = [path for path in files if engine.is_supported(path)]
    if not supported:
        print("No media files staged that require metadata cleaning.")
        return 0

    print(f"\nChecking {len(supported)} staged media file(s) for metadata...")

    to_clean = []
    for path in supported:
        result = engine.scan_file(path)
        if result.has_metadata or result.error:
            to_clean.append(result)

    if not to_clean:
        print("✓ All staged media files are already clean of metadata.")
        return 0

    print(f"\nFound {len(to_clean)} file(s) with metadata to clean:\n")

    cleaned = []
    failures = []
    for result in to_clean:
        path = result.file_path
        print(f"  Cleaning: {os.path.basename(path)} ({result.file_category.value})")
        _print_concerns(result)

        try:
            engine.strip_file(path)
            if git is not None:
                git.add(path)
        except (MetadataError, OSError) as e:
            print(f"     ✗ Failed: {e}")
            logger.debug(f"Failed to clean {path}: {e}")
            failures.append((path, str(e)))
            continue

        print("     ✓ Cleaned and re-staged" if git is not None else "     ✓ Cleaned")
        cleaned.append(path)

    print()
    if cleaned:
        print("Metadata cleaning results:")
        print(f"  Successfully cleaned: {len(cleaned)} file(s)")
        if failures:
            print(f"  Failed: {len(failures)} file(s)")
        print()

    if failures:
        print("✗ Metadata cleaning failed for some files. Commit aborted.")
        print()
        print("Failed files:")
        for path, error in failures:
            print(f"  - {path}: {error}")
        print()
        print("Please fix these issues and try again.")
        return 1

    print("✓ All media files cleaned successfully. Continuing with commit...\n")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    parser = argparse.ArgumentParser(prog="metastrip-pre-commit",
                                     description="Strip metadata from staged images, PDFs, and videos")
    parser.add_argument("files", nargs="*", help="Files to check (default: files staged in git)")
    parser.add_argument("--no-stage", action="store_true", help="Do not re-stage cleaned files")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose)

    staging = GitStagingArea()
    try:
        files = args.files or staging.staged_files()
        engine = MetadataEngine(EngineConfig(verbose=args.verbose))
        return run_pre_commit(engine, files, None if args.no_stage else staging)
    except MetadataError as e:
        print(f"✗ Pre-commit metadata check failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
