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
Recursive directory walking and result aggregation.

Directories are visited depth-first in name order. A directory's summary is
the field-wise sum of its subdirectories' summaries plus its own files. Files
are handled one at a time; a failure on one file is recorded and the walk
continues.
"""

import logging
import os
from typing import Iterable, Iterator, List, Tuple

from tqdm import tqdm

from .analyzers import MetadataAnalyzer
from .classifier import FormatClassifier, extension_of
from .errors import UnsupportedFormatError
from .models import DirectoryStripSummary, DirectorySummary, FileCategory, StripResult
from .strippers import MetadataStripper

logger = logging.getLogger(__name__)

BAR_FORMAT = '{desc}: {n_fmt} files [{elapsed}, {rate_fmt}] {postfix}'


def _entries(directory: str) -> List[os.DirEntry]:
    with os.scandir(directory) as it:
        return sorted(it, key=lambda entry: entry.name)


class DirectoryWalker:
    """Applies scan or strip to every supported file below a path."""

    def __init__(self, classifier: FormatClassifier, analyzer: MetadataAnalyzer, stripper: MetadataStripper,
                 show_progress: bool = False):
        self.classifier = classifier
        self.analyzer = analyzer
        self.stripper = stripper
        self.show_progress = show_progress

    def _progress(self, desc: str) -> tqdm:
        return tqdm(desc=desc, unit="file", bar_format=BAR_FORMAT, leave=False, dynamic_ncols=True,
                    disable=not self.show_progress)

    def _check_supported(self, path: str):
        if not self.classifier.is_supported(path):
            raise UnsupportedFormatError(f"Unsupported file type: .{extension_of(path)}")

    # Scanning

    def scan(self, path: str) -> DirectorySummary:
        """Scan a file or a directory tree.

        A single file yields a one-entry summary shaped like a directory's.
        """
        if os.path.isdir(path):
            return self.scan_directory(path)
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Invalid input: {path} is neither a file nor a directory")

        self._check_supported(path)
        summary = DirectorySummary()
        summary.add_result(self.analyzer.analyze(path))
        return summary

    def scan_directory(self, path: str) -> DirectorySummary:
        with self._progress("Scanning") as bar:
            return self._scan_directory(path, bar)

    def _scan_directory(self, directory: str, bar: tqdm) -> DirectorySummary:
        summary = DirectorySummary()

        for entry in _entries(directory):
            if entry.is_dir(follow_symlinks=False):
                summary.merge(self._scan_directory(entry.path, bar))
            elif not entry.is_file():
                continue
            elif self.classifier.is_supported(entry.path):
                bar.set_postfix_str(entry.name)
                summary.add_result(self.analyzer.analyze(entry.path))
                bar.update(1)
            else:
                summary.add_skipped()
                logger.debug(f"Skipped: {entry.name} (unsupported type)")

        return summary

    # Stripping

    def _strip_one(self, path: str) -> StripResult:
        logger.debug(f"Processing: {os.path.basename(path)}")
        try:
            result = self.stripper.strip(path)
        except Exception as e:
            logger.warning(f"Error: {os.path.basename(path)} - {e}")
            size = os.path.getsize(path) if os.path.exists(path) else 0
            return StripResult(path, self.classifier.category(path), original_size=size, success=False,
                               error=str(e) or type(e).__name__)

        logger.debug(f"Success: {os.path.basename(path)}")
        return result

    def strip(self, path: str) -> DirectoryStripSummary:
        """Strip a file or a directory tree."""
        if os.path.isdir(path):
            return self.strip_directory(path)
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Invalid input: {path} is neither a file nor a directory")

        self._check_supported(path)
        summary = DirectoryStripSummary()
        summary.add_result(self._strip_one(path))
        return summary

    def strip_directory(self, path: str) -> DirectoryStripSummary:
        with self._progress("Stripping") as bar:
            return self._strip_directory(path, bar)

    def _strip_directory(self, directory: str, bar: tqdm) -> DirectoryStripSummary:
        summary = DirectoryStripSummary()

        for entry in _entries(directory):
            if entry.is_dir(follow_symlinks=False):
                summary.merge(self._strip_directory(entry.path, bar))
            elif not entry.is_file():
                continue
            elif self.classifier.is_supported(entry.path):
                bar.set_postfix_str(entry.name)
                summary.add_result(self._strip_one(entry.path))
                bar.update(1)
            else:
                summary.add_skipped()
                logger.debug(f"Skipped: {entry.name} (unsupported type)")

        return summary

    def strip_selected(self, paths: Iterable[str]) -> DirectoryStripSummary:
        """Strip exactly the given files, recording failures per file."""
        summary = DirectoryStripSummary()
        for path in paths:
            if self.classifier.is_supported(path):
                summary.add_result(self._strip_one(path))
            else:
                summary.add_skipped()
        return summary

    # Dry run

    def plan(self, path: str, depth: int = 0) -> Iterator[Tuple[str, str, FileCategory, int]]:
        """Yield what a strip run would do without touching any file.

        Items are ``(action, path, category, depth)`` where action is
        ``"directory"``, ``"process"``, or ``"skip"``. A single unsupported
        file raises UnsupportedFormatError, as a real strip would.
        """
        if os.path.isfile(path):
            self._check_supported(path)
            yield "process", path, self.classifier.category(path), depth
            return

        for entry in _entries(path):
            if entry.is_dir(follow_symlinks=False):
                yield "directory", entry.path, FileCategory.UNSUPPORTED, depth
                yield from self.plan(entry.path, depth + 1)
            elif entry.is_file():
                category = self.classifier.category(entry.path)
                action = "skip" if category is FileCategory.UNSUPPORTED else "process"
                yield action, entry.path, category, depth

