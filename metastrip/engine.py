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
Main metadata engine class.
"""

import logging
import os
from typing import Iterable

from .analyzers import ImageAnalyzer, MetadataAnalyzer, PdfAnalyzer, VideoAnalyzer
from .capabilities import Capabilities, detect_capabilities
from .classifier import FormatClassifier
from .config import EngineConfig
from .errors import MetadataError
from .models import DirectoryStripSummary, DirectorySummary, FileCategory, Report, ScanResult, StripResult
from .report import build_report
from .strippers import ImageStripper, MetadataStripper, PdfStripper, VideoStripper
from .tools import ExternalMetadataTool, ExternalTranscoder
from .walker import DirectoryWalker

logger = logging.getLogger(__name__)


class MetadataEngine:
    """Scans and strips embedded metadata from images, PDFs, and videos.

    Everything the engine depends on is passed in: the configuration, which
    codec libraries may be used, and the external programs for video
    remuxing and the XMP fallback pass.
    """

    def __init__(self, config: EngineConfig = None, capabilities: Capabilities = None,
                 transcoder: ExternalTranscoder = None, metadata_tool: ExternalMetadataTool = None):
        self.config = config or EngineConfig()
        self.capabilities = capabilities or detect_capabilities()
        self.transcoder = transcoder or ExternalTranscoder()
        self.metadata_tool = metadata_tool or ExternalMetadataTool()

        self.classifier = FormatClassifier(self.config)
        self.analyzer = MetadataAnalyzer(
            self.classifier,
            [
                ImageAnalyzer(self.capabilities),
                PdfAnalyzer(self.capabilities, self.config.producer_signature),
                VideoAnalyzer(self.transcoder),
            ],
            timeout_seconds=self.config.timeout_seconds,
        )
        self.stripper = MetadataStripper(
            self.classifier,
            [
                ImageStripper(self.capabilities, self.metadata_tool),
                PdfStripper(self.capabilities, self.config.producer_signature),
                VideoStripper(self.transcoder),
            ],
            backup=self.config.backup,
            backup_suffix=self.config.backup_suffix,
        )
        self.walker = DirectoryWalker(self.classifier, self.analyzer, self.stripper,
                                      show_progress=self.config.show_progress)

    def category(self, path: str) -> FileCategory:
        return self.classifier.category(path)

    def is_supported(self, path: str) -> bool:
        return self.classifier.is_supported(path)

    def scan_file(self, path: str) -> ScanResult:
        return self.analyzer.analyze(path)

    def strip_file(self, path: str) -> StripResult:
        return self.stripper.strip(path)

    def scan(self, path: str) -> DirectorySummary:
        return self.walker.scan(path)

    def scan_directory(self, path: str) -> DirectorySummary:
        return self.walker.scan_directory(path)

    def strip(self, path: str) -> DirectoryStripSummary:
        return self.walker.strip(path)

    def strip_directory(self, path: str) -> DirectoryStripSummary:
        return self.walker.strip_directory(path)

    def strip_selected(self, paths: Iterable[str]) -> DirectoryStripSummary:
        return self.walker.strip_selected(paths)

    def plan(self, path: str):
        return self.walker.plan(path)

    def build_report(self, summary: DirectorySummary) -> Report:
        return build_report(summary)

    def strip_bytes(self, data: bytes, filename: str) -> bytes:
        """Stripped copy of an in-memory image or PDF."""
        return self.stripper.strip_bytes(data, filename)

    def sanitize_for_publish(self, path: str) -> bool:
        """Strip a downloaded asset before it is published.

        Returns False and leaves the original file in place when stripping
        fails, so publishing can continue with the original bytes.
        """
        if not self.is_supported(path):
            return False
        try:
            self.strip_file(path)
        except (MetadataError, OSError) as e:
            logger.warning(f"Publishing {os.path.basename(path)} with original metadata: {e}")
            return False
        return True
