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
Data models for metadata scan and strip results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class FileCategory(str, Enum):
    """Category a file falls into, derived from its extension."""
    IMAGE = "image"
    PDF = "pdf"
    VIDEO = "video"
    UNSUPPORTED = "unsupported"


class Severity(str, Enum):
    """How privacy-relevant a piece of metadata is."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class Concern:
    """A single piece of discovered metadata."""
    severity: Severity
    kind: str          # tag such as gps_location, author_info
    field: str         # human label
    value: Any         # raw extracted value
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.severity.value,
            "type": self.kind,
            "field": self.field,
            "value": self.value,
            "description": self.description,
        }


@dataclass
class ScanResult:
    """Analysis outcome for one file."""
    file_path: str
    file_category: FileCategory
    has_metadata: bool = False
    concerns: List[Concern] = field(default_factory=list)
    format_metadata: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    def count(self, severity: Severity) -> int:
        return sum(1 for concern in self.concerns if concern.severity == severity)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "filePath": self.file_path,
            "fileType": self.file_category.value,
            "hasMetadata": self.has_metadata,
            "concerns": [concern.to_dict() for concern in self.concerns],
            "metadata": self.format_metadata,
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class StripResult:
    """Strip outcome for one file."""
    file_path: str
    file_category: FileCategory
    original_size: int = 0
    success: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "filePath": self.file_path,
            "fileType": self.file_category.value,
            "originalSize": self.original_size,
            "success": self.success,
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class DirectorySummary:
    """Scan counters accumulated bottom-up over a directory tree."""
    total_files: int = 0
    scanned_files: int = 0
    files_with_metadata: int = 0
    high_concerns: int = 0
    medium_concerns: int = 0
    low_concerns: int = 0
    errors: int = 0
    files: List[ScanResult] = field(default_factory=list)

    def add_skipped(self):
        """Count a file that is not in any supported category."""
        self.total_files += 1

    def add_result(self, result: ScanResult):
        """Fold one analyzed file into the counters."""
        self.total_files += 1
        self.files.append(result)

        if result.error:
            self.errors += 1
            return

        self.scanned_files += 1
        if result.has_metadata:
            self.files_with_metadata += 1
            self.high_concerns += result.count(Severity.HIGH)
            self.medium_concerns += result.count(Severity.MEDIUM)
            self.low_concerns += result.count(Severity.LOW)

    def merge(self, other: "DirectorySummary"):
        """Add a child directory's summary field by field."""
        self.total_files += other.total_files
        self.scanned_files += other.scanned_files
        self.files_with_metadata += other.files_with_metadata
        self.high_concerns += other.high_concerns
        self.medium_concerns += other.medium_concerns
        self.low_concerns += other.low_concerns
        self.errors += other.errors
        self.files.extend(other.files)

    def counters(self) -> Dict[str, int]:
        return {
            "totalFiles": self.total_files,
            "scannedFiles": self.scanned_files,
            "filesWithMetadata": self.files_with_metadata,
            "highConcerns": self.high_concerns,
            "mediumConcerns": self.medium_concerns,
            "lowConcerns": self.low_concerns,
            "errors": self.errors,
        }


@dataclass
class DirectoryStripSummary:
    """Strip counters accumulated bottom-up over a directory tree."""
    total_files: int = 0
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    files: List[StripResult] = field(default_factory=list)

    def add_skipped(self):
        self.total_files += 1
        self.skipped += 1

    def add_result(self, result: StripResult):
        self.total_files += 1
        self.files.append(result)
        if result.success:
            self.processed += 1
        else:
            self.errors += 1

    def merge(self, other: "DirectoryStripSummary"):
        self.total_files += other.total_files
        self.processed += other.processed
        self.skipped += other.skipped
        self.errors += other.errors
        self.files.extend(other.files)

    def result_for(self, file_path: str) -> Optional[StripResult]:
        for result in self.files:
            if result.file_path == file_path:
                return result
        return None

    def failures(self) -> List[StripResult]:
        return [result for result in self.files if not result.success]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalFiles": self.total_files,
            "processed": self.processed,
            "skipped": self.skipped,
            "errors": self.errors,
            "files": [result.to_dict() for result in self.files],
        }


@dataclass(frozen=True)
class ReportedConcern:
    """A concern together with the file it was found in."""
    concern: Concern
    file_path: str

    def to_dict(self) -> Dict[str, Any]:
        data = self.concern.to_dict()
        data["filePath"] = self.file_path
        return data


@dataclass(frozen=True)
class Report:
    """Severity-bucketed view over a DirectorySummary."""
    summary: Dict[str, int]
    high_concerns: List[ReportedConcern]
    medium_concerns: List[ReportedConcern]
    low_concerns: List[ReportedConcern]
    files_with_metadata: List[ScanResult]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": dict(self.summary),
            "highConcerns": [item.to_dict() for item in self.high_concerns],
            "mediumConcerns": [item.to_dict() for item in self.medium_concerns],
            "lowConcerns": [item.to_dict() for item in self.low_concerns],
            "filesWithMetadata": [result.to_dict() for result in self.files_with_metadata],
        }
