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
Report generation from scan summaries.
"""

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict

from .models import DirectorySummary, Report, ReportedConcern, Severity

logger = logging.getLogger(__name__)

STATUS_CLEAN = "CLEAN"
STATUS_HIGH = "ATTENTION NEEDED"
STATUS_MEDIUM = "REVIEW RECOMMENDED"
STATUS_LOW = "LOW PRIORITY"


def build_report(summary: DirectorySummary) -> Report:
    """Bucket every concern of every file with metadata by severity."""
    buckets = {Severity.HIGH: [], Severity.MEDIUM: [], Severity.LOW: []}
    files_with_metadata = []

    for result in summary.files:
        if not result.has_metadata:
            continue
        files_with_metadata.append(result)
        for concern in result.concerns:
            buckets[concern.severity].append(ReportedConcern(concern, result.file_path))

    return Report(
        summary=summary.counters(),
        high_concerns=buckets[Severity.HIGH],
        medium_concerns=buckets[Severity.MEDIUM],
        low_concerns=buckets[Severity.LOW],
        files_with_metadata=files_with_metadata,
    )


def overall_status(report: Report) -> str:
    if report.summary["filesWithMetadata"] == 0:
        return STATUS_CLEAN
    if report.summary["highConcerns"] > 0:
        return STATUS_HIGH
    if report.summary["mediumConcerns"] > 0:
        return STATUS_MEDIUM
    return STATUS_LOW


def report_document(report: Report, input_path: str = None) -> Dict[str, Any]:
    """The report as a JSON-ready dict."""
    document = {"analysisTimestamp": datetime.now().isoformat()}
    if input_path:
        document["input"] = input_path
    document.update(report.to_dict())
    return document


def write_report(report: Report, output_file: str, input_path: str = None) -> Dict[str, Any]:
    """Write the report as JSON and return what was written."""
    document = report_document(report, input_path)

    # Concern values can be rationals or bytes from the codecs
    def json_serializer(obj):
        """Custom JSON serializer to handle non-serializable objects."""
        if isinstance(obj, bytes):
            return obj.decode("utf-8", errors="replace")
        return str(obj)

    directory = os.path.dirname(os.path.abspath(output_file))
    os.makedirs(directory, exist_ok=True)
    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(document, f, indent=2, ensure_ascii=False, default=json_serializer)

    logger.info(f"Report saved to {output_file}")
    return document
