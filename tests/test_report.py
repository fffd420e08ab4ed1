#!/usr/bin/env python3
"""Tests for report generation and JSON output."""

import json

from metastrip.models import Concern, DirectorySummary, FileCategory, ScanResult, Severity
from metastrip.report import (
    STATUS_CLEAN, STATUS_HIGH, STATUS_LOW, STATUS_MEDIUM, build_report, overall_status, write_report,
)


def result(path, *severities, error=None):
    concerns = [Concern(severity, "kind", "Field", f"value{i}", "desc") for i, severity in enumerate(severities)]
    return ScanResult(path, FileCategory.IMAGE, has_metadata=bool(concerns), concerns=concerns, error=error)


def summary_of(*results):
    summary = DirectorySummary()
    for item in results:
        summary.add_result(item)
    return summary


class TestBuildReport:
    """Tests for severity bucketing."""

    def test_bucket_sizes_match_counters(self, engine, media_tree):
        report = build_report(engine.scan(media_tree))

        assert len(report.high_concerns) == report.summary["highConcerns"]
        assert len(report.medium_concerns) == report.summary["mediumConcerns"]
        assert len(report.low_concerns) == report.summary["lowConcerns"]
        assert len(report.files_with_metadata) == report.summary["filesWithMetadata"]

    def test_concerns_carry_file_path(self):
        report = build_report(summary_of(result("/a.jpg", Severity.HIGH), result("/b.jpg", Severity.LOW)))
        assert [item.file_path for item in report.high_concerns] == ["/a.jpg"]
        assert [item.file_path for item in report.low_concerns] == ["/b.jpg"]

    def test_clean_and_error_files_excluded(self):
        report = build_report(summary_of(result("/clean.jpg"), result("/bad.jpg", error="boom")))
        assert report.files_with_metadata == []
        assert report.summary["errors"] == 1
        assert report.summary["scannedFiles"] == 1


class TestOverallStatus:
    """Tests for the headline status."""

    def test_statuses(self):
        assert overall_status(build_report(summary_of(result("/a")))) == STATUS_CLEAN
        assert overall_status(build_report(summary_of(result("/a", Severity.LOW, Severity.HIGH)))) == STATUS_HIGH
        assert overall_status(build_report(summary_of(result("/a", Severity.MEDIUM)))) == STATUS_MEDIUM
        assert overall_status(build_report(summary_of(result("/a", Severity.LOW)))) == STATUS_LOW


class TestWriteReport:
    """Tests for the JSON document shape."""

    def test_json_shape(self, tmp_path, engine, jpeg_file):
        report = build_report(engine.scan(jpeg_file))
        output = tmp_path / "out" / "report.json"

        write_report(report, str(output), jpeg_file)

        document = json.loads(output.read_text(encoding="utf-8"))
        assert document["input"] == jpeg_file
        assert "analysisTimestamp" in document
        assert set(document["summary"]) == {
            "totalFiles", "scannedFiles", "filesWithMetadata", "highConcerns", "mediumConcerns", "lowConcerns",
            "errors",
        }
        high = document["highConcerns"][0]
        assert set(high) == {"level", "type", "field", "value", "description", "filePath"}
        assert high["level"] == "high"
        entry = document["filesWithMetadata"][0]
        assert entry["filePath"] == jpeg_file
        assert entry["fileType"] == "image"
        assert entry["hasMetadata"] is True

    def test_non_json_values_serialized(self, tmp_path):
        concern = Concern(Severity.MEDIUM, "user_comment", "User Comment", b"caf\xc3\xa9", "desc")
        summary = summary_of(ScanResult("/a.jpg", FileCategory.IMAGE, True, [concern]))
        output = tmp_path / "report.json"

        write_report(build_report(summary), str(output))

        document = json.loads(output.read_text(encoding="utf-8"))
        assert document["mediumConcerns"][0]["value"] == "café"
        assert "input" not in document
