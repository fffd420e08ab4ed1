#!/usr/bin/env python3
"""Tests for engine configuration and file classification."""

import pytest

from metastrip.classifier import FormatClassifier, extension_of
from metastrip.config import EngineConfig, normalize_extensions, parse_extensions
from metastrip.errors import ConfigurationError
from metastrip.models import FileCategory


class TestParseExtensions:
    """Tests for comma-separated extension lists."""

    def test_trims_lowers_and_drops_dots(self):
        assert parse_extensions(" JPG, .png,,webp ") == frozenset({"jpg", "png", "webp"})

    def test_empty_list_rejected(self):
        with pytest.raises(ConfigurationError):
            parse_extensions(" , ,")

    def test_normalize_ignores_blanks(self):
        assert normalize_extensions(["", ".", "TIFF"]) == frozenset({"tiff"})


class TestEngineConfig:
    """Tests for EngineConfig defaults and validation."""

    def test_defaults(self):
        config = EngineConfig()
        assert "jpg" in config.image_extensions
        assert config.pdf_extensions == frozenset({"pdf"})
        assert "mkv" in config.video_extensions
        assert config.producer_signature == "metastrip"
        assert config.backup_suffix == ".backup"

    def test_accepts_any_iterable(self):
        config = EngineConfig(image_extensions=[".HEIC", "jpg"])
        assert config.image_extensions == frozenset({"heic", "jpg"})

    def test_empty_category_rejected(self):
        with pytest.raises(ConfigurationError):
            EngineConfig(video_extensions=[])


class TestFormatClassifier:
    """Tests for extension based classification."""

    @pytest.fixture
    def classifier(self):
        return FormatClassifier(EngineConfig())

    @pytest.mark.parametrize("name, category", [
        ("photo.JPG", FileCategory.IMAGE),
        ("scan.tiff", FileCategory.IMAGE),
        ("report.PDF", FileCategory.PDF),
        ("dir.v2/clip.MoV", FileCategory.VIDEO),
        ("notes.txt", FileCategory.UNSUPPORTED),
        ("Makefile", FileCategory.UNSUPPORTED),
        (".jpg", FileCategory.UNSUPPORTED),
    ])
    def test_categories(self, classifier, name, category):
        assert classifier.category(name) is category

    def test_is_supported(self, classifier):
        assert classifier.is_supported("a/b/c.webm")
        assert not classifier.is_supported("a/b/c.docx")

    def test_custom_extensions(self):
        classifier = FormatClassifier(EngineConfig(image_extensions=["heic"]))
        assert classifier.category("x.heic") is FileCategory.IMAGE
        assert classifier.category("x.jpg") is FileCategory.UNSUPPORTED

    def test_extension_of(self):
        assert extension_of("archive.tar.GZ") == "gz"
        assert extension_of("no_extension") == ""
