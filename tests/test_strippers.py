#!/usr/bin/env python3
"""Tests for metadata stripping and the verify-and-fallback path."""

import glob
import os
import tempfile

import pytest
from PIL import Image
from pypdf import PdfReader

from metastrip import image_codec
from metastrip.analyzers import ImageAnalyzer, PdfAnalyzer
from metastrip.capabilities import Capabilities
from metastrip.classifier import FormatClassifier
from metastrip.config import EngineConfig
from metastrip.errors import CapabilityUnavailableError, StripError, UnsupportedFormatError, VerificationError
from metastrip.models import FileCategory
from metastrip.strippers import ImageStripper, MetadataStripper, PdfStripper, VideoStripper

from conftest import FakeMetadataTool, FakeTranscoder, make_png_with_xmp


class KeepEverythingStripper(ImageStripper):
    """Re-encoding that leaves the bytes untouched, forcing the fallback pass."""

    def _reencode(self, data):
        return data


def leftover_temp_files():
    return glob.glob(os.path.join(tempfile.gettempdir(), "metastrip_*"))


class TestImageStripper:
    """Tests for image re-encoding."""

    def test_jpeg_exif_removed(self, jpeg_file):
        ImageStripper(Capabilities(), FakeMetadataTool()).strip_file(jpeg_file)

        result = ImageAnalyzer(Capabilities()).analyze(jpeg_file)
        assert not result.has_metadata
        with Image.open(jpeg_file) as image:
            assert image.size == (32, 24)
            assert image.format == "JPEG"

    def test_animated_gif_keeps_every_frame(self, tmp_path):
        path = str(tmp_path / "wave.gif")
        frames = [Image.new("RGB", (16, 16), color) for color in ("red", "green", "blue")]
        frames[0].save(path, save_all=True, append_images=frames[1:], duration=[80, 120, 160], loop=0,
                       comment=b"Shot by Jane Doe")

        ImageStripper(Capabilities(), FakeMetadataTool()).strip_file(path)

        with Image.open(path) as image:
            assert image.n_frames == 3
            assert image.info.get("loop") == 0
            assert "comment" not in image.info
            durations = []
            for index in range(image.n_frames):
                image.seek(index)
                durations.append(image.info.get("duration"))
        assert durations == [80, 120, 160]

    def test_png_xmp_removed_without_fallback(self, png_xmp_file):
        tool = FakeMetadataTool()
        ImageStripper(Capabilities(), tool).strip_file(png_xmp_file)

        with open(png_xmp_file, "rb") as f:
            assert image_codec.xmp_from_bytes(f.read()) is None
        assert tool.calls == []

    def test_fallback_removes_residual_xmp(self, png_xmp_file):
        before = set(leftover_temp_files())
        tool = FakeMetadataTool()
        KeepEverythingStripper(Capabilities(), tool).strip_file(png_xmp_file)

        assert len(tool.calls) == 1
        assert tool.calls[0].endswith(".png")
        assert not os.path.exists(tool.calls[0])
        assert set(leftover_temp_files()) == before
        assert not ImageAnalyzer(Capabilities()).analyze(png_xmp_file).has_metadata

    def test_fallback_failure_names_both_passes(self, png_xmp_file):
        tool = FakeMetadataTool(fail=True)
        with pytest.raises(VerificationError) as excinfo:
            KeepEverythingStripper(Capabilities(), tool).strip_file(png_xmp_file)

        assert "Both re-encoding and exiftool failed" in str(excinfo.value)
        assert not os.path.exists(tool.calls[0])

    def test_fallback_that_leaves_xmp_fails_verification(self, png_xmp_file):
        tool = FakeMetadataTool(leave_xmp=True)
        with pytest.raises(VerificationError):
            KeepEverythingStripper(Capabilities(), tool).strip_file(png_xmp_file)
        assert not os.path.exists(tool.calls[0])

    def test_failed_strip_leaves_file_untouched(self, png_xmp_file):
        with open(png_xmp_file, "rb") as f:
            original = f.read()
        with pytest.raises(VerificationError):
            KeepEverythingStripper(Capabilities(), FakeMetadataTool(fail=True)).strip_file(png_xmp_file)
        with open(png_xmp_file, "rb") as f:
            assert f.read() == original

    def test_corrupt_image(self, corrupt_jpeg):
        with pytest.raises(StripError, match="Failed to strip image metadata"):
            ImageStripper(Capabilities(), FakeMetadataTool()).strip_file(corrupt_jpeg)

    def test_missing_codec(self, jpeg_file):
        with pytest.raises(CapabilityUnavailableError):
            ImageStripper(Capabilities(pillow=False), FakeMetadataTool()).strip_file(jpeg_file)

    def test_strip_bytes(self, tmp_path):
        path = make_png_with_xmp(tmp_path / "x.png")
        with open(path, "rb") as f:
            data = f.read()
        stripped = ImageStripper(Capabilities(), FakeMetadataTool()).strip_bytes(data, ".png")
        assert image_codec.xmp_from_bytes(stripped) is None


class TestPdfStripper:
    """Tests for PDF information dictionary rewriting."""

    @pytest.mark.parametrize("capabilities", [Capabilities(), Capabilities(pypdf=False)])
    def test_metadata_removed(self, pdf_file, capabilities):
        PdfStripper(capabilities, "metastrip").strip_file(pdf_file)

        result = PdfAnalyzer(Capabilities(), "metastrip").analyze(pdf_file)
        assert not result.has_metadata
        assert result.format_metadata["pageCount"] == 1

    def test_producer_signature_and_dates(self, pdf_file):
        PdfStripper(Capabilities(), "metastrip").strip_file(pdf_file)

        metadata = PdfReader(pdf_file).metadata
        assert metadata["/Producer"] == "metastrip"
        assert metadata["/CreationDate"].startswith("D:")
        assert metadata["/ModDate"] == metadata["/CreationDate"]
        assert "/Author" not in metadata

    def test_no_writer_available(self, pdf_file):
        capabilities = Capabilities(pypdf=False, pymupdf=False)
        with pytest.raises(CapabilityUnavailableError):
            PdfStripper(capabilities, "metastrip").strip_file(pdf_file)

    def test_corrupt_pdf(self, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"%PDF-1.4 garbage")
        with pytest.raises(StripError, match="Failed to strip PDF metadata"):
            PdfStripper(Capabilities(), "metastrip").strip_file(str(path))


class TestVideoStripper:
    """Tests for remuxing through the transcoder."""

    def test_remux_replaces_file(self, video_file, transcoder):
        with open(video_file, "rb") as f:
            original = f.read()

        VideoStripper(transcoder).strip_file(video_file)

        temp_input, output, options = transcoder.remuxed[0]
        assert output != os.path.abspath(video_file)
        assert os.path.dirname(output) == os.path.dirname(os.path.abspath(video_file))
        assert output.endswith(".mp4")
        assert "-map_metadata" in options
        assert not os.path.exists(temp_input)
        assert not os.path.exists(output)
        with open(video_file, "rb") as f:
            assert f.read() == original
        assert transcoder.tags == {}

    def test_remux_failure_cleans_temp(self, video_file):
        transcoder = FakeTranscoder(fail_remux=True)
        with pytest.raises(StripError, match="Failed to strip video metadata"):
            VideoStripper(transcoder).strip_file(video_file)

        temp_input, output, _options = transcoder.remuxed[0]
        assert not os.path.exists(temp_input)
        assert not os.path.exists(output)
        assert sorted(os.listdir(os.path.dirname(video_file))) == ["clip.mp4"]

    def test_remux_failure_keeps_original_bytes(self, video_file):
        with open(video_file, "rb") as f:
            original = f.read()

        with pytest.raises(StripError):
            VideoStripper(FakeTranscoder(fail_remux=True)).strip_file(video_file)

        with open(video_file, "rb") as f:
            assert f.read() == original
        assert original

    def test_missing_transcoder(self, video_file):
        with pytest.raises(CapabilityUnavailableError):
            VideoStripper(FakeTranscoder(available=False)).strip_file(video_file)


class TestMetadataStripper:
    """Tests for dispatch and backups."""

    def make(self, backup=False):
        capabilities = Capabilities()
        return MetadataStripper(
            FormatClassifier(EngineConfig()),
            [ImageStripper(capabilities, FakeMetadataTool()), PdfStripper(capabilities, "metastrip"),
             VideoStripper(FakeTranscoder())],
            backup=backup,
        )

    def test_result(self, jpeg_file):
        size = os.path.getsize(jpeg_file)
        result = self.make().strip(jpeg_file)
        assert result.success
        assert result.file_category is FileCategory.IMAGE
        assert result.original_size == size
        assert not os.path.exists(jpeg_file + ".backup")

    def test_backup_keeps_original_bytes(self, pdf_file):
        with open(pdf_file, "rb") as f:
            original = f.read()

        self.make(backup=True).strip(pdf_file)

        with open(pdf_file + ".backup", "rb") as f:
            assert f.read() == original
        with open(pdf_file, "rb") as f:
            assert f.read() != original

    def test_unsupported_rejected_before_touching_file(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(UnsupportedFormatError):
            self.make(backup=True).strip(str(path))
        assert not os.path.exists(str(path) + ".backup")

    def test_strip_bytes_routes_by_filename(self, pdf_file):
        with open(pdf_file, "rb") as f:
            data = f.read()
        stripped = self.make().strip_bytes(data, "upload.PDF")
        assert stripped.startswith(b"%PDF")

    def test_strip_bytes_rejects_video(self):
        with pytest.raises(UnsupportedFormatError):
            self.make().strip_bytes(b"\x00", "clip.mp4")
