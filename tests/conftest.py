#!/usr/bin/env python3
"""Shared fixtures: media synthesized on the fly and fake external programs."""

import os

import pytest
from PIL import Image
from PIL.PngImagePlugin import PngInfo
from pypdf import PdfWriter

from metastrip.capabilities import Capabilities
from metastrip.config import EngineConfig
from metastrip.engine import MetadataEngine
from metastrip.errors import ToolError
from metastrip.tools import REMUX_OPTIONS

XMP_PACKET = """<?xpacket begin="" id="W5M0MpCehiHzreSzNTczkc9d"?>
<x:xmpmeta xmlns:x="adobe:ns:meta/">
 <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
  <rdf:Description rdf:about=""
    xmlns:dc="http://purl.org/dc/elements/1.1/"
    xmlns:xmp="http://ns.adobe.com/xap/1.0/"
    xmp:CreatorTool="Adobe Photoshop 25.0">
   <dc:creator><rdf:Seq><rdf:li>Jane Doe</rdf:li></rdf:Seq></dc:creator>
  </rdf:Description>
 </rdf:RDF>
</x:xmpmeta>
<?xpacket end="w"?>"""


class FakeTranscoder:
    """Stands in for ffprobe/ffmpeg; remux copies bytes and drops the tags."""

    ffmpeg = "ffmpeg"
    ffprobe = "ffprobe"

    def __init__(self, tags=None, available=True, fail_remux=False):
        self.tags = dict(tags or {})
        self._available = available
        self.fail_remux = fail_remux
        self.remuxed = []

    def available(self):
        return self._available

    def probe(self, path):
        return {
            "format": {
                "duration": "1.000000",
                "size": str(os.path.getsize(path)),
                "bit_rate": "8000",
                "tags": dict(self.tags),
            }
        }

    def remux(self, input_path, output_path, options=REMUX_OPTIONS):
        self.remuxed.append((input_path, output_path, tuple(options)))
        if self.fail_remux:
            # ffmpeg opens the output before it fails on the streams
            with open(output_path, "wb"):
                pass
            raise ToolError("ffmpeg failed: Invalid data found when processing input")
        with open(input_path, "rb") as src, open(output_path, "wb") as dst:
            dst.write(src.read())
        self.tags = {}


class FakeMetadataTool:
    """Stands in for exiftool; rewrites the image without any info blocks."""

    def __init__(self, fail=False, leave_xmp=False):
        self.fail = fail
        self.leave_xmp = leave_xmp
        self.calls = []

    def available(self):
        return True

    def strip_all(self, path):
        self.calls.append(path)
        if self.fail:
            raise ToolError("exiftool failed: Error writing file")
        if self.leave_xmp:
            return
        with Image.open(path) as image:
            image.load()
            image_format = image.format
            clean = image.copy()
        clean.info = {}
        clean.save(path, format=image_format)


def make_jpeg(path, artist="Jane Doe", gps=True):
    image = Image.new("RGB", (32, 24), (200, 30, 30))
    exif = Image.Exif()
    exif[0x010F] = "Canon"
    exif[0x0110] = "EOS 5D"
    exif[0x0132] = "2024:05:01 10:30:00"
    if artist:
        exif[0x013B] = artist
    if gps:
        exif[0x8825] = {1: "N", 2: (40.0, 42.0, 0.0), 3: "W", 4: (74.0, 0.0, 0.0)}
    image.save(path, "JPEG", exif=exif)
    return str(path)


def make_png_with_xmp(path, xmp=XMP_PACKET):
    image = Image.new("RGB", (16, 16), (10, 120, 200))
    info = PngInfo()
    info.add_itxt("XML:com.adobe.xmp", xmp)
    image.save(path, "PNG", pnginfo=info)
    return str(path)


def make_clean_png(path):
    Image.new("RGB", (8, 8), (0, 0, 0)).save(path, "PNG")
    return str(path)


def make_pdf(path, metadata=None):
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    writer.add_metadata(metadata if metadata is not None else {
        "/Author": "Jane Doe",
        "/Title": "Quarterly numbers",
        "/Producer": "Acrobat Distiller 23.0",
    })
    with open(path, "wb") as f:
        writer.write(f)
    return str(path)


@pytest.fixture
def transcoder():
    return FakeTranscoder(tags={"artist": "Jane Doe", "title": "Beach day", "genre": "Vlog"})


@pytest.fixture
def metadata_tool():
    return FakeMetadataTool()


@pytest.fixture
def config():
    return EngineConfig(timeout_seconds=None)


@pytest.fixture
def engine(config, transcoder, metadata_tool):
    return MetadataEngine(config, Capabilities(), transcoder, metadata_tool)


@pytest.fixture
def jpeg_file(tmp_path):
    return make_jpeg(tmp_path / "photo.jpg")


@pytest.fixture
def png_xmp_file(tmp_path):
    return make_png_with_xmp(tmp_path / "graphic.png")


@pytest.fixture
def pdf_file(tmp_path):
    return make_pdf(tmp_path / "report.pdf")


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 64)
    return str(path)


@pytest.fixture
def corrupt_jpeg(tmp_path):
    path = tmp_path / "broken.jpg"
    path.write_bytes(b"this is not a jpeg")
    return str(path)


@pytest.fixture
def media_tree(tmp_path):
    """A small tree: metadata-laden files, a clean file, an unsupported file, nested dirs."""
    root = tmp_path / "media"
    (root / "docs").mkdir(parents=True)
    (root / "photos" / "2024").mkdir(parents=True)

    make_jpeg(root / "photos" / "2024" / "beach.jpg")
    make_clean_png(root / "photos" / "clean.png")
    make_pdf(root / "docs" / "report.pdf")
    (root / "docs" / "notes.txt").write_text("plain text")
    (root / "README.md").write_text("# media")
    return str(root)
