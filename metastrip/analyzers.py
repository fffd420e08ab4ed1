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
Metadata analysis for images, PDFs, and videos.

Each category analyzer turns one file into a ScanResult whose concerns rate
the privacy impact of every metadata field found. ``MetadataAnalyzer``
dispatches by category and converts any per-file failure into
``ScanResult.error`` so that a batch is never aborted by one bad file.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from . import image_codec, pdf_backends
from .capabilities import Capabilities
from .classifier import FormatClassifier, extension_of
from .errors import AnalysisError, UnsupportedFormatError
from .models import Concern, FileCategory, ScanResult, Severity
from .tools import ExternalTranscoder
from .utils import run_with_timeout
from .xmp import extract_xmp_fields

logger = logging.getLogger(__name__)

HIGH, MEDIUM, LOW = Severity.HIGH, Severity.MEDIUM, Severity.LOW


def _present(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


# (EXIF field, severity, kind, label, description)
EXIF_RULES = (
    ("BodySerialNumber", HIGH, "camera_serial", "Camera Serial Number", "Contains camera serial number"),
    ("LensSerialNumber", HIGH, "lens_serial", "Lens Serial Number", "Contains lens serial number"),
    ("CameraOwnerName", HIGH, "author_info", "Camera Owner", "Contains camera owner name"),
    ("Artist", HIGH, "author_info", "Artist", "Contains artist/author information"),
    ("Copyright", HIGH, "copyright_info", "Copyright", "Contains copyright information"),
    ("Software", MEDIUM, "software_info", "Software", "Contains software information"),
    ("ProcessingSoftware", MEDIUM, "software_info", "Processing Software", "Contains processing software information"),
    ("ImageDescription", MEDIUM, "description_info", "Image Description", "Contains image description"),
    ("LensModel", MEDIUM, "lens_info", "Lens Model", "Contains lens model information"),
    ("UserComment", MEDIUM, "user_comment", "User Comment", "Contains user comment"),
    ("HostComputer", MEDIUM, "computer_info", "Host Computer", "Contains host computer information"),
)

IPTC_RULES = (
    ("By-line", HIGH, "author_info", "IPTC Author", "Contains IPTC author information"),
    ("CopyrightNotice", HIGH, "copyright_info", "IPTC Copyright", "Contains IPTC copyright notice"),
    ("Caption", MEDIUM, "description_info", "IPTC Caption", "Contains IPTC caption"),
    ("Keywords", MEDIUM, "keywords", "IPTC Keywords", "Contains IPTC keywords that might be identifying"),
    ("City", MEDIUM, "location_info", "IPTC City", "Contains IPTC city name"),
    ("Country", MEDIUM, "location_info", "IPTC Country", "Contains IPTC country name"),
)

XMP_RULES = (
    ("author", HIGH, "author_info", "XMP Author/Creator", "Contains XMP author or creator information"),
    ("copyright", HIGH, "copyright_info", "XMP Copyright", "Contains XMP copyright information"),
    ("title", MEDIUM, "title", "XMP Title", "Contains XMP title information"),
    ("description", MEDIUM, "description_info", "XMP Description", "Contains XMP description information"),
    ("keywords", MEDIUM, "keywords", "XMP Keywords", "Contains XMP keywords information"),
    ("create_date", LOW, "date_info", "XMP Creation Date", "Contains XMP creation date information"),
    ("modify_date", LOW, "date_info", "XMP Modification Date", "Contains XMP modification date information"),
)


def image_concerns(exif: Dict[str, Any], iptc: Dict[str, str], xmp: Optional[str]) -> List[Concern]:
    """Rate every EXIF, IPTC, and XMP field found in an image.

    Every rule is checked independently, so one file can yield many concerns.
    """
    concerns = []

    # GPS location
    latitude = exif.get("GPSLatitude")
    longitude = exif.get("GPSLongitude")
    if latitude is not None or longitude is not None:
        lat = image_codec.gps_to_degrees(latitude, exif.get("GPSLatitudeRef")) if latitude is not None else None
        lon = image_codec.gps_to_degrees(longitude, exif.get("GPSLongitudeRef")) if longitude is not None else None
        concerns.append(Concern(HIGH, "gps_location", "GPS Coordinates", f"{lat}, {lon}",
                                "Contains GPS location data"))

    for name, severity, kind, label, description in EXIF_RULES:
        value = image_codec.clean_text(exif[name]) if name in exif else ""
        if value:
            concerns.append(Concern(severity, kind, label, value, description))

    # Make and model are reported together
    camera = " ".join(
        image_codec.clean_text(exif[name]) for name in ("Make", "Model") if _present(exif.get(name))
    ).strip()
    if camera:
        concerns.append(Concern(MEDIUM, "camera_info", "Camera Make/Model", camera,
                                "Contains camera make and model information"))

    date_value = exif.get("DateTimeOriginal") or exif.get("DateTime")
    if _present(date_value):
        concerns.append(Concern(LOW, "date_info", "Creation Date/Time", image_codec.clean_text(date_value),
                                "Contains creation date/time information"))

    for name, severity, kind, label, description in IPTC_RULES:
        if iptc.get(name):
            concerns.append(Concern(severity, kind, label, iptc[name], description))

    if xmp:
        concerns.extend(xmp_concerns(extract_xmp_fields(xmp)))

    return concerns


def xmp_concerns(fields: Dict[str, str]) -> List[Concern]:
    concerns = []

    if fields.get("gps_latitude") or fields.get("gps_longitude"):
        value = f"{fields.get('gps_latitude')}, {fields.get('gps_longitude')}"
        concerns.append(Concern(HIGH, "gps_location", "XMP GPS Coordinates", value,
                                "Contains XMP GPS location data"))

    for name, severity, kind, label, description in XMP_RULES:
        if fields.get(name):
            concerns.append(Concern(severity, kind, label, fields[name], description))

    # Some editors write the tool name as the creator as well
    creator_tool = fields.get("creator_tool")
    if creator_tool and creator_tool != fields.get("author"):
        concerns.append(Concern(MEDIUM, "software_info", "XMP Creator Tool", creator_tool,
                                "Contains XMP creator tool information"))

    return concerns


def pdf_concerns(info: Dict[str, str], producer_signature: str) -> List[Concern]:
    """Rate the fields of a PDF document information dictionary."""
    concerns = []

    if _present(info.get("author")):
        concerns.append(Concern(HIGH, "author_info", "Author", info["author"], "Contains author information"))

    if _present(info.get("creator")):
        concerns.append(Concern(MEDIUM, "software_info", "Creator", info["creator"],
                                "Contains software creator information"))

    # Output written by this tool carries its own producer signature
    producer = info.get("producer", "")
    if _present(producer) and producer_signature.lower() not in producer.lower():
        concerns.append(Concern(MEDIUM, "software_info", "Producer", producer,
                                "Contains software producer information"))

    if _present(info.get("title")):
        concerns.append(Concern(MEDIUM, "title", "Title", info["title"], "Contains document title"))

    if _present(info.get("subject")):
        concerns.append(Concern(MEDIUM, "subject", "Subject", info["subject"], "Contains document subject"))

    if _present(info.get("keywords")):
        concerns.append(Concern(MEDIUM, "keywords", "Keywords", info["keywords"],
                                "Contains keywords that might be identifying"))

    return concerns


def video_concerns(tags: Dict[str, Any]) -> List[Concern]:
    """Rate container-level format tags reported by ffprobe."""
    tags = {str(key).lower(): value for key, value in (tags or {}).items()}
    concerns = []

    for key, label in (("artist", "Artist"), ("author", "Author"), ("comment", "Comment")):
        if _present(tags.get(key)):
            concerns.append(Concern(HIGH, "author_info", label, tags[key],
                                    "Contains author or comment information"))

    for key in ("location", "location-eng", "com.apple.quicktime.location.iso6709"):
        if _present(tags.get(key)):
            concerns.append(Concern(HIGH, "gps_location", "Location", tags[key], "Contains GPS location data"))
            break

    if _present(tags.get("title")):
        concerns.append(Concern(MEDIUM, "title", "Title", tags["title"], "Contains video title"))

    if _present(tags.get("album")):
        concerns.append(Concern(MEDIUM, "album", "Album", tags["album"], "Contains album information"))

    if _present(tags.get("genre")):
        concerns.append(Concern(LOW, "genre", "Genre", tags["genre"], "Contains genre information"))

    return concerns


def unavailable_result(path: str, category: FileCategory, label: str, name: str) -> ScanResult:
    """Result for a file that cannot be verified because a codec or tool is missing.

    The file counts as carrying metadata so that callers never treat it as clean.
    """
    concern = Concern(HIGH, "capability_unavailable", label, name,
                      f"{name} is not available for metadata analysis; install it to verify this file")
    return ScanResult(path, category, has_metadata=True, concerns=[concern], format_metadata={"analyzed": False})


def _read(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


class ImageAnalyzer:
    category = FileCategory.IMAGE

    def __init__(self, capabilities: Capabilities):
        self.capabilities = capabilities

    def analyze(self, path: str) -> ScanResult:
        if not self.capabilities.image_codec:
            return unavailable_result(path, self.category, "Image Codec", "Pillow")

        with image_codec.open_image(_read(path)) as image:
            exif = image_codec.read_exif(image)
            iptc = image_codec.read_iptc(image)
            xmp = image_codec.raw_xmp(image)
            facts = image_codec.format_facts(image)

        concerns = image_concerns(exif, iptc, xmp)
        facts.update({"hasExif": bool(exif), "hasIptc": bool(iptc), "hasXmp": bool(xmp)})
        return ScanResult(path, self.category, has_metadata=bool(concerns), concerns=concerns,
                          format_metadata=facts)


class PdfAnalyzer:
    category = FileCategory.PDF

    def __init__(self, capabilities: Capabilities, producer_signature: str):
        self.capabilities = capabilities
        self.producer_signature = producer_signature

    def read_info(self, data: bytes) -> Dict[str, Any]:
        """Document info from the first available backend."""
        if self.capabilities.pypdf:
            return pdf_backends.read_pypdf(data)
        if self.capabilities.pymupdf:
            return pdf_backends.read_pymupdf(data)
        if self.capabilities.pdfplumber:
            return pdf_backends.read_pdfplumber(data)
        raise AnalysisError("No PDF library available (install pypdf, PyMuPDF, or pdfplumber)")

    def analyze(self, path: str) -> ScanResult:
        if not self.capabilities.pdf_reader:
            return unavailable_result(path, self.category, "PDF Library", "pypdf")

        info = self.read_info(_read(path))
        metadata = info.get("metadata", {})
        concerns = pdf_concerns(metadata, self.producer_signature)

        facts = {"pageCount": info.get("pages", 0)}
        for name in ("title", "author", "subject", "keywords", "producer", "creator"):
            facts[f"has{name.capitalize()}"] = _present(metadata.get(name))

        return ScanResult(path, self.category, has_metadata=bool(concerns), concerns=concerns,
                          format_metadata=facts)


class VideoAnalyzer:
    category = FileCategory.VIDEO

    def __init__(self, transcoder: ExternalTranscoder):
        self.transcoder = transcoder

    def analyze(self, path: str) -> ScanResult:
        if not self.transcoder.available():
            return unavailable_result(path, self.category, "Media Prober", self.transcoder.ffprobe)

        probe = self.transcoder.probe(path)
        container = probe.get("format") or {}
        tags = container.get("tags") or {}
        concerns = video_concerns(tags)

        facts = {
            "duration": container.get("duration"),
            "size": container.get("size"),
            "bitRate": container.get("bit_rate"),
            "hasTags": bool(tags),
        }
        return ScanResult(path, self.category, has_metadata=bool(concerns), concerns=concerns,
                          format_metadata=facts)


class MetadataAnalyzer:
    """Dispatches analysis to the analyzer registered for a file's category."""

    def __init__(self, classifier: FormatClassifier, analyzers, timeout_seconds: Optional[int] = None):
        self.classifier = classifier
        self.analyzers = {analyzer.category: analyzer for analyzer in analyzers}
        self.timeout_seconds = timeout_seconds

    def analyze(self, path: str) -> ScanResult:
        """Analyze one supported file.

        Raises UnsupportedFormatError for files outside every category; every
        other failure is returned as ``ScanResult.error``.
        """
        category = self.classifier.category(path)
        if category is FileCategory.UNSUPPORTED:
            raise UnsupportedFormatError(f"Unsupported file type: .{extension_of(path)}")

        analyzer = self.analyzers[category]
        try:
            result = run_with_timeout(analyzer.analyze, self.timeout_seconds, path)
        except Exception as e:
            logger.warning(f"Failed to analyze {os.path.basename(path)}: {e}")
            return ScanResult(path, category, has_metadata=False, concerns=[], error=str(e) or type(e).__name__)

        if result.has_metadata:
            logger.debug(f"Found {len(result.concerns)} metadata concerns: {os.path.basename(path)}")
        else:
            logger.debug(f"Clean: {os.path.basename(path)}")
        return result
