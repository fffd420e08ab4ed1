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
Metadata removal for images, PDFs, and videos.

Image and PDF strippers work on bytes and rewrite the file in place. Video
containers are remuxed by ffmpeg, which needs real paths, so the original
bytes are first copied to a temporary input file.
"""

import logging
import os
import shutil
import tempfile
from typing import Optional

from . import image_codec, pdf_backends
from .capabilities import Capabilities
from .classifier import FormatClassifier, extension_of
from .errors import (
    CapabilityUnavailableError, MetadataError, StripError, UnsupportedFormatError, VerificationError,
)
from .models import FileCategory, StripResult
from .tools import ExternalMetadataTool, ExternalTranscoder

logger = logging.getLogger(__name__)


def _read(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _write(path: str, data: bytes):
    with open(path, "wb") as f:
        f.write(data)


def _remove(path: Optional[str]):
    if path and os.path.exists(path):
        os.unlink(path)


class ImageStripper:
    """Re-encodes pixel data and verifies that no XMP survived.

    When the re-encoded image still carries XMP, the bytes are handed to
    exiftool in a temporary file as a second pass.
    """

    category = FileCategory.IMAGE

    def __init__(self, capabilities: Capabilities, metadata_tool: ExternalMetadataTool):
        self.capabilities = capabilities
        self.metadata_tool = metadata_tool

    def _reencode(self, data: bytes) -> bytes:
        stripped, _format = image_codec.reencode(data)
        return stripped

    def _fallback(self, data: bytes, suffix: str) -> bytes:
        logger.warning("Re-encoding did not remove XMP metadata, using exiftool fallback")

        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(prefix="metastrip_", suffix=suffix)
            with os.fdopen(fd, "wb") as f:
                f.write(data)

            self.metadata_tool.strip_all(temp_path)
            cleaned = _read(temp_path)

            if image_codec.xmp_from_bytes(cleaned):
                raise VerificationError("exiftool failed to remove XMP metadata")

            logger.debug("exiftool removed the remaining XMP metadata")
            return cleaned
        except (MetadataError, OSError) as e:
            raise VerificationError(f"Both re-encoding and exiftool failed to remove XMP metadata: {e}") from e
        finally:
            _remove(temp_path)

    def strip_bytes(self, data: bytes, suffix: str = ".png") -> bytes:
        if not self.capabilities.image_codec:
            raise CapabilityUnavailableError("Pillow is not available for image processing")

        try:
            stripped = self._reencode(data)
        except Exception as e:
            raise StripError(f"Failed to strip image metadata: {e}") from e

        if image_codec.xmp_from_bytes(stripped):
            stripped = self._fallback(stripped, suffix)

        logger.debug(f"Stripped image metadata ({round(len(stripped) / 1024)}KB)")
        return stripped

    def strip_file(self, path: str):
        stripped = self.strip_bytes(_read(path), os.path.splitext(path)[1] or ".png")
        _write(path, stripped)


class PdfStripper:
    """Rewrites the document info with only the producer signature and fresh timestamps."""

    category = FileCategory.PDF

    def __init__(self, capabilities: Capabilities, producer_signature: str):
        self.capabilities = capabilities
        self.producer_signature = producer_signature

    def strip_bytes(self, data: bytes, suffix: str = ".pdf") -> bytes:
        if not self.capabilities.pdf_writer:
            raise CapabilityUnavailableError("No PDF writer available (install pypdf or PyMuPDF)")
        backend = pdf_backends.strip_pypdf if self.capabilities.pypdf else pdf_backends.strip_pymupdf

        try:
            stripped = backend(data, self.producer_signature)
        except Exception as e:
            raise StripError(f"Failed to strip PDF metadata: {e}") from e

        logger.debug(f"Stripped PDF metadata ({round(len(stripped) / 1024)}KB)")
        return stripped

    def strip_file(self, path: str):
        _write(path, self.strip_bytes(_read(path)))


class VideoStripper:
    """Remuxes the container with all metadata dropped and streams copied."""

    category = FileCategory.VIDEO

    def __init__(self, transcoder: ExternalTranscoder):
        self.transcoder = transcoder

    def strip_file(self, path: str):
        if not self.transcoder.available():
            raise CapabilityUnavailableError(f"{self.transcoder.ffmpeg} is not available for video processing")

        directory, name = os.path.split(os.path.abspath(path))
        suffix = os.path.splitext(name)[1]
        temp_input = None
        temp_output = None
        try:
            fd, temp_input = tempfile.mkstemp(prefix=f".{name}.", suffix=suffix, dir=directory)
            with os.fdopen(fd, "wb") as f:
                f.write(_read(path))

            # ffmpeg truncates its output before writing, so the original is
            # only replaced once the remux has succeeded
            fd, temp_output = tempfile.mkstemp(prefix=f".{name}.out.", suffix=suffix, dir=directory)
            os.close(fd)

            self.transcoder.remux(temp_input, temp_output)
            os.replace(temp_output, path)
        except (MetadataError, OSError) as e:
            raise StripError(f"Failed to strip video metadata: {e}") from e
        finally:
            _remove(temp_input)
            _remove(temp_output)

        logger.debug("Stripped video metadata")


class MetadataStripper:
    """Dispatches stripping to the stripper registered for a file's category."""

    def __init__(self, classifier: FormatClassifier, strippers, backup: bool = False,
                 backup_suffix: str = ".backup"):
        self.classifier = classifier
        self.strippers = {stripper.category: stripper for stripper in strippers}
        self.backup = backup
        self.backup_suffix = backup_suffix

    def strip(self, path: str) -> StripResult:
        """Strip one file in place.

        Raises UnsupportedFormatError before touching the file, and
        StripError (or OSError) when the strip itself fails.
        """
        category = self.classifier.category(path)
        if category is FileCategory.UNSUPPORTED:
            raise UnsupportedFormatError(f"Unsupported file type: .{extension_of(path)}")

        if self.backup:
            backup_path = path + self.backup_suffix
            shutil.copyfile(path, backup_path)
            logger.debug(f"Created backup: {os.path.basename(backup_path)}")

        original_size = os.path.getsize(path)
        self.strippers[category].strip_file(path)
        return StripResult(path, category, original_size=original_size, success=True)

    def strip_bytes(self, data: bytes, filename: str) -> bytes:
        """Strip an in-memory image or PDF; filename only selects the category."""
        category = self.classifier.category(filename)
        if category is FileCategory.UNSUPPORTED:
            raise UnsupportedFormatError(f"Unsupported file type: .{extension_of(filename)}")

        stripper = self.strippers[category]
        if not hasattr(stripper, "strip_bytes"):
            raise UnsupportedFormatError(f"{category.value} files can only be stripped on disk")
        return stripper.strip_bytes(data, os.path.splitext(filename)[1])
