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
Codec availability.

The engine never branches on the import-time flags directly; it receives a
``Capabilities`` value so that a missing codec is a configuration state that
tests can reproduce.
"""

from dataclasses import dataclass
from typing import Dict

from .image_codec import PIL_AVAILABLE
from .pdf_backends import PYPDF_AVAILABLE, PYMUPDF_AVAILABLE, PDFPLUMBER_AVAILABLE


@dataclass(frozen=True)
class Capabilities:
    """Which codec libraries the engine may use."""
    pillow: bool = PIL_AVAILABLE
    pypdf: bool = PYPDF_AVAILABLE
    pymupdf: bool = PYMUPDF_AVAILABLE
    pdfplumber: bool = PDFPLUMBER_AVAILABLE

    @property
    def image_codec(self) -> bool:
        return self.pillow

    @property
    def pdf_reader(self) -> bool:
        return self.pypdf or self.pymupdf or self.pdfplumber

    @property
    def pdf_writer(self) -> bool:
        return self.pypdf or self.pymupdf

    def as_dict(self) -> Dict[str, bool]:
        return {
            "pillow": self.pillow,
            "pypdf": self.pypdf,
            "pymupdf": self.pymupdf,
            "pdfplumber": self.pdfplumber,
        }


def detect_capabilities() -> Capabilities:
    """Capabilities of the running interpreter."""
    return Capabilities(
        pillow=PIL_AVAILABLE,
        pypdf=PYPDF_AVAILABLE,
        pymupdf=PYMUPDF_AVAILABLE,
        pdfplumber=PDFPLUMBER_AVAILABLE,
    )
