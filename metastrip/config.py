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
Engine configuration.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from .errors import ConfigurationError

DEFAULT_IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp", "tiff", "bmp")
DEFAULT_PDF_EXTENSIONS = ("pdf",)
DEFAULT_VIDEO_EXTENSIONS = ("mp4", "avi", "mov", "wmv", "flv", "webm", "mkv")

DEFAULT_PRODUCER_SIGNATURE = "metastrip"


def normalize_extensions(extensions: Iterable[str]) -> FrozenSet[str]:
    """Lower-case extensions and drop leading dots and blanks."""
    normalized = set()
    for ext in extensions:
        ext = ext.strip().lower().lstrip(".")
        if ext:
            normalized.add(ext)
    return frozenset(normalized)


def parse_extensions(value: str) -> FrozenSet[str]:
    """Parse a comma-separated extension list such as ``"jpg, .PNG,webp"``."""
    extensions = normalize_extensions(value.split(","))
    if not extensions:
        raise ConfigurationError(f"No usable extensions in {value!r}")
    return extensions


@dataclass(frozen=True)
class EngineConfig:
    """Configuration supplied once when the engine is constructed.

    The three extension sets decide which category a file falls into.
    ``producer_signature`` is written as the PDF Producer by the stripper and
    recognised by the analyzer so that stripped output is not flagged again.
    """

    image_extensions: FrozenSet[str] = field(default_factory=lambda: frozenset(DEFAULT_IMAGE_EXTENSIONS))
    pdf_extensions: FrozenSet[str] = field(default_factory=lambda: frozenset(DEFAULT_PDF_EXTENSIONS))
    video_extensions: FrozenSet[str] = field(default_factory=lambda: frozenset(DEFAULT_VIDEO_EXTENSIONS))
    verbose: bool = False
    backup: bool = False
    backup_suffix: str = ".backup"
    producer_signature: str = DEFAULT_PRODUCER_SIGNATURE
    timeout_seconds: Optional[int] = 30
    show_progress: bool = False

    def __post_init__(self):
        # Accept any iterable of extensions from callers
        for name in ("image_extensions", "pdf_extensions", "video_extensions"):
            value = normalize_extensions(getattr(self, name))
            if not value:
                raise ConfigurationError(f"{name} must not be empty")
            object.__setattr__(self, name, value)
