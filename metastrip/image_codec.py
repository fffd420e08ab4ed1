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
Pillow helpers for reading and re-encoding image metadata.
"""

import io
from typing import Any, Dict, List, Optional, Tuple

try:
    from PIL import Image, ImageSequence, IptcImagePlugin
    PIL_AVAILABLE = True
except ImportError:
    PIL_AVAILABLE = False


# EXIF tags read from IFD0, the Exif sub-IFD and the GPS sub-IFD.
# Numeric ids, so the tables work across Pillow versions.
IFD0_TAGS = {
    0x000B: "ProcessingSoftware",
    0x010E: "ImageDescription",
    0x010F: "Make",
    0x0110: "Model",
    0x0131: "Software",
    0x0132: "DateTime",
    0x013B: "Artist",
    0x013C: "HostComputer",
    0x8298: "Copyright",
}

EXIF_IFD_TAGS = {
    0x9003: "DateTimeOriginal",
    0x9286: "UserComment",
    0xA430: "CameraOwnerName",
    0xA431: "BodySerialNumber",
    0xA434: "LensModel",
    0xA435: "LensSerialNumber",
}

GPS_IFD_TAGS = {
    0x0001: "GPSLatitudeRef",
    0x0002: "GPSLatitude",
    0x0003: "GPSLongitudeRef",
    0x0004: "GPSLongitude",
}

EXIF_IFD_POINTER = 0x8769
GPS_IFD_POINTER = 0x8825
TIFF_XMP_TAG = 700

# IPTC-IIM record 2 datasets
IPTC_DATASETS = {
    (2, 25): "Keywords",
    (2, 80): "By-line",
    (2, 90): "City",
    (2, 101): "Country",
    (2, 116): "CopyrightNotice",
    (2, 120): "Caption",
}

# image.info keys that affect rendering only
RENDERING_INFO_KEYS = ("transparency", "dpi", "gamma", "background", "duration", "loop")

# UserComment starts with an 8 byte character code
_USER_COMMENT_PREFIXES = (b"ASCII\x00\x00\x00", b"UNICODE\x00", b"JIS\x00\x00\x00\x00\x00", b"\x00" * 8)

SAVE_FORMATS = {"MPO": "JPEG"}
SAVE_OPTIONS = {
    "JPEG": {"quality": 95},
    "WEBP": {"quality": 95},
}


def clean_text(value: Any) -> str:
    """Decode and trim a raw tag value."""
    if isinstance(value, bytes):
        for prefix in _USER_COMMENT_PREFIXES:
            if value.startswith(prefix):
                encoding = "utf-16" if prefix.startswith(b"UNICODE") else "utf-8"
                return value[len(prefix):].decode(encoding, errors="replace").strip("\x00 \t\r\n")
        return value.decode("utf-8", errors="replace").strip("\x00 \t\r\n")
    if isinstance(value, (list, tuple)):
        return ", ".join(clean_text(item) for item in value if clean_text(item))
    return str(value).strip("\x00 \t\r\n")


def open_image(data: bytes):
    """Open and fully decode an image held in memory."""
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


def read_exif(image) -> Dict[str, Any]:
    """Named EXIF values from IFD0 and the Exif/GPS sub-IFDs."""
    exif = image.getexif()
    fields = {}
    for tag, name in IFD0_TAGS.items():
        if tag in exif:
            fields[name] = exif[tag]

    for pointer, table in ((EXIF_IFD_POINTER, EXIF_IFD_TAGS), (GPS_IFD_POINTER, GPS_IFD_TAGS)):
        try:
            ifd = exif.get_ifd(pointer)
        except (KeyError, ValueError, OSError):
            ifd = {}
        for tag, name in table.items():
            if tag in ifd:
                fields[name] = ifd[tag]
    return fields


def gps_to_degrees(value: Any, ref: Any = None) -> Optional[float]:
    """Convert an EXIF degrees/minutes/seconds triple to signed decimal degrees."""
    try:
        if isinstance(value, (list, tuple)):
            parts = [float(part) for part in value] + [0.0, 0.0]
            degrees = parts[0] + parts[1] / 60 + parts[2] / 3600
        else:
            degrees = float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None

    if degrees != degrees:  # NaN from a zero denominator
        return None
    if clean_text(ref or "").upper() in ("S", "W"):
        degrees = -degrees
    return round(degrees, 6)


def read_iptc(image) -> Dict[str, str]:
    """Named IPTC values, or an empty dict when the image carries none."""
    try:
        info = IptcImagePlugin.getiptcinfo(image)
    except (SyntaxError, ValueError, OSError, IndexError):
        info = None
    if not info:
        return {}

    fields = {}
    for key, name in IPTC_DATASETS.items():
        if key in info:
            text = clean_text(info[key])
            if text:
                fields[name] = text
    return fields


def raw_xmp(image) -> Optional[str]:
    """Raw XMP packet from an open image, if any."""
    candidates: List[Any] = [image.info.get("xmp"), image.info.get("XML:com.adobe.xmp")]
    tag_v2 = getattr(image, "tag_v2", None)
    if tag_v2 is not None and TIFF_XMP_TAG in tag_v2:
        candidates.append(tag_v2[TIFF_XMP_TAG])

    for candidate in candidates:
        if not candidate:
            continue
        text = candidate.decode("utf-8", errors="replace") if isinstance(candidate, bytes) else str(candidate)
        text = text.strip("\x00 \t\r\n")
        if text:
            return text
    return None


def xmp_from_bytes(data: bytes) -> Optional[str]:
    """Raw XMP packet from encoded image bytes."""
    with open_image(data) as image:
        return raw_xmp(image)


def format_facts(image) -> Dict[str, Any]:
    return {
        "width": image.width,
        "height": image.height,
        "format": (image.format or "").lower(),
    }


def reencode(data: bytes) -> Tuple[bytes, str]:
    """Re-encode pixel data only, dropping every metadata block. Every frame
    of an animated or multi-page image is kept.

    Returns the new bytes and the Pillow format they were written in.
    """
    with open_image(data) as image:
        save_format = SAVE_FORMATS.get(image.format, image.format)
        options = dict(SAVE_OPTIONS.get(save_format, {}))
        info = {key: image.info[key] for key in RENDERING_INFO_KEYS if key in image.info}

        # MPO is written back as a single JPEG, which has no multi-frame writer
        if getattr(image, "n_frames", 1) > 1 and save_format.upper() in Image.SAVE_ALL:
            frames = []
            durations = []
            for frame in ImageSequence.Iterator(image):
                durations.append(frame.info.get("duration"))
                frames.append(_bare_copy(frame))

            options.update(save_all=True, append_images=frames[1:])
            if all(duration is not None for duration in durations):
                options["duration"] = durations
            if "loop" in info:
                options["loop"] = info["loop"]
            clean = frames[0]
        else:
            clean = _bare_copy(image)
        clean.info = info

    output = io.BytesIO()
    clean.save(output, format=save_format, **options)
    return output.getvalue(), save_format


def _bare_copy(frame):
    """Pixel copy of the current frame without any info entries."""
    copy = frame.copy()
    copy.info = {}
    return copy
