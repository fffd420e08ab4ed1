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
Best-effort XMP field extraction.

XMP packets embedded by cameras and editors are frequently not well-formed
RDF, so fields are located with patterns rather than an XML parser. Each
property is accepted in three encodings:

    <dc:title>Holiday</dc:title>
    <dc:title><rdf:Alt><rdf:li xml:lang="x-default">Holiday</rdf:li></rdf:Alt></dc:title>
    <rdf:Description dc:title="Holiday" .../>

Only ``extract_xmp_fields`` is public; callers must not depend on the
patterns so the layer can be swapped for a real RDF parser.
"""

import html
import re
from typing import Dict, List

# field name -> XMP properties checked in order
XMP_PROPERTIES = {
    "author": ("dc:creator", "pdf:Author"),
    "title": ("dc:title",),
    "description": ("dc:description",),
    "keywords": ("dc:subject", "pdf:Keywords"),
    "copyright": ("dc:rights", "xmpRights:Copyright"),
    "creator_tool": ("xmp:CreatorTool",),
    "create_date": ("xmp:CreateDate", "dc:date", "photoshop:DateCreated"),
    "modify_date": ("xmp:ModifyDate",),
    "gps_latitude": ("exif:GPSLatitude",),
    "gps_longitude": ("exif:GPSLongitude",),
}

_LIST_ITEM = re.compile(r"<rdf:li(?:\s[^>]*)?>\s*([^<]*?)\s*</rdf:li>", re.IGNORECASE)


def _element_pattern(prop: str) -> "re.Pattern":
    name = re.escape(prop)
    return re.compile(rf"<{name}(?:\s[^>]*)?(?<!/)>(.*?)</{name}>", re.IGNORECASE | re.DOTALL)


def _attribute_pattern(prop: str) -> "re.Pattern":
    name = re.escape(prop)
    return re.compile(rf"(?<![\w:]){name}\s*=\s*(?:\"([^\"]*)\"|'([^']*)')", re.IGNORECASE)


_PATTERNS = {
    prop: (_element_pattern(prop), _attribute_pattern(prop))
    for props in XMP_PROPERTIES.values()
    for prop in props
}


def _values(xmp: str, prop: str) -> List[str]:
    element, attribute = _PATTERNS[prop]

    match = element.search(xmp)
    if match:
        inner = match.group(1)
        items = [item for item in _LIST_ITEM.findall(inner) if item.strip()]
        if items:
            return [html.unescape(item.strip()) for item in items]
        if "<" not in inner and inner.strip():
            return [html.unescape(inner.strip())]

    match = attribute.search(xmp)
    if match:
        value = (match.group(1) or match.group(2) or "").strip()
        if value:
            return [html.unescape(value)]
    return []


def extract_xmp_fields(xmp: str) -> Dict[str, str]:
    """Map of field name to value for every field present in the packet.

    List-valued properties (creators, keywords) are joined with ", ".
    """
    fields = {}
    if not xmp:
        return fields

    for field, props in XMP_PROPERTIES.items():
        for prop in props:
            values = _values(xmp, prop)
            if values:
                fields[field] = ", ".join(values)
                break
    return fields
