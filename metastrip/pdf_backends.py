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
PDF document information backends for pypdf, PyMuPDF, and pdfplumber.

Every reader returns the same shape: ``{"pages": int, "metadata": {...}}``
where metadata holds title, author, subject, keywords, creator, producer,
creation_date and modification_date as plain strings.
"""

import io
import warnings
from datetime import datetime
from typing import Any, Dict

# PDF processing libraries
try:
    import pypdf
    from pypdf.generic import NullObject
    PYPDF_AVAILABLE = True
except ImportError:
    PYPDF_AVAILABLE = False

try:
    import fitz  # PyMuPDF
    PYMUPDF_AVAILABLE = True
except ImportError:
    PYMUPDF_AVAILABLE = False

try:
    import pdfplumber
    PDFPLUMBER_AVAILABLE = True
except ImportError:
    PDFPLUMBER_AVAILABLE = False


def _text(value: Any) -> str:
    if value is None:
        return ""
    if hasattr(value, "get_object"):
        value = value.get_object()
    if PYPDF_AVAILABLE and isinstance(value, NullObject):
        return ""
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    return str(value).strip()


def extract_pypdf_metadata(metadata) -> Dict[str, str]:
    """Extract metadata from pypdf reader."""
    if not metadata:
        return {}
    return {
        "title": _text(metadata.get("/Title")),
        "author": _text(metadata.get("/Author")),
        "subject": _text(metadata.get("/Subject")),
        "keywords": _text(metadata.get("/Keywords")),
        "creator": _text(metadata.get("/Creator")),
        "producer": _text(metadata.get("/Producer")),
        "creation_date": _text(metadata.get("/CreationDate")),
        "modification_date": _text(metadata.get("/ModDate")),
    }


def extract_pymupdf_metadata(metadata) -> Dict[str, str]:
    """Extract metadata from PyMuPDF document."""
    if not metadata:
        return {}
    return {
        "title": _text(metadata.get("title")),
        "author": _text(metadata.get("author")),
        "subject": _text(metadata.get("subject")),
        "keywords": _text(metadata.get("keywords")),
        "creator": _text(metadata.get("creator")),
        "producer": _text(metadata.get("producer")),
        "creation_date": _text(metadata.get("creationDate")),
        "modification_date": _text(metadata.get("modDate")),
    }


def extract_pdfplumber_metadata(metadata) -> Dict[str, str]:
    """Extract metadata from pdfplumber PDF."""
    if not metadata:
        return {}
    return {
        "title": _text(metadata.get("Title")),
        "author": _text(metadata.get("Author")),
        "subject": _text(metadata.get("Subject")),
        "keywords": _text(metadata.get("Keywords")),
        "creator": _text(metadata.get("Creator")),
        "producer": _text(metadata.get("Producer")),
        "creation_date": _text(metadata.get("CreationDate")),
        "modification_date": _text(metadata.get("ModDate")),
    }


def read_pypdf(data: bytes) -> Dict[str, Any]:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        reader = pypdf.PdfReader(io.BytesIO(data))
        if reader.is_encrypted:
            reader.decrypt("")
        return {
            "pages": len(reader.pages),
            "metadata": extract_pypdf_metadata(reader.metadata),
        }


def read_pymupdf(data: bytes) -> Dict[str, Any]:
    doc = fitz.open(stream=data, filetype="pdf")
    try:
        return {
            "pages": doc.page_count,
            "metadata": extract_pymupdf_metadata(doc.metadata),
        }
    finally:
        doc.close()


def read_pdfplumber(data: bytes) -> Dict[str, Any]:
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        return {
            "pages": len(pdf.pages),
            "metadata": extract_pdfplumber_metadata(pdf.metadata),
        }


def pdf_date(moment: datetime = None) -> str:
    """Format a timestamp as a PDF date string."""
    return (moment or datetime.now()).strftime("D:%Y%m%d%H%M%S")


def strip_pypdf(data: bytes, producer: str) -> bytes:
    """Rebuild the document with an information dictionary holding only the
    producer signature and fresh timestamps."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        reader = pypdf.PdfReader(io.BytesIO(data))
        if reader.is_encrypted:
            reader.decrypt("")

        # append() copies pages and outlines but not the document info or the
        # catalog's XMP stream
        writer = pypdf.PdfWriter()
        writer.append(reader)

    now = pdf_date()
    # Replaces the whole information dictionary
    writer.metadata = {
        "/Producer": producer,
        "/CreationDate": now,
        "/ModDate": now,
    }

    output = io.BytesIO()
    writer.write(output)
    return output.getvalue()


def strip_pymupdf(data: bytes, producer: str) -> bytes:
    doc = fitz.open(stream=data, filetype="pdf")
    try:
        now = pdf_date()
        # set_metadata only touches the keys it is given
        doc.set_metadata({
            "title": "",
            "author": "",
            "subject": "",
            "keywords": "",
            "creator": "",
            "producer": producer,
            "creationDate": now,
            "modDate": now,
        })
        doc.del_xml_metadata()
        return doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()
