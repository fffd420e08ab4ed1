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
Metadata strip and audit engine package.
"""

__version__ = "1.0.0"

from .capabilities import Capabilities, detect_capabilities
from .config import EngineConfig, parse_extensions
from .engine import MetadataEngine
from .errors import MetadataError
from .models import Concern, FileCategory, ScanResult, Severity, StripResult

__all__ = [
    'Capabilities', 'Concern', 'EngineConfig', 'FileCategory', 'MetadataEngine', 'MetadataError',
    'ScanResult', 'Severity', 'StripResult', 'detect_capabilities', 'parse_extensions',
]
