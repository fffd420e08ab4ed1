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
Exceptions raised by the metadata engine.
"""


class MetadataError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(MetadataError):
    """Invalid engine configuration."""


class UnsupportedFormatError(MetadataError):
    """File extension is not in any configured category."""


class AnalysisError(MetadataError):
    """Metadata could not be read from a file."""


class AnalysisTimeout(AnalysisError):
    """Analysis did not finish within the configured timeout."""


class StripError(MetadataError):
    """Metadata could not be removed from a file."""


class VerificationError(StripError):
    """Metadata was still present after both strip passes."""


class CapabilityUnavailableError(StripError):
    """A codec library or external program needed for stripping is missing."""


class ToolError(MetadataError):
    """An external program failed or could not be started."""
