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
Extension based file classification.
"""

import os
from typing import Union

from .config import EngineConfig
from .models import FileCategory


def extension_of(path: Union[str, os.PathLike]) -> str:
    """Lower-cased extension without the leading dot."""
    return os.path.splitext(os.fspath(path))[1].lower()[1:]


class FormatClassifier:
    """Maps file paths to a FileCategory using the configured extension sets."""

    def __init__(self, config: EngineConfig):
        self.config = config

    def category(self, path: Union[str, os.PathLike]) -> FileCategory:
        ext = extension_of(path)
        if ext in self.config.image_extensions:
            return FileCategory.IMAGE
        if ext in self.config.pdf_extensions:
            return FileCategory.PDF
        if ext in self.config.video_extensions:
            return FileCategory.VIDEO
        return FileCategory.UNSUPPORTED

    def is_supported(self, path: Union[str, os.PathLike]) -> bool:
        return self.category(path) is not FileCategory.UNSUPPORTED
