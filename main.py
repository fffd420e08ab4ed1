# -----------------------------------------------------------------------------

# Part of "metastrip", a tool to scan and strip privacy-relevant metadata
# from images, PDFs, and videos before they are published.
# Copyright (C) 2025 Jeff Luster, mailto:jeff.luster96@gmail.com

# License: GNU AFFERO GPL 3.0, https://www.gnu.org/licenses/agpl-3.0.html
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.

# You should have received a copy of the GNU Affero General Public License
# along with this program in the file "COPYING.txt". If not, see 
# <http://www.gnu.org/licenses/>.
# -----------------------------------------------------------------------------

#!/usr/bin/env python3
"""
Main CLI entry point for the metadata stripper.

Usage:
    python main.py scan <input> [--interactive] [--backup]
    python main.py strip <input> [--dry-run] [--backup]
"""

import sys

from metastrip.cli import main


if __name__ == "__main__":
    sys.exit(main())
