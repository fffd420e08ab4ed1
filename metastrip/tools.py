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
External programs used by the engine: ffprobe/ffmpeg for video containers and
exiftool as the last-resort image metadata remover.

Both are exposed through small classes so tests can substitute fakes.
"""

import json
import logging
import shutil
import subprocess
from typing import Any, Dict, List, Optional, Sequence

from .errors import ToolError

logger = logging.getLogger(__name__)

REMUX_OPTIONS = (
    "-map_metadata", "-1",  # drop global and stream metadata
    "-map", "0",            # keep every stream
    "-c", "copy",           # no re-encoding
)


def run_tool(command: Sequence[str], timeout: Optional[int] = None) -> subprocess.CompletedProcess:
    """Run an external program and raise ToolError on any failure."""
    logger.debug(f"Running: {' '.join(command)}")
    try:
        return subprocess.run(
            list(command),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise ToolError(f"{command[0]} is not installed") from e
    except subprocess.TimeoutExpired as e:
        raise ToolError(f"{command[0]} timed out after {timeout} seconds") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
        detail = stderr.splitlines()[-1] if stderr else f"exit code {e.returncode}"
        raise ToolError(f"{command[0]} failed: {detail}") from e


class ExternalTranscoder:
    """Container probing and metadata-free remuxing through ffprobe/ffmpeg."""

    def __init__(self, ffmpeg: str = "ffmpeg", ffprobe: str = "ffprobe", timeout: Optional[int] = None):
        self.ffmpeg = ffmpeg
        self.ffprobe = ffprobe
        self.timeout = timeout

    def available(self) -> bool:
        return shutil.which(self.ffmpeg) is not None and shutil.which(self.ffprobe) is not None

    def probe(self, path: str) -> Dict[str, Any]:
        """ffprobe's JSON description of the container format."""
        result = run_tool(
            [self.ffprobe, "-v", "quiet", "-print_format", "json", "-show_format", path],
            timeout=self.timeout,
        )
        try:
            return json.loads(result.stdout or b"{}")
        except ValueError as e:
            raise ToolError(f"{self.ffprobe} returned invalid JSON: {e}") from e

    def remux(self, input_path: str, output_path: str, options: Sequence[str] = REMUX_OPTIONS) -> None:
        """Copy all streams of input_path into output_path with the given options."""
        command: List[str] = [self.ffmpeg, "-y", "-v", "error", "-i", input_path]
        command.extend(options)
        command.append(output_path)
        run_tool(command, timeout=self.timeout)


class ExternalMetadataTool:
    """In-place removal of every metadata tag with exiftool."""

    def __init__(self, executable: str = "exiftool", timeout: Optional[int] = None):
        self.executable = executable
        self.timeout = timeout

    def available(self) -> bool:
        return shutil.which(self.executable) is not None

    def strip_all(self, path: str) -> None:
        run_tool([self.executable, "-all=", "-overwrite_original", path], timeout=self.timeout)
