# File: yogen/formatter.py
"""
yogen - Go Source Formatters
=============================
A formatter is a callable ``(path, source) -> formatted`` applied to each
temp file before it is renamed into place.

``gofmt_formatter`` pipes the source through ``goimports`` (which also
fixes the import block), falling back to ``gofmt`` when ``goimports`` is
not on ``PATH``.  ``identity_formatter`` returns the source unchanged and
backs ``--disable-format``.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from typing import List, Optional

from yogen.errors import EmissionError

logger: logging.Logger = logging.getLogger("yogen.formatter")

FORMAT_TOOLS: List[str] = ["goimports", "gofmt"]
FORMAT_TIMEOUT: float = 60.0


def find_format_tool() -> Optional[str]:
    for tool in FORMAT_TOOLS:
        path: Optional[str] = shutil.which(tool)
        if path:
            return path
    return None


def gofmt_formatter(path: str, source: bytes) -> bytes:
    tool: Optional[str] = find_format_tool()
    if tool is None:
        raise EmissionError(
            f"no Go formatter found on PATH (tried {', '.join(FORMAT_TOOLS)})", path
        )
    try:
        result = subprocess.run(
            [tool],
            input=source,
            capture_output=True,
            timeout=FORMAT_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise EmissionError(f"{tool} failed: {exc}", path) from exc
    if result.returncode != 0:
        stderr: str = result.stderr.decode("utf-8", errors="replace").strip()
        raise EmissionError(f"{os.path.basename(tool)}: {stderr}", path)
    logger.debug("Formatted %s with %s.", path, tool)
    return result.stdout


def identity_formatter(path: str, source: bytes) -> bytes:
    return source


__all__: List[str] = [
    "FORMAT_TOOLS",
    "find_format_tool",
    "gofmt_formatter",
    "identity_formatter",
]

logger.debug("yogen.formatter loaded.")
