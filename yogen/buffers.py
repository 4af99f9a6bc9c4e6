# File: yogen/buffers.py
"""
yogen - Output File Buffers
============================
A ``FileBuffer`` collects the rendered chunks destined for one output
file and moves them to disk in three separate steps, so a failure in any
file stops the run before a single destination file is touched:

    write_temp_file()   header + sorted non-blank chunks → temp file
    postprocess()       formatter, rewrite, chmod
    finalize()          os.replace() into the output directory

The temp file lives in a workspace inside the output directory, so the
final step is a same-filesystem rename.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from yogen.errors import EmissionError

logger: logging.Logger = logging.getLogger("yogen.buffers")

Formatter = Callable[[str, bytes], bytes]


@dataclass(slots=True)
class TBuf:
    """One rendered template chunk; chunks sort by ``(name, subname)``."""

    name: str
    subname: str
    body: str

    @property
    def sort_key(self) -> tuple:
        return (self.name, self.subname)

    def is_blank(self) -> bool:
        return not self.body.strip()


@dataclass(slots=True)
class FileBuffer:
    file_name: str
    base_name: str
    temp_dir: str
    header: str = ""
    chunks: List[TBuf] = field(default_factory=list)
    temp_path: Optional[str] = None

    def render(self) -> bytes:
        parts: List[str] = [self.header]
        for chunk in sorted(self.chunks, key=lambda c: c.sort_key):
            if chunk.is_blank():
                continue
            parts.append(chunk.body)
        return "".join(parts).encode("utf-8")

    def write_temp_file(self) -> None:
        try:
            fd, path = tempfile.mkstemp(dir=self.temp_dir, prefix=f"{self.base_name}_")
        except OSError as exc:
            raise EmissionError(
                f"failed to create temp file for {self.base_name}: {exc}", self.file_name
            ) from exc
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(self.render())
        except OSError as exc:
            raise EmissionError(
                f"failed to write temp file for {self.base_name}: {exc}", self.file_name
            ) from exc
        self.temp_path = path
        logger.debug("Wrote temp file %s for %s.", path, self.base_name)

    def postprocess(self, formatter: Formatter, mode: int) -> None:
        if self.temp_path is None:
            raise EmissionError(f"temp file for {self.base_name} was not written", self.file_name)
        try:
            with open(self.temp_path, "rb") as fh:
                source: bytes = fh.read()
        except OSError as exc:
            raise EmissionError(
                f"failed to read temp file for {self.base_name}: {exc}", self.file_name
            ) from exc
        try:
            formatted: bytes = formatter(self.temp_path, source)
        except Exception as exc:
            raise EmissionError(
                f"failed to fmt file for {self.base_name}: {exc}", self.file_name
            ) from exc
        try:
            with open(self.temp_path, "wb") as fh:
                fh.write(formatted)
            os.chmod(self.temp_path, mode)
        except OSError as exc:
            raise EmissionError(
                f"failed to write formatted file for {self.base_name}: {exc}", self.file_name
            ) from exc

    def finalize(self) -> None:
        if self.temp_path is None:
            raise EmissionError(f"temp file for {self.base_name} was not written", self.file_name)
        try:
            os.replace(self.temp_path, self.file_name)
        except OSError as exc:
            raise EmissionError(
                f"failed to put file for {self.base_name}: {exc}", self.file_name
            ) from exc
        logger.info("Wrote %s.", self.file_name)


__all__: List[str] = ["FileBuffer", "Formatter", "TBuf"]

logger.debug("yogen.buffers loaded.")
