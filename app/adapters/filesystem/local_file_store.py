"""Local filesystem implementation of the FileStore port."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import AsyncIterator
from pathlib import Path

import aiofiles
import aiofiles.os

from app.application.ports.file_store import FileStore

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")

DEFAULT_CHUNK_SIZE = 64 * 1024


class LocalFileStore(FileStore):
    def __init__(self, encoding: str = "utf-8", chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._encoding = encoding
        self._chunk_size = max(1, chunk_size)

    async def list_files(self, directory: str, suffix: str = ".csv") -> list[str]:
        names = await aiofiles.os.listdir(directory)
        return sorted(
            name for name in names
            if name.endswith(suffix) and (Path(directory) / name).is_file()
        )

    async def iter_lines(self, path: str) -> AsyncIterator[str]:
        """Read in chunks and split locally; one thread-pool hop per chunk, not per line.

        Accepts \\n, \\r\\n and bare \\r terminators.
        """
        async with aiofiles.open(path, encoding=self._encoding, newline="") as f:
            tail = ""
            while True:
                chunk = await f.read(self._chunk_size)
                if not chunk:
                    break
                data = tail + chunk
                held = ""
                # a trailing \r may be the first half of a \r\n split across chunks
                if data.endswith("\r"):
                    data, held = data[:-1], "\r"
                *lines, tail = _LINE_BREAK.split(data)
                tail += held
                for line in lines:
                    yield line

            if tail:
                yield tail[:-1] if tail.endswith("\r") else tail

    async def write_atomic(self, path: str, content: str) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = target.with_name(f".{target.name}.{os.getpid()}.tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding=self._encoding, newline="") as f:
                await f.write(content)
            tmp_path.replace(target)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
        logger.debug("Wrote %s (%d bytes)", target, len(content))
