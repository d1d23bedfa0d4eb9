"""Async helpers for file-backed storage adapters.

Blocking filesystem calls are moved to worker threads so the event loop
keeps serving other lookups while a large log is being read.
"""

import asyncio
import os
from collections.abc import AsyncIterator
from pathlib import Path

# Byte hint passed to readlines(); bounds how much of a file is held at once.
READ_BATCH_BYTES = 1 << 20


async def iter_lines(
    path: Path, batch_bytes: int = READ_BATCH_BYTES
) -> AsyncIterator[str]:
    """Yield the lines of a text file in order without reading it whole.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    handle = await asyncio.to_thread(
        open, path, encoding="utf-8", errors="replace", newline=None
    )
    try:
        while True:
            batch = await asyncio.to_thread(handle.readlines, batch_bytes)
            if not batch:
                break
            for line in batch:
                yield line
    finally:
        await asyncio.to_thread(handle.close)


async def stat_mtime_ns(path: Path) -> int:
    """Return the file's last-modification time in nanoseconds."""
    result = await asyncio.to_thread(os.stat, path)
    return result.st_mtime_ns


async def list_json_files(directory: Path) -> list[str]:
    """Return sorted names of the .json files in directory.

    A missing directory is treated as empty.
    """

    def _list() -> list[str]:
        try:
            names = os.listdir(directory)
        except FileNotFoundError:
            return []
        return sorted(name for name in names if name.endswith(".json"))

    return await asyncio.to_thread(_list)
