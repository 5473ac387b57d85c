"""
Durable single-file key-value store.

Holds one named record slot as a JSON object on disk. Reads degrade to an
empty record when the file is missing, unreadable or corrupt; writes are
transactional (read, mutate a copy, atomically replace the file) and every
committed record is published to live readers.
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import AsyncIterator, Callable, Dict, Optional

from .core.live_value import LiveValue
from .utils.logging import get_logger

logger = get_logger(__name__)

Record = Dict[str, str]


class FileKeyValueStore:
    """
    JSON-file backed string key-value store.

    The file is read lazily on first access. Writes from concurrent callers
    are serialized through an ``asyncio.Lock`` so each ``edit`` sees the
    result of the previous one.
    """

    def __init__(self, path: Path):
        """
        Initialize the store.

        Args:
            path: Location of the JSON file; parent directories are created on first write
        """
        self.path = Path(path).expanduser()
        self._lock = asyncio.Lock()
        self._live: Optional[LiveValue[Record]] = None

    async def _ensure_loaded(self) -> LiveValue[Record]:
        if self._live is None:
            record = await asyncio.to_thread(self._read_file)
            if self._live is None:
                self._live = LiveValue(record)
        return self._live

    def _read_file(self) -> Record:
        try:
            with open(self.path, "r", encoding="utf-8") as file:
                data = json.load(file)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {self.path}, treating it as empty: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring non-object content in {self.path}")
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _write_file(self, record: Record) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file:
                json.dump(record, file)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def snapshot(self) -> Record:
        """Current committed record."""
        live = await self._ensure_loaded()
        return dict(live.value)

    async def data(self) -> AsyncIterator[Record]:
        """Yield the current record, then every committed record."""
        live = await self._ensure_loaded()
        async for record in live.stream():
            yield dict(record)

    async def edit(self, mutate: Callable[[Record], None], publish_on_failure: bool = False) -> Record:
        """
        Apply ``mutate`` to a copy of the record and commit it atomically.

        Args:
            mutate: Callback editing the record in place
            publish_on_failure: Publish the edited record to live readers even
                when the file write fails, so in-memory state still moves on

        Raises:
            OSError: If the file cannot be written; the file keeps the previous record
        """
        async with self._lock:
            live = await self._ensure_loaded()
            record = dict(live.value)
            mutate(record)
            try:
                await asyncio.to_thread(self._write_file, record)
            except OSError:
                if publish_on_failure:
                    live.set(record)
                raise
            live.set(record)
            return dict(record)
