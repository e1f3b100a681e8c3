"""Whole-document JSON persistence."""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Optional

from ..core.errors import StoreIOError

_ABSENT = object()


class JsonDocument:
    """A JSON file rewritten in full on every mutation.

    Mutations go through :meth:`transaction`, which holds a per-document
    ``asyncio.Lock`` across the read-modify-write cycle so concurrent handlers
    and the refresh sweep cannot lose each other's updates. Writes land in a
    temporary file that is renamed over the target.
    """

    def __init__(
        self,
        path: Path | str,
        default_factory: Callable[[], Any],
        coerce: Optional[Callable[[Any], Any]] = None,
    ) -> None:
        self.path = Path(path)
        self._default_factory = default_factory
        self._coerce = coerce or (lambda data: data)
        self._lock = asyncio.Lock()

    async def read(self) -> Any:
        data = await asyncio.to_thread(self._read_sync, False)
        if data is not _ABSENT:
            return data
        # First use: create the default document under the lock.
        async with self._lock:
            return await asyncio.to_thread(self._read_sync, True)

    async def overwrite(self, data: Any) -> None:
        async with self._lock:
            await asyncio.to_thread(self._write_sync, data)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Any]:
        """Yield the current contents; write them back if the block succeeds."""

        async with self._lock:
            data = await asyncio.to_thread(self._read_sync)
            yield data
            await asyncio.to_thread(self._write_sync, data)

    def _read_sync(self, create: bool = True) -> Any:
        try:
            if not self.path.exists():
                if not create:
                    return _ABSENT
                data = self._default_factory()
                self._write_sync(data)
                return data
            with self.path.open("r", encoding="utf-8") as handle:
                return self._coerce(json.load(handle))
        except (OSError, ValueError) as exc:
            raise StoreIOError(f"Cannot read {self.path.name}") from exc

    def _write_sync(self, data: Any) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(data, handle, indent=2, ensure_ascii=False)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise StoreIOError(f"Cannot write {self.path.name}") from exc


__all__ = ["JsonDocument"]
