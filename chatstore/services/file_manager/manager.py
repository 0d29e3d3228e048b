import asyncio
import os
import sys
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import aiofiles

if TYPE_CHECKING:
    from chatstore.context import Context

from chatstore.services.manager import BaseFileServiceManager

# -------------------------------------------------------------- #
# File Manager Service
# -------------------------------------------------------------- #


class FileManagerService(BaseFileServiceManager):
    """Service for atomic file storage and retrieval."""

    def __init__(self, context: "Context", storage_path: str):
        super().__init__(context)

        self.storage_path = storage_path

        # per-path locks, dropped once nobody waits on them
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    # -------------------------------------------------------------- #
    # Manager Methods
    # -------------------------------------------------------------- #

    async def on_start(self, services):
        await super().on_start(services)

        await self.ensure_dir(self.get_storage_absolute_path())

        await self.services.logging_service.info(
            f"FileManagerService initialized with storage path: {self.storage_path}"
        )
        return True

    async def on_close(self):
        return True

    # -------------------------------------------------------------- #
    # File Management Methods
    # -------------------------------------------------------------- #

    def _resolve(self, filepath: str) -> Path:
        """Absolute paths are used as-is, relative ones are joined to storage_path."""
        if os.path.isabs(filepath):
            return Path(filepath)
        return Path(self.storage_path, filepath)

    def _lock_key(self, filepath: str) -> str:
        """
        Normalize lock key by absolute path.
        On Windows, also convert to lowercase for case-insensitive comparison.
        """
        p = self._resolve(filepath).resolve()
        return str(p).lower() if sys.platform.startswith("win") else str(p)

    def get_storage_path(self) -> str:
        """Get the storage path."""
        return self.storage_path

    def get_storage_absolute_path(self) -> str:
        """Get the absolute storage path."""
        return os.path.abspath(self.storage_path)

    @asynccontextmanager
    async def _acquire_file_lock(self, filepath: str):
        """Context manager for acquiring and releasing file locks safely."""
        key = self._lock_key(filepath)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        acquired = False
        try:
            await lock.acquire()
            acquired = True
            yield
        finally:
            if acquired:
                lock.release()
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                self._locks.pop(key, None)
                self._waiters.pop(key, None)

    # -------------------------------------------------------------- #
    # Public File Operations
    # -------------------------------------------------------------- #

    async def write_file(self, filepath: str, data: bytes) -> None:
        """
        Create or replace a file atomically.

        The data goes to a temporary file in the target directory first and is
        then renamed over the target, so readers see either the old or the new
        content, never a partial write.

        Args:
            filepath: Can be absolute path or relative to storage_path
            data: File data as bytes

        Raises:
            OSError: If the temporary file cannot be written or renamed
            ValueError: If the path is not representable (e.g. contains a NUL byte)
        """
        path = self._resolve(filepath)
        loop = asyncio.get_event_loop()

        async with self._acquire_file_lock(filepath):

            def write_temp_file():
                tmp = tempfile.NamedTemporaryFile(
                    dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
                )
                try:
                    with tmp:
                        tmp.write(data)
                        tmp.flush()
                        os.fsync(tmp.fileno())
                except OSError:
                    self._discard(Path(tmp.name))
                    raise
                return Path(tmp.name)

            tmp_path = await loop.run_in_executor(None, write_temp_file)

            try:
                # atomic rename on same filesystem
                await loop.run_in_executor(None, os.replace, tmp_path, path)
            except (OSError, ValueError):
                await loop.run_in_executor(None, self._discard, tmp_path)
                raise

        await self.services.logging_service.debug(f"Wrote file: {filepath} ({len(data)} bytes)")

    async def read_file(self, filepath: str) -> bytes:
        """
        Read a file.

        Args:
            filepath: Can be absolute path or relative to storage_path

        Returns:
            File contents as bytes

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        path = self._resolve(filepath)

        loop = asyncio.get_event_loop()
        if not await loop.run_in_executor(None, path.is_file):
            raise FileNotFoundError(f"File {filepath} does not exist.")

        async with (
            self._acquire_file_lock(filepath),
            aiofiles.open(path, "rb") as f,
        ):
            data = await f.read()

        await self.services.logging_service.debug(f"Read file: {filepath} ({len(data)} bytes)")
        return data

    async def delete_file(self, filepath: str) -> None:
        """
        Delete a file.

        Args:
            filepath: Can be absolute path or relative to storage_path

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        path = self._resolve(filepath)

        loop = asyncio.get_event_loop()
        if not await loop.run_in_executor(None, os.path.exists, path):
            raise FileNotFoundError(f"File {filepath} does not exist.")

        async with self._acquire_file_lock(filepath):
            await loop.run_in_executor(None, os.remove, path)

        await self.services.logging_service.debug(f"Deleted file: {filepath}")

    async def file_exists(self, filepath: str) -> bool:
        """
        Check if a file exists.

        Args:
            filepath: Can be absolute path or relative to storage_path
        """
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, os.path.exists, self._resolve(filepath))

    async def ensure_dir(self, dirpath: str) -> None:
        """
        Create a directory, including missing parents, if it does not exist.

        Args:
            dirpath: Can be absolute path or relative to storage_path
        """
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(
            None, lambda: os.makedirs(self._resolve(dirpath), exist_ok=True)
        )

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
