from __future__ import annotations

import asyncio
import json
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chatstore.context import Context

from chatstore.services.conversation_store.errors import (
    ReadError,
    StorageInitError,
    WriteError,
)
from chatstore.services.conversation_store.models import Conversation, JsonValue
from chatstore.services.manager import BaseConversationStoreServiceManager

CONVERSATIONS_DIRNAME = "chat_conversations"
INDEX_FILENAME = "index.json"

# -------------------------------------------------------------- #
# Conversation Store Service
# -------------------------------------------------------------- #


class ConversationStoreService(BaseConversationStoreServiceManager):
    """
    Stores each conversation as a JSON file and keeps ``index.json`` listing them.

    The index is the authoritative list of visible conversations. Every
    read-modify-write of the index runs under one lock per store instance, and
    every write is an atomic replace done by the file manager.
    """

    def __init__(self, context: Context, app_data_dir: str):
        super().__init__(context)
        # absolute so the file manager never joins it onto its own storage path
        self.conversations_dir = os.path.abspath(os.path.join(app_data_dir, CONVERSATIONS_DIRNAME))
        self.index_path = os.path.join(self.conversations_dir, INDEX_FILENAME)

        self._index_lock = asyncio.Lock()
        self._started = False

    # -------------------------------------------------------------- #
    # Manager Methods
    # -------------------------------------------------------------- #

    async def on_start(self, services):
        await super().on_start(services)

        file_service = self.services.file_service_manager
        try:
            await file_service.ensure_dir(self.conversations_dir)
            if not await file_service.file_exists(self.index_path):
                await file_service.write_file(self.index_path, b"[]")
                await self.services.logging_service.info(
                    f"Created empty conversation index: {self.index_path}"
                )
        except OSError as e:
            await self.services.logging_service.critical(
                f"Could not initialize conversation storage at {self.conversations_dir}: {e}"
            )
            raise StorageInitError(f"{self.conversations_dir}: {e}") from e

        self._started = True
        await self.services.logging_service.info(
            f"ConversationStoreService initialized with storage path: {self.conversations_dir}"
        )
        return True

    async def on_close(self):
        # let an in-flight index update finish
        async with self._index_lock:
            self._started = False
        await self.services.logging_service.info("ConversationStoreService closed")
        return True

    # -------------------------------------------------------------- #
    # Helpers
    # -------------------------------------------------------------- #

    def get_storage_path(self) -> str:
        """Get the absolute conversations directory."""
        return self.conversations_dir

    def _conversation_path(self, filename: str) -> str:
        return os.path.join(self.conversations_dir, filename)

    def _require_started(self) -> None:
        if not self._started:
            raise RuntimeError("ConversationStoreService is not started; call on_start() first")
        if self.context is not None and self.context.is_shutting_down():
            raise RuntimeError("ConversationStoreService is shutting down")

    async def _read_index(self) -> list[str]:
        """Read and validate the persisted index, in on-disk (insertion) order."""
        try:
            raw = await self.services.file_service_manager.read_file(self.index_path)
        except OSError as e:
            await self.services.logging_service.error(f"Failed to read {INDEX_FILENAME}: {e}")
            raise ReadError(f"{INDEX_FILENAME}: {e}") from e

        try:
            index = json.loads(raw.decode("utf-8"))
        except ValueError as e:
            await self.services.logging_service.error(f"Malformed {INDEX_FILENAME}: {e}")
            raise ReadError(f"{INDEX_FILENAME}: {e}") from e

        if not isinstance(index, list) or not all(isinstance(f, str) for f in index):
            await self.services.logging_service.error(
                f"Malformed {INDEX_FILENAME}: expected a JSON array of filenames"
            )
            raise ReadError(f"{INDEX_FILENAME}: expected a JSON array of filenames")

        return index

    async def _write_index(self, index: list[str]) -> None:
        data = json.dumps(index, indent=2, ensure_ascii=False).encode("utf-8")
        try:
            await self.services.file_service_manager.write_file(self.index_path, data)
        except OSError as e:
            await self.services.logging_service.error(f"Failed to persist {INDEX_FILENAME}: {e}")
            raise WriteError(f"{INDEX_FILENAME}: {e}") from e

    async def _remove_file(self, filename: str) -> None:
        """Remove a conversation file. A missing file is fine; other failures are only logged."""
        try:
            await self.services.file_service_manager.delete_file(self._conversation_path(filename))
        except FileNotFoundError:
            await self.services.logging_service.debug(
                f"Conversation file not found (already deleted?): {filename}"
            )
        except OSError as e:
            await self.services.logging_service.warning(
                f"Could not remove conversation file {filename}, dropping it from the index anyway: {e}"
            )

    # -------------------------------------------------------------- #
    # Conversation Store Methods
    # -------------------------------------------------------------- #

    async def list_index(self) -> list[str]:
        """
        List the indexed conversation filenames.

        Returns:
            Filenames sorted in descending order (newest first for timestamped names)

        Raises:
            ReadError: If index.json is unreadable, not JSON, or not an array of strings
        """
        self._require_started()

        index = await self._read_index()
        index.sort(reverse=True)

        await self.services.logging_service.info(f"Listed {len(index)} conversations")
        return index

    async def get_conversation(self, filename: str) -> Conversation:
        """
        Read a conversation file. The index is not consulted.

        Raises:
            ReadError: If the file does not exist or is not valid JSON
        """
        self._require_started()

        try:
            raw = await self.services.file_service_manager.read_file(
                self._conversation_path(filename)
            )
        except FileNotFoundError as e:
            await self.services.logging_service.warning(f"Conversation file not found: {filename}")
            raise ReadError(f"{filename}: file not found") from e
        except OSError as e:
            await self.services.logging_service.error(
                f"Failed to retrieve conversation {filename}: {e}"
            )
            raise ReadError(f"{filename}: {e}") from e

        try:
            content = json.loads(raw.decode("utf-8"))
        except ValueError as e:
            await self.services.logging_service.error(
                f"Conversation {filename} is not valid JSON: {e}"
            )
            raise ReadError(f"{filename}: {e}") from e

        await self.services.logging_service.info(f"Retrieved conversation: {filename}")
        return Conversation(filename=filename, content=content)

    async def save_conversation(self, filename: str, content: JsonValue) -> None:
        """
        Write a conversation (full replace) and make sure the index lists it once.

        Args:
            filename: Name of the conversation file
            content: Any JSON-serializable document

        Raises:
            WriteError: If the content cannot be serialized or either file cannot be written.
                        A failed content write leaves the index untouched.
            ReadError: If the index cannot be read after the content was written
        """
        self._require_started()

        try:
            data = json.dumps(content, indent=2, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            await self.services.logging_service.error(
                f"Conversation {filename} is not JSON serializable: {e}"
            )
            raise WriteError(f"{filename}: {e}") from e

        # delete and clear remove files under this lock too
        async with self._index_lock:
            try:
                await self.services.file_service_manager.write_file(
                    self._conversation_path(filename), data
                )
            except (OSError, ValueError) as e:
                await self.services.logging_service.error(
                    f"Failed to save conversation {filename}: {e}"
                )
                raise WriteError(f"{filename}: {e}") from e

            # the content file stays written even if the index update below fails
            index = await self._read_index()
            if filename not in index:
                index.append(filename)
                await self._write_index(index)

        await self.services.logging_service.info(
            f"Saved conversation file: {filename} ({len(data)} bytes)"
        )

    async def delete_conversation(self, filename: str) -> None:
        """
        Remove a conversation file and every index entry naming it.

        A missing file is not an error, and a file that cannot be removed is
        still dropped from the index.

        Raises:
            ReadError: If the index cannot be read
            WriteError: If the updated index cannot be persisted
        """
        self._require_started()

        async with self._index_lock:
            await self._remove_file(filename)

            index = await self._read_index()
            remaining = [f for f in index if f != filename]
            await self._write_index(remaining)

        await self.services.logging_service.info(
            f"Deleted conversation: {filename} ({len(index) - len(remaining)} index entries removed)"
        )

    async def clear_all_conversations(self) -> None:
        """
        Remove every indexed conversation file and reset the index to ``[]``.

        Per-file failures are logged and skipped; the index is reset regardless.

        Raises:
            ReadError: If the index cannot be read
            WriteError: If the empty index cannot be persisted
        """
        self._require_started()

        async with self._index_lock:
            index = await self._read_index()

            # the index is reset below, so only the files need removing here
            for filename in index:
                await self._remove_file(filename)

            await self._write_index([])

        await self.services.logging_service.info(f"Cleared {len(index)} conversations")
