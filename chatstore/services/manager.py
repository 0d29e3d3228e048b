from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chatstore.context import Context
    from chatstore.services.conversation_store.models import Conversation, JsonValue
    from chatstore.services.logger import AsyncLoggingService


# -------------------------------------------------------------- #
# Services Manager Class
# -------------------------------------------------------------- #


class ServicesManager:
    """Manager for handling multiple service instances."""

    def __init__(
        self,
        context: Context,
        logging_service: AsyncLoggingService,
        file_service_manager: BaseFileServiceManager,
        conversation_store_service_manager: BaseConversationStoreServiceManager,
    ):
        self.context = context

        self.logging_service = logging_service

        # add service managers as attributes
        self.file_service_manager = file_service_manager
        self.conversation_store_service_manager = conversation_store_service_manager

    async def initialize_all(self) -> None:
        """Initialize all service managers.

        The conversation store bootstraps its storage root here; a failure
        propagates so the host never starts without storage.
        """

        # Logging
        await self.logging_service.on_start(self)

        # Services managers
        await self.file_service_manager.on_start(self)
        await self.conversation_store_service_manager.on_start(self)

    async def shutdown_all(self, timeout: float = 10.0) -> None:
        """
        Gracefully shutdown all service managers.

        Args:
            timeout: Maximum time in seconds to wait for each phase (default: 10s)
        """
        import asyncio

        await self.logging_service.info("=" * 60)
        await self.logging_service.info("Starting graceful shutdown of all services...")

        # Mark context as shutting down to prevent new operations
        if self.context:
            self.context.mark_shutdown_started()
            await self.logging_service.info("✓ Shutdown flag set - no new operations will start")

        try:
            # Phase 1: Close the conversation store (waits for in-flight index updates)
            await self.logging_service.info("Phase 1: Closing conversation store...")
            await asyncio.wait_for(
                self.conversation_store_service_manager.on_close(), timeout=timeout
            )
            await self.logging_service.info("✓ Conversation store closed")

            # Phase 2: Close file manager
            await self.logging_service.info("Phase 2: Closing file manager...")
            await self.file_service_manager.on_close()
            await self.logging_service.info("✓ File manager closed")

            await self.logging_service.info("✓ Graceful shutdown completed successfully")
            await self.logging_service.info("=" * 60)

        except asyncio.TimeoutError:
            await self.logging_service.error(
                f"⚠️  Shutdown timeout exceeded ({timeout}s) - forcing shutdown"
            )
        except Exception as e:
            await self.logging_service.error(f"⚠️  Error during shutdown: {e}")

        # Phase 3: Always flush and close logging (even if there were errors)
        try:
            await asyncio.wait_for(self.logging_service.on_close(), timeout=5.0)
        except asyncio.TimeoutError:
            print("[ERROR] Timed out flushing logs during shutdown", flush=True)


# -------------------------------------------------------------- #
# Base Service Manager Class
# -------------------------------------------------------------- #


class Manager(ABC):
    """Base class for all manager services."""

    def __init__(self, context: Context):
        self.context = context
        self.services: ServicesManager | None = None

    # -------------------------------------------------------------- #
    # Manager Methods
    # -------------------------------------------------------------- #

    async def on_start(self, services: ServicesManager) -> None:
        """Actions to perform on manager start."""
        self.services = services

    async def on_close(self) -> None:
        """Actions to perform on manager close."""
        pass


# -------------------------------------------------------------- #
# Specialized Manager Classes
# -------------------------------------------------------------- #


class BaseFileServiceManager(Manager):
    """Specialized manager for file services."""

    def __init__(self, context):
        super().__init__(context)

    @abstractmethod
    def get_storage_path(self) -> str:
        """Get the storage path."""
        pass

    @abstractmethod
    def get_storage_absolute_path(self) -> str:
        """Get the absolute storage path."""
        pass

    @abstractmethod
    async def write_file(self, filepath: str, data: bytes) -> None:
        """Create or replace a file atomically."""
        pass

    @abstractmethod
    async def read_file(self, filepath: str) -> bytes:
        """Read data from a file."""
        pass

    @abstractmethod
    async def delete_file(self, filepath: str) -> None:
        """Delete a file."""
        pass

    @abstractmethod
    async def file_exists(self, filepath: str) -> bool:
        """Check if a file exists."""
        pass

    @abstractmethod
    async def ensure_dir(self, dirpath: str) -> None:
        """Create a directory (and parents) if it does not exist."""
        pass


class BaseConversationStoreServiceManager(Manager):
    """Specialized manager for the conversation store."""

    def __init__(self, context):
        super().__init__(context)

    @abstractmethod
    def get_storage_path(self) -> str:
        """Get the conversations directory."""
        pass

    @abstractmethod
    async def list_index(self) -> list[str]:
        """List indexed conversation filenames, newest first."""
        pass

    @abstractmethod
    async def get_conversation(self, filename: str) -> Conversation:
        """Fetch a conversation by filename."""
        pass

    @abstractmethod
    async def save_conversation(self, filename: str, content: JsonValue) -> None:
        """Create or replace a conversation and index it."""
        pass

    @abstractmethod
    async def delete_conversation(self, filename: str) -> None:
        """Delete a conversation and drop it from the index."""
        pass

    @abstractmethod
    async def clear_all_conversations(self) -> None:
        """Delete every indexed conversation and reset the index."""
        pass

