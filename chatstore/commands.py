"""Host-facing commands for the conversation store.

Each command returns a ``CommandResponse`` instead of raising, so a host UI
can show ``error`` directly as the message of a failed action.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from chatstore.services.conversation_store.errors import ConversationError

if TYPE_CHECKING:
    from chatstore.services.conversation_store.models import JsonValue
    from chatstore.services.manager import ServicesManager


# -------------------------------------------------------------- #
# Command Response
# -------------------------------------------------------------- #


@dataclass
class CommandResponse:
    """Result of one host command."""

    success: bool
    data: Any = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error}


# -------------------------------------------------------------- #
# Conversation Commands
# -------------------------------------------------------------- #


class ConversationCommands:
    """The five conversation commands exposed to the host."""

    def __init__(self, services: ServicesManager):
        self.services = services

    @property
    def store(self):
        return self.services.conversation_store_service_manager

    async def _run(self, command: str, coro) -> CommandResponse:
        try:
            return CommandResponse(success=True, data=await coro)
        except ConversationError as e:
            return CommandResponse(success=False, error=str(e))
        except Exception as e:
            await self.services.logging_service.error(f"Unexpected error in {command}: {e}")
            return CommandResponse(success=False, error=str(e))

    async def get_conversations_index(self) -> CommandResponse:
        return await self._run("get_conversations_index", self.store.list_index())

    async def get_conversation(self, filename: str) -> CommandResponse:
        response = await self._run("get_conversation", self.store.get_conversation(filename))
        if response.success:
            response.data = response.data.to_json()
        return response

    async def save_conversation(self, filename: str, content: JsonValue) -> CommandResponse:
        return await self._run("save_conversation", self.store.save_conversation(filename, content))

    async def delete_conversation(self, filename: str) -> CommandResponse:
        return await self._run("delete_conversation", self.store.delete_conversation(filename))

    async def clear_all_conversations(self) -> CommandResponse:
        return await self._run("clear_all_conversations", self.store.clear_all_conversations())
