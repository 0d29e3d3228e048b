"""
Conversation Store Package.

Keeps one JSON file per conversation plus an ``index.json`` listing them.
"""

from chatstore.services.conversation_store.errors import (
    ConversationError,
    DeleteError,
    ReadError,
    StorageInitError,
    WriteError,
)
from chatstore.services.conversation_store.manager import ConversationStoreService
from chatstore.services.conversation_store.models import Conversation, JsonValue

__all__ = [
    "Conversation",
    "ConversationError",
    "ConversationStoreService",
    "DeleteError",
    "JsonValue",
    "ReadError",
    "StorageInitError",
    "WriteError",
]
