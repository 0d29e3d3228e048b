"""Errors raised by the conversation store.

Every error renders as a human-readable message through ``str()``; that
message is all the host ever shows.
"""


class ConversationError(Exception):
    """Base class for conversation storage failures."""

    prefix = "Conversation storage error"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"{self.prefix}: {detail}")


class ReadError(ConversationError):
    """A conversation or the index is missing, unreadable or malformed."""

    prefix = "Failed to read conversation"


class WriteError(ConversationError):
    """A conversation or the index could not be written."""

    prefix = "Failed to write conversation"


class DeleteError(ConversationError):
    """Reserved; file removal failures are logged instead of raised."""

    prefix = "Failed to delete conversation"


class StorageInitError(ConversationError):
    """The conversations directory or the index could not be created."""

    prefix = "Failed to initialize conversation storage"
