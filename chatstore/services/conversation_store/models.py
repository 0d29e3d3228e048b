from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Union

# Opaque JSON document; the store never looks inside it.
JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


# -------------------------------------------------------------- #
# Conversation Object
# -------------------------------------------------------------- #


@dataclass
class Conversation:
    """A stored conversation.

    Attributes:
        filename: Unique name of the conversation file, also its sort key
        content: The conversation document exactly as the host saved it
    """

    filename: str
    content: JsonValue

    def to_json(self) -> Dict[str, Any]:
        """Convert the conversation to the shape the host expects."""
        return {"filename": self.filename, "content": self.content}
