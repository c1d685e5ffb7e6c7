from typing import Literal, Optional

from pydantic import Field

from .common import Payload


class BroadcastPayload(Payload):
    type: Literal["event", "announcement", "reminder", "system"]
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)
    related_id: Optional[str] = None
    target_group: Optional[str] = None  # group name, or "all"

    error_messages = {
        "type": "Type de notification invalide",
        "title": "Titre requis",
        "message": "Message requis",
    }
