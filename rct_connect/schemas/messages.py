from pydantic import Field

from .common import Payload


class ConversationCreate(Payload):
    participant_id: str = Field(min_length=1)

    error_messages = {"participant_id": "Participant requis"}


class MessageCreate(Payload):
    content: str = Field(min_length=1)

    error_messages = {"content": "Le message ne peut pas être vide"}
