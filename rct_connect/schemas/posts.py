from typing import Optional

from pydantic import Field

from .common import PartialPayload, Payload, UrlStr


class PostCreate(Payload):
    content: str = Field(min_length=1)
    image: Optional[UrlStr] = None

    error_messages = {
        "content": "Le contenu ne peut pas être vide",
        "image": "URL d'image invalide",
    }


class PostUpdate(PartialPayload):
    content: Optional[str] = Field(None, min_length=1)
    image: Optional[UrlStr] = None

    nullable = frozenset({"image"})
    error_messages = PostCreate.error_messages


class CommentCreate(Payload):
    content: str = Field(min_length=1)

    error_messages = {"content": "Le commentaire ne peut pas être vide"}
