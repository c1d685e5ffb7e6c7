from typing import Optional

from pydantic import Field

from .common import Payload, UrlStr


class StoryCreate(Payload):
    image: UrlStr
    caption: Optional[str] = Field(None, max_length=200)

    error_messages = {
        "image": "URL d'image invalide",
        "caption": "La légende ne peut pas dépasser 200 caractères",
    }
