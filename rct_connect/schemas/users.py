from typing import Literal, Optional

from pydantic import ConfigDict, Field

from .common import PartialPayload, Payload, UrlStr


class UserUpdate(PartialPayload):
    name: Optional[str] = Field(None, min_length=2)
    avatar: Optional[UrlStr] = None
    group_name: Optional[str] = None
    role: Optional[Literal["admin", "coach", "member"]] = None

    nullable = frozenset({"avatar", "group_name"})
    error_messages = {
        "name": "Le nom doit contenir au moins 2 caractères",
        "avatar": "URL d'avatar invalide",
        "role": "Rôle invalide",
    }


class StatsUpdate(PartialPayload):
    distance: Optional[float] = Field(None, ge=0)
    runs: Optional[int] = Field(None, ge=0)

    error_messages = {
        "distance": "La distance doit être positive",
        "runs": "Le nombre de sorties doit être positif",
    }


class StravaLink(Payload):
    model_config = ConfigDict(strict=True, populate_by_name=True)

    strava_id: str = Field(alias="stravaId", min_length=1)

    error_messages = {"stravaId": "Identifiant Strava requis"}
