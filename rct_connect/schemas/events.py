from typing import Optional

from pydantic import Field

from .common import LatLng, PartialPayload, Payload

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}$"


class EventCreate(Payload):
    title: str = Field(min_length=3)
    description: Optional[str] = None
    date: str = Field(pattern=DATE_PATTERN)
    time: str = Field(pattern=TIME_PATTERN)
    location: str = Field(min_length=2)
    location_coords: Optional[LatLng] = None
    distance: float = Field(0, ge=0)
    group_name: str = "Tous"
    event_type: str = "Course"
    max_participants: Optional[int] = Field(None, gt=0)

    error_messages = {
        "title": "Le titre doit contenir au moins 3 caractères",
        "date": "Date invalide (AAAA-MM-JJ)",
        "time": "Heure invalide (HH:MM)",
        "location": "Lieu requis",
        "distance": "La distance doit être positive",
        "max_participants": "Le nombre maximum de participants doit être positif",
    }


class EventUpdate(PartialPayload):
    title: Optional[str] = Field(None, min_length=3)
    description: Optional[str] = None
    date: Optional[str] = Field(None, pattern=DATE_PATTERN)
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    location: Optional[str] = Field(None, min_length=2)
    location_coords: Optional[LatLng] = None
    distance: Optional[float] = Field(None, ge=0)
    group_name: Optional[str] = None
    event_type: Optional[str] = None
    max_participants: Optional[int] = Field(None, gt=0)

    nullable = frozenset({"description", "location_coords", "max_participants"})
    error_messages = EventCreate.error_messages
