from typing import List, Literal, Optional

from pydantic import Field

from .common import LatLng, PartialPayload, Payload

Difficulty = Literal["Facile", "Moyen", "Difficile"]


class CourseCreate(Payload):
    name: str = Field(min_length=3)
    description: Optional[str] = None
    distance: float = Field(gt=0)
    difficulty: Difficulty = "Moyen"
    location: str = Field(min_length=2)
    start_point: LatLng
    route_points: Optional[List[LatLng]] = None

    error_messages = {
        "name": "Le nom doit contenir au moins 3 caractères",
        "distance": "La distance doit être positive",
        "difficulty": "Difficulté invalide",
        "location": "Lieu requis",
        "start_point": "Point de départ invalide",
        "route_points": "Tracé invalide",
    }


class CourseUpdate(PartialPayload):
    name: Optional[str] = Field(None, min_length=3)
    description: Optional[str] = None
    distance: Optional[float] = Field(None, gt=0)
    difficulty: Optional[Difficulty] = None
    location: Optional[str] = Field(None, min_length=2)
    start_point: Optional[LatLng] = None
    route_points: Optional[List[LatLng]] = None

    nullable = frozenset({"description"})
    error_messages = CourseCreate.error_messages


class RatingPayload(Payload):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None

    error_messages = {"rating": "La note doit être un entier entre 1 et 5"}
