from typing import Annotated, ClassVar, Dict, FrozenSet
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, ConfigDict, model_validator


def _check_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("URL invalide")
    return value


UrlStr = Annotated[str, AfterValidator(_check_url)]


class LatLng(BaseModel):
    model_config = ConfigDict(strict=True)

    lat: float
    lng: float


class Payload(BaseModel):
    # no coercion: "4" is not a rating, 1 is not a boolean (ints still pass for floats)
    model_config = ConfigDict(strict=True)

    # field name -> localized message returned when that field fails
    error_messages: ClassVar[Dict[str, str]] = {}


class PartialPayload(Payload):
    """
    Update bodies: every field optional, but only fields listed in
    ``nullable`` may be explicitly sent as null.
    """
    nullable: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_nulls(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.nullable:
                raise ValueError(f"{name} ne peut pas être nul")
        return self
