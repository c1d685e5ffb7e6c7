# rct_connect/validation.py
from __future__ import annotations

from typing import Any, Dict, Type, TypeVar

from fastapi import HTTPException, status
from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)


def first_error_message(exc: ValidationError, model: Type[BaseModel] | None = None) -> str:
    errors = exc.errors()
    if not errors:
        return "Données invalides"
    err = errors[0]
    loc = [str(p) for p in err.get("loc", ())]
    field = loc[0] if loc else ""

    messages: Dict[str, str] = getattr(model, "error_messages", {}) or {}
    if field in messages:
        return messages[field]
    if "__all__" in messages:
        return messages["__all__"]

    msg = err.get("msg", "Valeur invalide")
    # field validators raising ValueError carry their own message
    if msg.startswith("Value error, "):
        return msg[len("Value error, "):]
    return f"{'.'.join(loc)}: {msg}" if loc else msg


def validate(model: Type[M], body: Any) -> M:
    """
    Parse a request body against ``model``.
    Raises a 400 carrying the first failing field's message.
    """
    try:
        return model.model_validate(body if body is not None else {})
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=first_error_message(e, model),
        )


def provided(payload: BaseModel) -> Dict[str, Any]:
    """Only the fields the client actually sent (absent != null)."""
    return payload.model_dump(exclude_unset=True)
