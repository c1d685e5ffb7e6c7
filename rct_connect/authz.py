# rct_connect/authz.py
from __future__ import annotations

from typing import Callable

from fastapi import Depends, HTTPException, status

from .auth import get_current_user


def require_role(*allowed_roles: str) -> Callable:
    """
    Usage:
        @router.post("/broadcast")
        def broadcast(user: dict = Depends(require_role("admin", "coach"))):
            ...
    """
    allowed = set(r.strip().lower() for r in allowed_roles if r)

    def _dep(user: dict = Depends(get_current_user)) -> dict:
        role = (user.get("role") or "member").strip().lower()
        if role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Accès refusé",
            )
        return user

    return _dep


def is_owner_or_admin(user: dict, owner_id: str | None) -> bool:
    return user["id"] == owner_id or user.get("role") == "admin"


def ensure_owner_or_admin(user: dict, owner_id: str | None) -> None:
    if not is_owner_or_admin(user, owner_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Non autorisé")
