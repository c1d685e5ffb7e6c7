# rct_connect/routes/users.py
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ..auth import get_current_user, public_user
from ..authz import ensure_owner_or_admin, require_role
from ..db import get_store
from ..db.query import filter_by, find_one, remove_where
from ..db.store import JsonStore
from ..schemas.users import StatsUpdate, StravaLink, UserUpdate
from ..utils.dates import now_iso
from ..utils.logger import log_activity
from ..validation import provided, validate
from .messages import leave_conversation

router = APIRouter(prefix="/users", tags=["users"])

USER_NOT_FOUND = "Utilisateur non trouvé"


def _get_user_or_404(store: JsonStore, user_id: str) -> dict:
    user = find_one(store.data["users"], id=user_id)
    if not user:
        raise HTTPException(status_code=404, detail=USER_NOT_FOUND)
    return user


@router.get("")
def list_users(
    role: Optional[str] = Query(None),
    group: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    users = list(store.data["users"])
    if role:
        users = [u for u in users if u.get("role") == role]
    if group:
        users = [u for u in users if u.get("group_name") == group]
    users.sort(key=lambda u: (u.get("name") or "").lower())
    return {"success": True, "data": [public_user(u) for u in users]}


@router.get("/{user_id}")
def get_user(user_id: str, current_user: dict = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    return {"success": True, "data": public_user(_get_user_or_404(store, user_id))}


@router.put("/{user_id}")
def update_user(
    user_id: str,
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    user = _get_user_or_404(store, user_id)
    ensure_owner_or_admin(current_user, user_id)

    updates = provided(validate(UserUpdate, body))
    if "role" in updates and current_user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Seul un administrateur peut changer le rôle")

    user.update(updates)
    user["updated_at"] = now_iso()
    store.write()
    return {"success": True, "data": public_user(user)}


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    current_user: dict = Depends(require_role("admin")),
    store: JsonStore = Depends(get_store),
):
    _get_user_or_404(store, user_id)

    for membership in filter_by(store.data["conversation_participants"], user_id=user_id):
        leave_conversation(store, membership["conversation_id"], user_id)

    remove_where(store, "users", id=user_id)
    remove_where(store, "user_settings", user_id=user_id)
    remove_where(store, "event_participants", user_id=user_id)
    remove_where(store, "post_likes", user_id=user_id)
    remove_where(store, "story_views", user_id=user_id)
    remove_where(store, "notifications", user_id=user_id)
    store.write()

    log_activity(user_id=current_user["id"], action="delete_user", metadata={"target": user_id})
    return {"success": True, "message": "Utilisateur supprimé"}


@router.put("/{user_id}/stats")
def update_stats(
    user_id: str,
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    user = _get_user_or_404(store, user_id)
    if current_user["id"] != user_id and current_user.get("role") not in ("admin", "coach"):
        raise HTTPException(status_code=403, detail="Non autorisé")

    updates = provided(validate(StatsUpdate, body))
    user.update(updates)
    user["updated_at"] = now_iso()
    store.write()
    return {"success": True, "data": public_user(user)}


@router.post("/{user_id}/strava")
def connect_strava(
    user_id: str,
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    user = _get_user_or_404(store, user_id)
    ensure_owner_or_admin(current_user, user_id)
    payload = validate(StravaLink, body)

    user["strava_connected"] = True
    user["strava_id"] = payload.strava_id
    user["updated_at"] = now_iso()
    store.write()
    return {"success": True, "data": public_user(user)}


@router.delete("/{user_id}/strava")
def disconnect_strava(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    user = _get_user_or_404(store, user_id)
    ensure_owner_or_admin(current_user, user_id)

    user["strava_connected"] = False
    user["strava_id"] = None
    user["updated_at"] = now_iso()
    store.write()
    return {"success": True, "message": "Strava déconnecté"}
