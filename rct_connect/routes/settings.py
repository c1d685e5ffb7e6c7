# rct_connect/routes/settings.py
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from ..auth import get_current_user
from ..db import get_store
from ..db.query import find_one
from ..db.store import JsonStore
from ..schemas.settings import (
    DEFAULT_SETTINGS,
    LanguageUpdate,
    NotificationPrefs,
    SettingsUpdate,
    ThemeUpdate,
)
from ..validation import provided, validate

router = APIRouter(prefix="/settings", tags=["settings"])

NO_CHANGES = "Aucune modification fournie"


def settings_for(store: JsonStore, user_id: str) -> dict:
    """The user's settings row, created with defaults on first access."""
    row = find_one(store.data["user_settings"], user_id=user_id)
    if row is None:
        row = {"user_id": user_id, **DEFAULT_SETTINGS}
        store.data["user_settings"].append(row)
    return row


@router.get("")
def get_settings(current_user: dict = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    existed = find_one(store.data["user_settings"], user_id=current_user["id"]) is not None
    row = settings_for(store, current_user["id"])
    if not existed:
        store.write()
    return {"success": True, "data": row}


@router.put("")
def update_settings(
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    updates = provided(validate(SettingsUpdate, body))
    if not updates:
        raise HTTPException(status_code=400, detail=NO_CHANGES)

    row = settings_for(store, current_user["id"])
    row.update(updates)
    store.write()
    return {"success": True, "data": row}


@router.put("/theme")
def update_theme(
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    payload = validate(ThemeUpdate, body)
    settings_for(store, current_user["id"])["theme"] = payload.theme
    store.write()
    return {"success": True, "data": {"theme": payload.theme}}


@router.put("/language")
def update_language(
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    payload = validate(LanguageUpdate, body)
    settings_for(store, current_user["id"])["language"] = payload.language
    store.write()
    return {"success": True, "data": {"language": payload.language}}


@router.put("/notifications")
def update_notification_prefs(
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    updates = provided(validate(NotificationPrefs, body))
    if not updates:
        raise HTTPException(status_code=400, detail=NO_CHANGES)

    settings_for(store, current_user["id"]).update(updates)
    store.write()
    return {"success": True, "message": "Préférences de notification mises à jour"}
