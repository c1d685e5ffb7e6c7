# rct_connect/routes/events.py
import json
import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ..auth import get_current_user, get_current_user_optional
from ..authz import ensure_owner_or_admin, require_role
from ..db import get_store
from ..db.query import exists, filter_by, find_index, find_one, oldest_first, remove_where, user_summary
from ..db.store import JsonStore
from ..schemas.events import EventCreate, EventUpdate
from ..utils.dates import now_iso
from ..utils.logger import log_activity
from ..validation import provided, validate

router = APIRouter(prefix="/events", tags=["events"])

EVENT_NOT_FOUND = "Événement non trouvé"


def _get_event_or_404(store: JsonStore, event_id: str) -> dict:
    event = find_one(store.data["events"], id=event_id)
    if not event:
        raise HTTPException(status_code=404, detail=EVENT_NOT_FOUND)
    return event


def _decode_coords(raw):
    return json.loads(raw) if raw else None


def _participants(store: JsonStore, event_id: str) -> list:
    rows = oldest_first(filter_by(store.data["event_participants"], event_id=event_id), key="joined_at")
    out = []
    for row in rows:
        user = find_one(store.data["users"], id=row["user_id"])
        if user:
            out.append({
                "id": user["id"],
                "name": user["name"],
                "avatar": user.get("avatar"),
                "group_name": user.get("group_name"),
                "joined_at": row["joined_at"],
            })
    return out


def _shape_event(store: JsonStore, event: dict, user: Optional[dict]) -> dict:
    participants = filter_by(store.data["event_participants"], event_id=event["id"])
    return {
        **event,
        "location_coords": _decode_coords(event.get("location_coords")),
        "creator": user_summary(store, event.get("created_by")),
        "participant_count": len(participants),
        "is_joined": bool(user) and any(p["user_id"] == user["id"] for p in participants),
    }


@router.get("")
def list_events(
    date: Optional[str] = Query(None),
    group: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    current_user: Optional[dict] = Depends(get_current_user_optional),
    store: JsonStore = Depends(get_store),
):
    events = list(store.data["events"])
    if date:
        events = [e for e in events if e.get("date") == date]
    if group:
        events = [e for e in events if e.get("group_name") == group]
    if type:
        events = [e for e in events if e.get("event_type") == type]

    events.sort(key=lambda e: (e.get("date") or "", e.get("time") or ""))
    return {"success": True, "data": [_shape_event(store, e, current_user) for e in events]}


@router.get("/{event_id}")
def get_event(
    event_id: str,
    current_user: Optional[dict] = Depends(get_current_user_optional),
    store: JsonStore = Depends(get_store),
):
    event = _get_event_or_404(store, event_id)
    data = _shape_event(store, event, current_user)
    data["participants"] = _participants(store, event_id)
    return {"success": True, "data": data}


@router.post("", status_code=201)
def create_event(
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(require_role("admin", "coach")),
    store: JsonStore = Depends(get_store),
):
    payload = validate(EventCreate, body)
    now = now_iso()
    event = {
        "id": str(uuid.uuid4()),
        "title": payload.title,
        "description": payload.description,
        "date": payload.date,
        "time": payload.time,
        "location": payload.location,
        "location_coords": json.dumps(payload.location_coords.model_dump()) if payload.location_coords else None,
        "distance": payload.distance,
        "group_name": payload.group_name,
        "event_type": payload.event_type,
        "max_participants": payload.max_participants,
        "created_by": current_user["id"],
        "created_at": now,
        "updated_at": now,
    }
    store.data["events"].append(event)
    store.write()

    log_activity(user_id=current_user["id"], action="create_event", metadata={"event_id": event["id"]})
    return {"success": True, "data": _shape_event(store, event, current_user)}


@router.put("/{event_id}")
def update_event(
    event_id: str,
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    event = _get_event_or_404(store, event_id)
    ensure_owner_or_admin(current_user, event.get("created_by"))

    updates = provided(validate(EventUpdate, body))
    if "location_coords" in updates and updates["location_coords"] is not None:
        updates["location_coords"] = json.dumps(updates["location_coords"])

    event.update(updates)
    event["updated_at"] = now_iso()
    store.write()
    return {"success": True, "data": _shape_event(store, event, current_user)}


@router.delete("/{event_id}")
def delete_event(
    event_id: str,
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    event = _get_event_or_404(store, event_id)
    ensure_owner_or_admin(current_user, event.get("created_by"))

    # participants lose the event from their counter, as on leave
    for row in filter_by(store.data["event_participants"], event_id=event_id):
        user = find_one(store.data["users"], id=row["user_id"])
        if user:
            user["joined_events"] = max((user.get("joined_events") or 0) - 1, 0)

    remove_where(store, "events", id=event_id)
    remove_where(store, "event_participants", event_id=event_id)
    store.write()

    log_activity(user_id=current_user["id"], action="delete_event", metadata={"event_id": event_id})
    return {"success": True, "message": "Événement supprimé"}


@router.post("/{event_id}/join")
def join_event(
    event_id: str,
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    event = _get_event_or_404(store, event_id)
    participants = store.data["event_participants"]

    if exists(participants, event_id=event_id, user_id=current_user["id"]):
        raise HTTPException(status_code=400, detail="Vous participez déjà à cet événement")

    capacity = event.get("max_participants")
    if capacity is not None and len(filter_by(participants, event_id=event_id)) >= capacity:
        raise HTTPException(status_code=400, detail="Événement complet")

    participants.append({"event_id": event_id, "user_id": current_user["id"], "joined_at": now_iso()})
    user = find_one(store.data["users"], id=current_user["id"])
    user["joined_events"] = (user.get("joined_events") or 0) + 1
    store.write()

    return {"success": True, "data": _shape_event(store, event, current_user)}


@router.delete("/{event_id}/leave")
def leave_event(
    event_id: str,
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    _get_event_or_404(store, event_id)
    participants = store.data["event_participants"]

    index = find_index(participants, event_id=event_id, user_id=current_user["id"])
    if index == -1:
        raise HTTPException(status_code=404, detail="Vous ne participez pas à cet événement")

    participants.pop(index)
    user = find_one(store.data["users"], id=current_user["id"])
    user["joined_events"] = max((user.get("joined_events") or 0) - 1, 0)
    store.write()

    return {"success": True, "message": "Vous avez quitté l'événement"}


@router.get("/{event_id}/participants")
def list_participants(event_id: str, store: JsonStore = Depends(get_store)):
    _get_event_or_404(store, event_id)
    return {"success": True, "data": _participants(store, event_id)}
