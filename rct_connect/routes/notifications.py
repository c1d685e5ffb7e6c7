# rct_connect/routes/notifications.py
import uuid
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ..auth import get_current_user
from ..authz import require_role
from ..db import get_store
from ..db.query import filter_by, find_index, newest_first
from ..db.store import JsonStore
from ..schemas.notifications import BroadcastPayload
from ..utils.dates import now_iso
from ..utils.logger import log_activity
from ..validation import validate

router = APIRouter(prefix="/notifications", tags=["notifications"])

NOTIFICATION_NOT_FOUND = "Notification non trouvée"


def notify(
    store: JsonStore,
    user_ids: List[str],
    type: str,
    title: str,
    message: str,
    related_id: Optional[str] = None,
) -> List[dict]:
    """Append one unread notification per user; the caller persists."""
    now = now_iso()
    created = [
        {
            "id": str(uuid.uuid4()),
            "user_id": uid,
            "type": type,
            "title": title,
            "message": message,
            "related_id": related_id,
            "read": False,
            "created_at": now,
        }
        for uid in user_ids
    ]
    store.data["notifications"].extend(created)
    return created


@router.get("")
def list_notifications(
    unread_only: Optional[str] = Query(None, alias="unreadOnly"),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    mine = filter_by(store.data["notifications"], user_id=current_user["id"])
    unread_count = sum(1 for n in mine if not n.get("read"))
    # only the literal "true" filters; anything else lists everything
    if unread_only == "true":
        mine = [n for n in mine if not n.get("read")]

    return {
        "success": True,
        "data": newest_first(mine),
        "meta": {"unread_count": unread_count},
    }


@router.put("/read-all")
def mark_all_read(current_user: dict = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    for n in store.data["notifications"]:
        if n["user_id"] == current_user["id"]:
            n["read"] = True
    store.write()
    return {"success": True, "message": "Toutes les notifications marquées comme lues"}


@router.put("/{notification_id}/read")
def mark_read(
    notification_id: str,
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    notifications = store.data["notifications"]
    index = find_index(notifications, id=notification_id, user_id=current_user["id"])
    if index == -1:
        raise HTTPException(status_code=404, detail=NOTIFICATION_NOT_FOUND)

    notifications[index]["read"] = True
    store.write()
    return {"success": True, "message": "Notification marquée comme lue"}


@router.delete("/{notification_id}")
def delete_notification(
    notification_id: str,
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    notifications = store.data["notifications"]
    index = find_index(notifications, id=notification_id, user_id=current_user["id"])
    if index == -1:
        raise HTTPException(status_code=404, detail=NOTIFICATION_NOT_FOUND)

    notifications.pop(index)
    store.write()
    return {"success": True, "message": "Notification supprimée"}


@router.post("/broadcast", status_code=201)
def broadcast(
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(require_role("admin", "coach")),
    store: JsonStore = Depends(get_store),
):
    payload = validate(BroadcastPayload, body)

    targets = store.data["users"]
    if payload.target_group and payload.target_group != "all":
        targets = [u for u in targets if u.get("group_name") == payload.target_group]
    target_ids = [u["id"] for u in targets if u["id"] != current_user["id"]]

    created = notify(
        store,
        target_ids,
        type=payload.type,
        title=payload.title,
        message=payload.message,
        related_id=payload.related_id,
    )
    store.write()

    log_activity(
        user_id=current_user["id"],
        action="broadcast_notification",
        metadata={"count": len(created), "target_group": payload.target_group or "all"},
    )
    return {
        "success": True,
        "message": f"Notification envoyée à {len(created)} utilisateur(s)",
        "data": {"count": len(created)},
    }
