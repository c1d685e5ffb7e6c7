# rct_connect/routes/stories.py
import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from .. import settings
from ..auth import get_current_user, get_current_user_optional
from ..authz import ensure_owner_or_admin
from ..db import get_store
from ..db.query import exists, filter_by, find_one, remove_where, user_summary
from ..db.store import JsonStore
from ..schemas.stories import StoryCreate
from ..utils.dates import iso_in, now_iso
from ..validation import validate

router = APIRouter(prefix="/stories", tags=["stories"])

STORY_NOT_FOUND = "Story non trouvée"


def is_active(story: dict, now: str) -> bool:
    """A story is visible strictly before its expires_at instant."""
    return story["expires_at"] > now


@router.get("")
def list_stories(
    current_user: Optional[dict] = Depends(get_current_user_optional),
    store: JsonStore = Depends(get_store),
):
    now = now_iso()
    active = [s for s in store.data["stories"] if is_active(s, now)]

    # group by author, preserving first-seen order
    groups = {}
    for story in active:
        groups.setdefault(story["user_id"], []).append(story)

    viewed_ids = set()
    if current_user:
        viewed_ids = {v["story_id"] for v in filter_by(store.data["story_views"], user_id=current_user["id"])}

    result = []
    for user_id, stories in groups.items():
        shaped = [{**s, "viewed": s["id"] in viewed_ids} for s in stories]
        result.append({
            "user": user_summary(store, user_id),
            "stories": shaped,
            "hasUnviewed": any(not s["viewed"] for s in shaped),
        })

    # unviewed groups first; sort is stable otherwise
    result.sort(key=lambda g: not g["hasUnviewed"])
    return {"success": True, "data": result}


@router.get("/{story_id}")
def get_story(
    story_id: str,
    current_user: Optional[dict] = Depends(get_current_user_optional),
    store: JsonStore = Depends(get_store),
):
    story = find_one(store.data["stories"], id=story_id)
    if not story:
        raise HTTPException(status_code=404, detail=STORY_NOT_FOUND)
    if not is_active(story, now_iso()):
        raise HTTPException(status_code=410, detail="Story expirée")

    views = filter_by(store.data["story_views"], story_id=story_id)
    return {
        "success": True,
        "data": {
            **story,
            "user": user_summary(store, story["user_id"]),
            "viewed": bool(current_user) and any(v["user_id"] == current_user["id"] for v in views),
            "view_count": len(views),
        },
    }


@router.post("", status_code=201)
def create_story(
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    payload = validate(StoryCreate, body)
    story = {
        "id": str(uuid.uuid4()),
        "user_id": current_user["id"],
        "image": payload.image,
        "caption": payload.caption,
        "expires_at": iso_in(hours=settings.STORY_TTL_HOURS),
        "created_at": now_iso(),
    }
    store.data["stories"].append(story)
    store.write()
    return {
        "success": True,
        "data": {**story, "user": user_summary(store, current_user["id"]), "viewed": False, "view_count": 0},
    }


@router.post("/{story_id}/view")
def view_story(
    story_id: str,
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    if not find_one(store.data["stories"], id=story_id):
        raise HTTPException(status_code=404, detail=STORY_NOT_FOUND)

    views = store.data["story_views"]
    if exists(views, story_id=story_id, user_id=current_user["id"]):
        return {"success": True, "message": "Déjà vue"}

    views.append({"story_id": story_id, "user_id": current_user["id"], "viewed_at": now_iso()})
    store.write()
    return {"success": True, "message": "Story marquée comme vue"}


@router.delete("/{story_id}")
def delete_story(
    story_id: str,
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    story = find_one(store.data["stories"], id=story_id)
    if not story:
        raise HTTPException(status_code=404, detail=STORY_NOT_FOUND)
    ensure_owner_or_admin(current_user, story["user_id"])

    remove_where(store, "stories", id=story_id)
    remove_where(store, "story_views", story_id=story_id)
    store.write()
    return {"success": True, "message": "Story supprimée"}
