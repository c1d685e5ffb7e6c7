# rct_connect/routes/courses.py
import json
import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ..auth import get_current_user, get_current_user_optional
from ..authz import ensure_owner_or_admin
from ..db import get_store
from ..db.query import average, filter_by, find_index, find_one, newest_first, remove_where, user_summary
from ..db.store import JsonStore
from ..schemas.courses import CourseCreate, CourseUpdate, RatingPayload
from ..utils.dates import now_iso
from ..utils.logger import log_activity
from ..validation import provided, validate

router = APIRouter(prefix="/courses", tags=["courses"])

COURSE_NOT_FOUND = "Parcours non trouvé"


def _get_course_or_404(store: JsonStore, course_id: str) -> dict:
    course = find_one(store.data["courses"], id=course_id)
    if not course:
        raise HTTPException(status_code=404, detail=COURSE_NOT_FOUND)
    return course


def rating_stats(store: JsonStore, course_id: str) -> dict:
    ratings = filter_by(store.data["ratings"], course_id=course_id)
    return {
        "average_rating": average([r["rating"] for r in ratings]),
        "rating_count": len(ratings),
    }


def _shape_course(store: JsonStore, course: dict, creator_avatar: bool = False) -> dict:
    # coordinates are stored serialized, callers get real lists back
    return {
        **course,
        "start_point": json.loads(course["start_point"]),
        "route_points": json.loads(course["route_points"]),
        **rating_stats(store, course["id"]),
        "creator": user_summary(store, course.get("created_by"), avatar=creator_avatar),
    }


@router.get("")
def list_courses(
    difficulty: Optional[str] = Query(None),
    min_distance: Optional[float] = Query(None, alias="minDistance"),
    max_distance: Optional[float] = Query(None, alias="maxDistance"),
    store: JsonStore = Depends(get_store),
):
    courses = list(store.data["courses"])
    if difficulty:
        courses = [c for c in courses if c.get("difficulty") == difficulty]
    if min_distance is not None:
        courses = [c for c in courses if c.get("distance", 0) >= min_distance]
    if max_distance is not None:
        courses = [c for c in courses if c.get("distance", 0) <= max_distance]

    return {"success": True, "data": [_shape_course(store, c) for c in courses]}


@router.get("/{course_id}")
def get_course(
    course_id: str,
    current_user: Optional[dict] = Depends(get_current_user_optional),
    store: JsonStore = Depends(get_store),
):
    course = _get_course_or_404(store, course_id)
    ratings = filter_by(store.data["ratings"], course_id=course_id)

    data = _shape_course(store, course, creator_avatar=True)
    data["ratings"] = [{**r, "user": user_summary(store, r["user_id"])} for r in newest_first(ratings)]
    data["user_rating"] = None
    if current_user:
        data["user_rating"] = find_one(ratings, user_id=current_user["id"])
    return {"success": True, "data": data}


@router.post("", status_code=201)
def create_course(
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    payload = validate(CourseCreate, body)
    start_point = payload.start_point.model_dump()
    route_points = [p.model_dump() for p in payload.route_points] if payload.route_points else [start_point]

    now = now_iso()
    course = {
        "id": str(uuid.uuid4()),
        "name": payload.name,
        "description": payload.description,
        "distance": payload.distance,
        "difficulty": payload.difficulty,
        "location": payload.location,
        "start_point": json.dumps(start_point),
        "route_points": json.dumps(route_points),
        "created_by": current_user["id"],
        "created_at": now,
        "updated_at": now,
    }
    store.data["courses"].append(course)
    store.write()

    return {"success": True, "data": _shape_course(store, course)}


@router.put("/{course_id}")
def update_course(
    course_id: str,
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    course = _get_course_or_404(store, course_id)
    ensure_owner_or_admin(current_user, course.get("created_by"))

    updates = provided(validate(CourseUpdate, body))
    for key in ("start_point", "route_points"):
        if key in updates:
            updates[key] = json.dumps(updates[key])

    course.update(updates)
    course["updated_at"] = now_iso()
    store.write()
    return {"success": True, "data": _shape_course(store, course)}


@router.delete("/{course_id}")
def delete_course(
    course_id: str,
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    course = _get_course_or_404(store, course_id)
    ensure_owner_or_admin(current_user, course.get("created_by"))

    remove_where(store, "courses", id=course_id)
    remove_where(store, "ratings", course_id=course_id)
    store.write()

    log_activity(user_id=current_user["id"], action="delete_course", metadata={"course_id": course_id})
    return {"success": True, "message": "Parcours supprimé"}


@router.post("/{course_id}/rate")
def rate_course(
    course_id: str,
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    """One rating per (course, user): a second submission overwrites in place."""
    _get_course_or_404(store, course_id)
    payload = validate(RatingPayload, body)

    ratings = store.data["ratings"]
    index = find_index(ratings, course_id=course_id, user_id=current_user["id"])
    if index != -1:
        ratings[index]["rating"] = payload.rating
        ratings[index]["comment"] = payload.comment
    else:
        ratings.append({
            "id": str(uuid.uuid4()),
            "course_id": course_id,
            "user_id": current_user["id"],
            "rating": payload.rating,
            "comment": payload.comment,
            "created_at": now_iso(),
        })

    store.write()
    return {"success": True, "data": rating_stats(store, course_id)}
