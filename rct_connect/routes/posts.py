# rct_connect/routes/posts.py
import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ..auth import get_current_user, get_current_user_optional
from ..authz import ensure_owner_or_admin
from ..db import get_store
from ..db.query import filter_by, find_index, find_one, newest_first, oldest_first, remove_where, user_summary
from ..db.store import JsonStore
from ..schemas.posts import CommentCreate, PostCreate, PostUpdate
from ..utils.dates import now_iso
from ..utils.logger import log_activity
from ..validation import provided, validate

router = APIRouter(prefix="/posts", tags=["posts"])

POST_NOT_FOUND = "Publication non trouvée"


def _get_post_or_404(store: JsonStore, post_id: str) -> dict:
    post = find_one(store.data["posts"], id=post_id)
    if not post:
        raise HTTPException(status_code=404, detail=POST_NOT_FOUND)
    return post


def _shape_post(store: JsonStore, post: dict, user: Optional[dict]) -> dict:
    likes = filter_by(store.data["post_likes"], post_id=post["id"])
    comments = filter_by(store.data["comments"], post_id=post["id"])
    return {
        **post,
        "author": user_summary(store, post["author_id"]),
        "like_count": len(likes),
        "comment_count": len(comments),
        "is_liked": bool(user) and any(l["user_id"] == user["id"] for l in likes),
    }


def _comments_with_authors(store: JsonStore, post_id: str) -> list:
    comments = filter_by(store.data["comments"], post_id=post_id)
    return [
        {**c, "author": user_summary(store, c["author_id"])}
        for c in oldest_first(comments)
    ]


@router.get("")
def list_posts(
    limit: int = Query(20, ge=0),
    offset: int = Query(0, ge=0),
    author_id: Optional[str] = Query(None, alias="authorId"),
    current_user: Optional[dict] = Depends(get_current_user_optional),
    store: JsonStore = Depends(get_store),
):
    posts = store.data["posts"]
    if author_id:
        posts = filter_by(posts, author_id=author_id)

    page = newest_first(posts)[offset:offset + limit]
    return {"success": True, "data": [_shape_post(store, p, current_user) for p in page]}


@router.get("/{post_id}")
def get_post(
    post_id: str,
    current_user: Optional[dict] = Depends(get_current_user_optional),
    store: JsonStore = Depends(get_store),
):
    post = _get_post_or_404(store, post_id)
    data = _shape_post(store, post, current_user)
    data["comments"] = _comments_with_authors(store, post_id)
    return {"success": True, "data": data}


@router.post("", status_code=201)
def create_post(
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    payload = validate(PostCreate, body)
    now = now_iso()
    post = {
        "id": str(uuid.uuid4()),
        "author_id": current_user["id"],
        "content": payload.content,
        "image": payload.image,
        "created_at": now,
        "updated_at": now,
    }
    store.data["posts"].append(post)
    store.write()
    return {"success": True, "data": _shape_post(store, post, current_user)}


@router.put("/{post_id}")
def update_post(
    post_id: str,
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    post = _get_post_or_404(store, post_id)
    ensure_owner_or_admin(current_user, post["author_id"])

    updates = provided(validate(PostUpdate, body))
    post.update(updates)
    post["updated_at"] = now_iso()
    store.write()
    return {"success": True, "data": post}


@router.delete("/{post_id}")
def delete_post(
    post_id: str,
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    post = _get_post_or_404(store, post_id)
    ensure_owner_or_admin(current_user, post["author_id"])

    # post, likes and comments go together
    remove_where(store, "posts", id=post_id)
    remove_where(store, "post_likes", post_id=post_id)
    remove_where(store, "comments", post_id=post_id)
    store.write()

    log_activity(user_id=current_user["id"], action="delete_post", metadata={"post_id": post_id})
    return {"success": True, "message": "Publication supprimée"}


@router.post("/{post_id}/like")
def toggle_like(
    post_id: str,
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    """A (post, user) row means liked; the call inserts or removes it."""
    _get_post_or_404(store, post_id)
    likes = store.data["post_likes"]

    index = find_index(likes, post_id=post_id, user_id=current_user["id"])
    if index == -1:
        likes.append({"post_id": post_id, "user_id": current_user["id"], "created_at": now_iso()})
        liked = True
    else:
        likes.pop(index)
        liked = False

    store.write()

    like_count = len(filter_by(store.data["post_likes"], post_id=post_id))
    return {"success": True, "data": {"liked": liked, "like_count": like_count}}


@router.get("/{post_id}/comments")
def list_comments(post_id: str, store: JsonStore = Depends(get_store)):
    _get_post_or_404(store, post_id)
    return {"success": True, "data": _comments_with_authors(store, post_id)}


@router.post("/{post_id}/comments", status_code=201)
def add_comment(
    post_id: str,
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    _get_post_or_404(store, post_id)
    payload = validate(CommentCreate, body)

    comment = {
        "id": str(uuid.uuid4()),
        "post_id": post_id,
        "author_id": current_user["id"],
        "content": payload.content,
        "created_at": now_iso(),
    }
    store.data["comments"].append(comment)
    store.write()
    return {"success": True, "data": {**comment, "author": user_summary(store, current_user["id"])}}


@router.delete("/{post_id}/comments/{comment_id}")
def delete_comment(
    post_id: str,
    comment_id: str,
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    comments = store.data["comments"]
    index = find_index(comments, id=comment_id, post_id=post_id)
    if index == -1:
        raise HTTPException(status_code=404, detail="Commentaire non trouvé")
    ensure_owner_or_admin(current_user, comments[index]["author_id"])

    comments.pop(index)
    store.write()
    return {"success": True, "message": "Commentaire supprimé"}
