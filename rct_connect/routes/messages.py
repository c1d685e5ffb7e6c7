# rct_connect/routes/messages.py
import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response

from ..auth import get_current_user
from ..db import get_store
from ..db.query import exists, filter_by, find_index, find_one, newest_first, remove_where, user_summary
from ..db.store import JsonStore
from ..schemas.messages import ConversationCreate, MessageCreate
from ..utils.dates import now_iso, parse_iso
from ..validation import validate

router = APIRouter(prefix="/messages", tags=["messages"])

NOT_ALLOWED = "Non autorisé"


def participant_ids(store: JsonStore, conversation_id: str) -> list:
    return [cp["user_id"] for cp in filter_by(store.data["conversation_participants"], conversation_id=conversation_id)]


def conversation_details(store: JsonStore, conversation_id: str, user_id: str) -> Optional[dict]:
    if not find_one(store.data["conversations"], id=conversation_id):
        return None

    participants = [
        summary
        for summary in (user_summary(store, uid) for uid in participant_ids(store, conversation_id))
        if summary
    ]
    messages = newest_first(filter_by(store.data["messages"], conversation_id=conversation_id))
    last = messages[0] if messages else None

    return {
        "id": conversation_id,
        "participants": participants,
        "last_message": last["content"] if last else None,
        "last_message_time": last["created_at"] if last else None,
        "unread_count": sum(1 for m in messages if m["sender_id"] != user_id and not m.get("read")),
    }


def find_direct_conversation(store: JsonStore, user_id: str, other_id: str) -> Optional[str]:
    """Existing 2-party conversation between exactly these two users."""
    for cp in filter_by(store.data["conversation_participants"], user_id=user_id):
        members = participant_ids(store, cp["conversation_id"])
        if len(members) == 2 and other_id in members:
            return cp["conversation_id"]
    return None


def leave_conversation(store: JsonStore, conversation_id: str, user_id: str) -> bool:
    """
    Drop ``user_id`` from the conversation. With nobody left the conversation
    and its messages are removed. Returns False if the user was not a member.
    """
    members = store.data["conversation_participants"]
    index = find_index(members, conversation_id=conversation_id, user_id=user_id)
    if index == -1:
        return False
    members.pop(index)

    if not exists(members, conversation_id=conversation_id):
        remove_where(store, "conversations", id=conversation_id)
        remove_where(store, "messages", conversation_id=conversation_id)
    return True


def _ensure_participant(store: JsonStore, conversation_id: str, user_id: str) -> None:
    if not exists(store.data["conversation_participants"], conversation_id=conversation_id, user_id=user_id):
        raise HTTPException(status_code=403, detail=NOT_ALLOWED)


@router.get("/conversations")
def list_conversations(current_user: dict = Depends(get_current_user), store: JsonStore = Depends(get_store)):
    uid = current_user["id"]
    conversations = [
        details
        for details in (
            conversation_details(store, cp["conversation_id"], uid)
            for cp in filter_by(store.data["conversation_participants"], user_id=uid)
        )
        if details
    ]

    # most recent activity first, conversations without messages last
    with_messages = [c for c in conversations if c["last_message_time"]]
    empty = [c for c in conversations if not c["last_message_time"]]
    with_messages.sort(key=lambda c: c["last_message_time"], reverse=True)
    return {"success": True, "data": with_messages + empty}


@router.get("/conversations/{conversation_id}")
def get_conversation(
    conversation_id: str,
    limit: int = Query(50, ge=1),
    before: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    uid = current_user["id"]
    _ensure_participant(store, conversation_id, uid)

    messages = newest_first(filter_by(store.data["messages"], conversation_id=conversation_id))
    if before:
        try:
            cursor = parse_iso(before)
        except ValueError:
            raise HTTPException(status_code=400, detail="Paramètre 'before' invalide")
        messages = [m for m in messages if parse_iso(m["created_at"]) < cursor]
    page = messages[:limit]

    shaped = [{**m, "sender": user_summary(store, m["sender_id"])} for m in reversed(page)]

    # reading the thread marks the other side's messages as read
    for m in store.data["messages"]:
        if m["conversation_id"] == conversation_id and m["sender_id"] != uid and not m.get("read"):
            m["read"] = True
    store.write_quietly()

    return {
        "success": True,
        "data": {
            "conversation": conversation_details(store, conversation_id, uid),
            "messages": shaped,
        },
    }


@router.post("/conversations")
def create_conversation(
    response: Response,
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    payload = validate(ConversationCreate, body)
    uid = current_user["id"]
    other_id = payload.participant_id

    if other_id == uid:
        raise HTTPException(status_code=400, detail="Impossible de créer une conversation avec vous-même")
    if not find_one(store.data["users"], id=other_id):
        raise HTTPException(status_code=404, detail="Utilisateur non trouvé")

    existing = find_direct_conversation(store, uid, other_id)
    if existing:
        return {"success": True, "data": conversation_details(store, existing, uid)}

    now = now_iso()
    conversation_id = str(uuid.uuid4())
    store.data["conversations"].append({"id": conversation_id, "created_at": now, "updated_at": now})
    store.data["conversation_participants"].extend([
        {"conversation_id": conversation_id, "user_id": uid, "joined_at": now},
        {"conversation_id": conversation_id, "user_id": other_id, "joined_at": now},
    ])
    store.write()

    response.status_code = 201
    return {"success": True, "data": conversation_details(store, conversation_id, uid)}


@router.post("/conversations/{conversation_id}/messages", status_code=201)
def send_message(
    conversation_id: str,
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    uid = current_user["id"]
    _ensure_participant(store, conversation_id, uid)
    payload = validate(MessageCreate, body)

    now = now_iso()
    message = {
        "id": str(uuid.uuid4()),
        "conversation_id": conversation_id,
        "sender_id": uid,
        "content": payload.content,
        "read": False,
        "created_at": now,
    }
    store.data["messages"].append(message)

    conversation = find_one(store.data["conversations"], id=conversation_id)
    if conversation:
        conversation["updated_at"] = now

    store.write()
    return {"success": True, "data": {**message, "sender": user_summary(store, uid)}}


@router.put("/{message_id}/read")
def mark_message_read(
    message_id: str,
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    message = find_one(store.data["messages"], id=message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Message non trouvé")
    _ensure_participant(store, message["conversation_id"], current_user["id"])

    message["read"] = True
    store.write()
    return {"success": True, "message": "Message marqué comme lu"}


@router.delete("/conversations/{conversation_id}")
def delete_conversation(
    conversation_id: str,
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    if not leave_conversation(store, conversation_id, current_user["id"]):
        raise HTTPException(status_code=403, detail=NOT_ALLOWED)

    store.write()
    return {"success": True, "message": "Conversation supprimée"}
