# rct_connect/routes/auth.py
import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from ..auth import (
    authenticate_user,
    create_access_token,
    get_current_user,
    get_password_hash,
    get_user_by_email,
    public_user,
    verify_password,
)
from ..db import get_store
from ..db.query import find_one
from ..db.store import JsonStore
from ..schemas.auth import LoginPayload, PasswordChangePayload, RegisterPayload
from ..utils.dates import now_iso
from ..utils.logger import log_activity
from ..validation import validate

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------- Register ----------
@router.post("/register", status_code=201)
def register(body: Optional[dict] = Body(None), store: JsonStore = Depends(get_store)):
    payload = validate(RegisterPayload, body)
    email = payload.email.lower()

    if get_user_by_email(store, email):
        raise HTTPException(status_code=409, detail="Cet email est déjà utilisé")

    now = now_iso()
    user = {
        "id": str(uuid.uuid4()),
        "email": email,
        "password": get_password_hash(payload.password),
        "name": payload.name,
        "avatar": None,
        "role": "member",
        "group_name": payload.group_name,
        "distance": 0,
        "runs": 0,
        "joined_events": 0,
        "strava_connected": False,
        "strava_id": None,
        "created_at": now,
        "updated_at": now,
    }
    store.data["users"].append(user)
    store.write()

    log_activity(user_id=user["id"], action="signup", metadata={"email": email})
    return {"success": True, "data": {"user": public_user(user), "token": create_access_token(user)}}


# ---------- Email/Password Login ----------
@router.post("/login")
def login(body: Optional[dict] = Body(None), store: JsonStore = Depends(get_store)):
    payload = validate(LoginPayload, body)
    user = authenticate_user(store, payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=401, detail="Email ou mot de passe incorrect")

    log_activity(user_id=user["id"], action="login_password")
    return {"success": True, "data": {"user": public_user(user), "token": create_access_token(user)}}


@router.get("/me")
def me(current_user: dict = Depends(get_current_user)):
    return {"success": True, "data": {"user": current_user}}


# Tokens are stateless; the client just drops its copy.
@router.post("/logout")
def logout(current_user: dict = Depends(get_current_user)):
    log_activity(user_id=current_user["id"], action="logout")
    return {"success": True, "message": "Déconnexion réussie"}


# ---------- Change Password ----------
@router.put("/password")
def change_password(
    body: Optional[dict] = Body(None),
    current_user: dict = Depends(get_current_user),
    store: JsonStore = Depends(get_store),
):
    payload = validate(PasswordChangePayload, body)
    user = find_one(store.data["users"], id=current_user["id"])

    if not verify_password(payload.current_password, user.get("password") or ""):
        raise HTTPException(status_code=401, detail="Mot de passe actuel incorrect")

    user["password"] = get_password_hash(payload.new_password)
    user["updated_at"] = now_iso()
    store.write()

    log_activity(user_id=user["id"], action="change_password")
    return {"success": True, "message": "Mot de passe modifié"}
