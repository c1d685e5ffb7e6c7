# rct_connect/auth.py
from datetime import datetime, timedelta, timezone
import uuid
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from passlib.context import CryptContext

from . import settings
from .db import get_store
from .db.query import find_one
from .db.store import JsonStore

# --- env & crypto ------------------------------------------------------------
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.JWT_ALG
ACCESS_TOKEN_EXPIRE_MIN = settings.ACCESS_TOKEN_EXPIRE_MIN

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

PUBLIC_USER_FIELDS = (
    "id", "email", "name", "avatar", "role", "group_name",
    "distance", "runs", "joined_events",
    "strava_connected", "strava_id", "created_at", "updated_at",
)


# --- password utils ----------------------------------------------------------
def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # malformed hash in the data file
        return False


def public_user(user: dict) -> dict:
    """User record without the password hash."""
    return {k: user.get(k) for k in PUBLIC_USER_FIELDS}


# --- user lookup -------------------------------------------------------------
def get_user_by_email(store: JsonStore, email: str) -> Optional[dict]:
    email = (email or "").strip().lower()
    for user in store.data["users"]:
        if (user.get("email") or "").lower() == email:
            return user
    return None


def authenticate_user(store: JsonStore, email: str, password: str) -> Optional[dict]:
    user = get_user_by_email(store, email)
    if not user or not user.get("password"):
        return None
    if not verify_password(password, user["password"]):
        return None
    return user


# --- JWT helpers -------------------------------------------------------------
def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(user: dict, expires_delta: Optional[timedelta] = None) -> str:
    iat = _now_utc()
    exp = iat + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MIN))
    payload = {
        "sub": user["id"],
        "email": user.get("email"),
        "role": user.get("role", "member"),
        "type": "access",
        "jti": str(uuid.uuid4()),
        "iat": int(iat.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(raw: str) -> dict:
    try:
        return jwt.decode(raw, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token invalide ou expiré")


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization") or ""
    if auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None


# --- dependencies used by the routes -----------------------------------------
def get_current_user(request: Request, store: JsonStore = Depends(get_store)) -> dict:
    """
    Pull the token from the Authorization header (Bearer) and resolve the user.
    """
    token = _bearer_token(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token manquant")

    payload = decode_token(token)
    if payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token invalide ou expiré")

    user = find_one(store.data["users"], id=payload.get("sub"))
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Utilisateur non trouvé")

    return public_user(user)


def get_current_user_optional(request: Request, store: JsonStore = Depends(get_store)) -> Optional[dict]:
    """
    Best-effort auth:
    - valid access token -> public user dict
    - missing/invalid token -> None instead of raising
    """
    token = _bearer_token(request)
    if not token:
        return None
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != "access":
        return None
    user = find_one(store.data["users"], id=payload.get("sub"))
    return public_user(user) if user else None
