from typing import Optional

from pydantic import ConfigDict, EmailStr, Field

from .common import Payload


class RegisterPayload(Payload):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = Field(min_length=2)
    group_name: Optional[str] = None

    error_messages = {
        "email": "Email invalide",
        "password": "Le mot de passe doit contenir au moins 6 caractères",
        "name": "Le nom doit contenir au moins 2 caractères",
    }


class LoginPayload(Payload):
    email: EmailStr
    password: str = Field(min_length=1)

    error_messages = {
        "email": "Email invalide",
        "password": "Mot de passe requis",
    }


class PasswordChangePayload(Payload):
    model_config = ConfigDict(strict=True, populate_by_name=True)

    current_password: str = Field(alias="currentPassword", min_length=1)
    new_password: str = Field(alias="newPassword", min_length=6)

    error_messages = {
        "currentPassword": "Mot de passe actuel requis",
        "newPassword": "Le nouveau mot de passe doit contenir au moins 6 caractères",
    }
