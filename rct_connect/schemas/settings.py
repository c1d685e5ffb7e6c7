from typing import Literal, Optional

from .common import PartialPayload, Payload

Theme = Literal["light", "dark", "system"]
Language = Literal["fr", "en", "ar"]

DEFAULT_SETTINGS = {
    "theme": "system",
    "language": "fr",
    "notifications_enabled": True,
    "email_notifications": True,
}


class SettingsUpdate(PartialPayload):
    theme: Optional[Theme] = None
    language: Optional[Language] = None
    notifications_enabled: Optional[bool] = None
    email_notifications: Optional[bool] = None

    error_messages = {
        "theme": "Thème invalide",
        "language": "Langue invalide",
    }


class ThemeUpdate(Payload):
    theme: Theme

    error_messages = {"__all__": "Thème invalide"}


class LanguageUpdate(Payload):
    language: Language

    error_messages = {"__all__": "Langue invalide"}


class NotificationPrefs(PartialPayload):
    notifications_enabled: Optional[bool] = None
    email_notifications: Optional[bool] = None
