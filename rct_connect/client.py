# rct_connect/client.py
"""
Thin HTTP client mirroring the REST routes.

Each method returns the decoded JSON envelope (``success``, ``data``,
``error``, ``message``) whatever the status code; callers check
``success`` like the web front end does.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import requests


class RctClient:
    def __init__(self, base_url: str = "http://localhost:3001/api", token: Optional[str] = None, session=None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()

        self.auth = _AuthApi(self)
        self.users = _UsersApi(self)
        self.events = _EventsApi(self)
        self.posts = _PostsApi(self)
        self.stories = _StoriesApi(self)
        self.courses = _CoursesApi(self)
        self.notifications = _NotificationsApi(self)
        self.messages = _MessagesApi(self)
        self.settings = _SettingsApi(self)

    def request(self, method: str, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        resp = self.session.request(method, f"{self.base_url}{path}", json=json, params=params or None, headers=headers)
        try:
            return resp.json()
        except ValueError:
            return {"success": False, "error": f"HTTP {resp.status_code}"}

    def health(self) -> dict:
        return self.request("GET", "/health")


class _Api:
    def __init__(self, client: RctClient):
        self._c = client


class _AuthApi(_Api):
    def _keep_token(self, result: dict) -> dict:
        if result.get("success"):
            self._c.token = result["data"]["token"]
        return result

    def login(self, email: str, password: str) -> dict:
        return self._keep_token(self._c.request("POST", "/auth/login", json={"email": email, "password": password}))

    def register(self, email: str, password: str, name: str, group_name: Optional[str] = None) -> dict:
        body = {"email": email, "password": password, "name": name}
        if group_name:
            body["group_name"] = group_name
        return self._keep_token(self._c.request("POST", "/auth/register", json=body))

    def me(self) -> dict:
        return self._c.request("GET", "/auth/me")

    def logout(self) -> dict:
        result = self._c.request("POST", "/auth/logout")
        self._c.token = None
        return result

    def change_password(self, current_password: str, new_password: str) -> dict:
        return self._c.request(
            "PUT", "/auth/password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )


class _UsersApi(_Api):
    def get_all(self, role: Optional[str] = None, group: Optional[str] = None) -> dict:
        return self._c.request("GET", "/users", params={"role": role, "group": group})

    def get_by_id(self, user_id: str) -> dict:
        return self._c.request("GET", f"/users/{user_id}")

    def update(self, user_id: str, data: dict) -> dict:
        return self._c.request("PUT", f"/users/{user_id}", json=data)

    def delete(self, user_id: str) -> dict:
        return self._c.request("DELETE", f"/users/{user_id}")

    def update_stats(self, user_id: str, distance: Optional[float] = None, runs: Optional[int] = None) -> dict:
        body = {k: v for k, v in {"distance": distance, "runs": runs}.items() if v is not None}
        return self._c.request("PUT", f"/users/{user_id}/stats", json=body)

    def connect_strava(self, user_id: str, strava_id: str) -> dict:
        return self._c.request("POST", f"/users/{user_id}/strava", json={"stravaId": strava_id})

    def disconnect_strava(self, user_id: str) -> dict:
        return self._c.request("DELETE", f"/users/{user_id}/strava")


class _EventsApi(_Api):
    def get_all(self, date: Optional[str] = None, group: Optional[str] = None, type: Optional[str] = None) -> dict:
        return self._c.request("GET", "/events", params={"date": date, "group": group, "type": type})

    def get_by_id(self, event_id: str) -> dict:
        return self._c.request("GET", f"/events/{event_id}")

    def create(self, data: dict) -> dict:
        return self._c.request("POST", "/events", json=data)

    def update(self, event_id: str, data: dict) -> dict:
        return self._c.request("PUT", f"/events/{event_id}", json=data)

    def delete(self, event_id: str) -> dict:
        return self._c.request("DELETE", f"/events/{event_id}")

    def join(self, event_id: str) -> dict:
        return self._c.request("POST", f"/events/{event_id}/join")

    def leave(self, event_id: str) -> dict:
        return self._c.request("DELETE", f"/events/{event_id}/leave")

    def participants(self, event_id: str) -> dict:
        return self._c.request("GET", f"/events/{event_id}/participants")


class _PostsApi(_Api):
    def get_all(self, limit: Optional[int] = None, offset: Optional[int] = None, author_id: Optional[str] = None) -> dict:
        return self._c.request("GET", "/posts", params={"limit": limit, "offset": offset, "authorId": author_id})

    def get_by_id(self, post_id: str) -> dict:
        return self._c.request("GET", f"/posts/{post_id}")

    def create(self, content: str, image: Optional[str] = None) -> dict:
        body = {"content": content}
        if image:
            body["image"] = image
        return self._c.request("POST", "/posts", json=body)

    def update(self, post_id: str, data: dict) -> dict:
        return self._c.request("PUT", f"/posts/{post_id}", json=data)

    def delete(self, post_id: str) -> dict:
        return self._c.request("DELETE", f"/posts/{post_id}")

    def toggle_like(self, post_id: str) -> dict:
        return self._c.request("POST", f"/posts/{post_id}/like")

    def get_comments(self, post_id: str) -> dict:
        return self._c.request("GET", f"/posts/{post_id}/comments")

    def add_comment(self, post_id: str, content: str) -> dict:
        return self._c.request("POST", f"/posts/{post_id}/comments", json={"content": content})

    def delete_comment(self, post_id: str, comment_id: str) -> dict:
        return self._c.request("DELETE", f"/posts/{post_id}/comments/{comment_id}")


class _StoriesApi(_Api):
    def get_all(self) -> dict:
        return self._c.request("GET", "/stories")

    def get_by_id(self, story_id: str) -> dict:
        return self._c.request("GET", f"/stories/{story_id}")

    def create(self, image: str, caption: Optional[str] = None) -> dict:
        body = {"image": image}
        if caption:
            body["caption"] = caption
        return self._c.request("POST", "/stories", json=body)

    def delete(self, story_id: str) -> dict:
        return self._c.request("DELETE", f"/stories/{story_id}")

    def mark_viewed(self, story_id: str) -> dict:
        return self._c.request("POST", f"/stories/{story_id}/view")


class _CoursesApi(_Api):
    def get_all(
        self,
        difficulty: Optional[str] = None,
        min_distance: Optional[float] = None,
        max_distance: Optional[float] = None,
    ) -> dict:
        return self._c.request(
            "GET", "/courses",
            params={"difficulty": difficulty, "minDistance": min_distance, "maxDistance": max_distance},
        )

    def get_by_id(self, course_id: str) -> dict:
        return self._c.request("GET", f"/courses/{course_id}")

    def create(self, data: dict) -> dict:
        return self._c.request("POST", "/courses", json=data)

    def update(self, course_id: str, data: dict) -> dict:
        return self._c.request("PUT", f"/courses/{course_id}", json=data)

    def delete(self, course_id: str) -> dict:
        return self._c.request("DELETE", f"/courses/{course_id}")

    def rate(self, course_id: str, rating: int, comment: Optional[str] = None) -> dict:
        body = {"rating": rating}
        if comment:
            body["comment"] = comment
        return self._c.request("POST", f"/courses/{course_id}/rate", json=body)


class _NotificationsApi(_Api):
    def get_all(self, unread_only: bool = False) -> dict:
        return self._c.request("GET", "/notifications", params={"unreadOnly": "true" if unread_only else None})

    def mark_as_read(self, notification_id: str) -> dict:
        return self._c.request("PUT", f"/notifications/{notification_id}/read")

    def mark_all_as_read(self) -> dict:
        return self._c.request("PUT", "/notifications/read-all")

    def delete(self, notification_id: str) -> dict:
        return self._c.request("DELETE", f"/notifications/{notification_id}")

    def broadcast(self, type: str, title: str, message: str, related_id: Optional[str] = None,
                  target_group: Optional[str] = None) -> dict:
        body = {"type": type, "title": title, "message": message}
        if related_id:
            body["related_id"] = related_id
        if target_group:
            body["target_group"] = target_group
        return self._c.request("POST", "/notifications/broadcast", json=body)


class _MessagesApi(_Api):
    def get_conversations(self) -> dict:
        return self._c.request("GET", "/messages/conversations")

    def get_conversation(self, conversation_id: str, limit: Optional[int] = None, before: Optional[str] = None) -> dict:
        return self._c.request(
            "GET", f"/messages/conversations/{conversation_id}",
            params={"limit": limit, "before": before},
        )

    def start_conversation(self, participant_id: str) -> dict:
        return self._c.request("POST", "/messages/conversations", json={"participant_id": participant_id})

    def send_message(self, conversation_id: str, content: str) -> dict:
        return self._c.request("POST", f"/messages/conversations/{conversation_id}/messages", json={"content": content})

    def mark_as_read(self, message_id: str) -> dict:
        return self._c.request("PUT", f"/messages/{message_id}/read")

    def delete_conversation(self, conversation_id: str) -> dict:
        return self._c.request("DELETE", f"/messages/conversations/{conversation_id}")


class _SettingsApi(_Api):
    def get(self) -> dict:
        return self._c.request("GET", "/settings")

    def update(self, data: dict) -> dict:
        return self._c.request("PUT", "/settings", json=data)

    def update_theme(self, theme: str) -> dict:
        return self._c.request("PUT", "/settings/theme", json={"theme": theme})

    def update_language(self, language: str) -> dict:
        return self._c.request("PUT", "/settings/language", json={"language": language})

    def update_notifications(self, notifications_enabled: Optional[bool] = None,
                             email_notifications: Optional[bool] = None) -> dict:
        body = {
            k: v
            for k, v in {
                "notifications_enabled": notifications_enabled,
                "email_notifications": email_notifications,
            }.items()
            if v is not None
        }
        return self._c.request("PUT", "/settings/notifications", json=body)
