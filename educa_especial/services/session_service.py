"""Admin session helpers (issue tokens, cookies, validation)."""
from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi import Request, Response

from educa_especial.core.config import get_settings

SESSION_COOKIE_NAME = "admin_session"


@dataclass(frozen=True)
class AdminSession:
    token: str
    user_id: str
    username: str
    expires_at: datetime


class _SessionStore:
    """Process-local token store; sessions do not survive a restart."""

    def __init__(self) -> None:
        self._sessions: dict[str, AdminSession] = {}
        self._lock = threading.Lock()

    def add(self, entry: AdminSession) -> None:
        with self._lock:
            self._sessions[entry.token] = entry

    def get(self, token: str) -> AdminSession | None:
        now = datetime.now(timezone.utc)
        with self._lock:
            entry = self._sessions.get(token)
            if entry and entry.expires_at < now:
                del self._sessions[token]
                return None
            return entry

    def remove(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


_store = _SessionStore()


def issue_session(user_id: str, username: str) -> str:
    """Create a new session token for an authenticated admin."""
    token = secrets.token_urlsafe(32)
    ttl = get_settings().admin_session_ttl_seconds
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl)
    _store.add(AdminSession(token=token, user_id=user_id, username=username, expires_at=expires_at))
    return token


def current_session(request: Request) -> AdminSession | None:
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        return None
    return _store.get(token)


def delete_session(token: str | None) -> None:
    if token:
        _store.remove(token)


def clear_sessions() -> None:
    _store.clear()


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        httponly=True,
        secure=settings.app_env == "prod",
        samesite="strict",
        max_age=settings.admin_session_ttl_seconds,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
