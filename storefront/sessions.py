"""In-memory access tokens and the log-in flow that issues them."""

from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from .database import Database, verify_password
from .errors import LoginFailedError

logger = logging.getLogger("storefront.sessions")


@dataclass
class _SessionRecord:
    user_id: int
    expires_at: datetime


class SessionManager:
    """Generate, validate, and revoke bearer access tokens."""

    def __init__(self, *, ttl: timedelta = timedelta(hours=8)) -> None:
        if ttl <= timedelta(0):
            raise ValueError("Session TTL must be positive")
        self._ttl = ttl
        self._sessions: Dict[str, _SessionRecord] = {}
        self._lock = threading.Lock()

    def create(self, user_id: int) -> str:
        now = self._now()
        token = secrets.token_urlsafe(32)
        record = _SessionRecord(user_id=user_id, expires_at=now + self._ttl)
        with self._lock:
            self._prune(now)
            self._sessions[token] = record
        return token

    def resolve(self, token: str) -> Optional[int]:
        now = self._now()
        with self._lock:
            record = self._sessions.get(token)
            if record is None:
                return None
            if record.expires_at <= now:
                self._sessions.pop(token, None)
                return None
            record.expires_at = now + self._ttl
            return record.user_id

    def destroy(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def _prune(self, now: datetime) -> None:
        # Caller holds the lock.
        expired = [token for token, record in self._sessions.items() if record.expires_at <= now]
        for token in expired:
            del self._sessions[token]

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)


class AuthenticationService:
    """Exchange email/password credentials for access tokens."""

    def __init__(self, database: Database, sessions: SessionManager) -> None:
        self._database = database
        self._sessions = sessions

    def login(self, email: str, password: str) -> str:
        with self._database.unit_of_work() as uow:
            user = uow.users.get_by_email(email)

        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Failed log-in attempt for %s", email)
            raise LoginFailedError(email)

        logger.info("User %s logged in", user.id)
        return self._sessions.create(user.id)

    def logout(self, token: str) -> None:
        self._sessions.destroy(token)


__all__ = ["AuthenticationService", "SessionManager"]
