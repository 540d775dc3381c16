"""Request guards that resolve the caller before a handler runs."""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable

from fastapi import HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .database import Database
from .errors import MissingHeaderError
from .sessions import SessionManager

AUTHORIZATION_HEADER = "Authorization"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller and the roles granted to it."""

    user_id: int
    roles: FrozenSet[str]
    token: str

    def has_roles(self, roles: Iterable[str]) -> bool:
        return set(roles) <= self.roles


def _invalid_token(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": "invalid_token", "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


class Authenticator:
    """Resolve the bearer token on a request into a :class:`Principal`."""

    def __init__(self, database: Database, sessions: SessionManager) -> None:
        self._database = database
        self._sessions = sessions
        self._bearer = HTTPBearer(auto_error=False)

    async def __call__(self, request: Request) -> Principal:
        if request.headers.get(AUTHORIZATION_HEADER) is None:
            raise MissingHeaderError(AUTHORIZATION_HEADER)

        credentials: HTTPAuthorizationCredentials | None = await self._bearer(request)  # type: ignore[assignment]
        if credentials is None or credentials.scheme.lower() != "bearer":
            raise _invalid_token("Authorization header must use the Bearer scheme")

        token = credentials.credentials
        user_id = self._sessions.resolve(token)
        if user_id is None:
            raise _invalid_token("Access token is invalid or has expired")

        with self._database.unit_of_work() as uow:
            user = uow.users.get(user_id)
            roles = uow.users.roles_for(user_id) if user is not None else []

        if user is None:
            self._sessions.destroy(token)
            raise _invalid_token("Access token refers to a removed user")

        return Principal(user_id=user.id, roles=frozenset(roles), token=token)


class RoleGuard:
    """Require an authenticated principal holding every listed role."""

    def __init__(self, authenticator: Authenticator, roles: Iterable[str] = ()) -> None:
        self._authenticator = authenticator
        self._roles = tuple(sorted(set(roles)))

    async def __call__(self, request: Request) -> Principal:
        principal = await self._authenticator(request)
        if not principal.has_roles(self._roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "code": "forbidden",
                    "message": "Insufficient privileges for this operation",
                    "required_roles": list(self._roles),
                },
            )
        return principal


__all__ = ["AUTHORIZATION_HEADER", "Authenticator", "Principal", "RoleGuard"]
