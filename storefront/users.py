"""User management: registration, profile updates and removal."""
from __future__ import annotations

import logging
import sqlite3
from typing import List, Optional

from .database import Database, UnitOfWork, hash_password
from .errors import UserEmailDuplicationError, UserNotFoundError
from .models import User
from .schemas import UserCreateRequest, UserUpdateRequest

logger = logging.getLogger("storefront.users")

DEFAULT_ROLE = "USER"
ADMIN_ROLE = "ADMIN"


class UserService:
    """Create, read, update and delete users.

    Every public method runs inside its own unit of work, so an error raised
    part-way through leaves the database untouched.
    """

    def __init__(self, database: Database) -> None:
        self._database = database

    def get_user(self, user_id: int) -> User:
        with self._database.unit_of_work() as uow:
            return _find_user(uow, user_id)

    def roles_for(self, user_id: int) -> List[str]:
        with self._database.unit_of_work() as uow:
            _find_user(uow, user_id)
            return uow.users.roles_for(user_id)

    def create_user(self, request: UserCreateRequest, *, roles: Optional[List[str]] = None) -> User:
        """Register a new user and return it with its hashed password set."""

        email = request.email
        with self._database.unit_of_work() as uow:
            if uow.users.exists_by_email(email):
                raise UserEmailDuplicationError(email)

            try:
                user = uow.users.add(name=request.name, email=email)
            except sqlite3.IntegrityError as exc:
                raise UserEmailDuplicationError(email) from exc

            uow.users.set_password_hash(user.id, hash_password(request.password))
            for role in roles or [DEFAULT_ROLE]:
                uow.users.add_role(user.id, role)

            created = _find_user(uow, user.id)

        logger.info("Created user %s <%s>", created.id, created.email)
        return created

    def update_user(self, user_id: int, request: UserUpdateRequest, acting_user_id: Optional[int]) -> User:
        with self._database.unit_of_work() as uow:
            _find_user(uow, user_id)
            uow.users.update_profile(user_id, name=request.name)
            uow.users.set_password_hash(user_id, hash_password(request.password))
            updated = _find_user(uow, user_id)

        logger.info("User %s updated by %s", user_id, acting_user_id)
        return updated

    def delete_user(self, user_id: int) -> User:
        with self._database.unit_of_work() as uow:
            user = _find_user(uow, user_id)
            uow.users.delete(user_id)

        logger.info("Deleted user %s", user_id)
        return user


def _find_user(uow: UnitOfWork, user_id: int) -> User:
    user = uow.users.get(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


__all__ = ["ADMIN_ROLE", "DEFAULT_ROLE", "UserService"]
