# user roster and the signed-in session
from __future__ import annotations

import dataclasses
import time
from typing import List, Optional

from store import seed
from store.models import Role, User, UserUpdate, changes, user_from_record, user_to_record
from store.storage import LocalStorage
from utils.errors import InvalidCredentialsError, PermissionDeniedError, ValidationError
from utils.logger import get_logger

_logger = get_logger(__name__)

USERS_KEY = "users"
SESSION_KEY = "currentUser"


def has_role(user: Optional[User], *roles: Role) -> bool:
    """True if user is signed in and holds one of roles (any role if none given)."""
    if user is None:
        return False
    return not roles or user.role in roles


class AuthStore:
    """
    Plaintext credential check against an in-memory roster.

    The roster and the session are stored under separate keys, so a restart
    restores the signed-in user without re-reading credentials.
    """

    def __init__(self, storage: Optional[LocalStorage] = None, with_seed: bool = True):
        self._storage = storage
        self._users: List[User] = seed.initial_users() if with_seed else []
        self._current: Optional[User] = None
        self._last_id = 0

    async def load(self) -> None:
        if self._storage is None:
            return
        records = await self._storage.get_item(USERS_KEY)
        if records is not None:
            self._users = [user_from_record(r) for r in records]
        session = await self._storage.get_item(SESSION_KEY)
        self._current = user_from_record(session) if session else None
        if self._current:
            _logger.info(f"Restored session for {self._current.username}")

    async def _save_users(self) -> None:
        if self._storage is not None:
            await self._storage.set_item(USERS_KEY, [user_to_record(u) for u in self._users])

    async def _save_session(self) -> None:
        if self._storage is None:
            return
        if self._current:
            await self._storage.set_item(SESSION_KEY, user_to_record(self._current))
        else:
            await self._storage.remove_item(SESSION_KEY)

    def _new_id(self) -> str:
        candidate = max(int(time.time() * 1000), self._last_id + 1)
        self._last_id = candidate
        return str(candidate)

    # ---------------------------
    # Session
    # ---------------------------

    @property
    def users(self) -> List[User]:
        return list(self._users)

    @property
    def current_user(self) -> Optional[User]:
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return self._current is not None

    @property
    def is_admin(self) -> bool:
        return has_role(self._current, Role.ADMIN)

    @property
    def is_manager(self) -> bool:
        return has_role(self._current, Role.MANAGER)

    @property
    def is_sales(self) -> bool:
        return has_role(self._current, Role.SALES)

    async def login(self, username: str, password: str) -> User:
        """
        Return the user whose username and password match and who is active.
        Every other case raises InvalidCredentialsError with the same message.
        """
        user = next(
            (
                u
                for u in self._users
                if u.username == username and u.password == password and u.active
            ),
            None,
        )
        if user is None:
            _logger.warning(f"Failed login for {username!r}")
            raise InvalidCredentialsError()
        self._current = user
        await self._save_session()
        _logger.info(f"{user.username} logged in as {user.role.value}")
        return user

    async def logout(self) -> None:
        if self._current:
            _logger.info(f"{self._current.username} logged out")
        self._current = None
        await self._save_session()

    # ---------------------------
    # Administration
    # ---------------------------

    def get_user(self, user_id: str) -> Optional[User]:
        return next((u for u in self._users if u.id == user_id), None)

    def _check_username(self, username: str, exclude_id: Optional[str] = None) -> None:
        if any(u.username == username and u.id != exclude_id for u in self._users):
            raise ValidationError("Username already taken", "username")

    async def add_user(
        self, username: str, password: str, role: Role, full_name: str, active: bool = True
    ) -> User:
        self._check_username(username)
        user = User(self._new_id(), username, password, role, full_name, active)
        self._users = [*self._users, user]
        await self._save_users()
        _logger.info(f"User {username} added")
        return user

    async def update_user(self, user_id: str, update: UserUpdate) -> Optional[User]:
        current = self.get_user(user_id)
        if current is None:
            return None
        fields = changes(update)
        if "username" in fields:
            self._check_username(fields["username"], exclude_id=user_id)
        updated = dataclasses.replace(current, **fields)
        self._users = [updated if u.id == user_id else u for u in self._users]
        await self._save_users()
        if self._current and self._current.id == user_id:
            self._current = updated
            await self._save_session()
        _logger.info(f"User {updated.username} updated")
        return updated

    async def toggle_user_status(self, user_id: str) -> Optional[User]:
        """Flip `active`. Signed-in users cannot deactivate themselves."""
        user = self.get_user(user_id)
        if user is None:
            return None
        if self._current and self._current.id == user_id and user.active:
            raise PermissionDeniedError("You cannot deactivate your own account")
        updated = dataclasses.replace(user, active=not user.active)
        self._users = [updated if u.id == user_id else u for u in self._users]
        await self._save_users()
        _logger.info(
            f"User {updated.username} {'activated' if updated.active else 'deactivated'}"
        )
        return updated

    async def change_password(self, user_id: str, new_password: str) -> Optional[User]:
        return await self.update_user(user_id, UserUpdate(password=new_password))
