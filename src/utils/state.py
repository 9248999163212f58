from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from store.auth_store import AuthStore, has_role
from store.data_store import DataStore
from store.models import Role, User
from store.storage import LocalStorage


def _default_storage() -> LocalStorage:
    return LocalStorage()


@dataclass
class GlobalState:
    """
    Centralized application state shared by screens.

    Fields:
      - storage: durable key-value storage both stores write through
      - auth: user roster and the signed-in session
      - data: clients, products, quotations and the auxiliary workflows
    """

    storage: Optional[LocalStorage] = field(default_factory=_default_storage)
    auth: AuthStore = None
    data: DataStore = None

    def __post_init__(self) -> None:
        if self.auth is None:
            self.auth = AuthStore(self.storage)
        if self.data is None:
            self.data = DataStore(self.storage)

    async def load(self) -> None:
        """Restore both stores from storage."""
        await self.auth.load()
        await self.data.load()

    @property
    def user(self) -> Optional[User]:
        return self.auth.current_user

    @property
    def user_id(self) -> str:
        return self.auth.current_user.id if self.auth.current_user else ""

    def can(self, *roles: Role) -> bool:
        return has_role(self.auth.current_user, *roles)

    async def end_session(self) -> None:
        """
        End the current session if one exists.
        Only called upon logging out; quitting keeps the session for next start.
        """
        if self.auth.is_authenticated:
            await self.auth.logout()
