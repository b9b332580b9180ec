"""In-memory user store."""

from typing import Any, Dict, List, Mapping, Optional, Sequence

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger("users_store")


class User(BaseModel):
    """A user record held by the store."""
    id: int = Field(..., gt=0, description="Store-assigned user ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Contact email")


class UserNotFoundError(LookupError):
    """Raised when no user carries the requested ID."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User #{user_id} not found")


SEED_USERS: Sequence[Dict[str, Any]] = (
    {"id": 1, "name": "Alice Johnson", "email": "alice@example.com"},
    {"id": 2, "name": "Bob Smith", "email": "bob@example.com"},
    {"id": 3, "name": "Charlie Brown", "email": "charlie@example.com"},
)

# Fields a caller may set; ``id`` belongs to the store.
WRITABLE_FIELDS = ("name", "email")


class UserStore:
    """Ordered, mutable collection of users with monotonic ID assignment.

    The store does no locking. Every method runs to completion without
    yielding, so callers on a single event loop see each call as atomic.
    """

    def __init__(self, seed: Optional[Sequence[Mapping[str, Any]]] = None):
        seed = SEED_USERS if seed is None else seed
        self._users: List[User] = [User(**record) for record in seed]
        self._next_id = max((user.id for user in self._users), default=0) + 1

    def list_users(self) -> List[User]:
        """Return all users in insertion order."""
        return list(self._users)

    def get_user(self, user_id: int) -> User:
        """Return the user with ``user_id`` or raise ``UserNotFoundError``."""
        for user in self._users:
            if user.id == user_id:
                return user
        logger.warning("User not found", user_id=user_id)
        raise UserNotFoundError(user_id)

    def create_user(self, fields: Mapping[str, Any]) -> User:
        """Append a new user with the next sequential ID."""
        user = User(id=self._next_id, **{k: fields[k] for k in WRITABLE_FIELDS})
        self._next_id += 1
        self._users.append(user)
        logger.info("User created", user_id=user.id)
        return user

    def update_user(self, user_id: int, fields: Mapping[str, Any]) -> User:
        """Overwrite only the provided fields of an existing user."""
        user = self.get_user(user_id)
        changed = []
        for key in WRITABLE_FIELDS:
            if key in fields:
                setattr(user, key, fields[key])
                changed.append(key)
        logger.info("User updated", user_id=user_id, fields=changed)
        return user

    def delete_user(self, user_id: int) -> None:
        """Remove the user with ``user_id`` or raise ``UserNotFoundError``."""
        for index, user in enumerate(self._users):
            if user.id == user_id:
                del self._users[index]
                logger.info("User deleted", user_id=user_id)
                return
        logger.warning("User not found", user_id=user_id)
        raise UserNotFoundError(user_id)

    def count(self) -> int:
        return len(self._users)
