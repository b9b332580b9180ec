"""Storage for user records.

The store keeps users in process memory only; a restart resets it to the
seeded set.
"""

from .user_store import SEED_USERS, User, UserNotFoundError, UserStore

__all__ = ["SEED_USERS", "User", "UserNotFoundError", "UserStore"]
