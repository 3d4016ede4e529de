"""
Identity provider abstraction for Firebase Authentication and in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from firebase_admin import auth
from firebase_admin import exceptions as firebase_exceptions

from papayafresh.errors import IdentityNotFoundError, UpstreamFailure


class IdentityProvider(Protocol):
    """Account operations the services need from the identity provider."""

    def delete_user(self, uid: str) -> None:
        """Delete the account, raising IdentityNotFoundError if it is absent."""
        ...


@dataclass
class InMemoryIdentityProvider:
    """Test double for Firebase Authentication."""

    uids: set[str] = field(default_factory=set)
    deleted: list[str] = field(default_factory=list)

    def delete_user(self, uid: str) -> None:
        if uid not in self.uids:
            raise IdentityNotFoundError(f"No auth account for uid {uid}")
        self.uids.remove(uid)
        self.deleted.append(uid)


class FirebaseIdentityProvider:
    """Firebase Authentication via the firebase-admin SDK."""

    def __init__(self, app=None):
        self._app = app

    def delete_user(self, uid: str) -> None:
        try:
            auth.delete_user(uid, app=self._app)
        except auth.UserNotFoundError as e:
            raise IdentityNotFoundError(str(e)) from e
        except (firebase_exceptions.FirebaseError, ValueError) as e:
            raise UpstreamFailure(f"Firebase Auth delete failed: {e}") from e
