"""
Exceptions shared by the store, identity and service layers.
"""

from __future__ import annotations


class PapayaFreshError(Exception):
    """Base class for errors raised by the backend."""

    status_code = 500


class NotFoundError(PapayaFreshError):
    """A referenced user or record does not exist."""

    status_code = 404

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class UpstreamFailure(PapayaFreshError):
    """A document store or identity provider call failed."""


class IdentityNotFoundError(PapayaFreshError):
    """
    The identity provider has no account for the given uid.

    Raised by identity providers; the user eraser treats it as benign because
    Firestore and Firebase Auth can drift out of sync.
    """

    status_code = 404
