"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

import firebase_admin
from fastapi import Depends
from firebase_admin import credentials, firestore

from papayafresh.config import Settings, get_settings
from papayafresh.dashboard import DashboardAggregator
from papayafresh.eraser import UserEraser
from papayafresh.identity import (
    FirebaseIdentityProvider,
    IdentityProvider,
    InMemoryIdentityProvider,
)
from papayafresh.scans import ScanRecorder
from papayafresh.store import (
    DocumentStore,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
)

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

_firebase_app: firebase_admin.App | None = None
_document_store: DocumentStore | None = None
_identity_provider: IdentityProvider | None = None


def _use_in_memory(settings: Settings) -> bool:
    return settings.use_in_memory_backends or not settings.firebase_project_id


def get_firebase_app() -> firebase_admin.App:
    """
    Initialize the default Firebase app once, from the FIREBASE_* service
    account settings or, without them, application default credentials.
    """
    global _firebase_app
    if _firebase_app:
        return _firebase_app

    try:
        _firebase_app = firebase_admin.get_app()
        return _firebase_app
    except ValueError:
        pass

    settings = get_settings()
    options = {"projectId": settings.firebase_project_id}
    if settings.firebase_database_url:
        options["databaseURL"] = settings.firebase_database_url

    cred = None
    if settings.has_service_account:
        cred = credentials.Certificate(
            {
                "type": "service_account",
                "project_id": settings.firebase_project_id,
                "client_email": settings.firebase_client_email,
                "private_key": settings.firebase_private_key_pem,
                "token_uri": GOOGLE_TOKEN_URI,
            }
        )
    _firebase_app = firebase_admin.initialize_app(cred, options)
    logger.info("Initialized Firebase app for project %s", settings.firebase_project_id)
    return _firebase_app


def get_document_store() -> DocumentStore:
    """
    Return a singleton document store; in-memory when no Firebase project is set.
    """
    global _document_store
    if _document_store:
        return _document_store

    if _use_in_memory(get_settings()):
        logger.warning("No Firebase project configured, using in-memory store")
        _document_store = InMemoryDocumentStore()
    else:
        _document_store = FirestoreDocumentStore(firestore.client(get_firebase_app()))
    return _document_store


def get_identity_provider() -> IdentityProvider:
    global _identity_provider
    if _identity_provider:
        return _identity_provider

    if _use_in_memory(get_settings()):
        _identity_provider = InMemoryIdentityProvider()
    else:
        _identity_provider = FirebaseIdentityProvider(get_firebase_app())
    return _identity_provider


def get_dashboard_aggregator(
    store: DocumentStore = Depends(get_document_store),
) -> DashboardAggregator:
    return DashboardAggregator(store)


def get_user_eraser(
    store: DocumentStore = Depends(get_document_store),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> UserEraser:
    return UserEraser(store, identity)


def get_scan_recorder(
    store: DocumentStore = Depends(get_document_store),
) -> ScanRecorder:
    return ScanRecorder(store)
