"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from fastapi import Depends

from listings_api.config import get_settings
from listings_api.db import DbClient, FirestoreDbClient, InMemoryDbClient
from listings_api.firebase import firestore_client, initialize_firebase
from listings_api.identity import (
    FirebaseIdentityVerifier,
    IdentityVerifier,
    InMemoryIdentityVerifier,
)
from listings_api.owners import OwnerResolver

_db_client: DbClient | None = None
_identity_verifier: IdentityVerifier | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client shared by every request.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _db_client = InMemoryDbClient()
    else:
        app = initialize_firebase(settings)
        _db_client = FirestoreDbClient(firestore_client(app))
    return _db_client


def get_identity_verifier() -> IdentityVerifier:
    global _identity_verifier
    if _identity_verifier:
        return _identity_verifier

    settings = get_settings()
    if settings.use_in_memory_backends:
        _identity_verifier = InMemoryIdentityVerifier()
    else:
        _identity_verifier = FirebaseIdentityVerifier(initialize_firebase(settings))
    return _identity_verifier


def get_owner_resolver(
    db: DbClient = Depends(get_db_client),
    identity: IdentityVerifier = Depends(get_identity_verifier),
) -> OwnerResolver:
    settings = get_settings()
    return OwnerResolver.default(
        db, identity, max_workers=settings.owner_lookup_workers
    )
