"""
User profile routes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from listings_api.auth import require_identity
from listings_api.db import DbClient
from listings_api.dependencies import get_db_client, get_identity_verifier
from listings_api.errors import dependency_failures
from listings_api.identity import Identity, IdentityVerifier
from listings_api.owners import ANONYMOUS_DISPLAY_NAME
from listings_api.schemas import ProfileUpdateRequest, ProfileUpdateResponse

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_identity)])


@router.get("/profile")
def get_profile(
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
):
    """
    Return the caller's profile, creating it from the identity provider's
    record on first access.
    """
    with dependency_failures("Failed to fetch user profile"):
        profile = db.get_profile(identity.user_id)
        if profile is not None:
            return {"id": identity.user_id, **profile}

        user = verifier.get_user(identity.user_id)
        profile = db.create_profile(
            identity.user_id,
            {
                "uid": user.uid,
                "email": user.email,
                "displayName": user.display_name or ANONYMOUS_DISPLAY_NAME,
                "photoURL": user.photo_url or None,
                "address": "",
            },
        )
        logger.info("Created profile for user %s", identity.user_id)
        return profile


@router.put("/profile", response_model=ProfileUpdateResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
):
    """
    Merge the supplied fields into the caller's profile. ``displayName`` and
    ``photoURL`` are mirrored onto the identity provider's user record.
    """
    fields = {"email": identity.email}
    for name in ("displayName", "address", "photoURL"):
        value = getattr(payload, name)
        if value:
            fields[name] = value

    with dependency_failures("Failed to update profile"):
        if payload.displayName or payload.photoURL:
            verifier.update_user(
                identity.user_id,
                display_name=payload.displayName or None,
                photo_url=payload.photoURL or None,
            )
        written = db.merge_profile(identity.user_id, fields)

    return ProfileUpdateResponse(message="Profile updated successfully", profile=written)
