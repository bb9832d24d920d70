"""
Property listing routes.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query

from listings_api.auth import require_identity
from listings_api.db import DbClient
from listings_api.dependencies import (
    get_db_client,
    get_identity_verifier,
    get_owner_resolver,
)
from listings_api.errors import (
    AuthorizationError,
    NotFoundError,
    RequestValidationFailed,
    dependency_failures,
)
from listings_api.identity import Identity, IdentityVerifier
from listings_api.owners import (
    ANONYMOUS_DISPLAY_NAME,
    OwnerResolver,
    attach_owner,
    owner_from_profile,
)
from listings_api.schemas import (
    MessageResponse,
    client_fields,
    missing_required_fields,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_identity)])


def _load_owned_property(db: DbClient, property_id: str, user_id: str, action: str) -> dict:
    record = db.get_property(property_id)
    if record is None:
        raise NotFoundError("Property not found")
    if record.get("userId") != user_id:
        raise AuthorizationError(
            f"Access denied - You can only {action} your own properties"
        )
    return record


def _creator_owner(
    db: DbClient,
    verifier: IdentityVerifier,
    identity: Identity,
    payload: dict,
) -> dict:
    """
    Owner view for a user creating a property, creating their profile from
    the identity provider's record when none exists yet.
    """
    owner_name = payload.get("ownerName")
    owner_phone = payload.get("ownerPhone")
    try:
        profile = db.get_profile(identity.user_id)
        if profile is None:
            user = verifier.get_user(identity.user_id)
            profile = db.create_profile(
                identity.user_id,
                {
                    "uid": user.uid,
                    "email": user.email,
                    "displayName": user.display_name
                    or owner_name
                    or ANONYMOUS_DISPLAY_NAME,
                    "phone": user.phone_number or owner_phone or None,
                    "photoURL": user.photo_url or None,
                    "address": "",
                },
            )
            logger.info("Created profile for user %s", identity.user_id)
        return owner_from_profile(profile)
    except Exception:
        logger.warning(
            "Could not resolve profile for user %s; using request data",
            identity.user_id,
            exc_info=True,
        )
        return {
            "email": identity.email,
            "displayName": owner_name or ANONYMOUS_DISPLAY_NAME,
            "phone": owner_phone or None,
            "photoURL": None,
        }


@router.get("")
@router.get("/", include_in_schema=False)
def list_properties(
    myProperties: Optional[str] = Query(None),
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
    resolver: OwnerResolver = Depends(get_owner_resolver),
):
    """
    All properties (or only the caller's with ``myProperties=true``), newest
    first, each with its owner attached.
    """
    owner_filter = identity.user_id if myProperties == "true" else None
    with dependency_failures("Failed to fetch properties"):
        records = db.list_properties(owner_id=owner_filter)
        return resolver.enrich(records, identity.user_id)


@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
def create_property(
    payload: dict[str, Any] = Body(...),
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
):
    missing = missing_required_fields(payload)
    if missing:
        raise RequestValidationFailed(
            "Missing required fields", missingFields=missing
        )

    owner = _creator_owner(db, verifier, identity, payload)
    with dependency_failures("Failed to create property"):
        record = db.create_property(identity.user_id, client_fields(payload))
    logger.info("User %s created property %s", identity.user_id, record["id"])
    return attach_owner(record, owner, identity.user_id)


@router.get("/user/{user_id}")
def list_user_properties(
    user_id: str,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
    resolver: OwnerResolver = Depends(get_owner_resolver),
):
    with dependency_failures("Failed to fetch user properties"):
        records = db.list_properties(owner_id=user_id)
        if not records:
            return []
        owner = resolver.resolve(user_id)
        return [attach_owner(record, owner, identity.user_id) for record in records]


@router.get("/{property_id}")
def get_property(
    property_id: str,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
    resolver: OwnerResolver = Depends(get_owner_resolver),
):
    with dependency_failures("Failed to fetch property"):
        record = db.get_property(property_id)
        if record is None:
            raise NotFoundError("Property not found")
        owner = resolver.resolve(record.get("userId"))
        return attach_owner(record, owner, identity.user_id)


@router.put("/{property_id}")
def update_property(
    property_id: str,
    payload: dict[str, Any] = Body(...),
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    with dependency_failures("Failed to update property"):
        _load_owned_property(db, property_id, identity.user_id, "update")
        record = db.update_property(property_id, client_fields(payload))
        profile = db.get_profile(identity.user_id) or {}

    owner = {
        "email": profile.get("email") or identity.email,
        "displayName": profile.get("displayName") or ANONYMOUS_DISPLAY_NAME,
        "phone": profile.get("phone") or None,
        "photoURL": profile.get("photoURL") or None,
    }
    return attach_owner(record, owner, identity.user_id)


@router.delete("/{property_id}", response_model=MessageResponse)
def delete_property(
    property_id: str,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    with dependency_failures("Failed to delete property"):
        _load_owned_property(db, property_id, identity.user_id, "delete")
        db.delete_property(property_id)
    logger.info("User %s deleted property %s", identity.user_id, property_id)
    return MessageResponse(message="Property deleted successfully")
