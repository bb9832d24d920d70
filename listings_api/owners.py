"""
Owner enrichment for property records.

An owner is resolved by walking an ordered list of lookup strategies (the
profile collection first, then the identity provider) and taking the first
one that produces a result. When every strategy comes up empty the owner is
reported as "Unknown User".
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional, Sequence

from listings_api.db import DbClient
from listings_api.identity import IdentityUser, IdentityVerifier

logger = logging.getLogger(__name__)

ANONYMOUS_DISPLAY_NAME = "Anonymous User"

OwnerStrategy = Callable[[str], Optional[dict]]


def unknown_owner() -> dict:
    return {
        "email": "Unknown",
        "displayName": "Unknown User",
        "phone": None,
        "photoURL": None,
    }


def owner_from_profile(profile: dict) -> dict:
    return {
        "email": profile.get("email") or "Unknown",
        "displayName": profile.get("displayName") or ANONYMOUS_DISPLAY_NAME,
        "phone": profile.get("phone") or None,
        "photoURL": profile.get("photoURL") or None,
    }


def owner_from_identity(user: IdentityUser) -> dict:
    return {
        "email": user.email,
        "displayName": user.display_name or ANONYMOUS_DISPLAY_NAME,
        "phone": user.phone_number or None,
        "photoURL": user.photo_url or None,
    }


def attach_owner(record: dict, owner: dict, requester_id: str) -> dict:
    """Return a copy of ``record`` with its ``owner`` view and ownership flag."""
    owner_id = record.get("userId")
    return {
        **record,
        "owner": {"uid": owner_id, **owner},
        "isOwnProperty": owner_id == requester_id,
    }


class ProfileStoreLookup:
    name = "profile store"

    def __init__(self, db: DbClient):
        self.db = db

    def __call__(self, user_id: str) -> Optional[dict]:
        profile = self.db.get_profile(user_id)
        if profile is None:
            return None
        return owner_from_profile(profile)


class IdentityProviderLookup:
    name = "identity provider"

    def __init__(self, identity: IdentityVerifier):
        self.identity = identity

    def __call__(self, user_id: str) -> Optional[dict]:
        return owner_from_identity(self.identity.get_user(user_id))


class OwnerResolver:
    """Resolves owner views for one or many user ids."""

    def __init__(self, strategies: Sequence[OwnerStrategy], max_workers: int = 8):
        self.strategies = list(strategies)
        self.max_workers = max_workers

    @classmethod
    def default(
        cls, db: DbClient, identity: IdentityVerifier, max_workers: int = 8
    ) -> "OwnerResolver":
        return cls(
            [ProfileStoreLookup(db), IdentityProviderLookup(identity)],
            max_workers=max_workers,
        )

    def resolve(self, user_id: Optional[str]) -> dict:
        if not user_id:
            return unknown_owner()
        for strategy in self.strategies:
            name = getattr(strategy, "name", repr(strategy))
            try:
                owner = strategy(user_id)
            except Exception:
                logger.warning(
                    "Owner lookup via %s failed for user %s", name, user_id, exc_info=True
                )
                continue
            if owner is not None:
                return owner
        logger.warning("Falling back to unknown owner for user %s", user_id)
        return unknown_owner()

    def resolve_many(self, user_ids: Iterable[Optional[str]]) -> dict:
        distinct = list(dict.fromkeys(user_ids))
        if len(distinct) <= 1:
            return {user_id: self.resolve(user_id) for user_id in distinct}
        workers = min(self.max_workers, len(distinct))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            owners = list(executor.map(self.resolve, distinct))
        return dict(zip(distinct, owners))

    def enrich(self, records: Sequence[dict], requester_id: str) -> list[dict]:
        if not records:
            return []
        owners = self.resolve_many(record.get("userId") for record in records)
        return [
            attach_owner(record, owners[record.get("userId")], requester_id)
            for record in records
        ]
