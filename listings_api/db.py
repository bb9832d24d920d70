"""
Document store abstraction for Cloud Firestore and an in-memory test
implementation.

Two collections are used: ``users`` (profiles keyed by user id) and
``properties`` (listings keyed by a generated id). Timestamps are assigned
here, never by callers.
"""

from __future__ import annotations

import copy
import itertools
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

from google.cloud.firestore_v1 import SERVER_TIMESTAMP, Query
from google.cloud.firestore_v1.base_query import FieldFilter

USERS_COLLECTION = "users"
PROPERTIES_COLLECTION = "properties"


class DbClient(Protocol):
    """Interface for the profile and property collections."""

    def get_profile(self, user_id: str) -> Optional[dict]:
        ...

    def create_profile(self, user_id: str, profile: dict) -> dict:
        ...

    def merge_profile(self, user_id: str, fields: dict) -> dict:
        ...

    def list_properties(self, owner_id: Optional[str] = None) -> list[dict]:
        ...

    def get_property(self, property_id: str) -> Optional[dict]:
        ...

    def create_property(self, owner_id: str, data: dict) -> dict:
        ...

    def update_property(self, property_id: str, fields: dict) -> dict:
        ...

    def delete_property(self, property_id: str) -> None:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _with_id(doc_id: str, data: dict) -> dict:
    return {"id": doc_id, **data}


class InMemoryDbClient:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.users: Dict[str, dict] = {}
        self.properties: Dict[str, dict] = {}
        self._insert_order: Dict[str, int] = {}
        self._counter = itertools.count()

    def get_profile(self, user_id: str) -> Optional[dict]:
        profile = self.users.get(user_id)
        return copy.deepcopy(profile) if profile is not None else None

    def create_profile(self, user_id: str, profile: dict) -> dict:
        now = _utcnow()
        stored = {**profile, "createdAt": now, "updatedAt": now}
        self.users[user_id] = stored
        return copy.deepcopy(stored)

    def merge_profile(self, user_id: str, fields: dict) -> dict:
        payload = {**fields, "updatedAt": _utcnow()}
        self.users.setdefault(user_id, {}).update(copy.deepcopy(payload))
        return payload

    def list_properties(self, owner_id: Optional[str] = None) -> list[dict]:
        matches = [
            (property_id, data)
            for property_id, data in self.properties.items()
            if owner_id is None or data.get("userId") == owner_id
        ]
        matches.sort(
            key=lambda item: (item[1].get("createdAt"), self._insert_order[item[0]]),
            reverse=True,
        )
        return [_with_id(pid, copy.deepcopy(data)) for pid, data in matches]

    def get_property(self, property_id: str) -> Optional[dict]:
        data = self.properties.get(property_id)
        if data is None:
            return None
        return _with_id(property_id, copy.deepcopy(data))

    def create_property(self, owner_id: str, data: dict) -> dict:
        property_id = uuid.uuid4().hex
        now = _utcnow()
        self.properties[property_id] = {
            **copy.deepcopy(data),
            "userId": owner_id,
            "createdAt": now,
            "updatedAt": now,
        }
        self._insert_order[property_id] = next(self._counter)
        return self.get_property(property_id)

    def update_property(self, property_id: str, fields: dict) -> dict:
        stored = self.properties.get(property_id)
        if stored is None:
            raise KeyError(property_id)
        stored.update(copy.deepcopy(fields))
        stored["updatedAt"] = _utcnow()
        return self.get_property(property_id)

    def delete_property(self, property_id: str) -> None:
        self.properties.pop(property_id, None)
        self._insert_order.pop(property_id, None)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.users.clear()
        self.properties.clear()
        self._insert_order.clear()


class FirestoreDbClient:
    """
    Cloud Firestore implementation. Writes use server timestamps and are read
    back so callers always see concrete values.
    """

    def __init__(self, client: Any):
        self.client = client
        self.users = client.collection(USERS_COLLECTION)
        self.properties = client.collection(PROPERTIES_COLLECTION)

    def get_profile(self, user_id: str) -> Optional[dict]:
        snapshot = self.users.document(user_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def create_profile(self, user_id: str, profile: dict) -> dict:
        doc_ref = self.users.document(user_id)
        doc_ref.set(
            {**profile, "createdAt": SERVER_TIMESTAMP, "updatedAt": SERVER_TIMESTAMP}
        )
        return doc_ref.get().to_dict()

    def merge_profile(self, user_id: str, fields: dict) -> dict:
        doc_ref = self.users.document(user_id)
        doc_ref.set({**fields, "updatedAt": SERVER_TIMESTAMP}, merge=True)
        stored = doc_ref.get().to_dict() or {}
        written = dict(fields)
        written["updatedAt"] = stored.get("updatedAt")
        return written

    def list_properties(self, owner_id: Optional[str] = None) -> list[dict]:
        query = self.properties
        if owner_id is not None:
            query = query.where(filter=FieldFilter("userId", "==", owner_id))
        query = query.order_by("createdAt", direction=Query.DESCENDING)
        return [_with_id(snapshot.id, snapshot.to_dict()) for snapshot in query.stream()]

    def get_property(self, property_id: str) -> Optional[dict]:
        snapshot = self.properties.document(property_id).get()
        if not snapshot.exists:
            return None
        return _with_id(snapshot.id, snapshot.to_dict())

    def create_property(self, owner_id: str, data: dict) -> dict:
        payload = {
            **data,
            "userId": owner_id,
            "createdAt": SERVER_TIMESTAMP,
            "updatedAt": SERVER_TIMESTAMP,
        }
        _, doc_ref = self.properties.add(payload)
        snapshot = doc_ref.get()
        return _with_id(snapshot.id, snapshot.to_dict())

    def update_property(self, property_id: str, fields: dict) -> dict:
        doc_ref = self.properties.document(property_id)
        doc_ref.update({**fields, "updatedAt": SERVER_TIMESTAMP})
        snapshot = doc_ref.get()
        return _with_id(snapshot.id, snapshot.to_dict())

    def delete_property(self, property_id: str) -> None:
        self.properties.document(property_id).delete()
