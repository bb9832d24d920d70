"""
Pydantic schemas for the listings API.

Property documents carry arbitrary client fields, so property routes work on
plain dicts; the models here cover the fixed-shape payloads.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

REQUIRED_PROPERTY_FIELDS = ("name", "type", "location", "price")

# Assigned by the server; never accepted from a request body.
SERVER_MANAGED_FIELDS = frozenset(
    {"id", "userId", "createdAt", "updatedAt", "owner", "isOwnProperty"}
)


def client_fields(payload: dict) -> dict:
    """Drop server-managed keys from a property request body."""
    return {key: value for key, value in payload.items() if key not in SERVER_MANAGED_FIELDS}


def missing_required_fields(payload: dict) -> list[str]:
    return [name for name in REQUIRED_PROPERTY_FIELDS if not payload.get(name)]


class ProfileUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    displayName: Optional[str] = None
    address: Optional[str] = None
    photoURL: Optional[str] = None


class ProfileUpdateResponse(BaseModel):
    message: str
    profile: dict[str, Any]


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    message: str
