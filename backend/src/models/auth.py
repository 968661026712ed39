"""Ownership models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

ANONYMOUS_OWNER = "anon"


class OwnerSource(str, Enum):
    FIREBASE = "firebase"
    HEADER = "header"


class OwnerIdentity(BaseModel):
    """Resolved document owner."""

    owner: str = Field(..., min_length=1, description="Owner id used as the document filter")
    source: OwnerSource = Field(OwnerSource.HEADER, description="Where the owner id came from")


__all__ = ["ANONYMOUS_OWNER", "OwnerSource", "OwnerIdentity"]
