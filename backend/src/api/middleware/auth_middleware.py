"""Owner dependency helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Header, HTTPException

from ...models.auth import OwnerSource
from ...services.auth import AuthError, AuthService


@lru_cache(maxsize=1)
def get_auth_service() -> AuthService:
    """Shared resolver; Firebase Admin is initialised on first use."""
    return AuthService()


@dataclass
class OwnerContext:
    """Owner every document query of this request is scoped to."""

    owner: str
    source: OwnerSource


def get_owner_context(
    x_owner: Annotated[Optional[str], Header(alias="x-owner")] = None,
    authorization: Annotated[Optional[str], Header(alias="Authorization")] = None,
) -> OwnerContext:
    """
    Resolve the request owner.

    Raises HTTPException(401) when a bearer token is present but rejected.
    """
    try:
        identity = get_auth_service().resolve_owner(x_owner, authorization)
    except AuthError as exc:
        raise HTTPException(
            status_code=exc.status_code,
            detail={"error": exc.error, "message": exc.message, "detail": exc.detail},
        ) from exc

    return OwnerContext(owner=identity.owner, source=identity.source)


__all__ = ["OwnerContext", "get_owner_context", "get_auth_service"]
