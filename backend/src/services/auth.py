"""Owner resolution: verified Firebase uid when available, else the x-owner header."""

from __future__ import annotations

import abc
import logging
from typing import Any, Dict, List, Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from fastapi import status

from ..models.auth import ANONYMOUS_OWNER, OwnerIdentity, OwnerSource
from .config import AppConfig, get_config

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "notely"


class AuthError(Exception):
    """Domain-specific authentication error."""

    def __init__(
        self,
        error: str,
        message: str,
        *,
        status_code: int = status.HTTP_401_UNAUTHORIZED,
        detail: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.error = error
        self.message = message
        self.status_code = status_code
        self.detail = detail or {}


def normalize_owner(value: Optional[str]) -> str:
    """Trim a raw header value; blank or missing becomes the anonymous owner."""
    cleaned = (value or "").strip()
    return cleaned or ANONYMOUS_OWNER


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class TokenValidator(abc.ABC):
    """Strategy that maps a bearer token to an owner."""

    @abc.abstractmethod
    def validate(self, token: str) -> Optional[OwnerIdentity]:
        """
        Return the owner for a recognized token, or None to let the next
        strategy try. Raise AuthError if the token is recognized but invalid.
        """


class FirebaseTokenValidator(TokenValidator):
    """Verify Firebase ID tokens issued to the web client."""

    def __init__(self, app: Any) -> None:
        self.app = app

    def validate(self, token: str) -> Optional[OwnerIdentity]:
        try:
            decoded = firebase_auth.verify_id_token(token, app=self.app)
        except firebase_auth.ExpiredIdTokenError as exc:
            raise AuthError("token_expired", "Token expired") from exc
        except (firebase_auth.InvalidIdTokenError, ValueError) as exc:
            raise AuthError("invalid_token", f"Invalid token: {exc}") from exc
        uid = decoded.get("uid") or decoded.get("sub")
        if not uid:
            raise AuthError("invalid_token", "Token carries no uid")
        return OwnerIdentity(owner=uid, source=OwnerSource.FIREBASE)


class HeaderOwnerResolver:
    """Last link of the chain: trust the client-supplied ``x-owner`` value."""

    def resolve(self, value: Optional[str]) -> OwnerIdentity:
        return OwnerIdentity(owner=normalize_owner(value), source=OwnerSource.HEADER)


def init_firebase_app(config: AppConfig) -> Optional[Any]:
    """Initialise (once) the Firebase Admin app from the configured service account."""
    if not config.firebase_enabled:
        return None
    try:
        return firebase_admin.get_app(FIREBASE_APP_NAME)
    except ValueError:
        cred = credentials.Certificate(config.firebase_service_account)
        app = firebase_admin.initialize_app(cred, name=FIREBASE_APP_NAME)
        logger.info(
            "Firebase Admin initialised",
            extra={"project_id": config.firebase_service_account.get("project_id")},
        )
        return app


class AuthService:
    """Resolve the owner of a request using configured strategies."""

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        validators: Optional[List[TokenValidator]] = None,
        header_resolver: Optional[HeaderOwnerResolver] = None,
    ) -> None:
        self.config = config or get_config()
        self.header_resolver = header_resolver or HeaderOwnerResolver()
        if validators is not None:
            self.validators = validators
        else:
            self.validators = []
            firebase_app = init_firebase_app(self.config)
            if firebase_app is not None:
                self.validators.append(FirebaseTokenValidator(firebase_app))

    def resolve_owner(
        self, x_owner: Optional[str], authorization: Optional[str] = None
    ) -> OwnerIdentity:
        """
        Verified token wins; otherwise the bare header value is trusted.

        Without any validator configured a bearer token is ignored.
        """
        token = extract_bearer_token(authorization)
        if token and self.validators:
            for validator in self.validators:
                identity = validator.validate(token)
                if identity:
                    return identity
            raise AuthError("invalid_token", "Invalid authentication credentials")

        return self.header_resolver.resolve(x_owner)


__all__ = [
    "AuthService",
    "AuthError",
    "TokenValidator",
    "FirebaseTokenValidator",
    "HeaderOwnerResolver",
    "init_firebase_app",
    "normalize_owner",
    "extract_bearer_token",
]
