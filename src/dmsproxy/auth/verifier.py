"""
This module verifies the bearer credentials required for mutating actions.

The dashboard signs users in with Firebase Authentication and attaches the
user's Firebase ID token as `Authorization: Bearer <token>` on every request.
The proxy only checks the token for `insert`, `update` and `delete`; reads are
open. Verification is pluggable through the `TokenVerifier` protocol so the
server can run against Firebase in production and a fixed token table in local
development and tests.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin.exceptions import FirebaseError

from ..config import AuthConfig
from ..errors import AuthInvalidError, AuthRequiredError

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "dmsproxy"


@dataclass
class CallerIdentity:
    """
    The verified identity behind a bearer token.

    Attributes:
        uid: The user's unique ID.
        email: The user's email address, if the token carries one.
        claims: All decoded token claims, including custom claims such as `role`.
    """

    uid: str
    email: str | None = None
    claims: dict[str, Any] = field(default_factory=dict)

    @property
    def role(self) -> str | None:
        return self.claims.get("role")


class TokenVerifier(Protocol):
    """Anything that can turn an opaque bearer token into a caller identity."""

    async def verify(self, token: str) -> CallerIdentity:
        """Raises `AuthInvalidError` if the token is not valid."""
        ...


def extract_bearer_token(header: str | None) -> str:
    """
    Pulls the token out of an `Authorization` header value.

    Raises:
        AuthRequiredError: If the header is missing or not a `Bearer` credential.
    """
    if not header or not header.startswith("Bearer "):
        raise AuthRequiredError()
    token = header[len("Bearer ") :].strip()
    if not token:
        raise AuthRequiredError()
    return token


def get_firebase_app(config: AuthConfig) -> firebase_admin.App:
    """
    Returns the proxy's Firebase Admin app, initializing it on first use.

    A service account file is used when `config.credentials_path` is set;
    otherwise Application Default Credentials apply (as on Cloud Run).
    """
    try:
        return firebase_admin.get_app(FIREBASE_APP_NAME)
    except ValueError:
        pass

    credential = credentials.Certificate(config.credentials_path) if config.credentials_path else credentials.ApplicationDefault()
    options = {"projectId": config.project_id} if config.project_id else None
    return firebase_admin.initialize_app(credential, options, name=FIREBASE_APP_NAME)


class FirebaseTokenVerifier:
    """Verifies Firebase ID tokens with the Firebase Admin SDK."""

    def __init__(self, config: AuthConfig) -> None:
        self.config = config
        self._app: firebase_admin.App | None = None

    def initialize(self) -> None:
        """
        Initializes the Admin SDK. Failures are logged rather than raised so the
        server still serves reads; every token check then fails.
        """
        try:
            self._app = get_firebase_app(self.config)
            logger.info("Firebase Admin initialized for token verification")
        except (ValueError, OSError, FirebaseError) as e:
            logger.warning(f"Firebase Admin init warning: {e}")

    async def verify(self, token: str) -> CallerIdentity:
        if self._app is None:
            raise AuthInvalidError()
        try:
            decoded = await asyncio.to_thread(firebase_auth.verify_id_token, token, app=self._app, check_revoked=self.config.check_revoked)
        except (ValueError, FirebaseError) as e:
            logger.info(f"Rejected bearer token: {e}")
            raise AuthInvalidError() from e
        return CallerIdentity(uid=decoded["uid"], email=decoded.get("email"), claims=decoded)


class StaticTokenVerifier:
    """Accepts a fixed set of tokens, each mapped to a uid."""

    def __init__(self, tokens: dict[str, str]) -> None:
        self.tokens = dict(tokens)

    async def verify(self, token: str) -> CallerIdentity:
        uid = self.tokens.get(token)
        if uid is None:
            raise AuthInvalidError()
        return CallerIdentity(uid=uid, claims={"uid": uid})


class RejectAllVerifier:
    """Rejects every token; mutating actions are disabled."""

    async def verify(self, token: str) -> CallerIdentity:  # noqa: ARG002
        raise AuthInvalidError()


def create_verifier(config: AuthConfig) -> TokenVerifier:
    """Builds the verifier selected by `config.provider`."""
    if config.provider == "firebase":
        verifier = FirebaseTokenVerifier(config)
        verifier.initialize()
        return verifier
    if config.provider == "static":
        return StaticTokenVerifier(config.static_tokens)
    if config.provider == "none":
        return RejectAllVerifier()
    raise ValueError(f"Unknown auth provider: {config.provider}")
