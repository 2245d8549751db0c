"""Bearer credential verification for mutating actions."""

from .admin import set_admin_claim
from .verifier import (
    CallerIdentity,
    FirebaseTokenVerifier,
    RejectAllVerifier,
    StaticTokenVerifier,
    TokenVerifier,
    create_verifier,
    extract_bearer_token,
)

__all__ = [
    "CallerIdentity",
    "FirebaseTokenVerifier",
    "RejectAllVerifier",
    "StaticTokenVerifier",
    "TokenVerifier",
    "create_verifier",
    "extract_bearer_token",
    "set_admin_claim",
]
