"""Administrative helpers for Firebase users."""

from firebase_admin import auth as firebase_auth

from ..config import AuthConfig
from .verifier import get_firebase_app

ADMIN_CLAIMS = {"role": "admin"}


def set_admin_claim(uid: str, config: AuthConfig) -> None:
    """
    Grants the admin role to a Firebase user through a custom claim.

    The claim appears in the user's ID token after their next sign-in or token
    refresh.

    Raises:
        ValueError: If the uid is empty or malformed.
        firebase_admin.exceptions.FirebaseError: If the Firebase call fails.
    """
    app = get_firebase_app(config)
    firebase_auth.set_custom_user_claims(uid, ADMIN_CLAIMS, app=app)
