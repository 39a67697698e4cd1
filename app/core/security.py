# Implements the identity boundary:
# Firebase Admin SDK initialization
# Verification of Firebase ID tokens sent as bearer tokens
# A development-only shortcut token ("dev:<uid>") for local testing
# The rest of the app only sees the resulting Identity (or None)

import logging
import os
from dataclasses import dataclass
from typing import Optional

import firebase_admin
from firebase_admin import auth, credentials

from app.core.config import settings

logger = logging.getLogger("app")

DEV_TOKEN_PREFIX = "dev:"

# Firebase initialization state
_firebase_initialized = False


@dataclass(frozen=True)
class Identity:
    """Caller identity as asserted by the identity provider"""
    uid: str
    name: Optional[str] = None
    email: Optional[str] = None
    picture: Optional[str] = None


def initialize_firebase() -> bool:
    """Initialize the Firebase Admin app once; returns False when it cannot be initialized"""
    global _firebase_initialized

    if _firebase_initialized or firebase_admin._apps:
        _firebase_initialized = True
        return True

    options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
    try:
        service_account_path = settings.FIREBASE_SERVICE_ACCOUNT_PATH
        if os.path.exists(service_account_path):
            cred = credentials.Certificate(service_account_path)
            firebase_admin.initialize_app(cred, options)
            logger.info(f"Firebase initialized with service account from {service_account_path}")
        else:
            firebase_admin.initialize_app(options=options)
            logger.warning("Firebase initialized without explicit credentials")

        _firebase_initialized = True
        return True
    except Exception as e:
        logger.error(f"Failed to initialize Firebase: {e}")
        return False


def _identity_from_dev_token(token: str) -> Optional[Identity]:
    uid = token[len(DEV_TOKEN_PREFIX):].strip()
    if not uid:
        return None
    logger.warning(f"DEVELOPMENT MODE: accepting unverified identity {uid}")
    return Identity(uid=uid, name=uid)


def verify_id_token(token: str) -> Optional[Identity]:
    """Verifies a Firebase ID token and returns the caller identity, or None when it is not valid"""
    if not token:
        return None

    if settings.ENVIRONMENT == "development" and token.startswith(DEV_TOKEN_PREFIX):
        return _identity_from_dev_token(token)

    if not initialize_firebase():
        logger.error("Cannot verify token: Firebase not initialized")
        return None

    try:
        decoded_token = auth.verify_id_token(token)
    except (ValueError, auth.InvalidIdTokenError, auth.ExpiredIdTokenError,
            auth.RevokedIdTokenError, auth.CertificateFetchError) as e:
        logger.warning(f"Firebase token verification failed: {type(e).__name__}: {e}")
        return None

    uid = decoded_token.get("uid") or decoded_token.get("sub")
    if not uid:
        logger.warning("Firebase token payload missing 'uid'")
        return None

    return Identity(
        uid=uid,
        name=decoded_token.get("name"),
        email=decoded_token.get("email"),
        picture=decoded_token.get("picture"),
    )


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header value"""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
