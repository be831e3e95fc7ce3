"""
Firebase Authentication Middleware

Verifies Firebase ID tokens sent as `Authorization: Bearer <token>`.
Accounts, passwords and token issuance live in Firebase Auth; this
service only checks tokens and mirrors uid/email into its users table.
"""

import json
import os
from typing import Optional

import firebase_admin
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth, credentials

from ..config import get_settings
from .logging import get_logger

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)

_firebase_initialized = False


def _load_credentials() -> Optional[credentials.Base]:
    """
    Resolve service account credentials.

    Priority:
    1. Local file path (FIREBASE_CREDENTIALS_PATH)
    2. JSON from environment variable (GOOGLE_APPLICATION_CREDENTIALS_JSON)
    3. None -> application default credentials
    """
    cred_path = get_settings().firebase_credentials_path
    if cred_path and os.path.exists(cred_path):
        logger.info("firebase_credentials_file", path=cred_path)
        return credentials.Certificate(cred_path)

    creds_json = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS_JSON")
    if creds_json:
        try:
            return credentials.Certificate(json.loads(creds_json))
        except ValueError as e:
            logger.warning("firebase_credentials_env_invalid", error=str(e))

    return None


def initialize_firebase():
    """Initialize the Firebase Admin SDK once per process."""
    global _firebase_initialized

    if _firebase_initialized:
        return

    try:
        cred = _load_credentials()
        if cred is not None:
            firebase_admin.initialize_app(cred)
        else:
            logger.info("firebase_default_credentials")
            firebase_admin.initialize_app()
    except Exception as e:
        # Protected endpoints will answer 401 until credentials are fixed
        logger.warning("firebase_init_failed", error=str(e))

    _firebase_initialized = True


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> dict:
    """
    Verify Firebase ID token and return user info.

    Returns:
        dict with keys: uid, email (optional)

    Raises:
        HTTPException 401 if token is missing or invalid
    """
    if credentials is None:
        raise _unauthorized("Missing authentication token")

    initialize_firebase()

    try:
        decoded_token = auth.verify_id_token(credentials.credentials)
    except auth.ExpiredIdTokenError:
        raise _unauthorized("Token has expired")
    except auth.InvalidIdTokenError:
        raise _unauthorized("Invalid authentication token")
    except Exception as e:
        raise _unauthorized(f"Authentication failed: {str(e)}")

    return {
        "uid": decoded_token["uid"],
        "email": decoded_token.get("email"),
    }


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[dict]:
    """
    Optional authentication - returns None if no token provided.

    Used by release details, which add the caller's watchlist entry when known.
    """
    if credentials is None:
        return None

    try:
        return await get_current_user(credentials)
    except HTTPException:
        return None
