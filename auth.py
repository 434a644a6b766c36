"""
Bearer-token gate for the admin routes.

The token is a shared secret taken from ADMIN_TOKEN; logging in with the
admin credentials stored in the settings document hands it out.
"""
import hmac
import logging
import os
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from site_settings import SettingsService, verify_password

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def admin_token() -> Optional[str]:
    return os.getenv("ADMIN_TOKEN")


def require_admin(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> None:
    expected = admin_token()
    if not expected:
        raise HTTPException(status_code=503, detail="Admin access not configured")
    if credentials is None or not hmac.compare_digest(credentials.credentials, expected):
        raise HTTPException(status_code=401, detail="Not authorized")


def login(settings: SettingsService, email: str, password: str) -> str:
    admin_email, password_hash = settings.admin_credentials()
    email_ok = email.strip().lower() == admin_email.lower()
    password_ok = verify_password(password, password_hash)
    token = admin_token()
    if not (email_ok and password_ok) or not token:
        logger.warning(f"Failed admin login for {email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")
    logger.info(f"Admin {admin_email} logged in")
    return token
