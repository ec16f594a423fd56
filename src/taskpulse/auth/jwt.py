"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
The access token is valid for 24 hours and there is no refresh or
revocation — expiry is the only way a token stops working.

The token embeds the full identity (id, email, role, workspaceName,
jobTitle) so the access guard never has to hit the users table.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from taskpulse.config import settings

IDENTITY_CLAIMS = ("sub", "email", "role", "workspaceName", "jobTitle")
# jobTitle is free text and may legitimately be empty.
REQUIRED_VALUES = ("sub", "email", "role", "workspaceName")


class TokenError(Exception):
    """Raised when token creation/verification fails."""


def create_access_token(
    user_id: str,
    email: str,
    role: str,
    workspace_name: str,
    job_title: str,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a signed access token binding the caller's identity."""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(
        minutes=expires_minutes or settings.access_token_expire_minutes
    )
    payload = {
        "sub": user_id,
        "email": email,
        "role": role,
        "workspaceName": workspace_name,
        "jobTitle": job_title,
        "type": "access",
        "exp": expires,
        "iat": now,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict:
    """Verify and decode a JWT token.

    Returns the payload dict on success.
    Raises TokenError on failure, including tokens that verify but lack
    one of the identity claims.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    missing = [
        claim
        for claim in IDENTITY_CLAIMS
        if claim not in payload or (claim in REQUIRED_VALUES and not payload[claim])
    ]
    if missing:
        raise TokenError(f"Invalid token: missing {', '.join(missing)}")
    return payload
