"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current identity from the request.

The identity is exactly what was embedded in the token at login time.
Nothing is re-fetched from the database, so a profile edit made after
login only shows up in the identity after the next login.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Header

from taskpulse.auth.jwt import TokenError, verify_token
from taskpulse.db.models import ROLE_ADMIN
from taskpulse.errors import InvalidTokenError, UnauthorizedError


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated caller, passed explicitly into every service call.

    Learn: workspace_name is the tenant key. Services filter every query
    by it, so a token from one workspace can never read or touch rows
    belonging to another.
    """

    id: uuid.UUID
    email: str
    role: str
    workspace_name: str
    job_title: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Pull the token out of an 'Authorization: Bearer <token>' header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def identity_from_token(token: str) -> CurrentIdentity:
    """Verify a token and build the identity it asserts."""
    try:
        payload = verify_token(token)
        return CurrentIdentity(
            id=uuid.UUID(payload["sub"]),
            email=payload["email"],
            role=payload["role"],
            workspace_name=payload["workspaceName"],
            job_title=payload["jobTitle"],
        )
    except (TokenError, ValueError):
        raise InvalidTokenError()


async def get_current_user(
    authorization: Optional[str] = Header(None),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if absent or invalid)."""
    token = bearer_token(authorization)
    if token is None:
        raise UnauthorizedError()
    return identity_from_token(token)
