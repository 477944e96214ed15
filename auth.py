from typing import Optional

from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from config import Settings
from errors import Unauthorized

# Bearer tokens are optional: without one the body's ownerID is trusted.
auth_scheme = HTTPBearer(auto_error=False)


def resolve_owner_id(
    body_owner_id: Optional[str],
    credentials: Optional[HTTPAuthorizationCredentials],
    settings: Settings,
) -> Optional[str]:
    """Return the caller's identity reference.

    A verified token subject wins over the ownerID sent in the body.
    """
    if credentials is None:
        return body_owner_id
    try:
        payload = jwt.decode(credentials.credentials, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise Unauthorized("Token decode error")
    user_id = payload.get("sub")
    if user_id is None:
        raise Unauthorized("Invalid token")
    return user_id
