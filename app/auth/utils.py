"""Access token handling.

Tokens are issued by the hosted auth provider; this service only verifies them.
"""
from typing import Optional
from jose import JWTError, jwt
from app.config import settings

# JWT settings
ALGORITHM = "HS256"


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and validate an access token.

    Returns the payload if valid, None otherwise.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
        return payload
    except JWTError:
        return None
