import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from fastapi import Header, HTTPException, status
from jose import JWTError, jwt

from pulsehustle.config import get_settings
from pulsehustle.errors import AuthenticationError

ALGORITHM = "HS256"
API_KEY_HEADER = "x-api-key"


def _pw_bytes(password: str) -> bytes:
    # Fixed-length prehash keeps long passwords under bcrypt's 72-byte limit
    return hashlib.sha256(password.encode("utf-8")).hexdigest().encode("utf-8")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_pw_bytes(password), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_pw_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user_id: str, secret_key: str, expire_days: int = 30) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=expire_days)
    to_encode = {"sub": user_id, "jti": secrets.token_hex(16), "exp": expire}
    return jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, secret_key: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except JWTError:
        raise AuthenticationError("Invalid or expired token")
    if not payload.get("sub"):
        raise AuthenticationError("Invalid or expired token")
    return payload


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def require_api_key(x_api_key: Optional[str] = Header(None)) -> None:
    """Protected routes must present the shared service key."""
    expected = get_settings().service_api_key
    if not x_api_key or not secrets.compare_digest(x_api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
