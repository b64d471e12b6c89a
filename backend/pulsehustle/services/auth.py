"""
Auth Service - email/password accounts and access tokens

Sessions are stateless JWTs (``sub`` = user id, ``jti`` = token id).
Signing out revokes the token id for the lifetime of the process.

Listeners registered with ``on_auth_state_change`` receive
``(event, session)`` for SIGNED_UP, SIGNED_IN and SIGNED_OUT; session is
None for SIGNED_OUT.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from pulsehustle.auth import check_password, create_access_token, decode_access_token, hash_password
from pulsehustle.database import utcnow
from pulsehustle.errors import AuthenticationError, InvalidStateError, UpstreamError, ValidationError
from pulsehustle.models import Profile, User

logger = logging.getLogger(__name__)

SIGNED_UP = "SIGNED_UP"
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

MIN_PASSWORD_LENGTH = 6


@dataclass
class AuthSession:
    user: User
    access_token: str
    token_type: str = "bearer"


class AuthListener:
    def __init__(self, service: "AuthService", callback: Callable[[str, Optional[AuthSession]], Any]):
        self.service = service
        self.callback = callback

    def unsubscribe(self) -> None:
        if self in self.service._listeners:
            self.service._listeners.remove(self)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class AuthService:
    def __init__(self, gateway, operations, secret_key: str, token_expire_days: int = 30):
        self.gateway = gateway
        self.operations = operations
        self.secret_key = secret_key
        self.token_expire_days = token_expire_days
        self._revoked: Set[str] = set()
        self._listeners: List[AuthListener] = []

    def _session(self, user: User) -> AuthSession:
        token = create_access_token(user.id, self.secret_key, self.token_expire_days)
        return AuthSession(user=user, access_token=token)

    async def _notify(self, event: str, session: Optional[AuthSession]) -> None:
        for listener in list(self._listeners):
            try:
                result = listener.callback(event, session)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Auth state listener failed on {event}")

    def on_auth_state_change(self, callback: Callable[[str, Optional[AuthSession]], Any]) -> AuthListener:
        listener = AuthListener(self, callback)
        self._listeners.append(listener)
        return listener

    async def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> AuthSession:
        email = normalize_email(email)
        if not email or "@" not in email:
            raise ValidationError("A valid email is required")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        metadata = metadata or {}
        existing = await self.gateway.first(select(User).where(User.email == email))
        if existing:
            raise InvalidStateError("User already registered")

        try:
            async with self.gateway.transaction() as uow:
                user = await uow.insert(
                    User,
                    email=email,
                    password_hash=hash_password(password),
                    user_metadata=metadata,
                )
                await uow.insert(
                    Profile,
                    id=user.id,
                    username=metadata.get("username"),
                    full_name=metadata.get("full_name"),
                )
        except UpstreamError as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise InvalidStateError("User already registered") from exc
            raise

        logger.info(f"User {user.id} signed up")
        await self.operations.log("sign_up", "users", {"email": email}, user_id=user.id)

        session = self._session(user)
        await self._notify(SIGNED_UP, session)
        return session

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = await self.gateway.first(select(User).where(User.email == email))
        if not user or not check_password(password, user.password_hash):
            raise AuthenticationError("Invalid login credentials")

        user = await self.gateway.update(User, user.id, last_sign_in_at=utcnow())
        await self.operations.log("sign_in", "users", {"email": email}, user_id=user.id)

        session = self._session(user)
        await self._notify(SIGNED_IN, session)
        return session

    async def sign_out(self, token: str) -> bool:
        payload = decode_access_token(token, self.secret_key)
        self._revoked.add(payload["jti"])

        await self.operations.log("sign_out", "users", {}, user_id=payload["sub"])
        await self._notify(SIGNED_OUT, None)
        return True

    async def get_user(self, token: Optional[str]) -> User:
        if not token:
            raise AuthenticationError("Not authenticated")

        payload = decode_access_token(token, self.secret_key)
        if payload.get("jti") in self._revoked:
            raise AuthenticationError("Token has been revoked")

        user = await self.gateway.get(User, payload["sub"])
        if not user:
            raise AuthenticationError("User not found")
        return user
