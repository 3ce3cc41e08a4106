"""Reader accounts: registration, sign-in, and sign-out."""

import logging
import time
from datetime import timedelta
from typing import Optional
from uuid import uuid4

from bookburst.core.config import settings
from bookburst.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from bookburst.domain.entities import User
from bookburst.domain.repositories import ITokenRevocationList, IUserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Account lifecycle for readers.

    Emails are stored lower-cased so sign-in is case-insensitive.  Sign-out
    needs a revocation list; without one it is a no-op.
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        revocations: Optional[ITokenRevocationList] = None,
    ):
        self.user_repository = user_repository
        self.revocations = revocations

    async def signup(self, email: str, name: str, password: str) -> User:
        if await self.user_repository.get_by_email(email):
            raise ValueError("Email already registered")

        user = User(
            id=uuid4(),
            email=email.strip().lower(),
            name=name.strip(),
            hashed_password=hash_password(password),
        )
        created = await self.user_repository.create(user)
        logger.info("Reader registered: %s", created.id)
        return created

    async def login(self, email: str, password: str) -> str:
        """Check the password and issue an access token."""
        user = await self.user_repository.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            raise ValueError("Invalid email or password")
        if not user.is_active:
            raise ValueError("Account is deactivated")

        token = create_access_token(
            data={"sub": str(user.id)},
            expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
        )
        logger.info("Reader signed in: %s", user.id)
        return token

    async def signout(self, token: str) -> bool:
        """Revoke ``token`` for the rest of its lifetime.

        Returns False when there was nothing to revoke: no revocation list,
        or a token without ``jti``/``exp``.
        """
        if self.revocations is None:
            return False
        payload = decode_access_token(token) or {}
        jti = payload.get("jti")
        exp = payload.get("exp")
        if not jti or not exp:
            return False

        ttl = max(int(exp - time.time()), 1)
        await self.revocations.revoke(jti, ttl)
        logger.info("Token %s revoked for %ds (reader %s)", jti, ttl, payload.get("sub"))
        return True
