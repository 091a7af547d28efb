"""Credential verification and session tokens."""
import secrets
import string
from datetime import datetime, timedelta
from random import Random
from typing import Callable, Optional

from sqlalchemy.orm import Session

from catalog_service import crud
from catalog_service import schemas
from catalog_service.core.config import TOKEN_TTL_HOURS
from catalog_service.core.exceptions import DatabaseError, InternalServerError, Unauthorized
from catalog_service.core.logging_config import logger
from catalog_service.core.security import verify_password
from catalog_service.core.timeutils import utcnow
from catalog_service.models import User

TOKEN_PREFIX = "tok_"
TOKEN_LENGTH = 32
TOKEN_ALPHABET = string.ascii_letters + string.digits


class Authenticator:
    """Logs users in and resolves bearer tokens back to identities.

    The random source and clock are injectable so tests can fix the minted
    token and move time past a token's expiry.
    """

    def __init__(self, rng: Optional[Random] = None,
                 clock: Callable[[], datetime] = utcnow,
                 token_ttl: timedelta = timedelta(hours=TOKEN_TTL_HOURS)):
        self._rng = rng or secrets.SystemRandom()
        self._clock = clock
        self._token_ttl = token_ttl

    def generate_token(self) -> str:
        return TOKEN_PREFIX + "".join(
            self._rng.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH)
        )

    def login(self, db: Session, username: str, password: str) -> schemas.LoginResponse:
        """Verify credentials and mint a new session token.

        Unknown users, disabled users, failed lookups and wrong passwords are
        all reported as the same Unauthorized error.
        """
        try:
            user = crud.get_user_by_username(db, username)
        except DatabaseError:
            raise Unauthorized()
        if user is None or not user.enabled:
            raise Unauthorized()

        if not verify_password(user.password_hash, password):
            logger.info(f"Failed login for user {user.id}")
            raise Unauthorized()

        token = self.generate_token()
        token_expiry = self._clock() + self._token_ttl
        try:
            crud.update_user_token(db, user, token, token_expiry)
        except DatabaseError:
            logger.warning(f"Failed to store session token for user {user.id}")
            raise InternalServerError()

        logger.info(f"User {user.id} logged in, token valid until {token_expiry.isoformat()}")
        return schemas.LoginResponse(token=token, token_expiry=token_expiry)

    def resolve_token(self, db: Session, token: str) -> User:
        """Return the identity holding token, or raise Unauthorized if none or expired."""
        if not token:
            raise Unauthorized()
        try:
            user = crud.get_user_by_token(db, token, self._clock())
        except DatabaseError:
            raise InternalServerError()
        if user is None:
            raise Unauthorized()
        return user
