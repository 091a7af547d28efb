"""Password hashing utilities (Argon2id).

Each identity stores its own random salt next to the encoded hash; the salt is
reused when the password is changed.
"""
import base64
import binascii
import secrets

from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError, VerifyMismatchError

from catalog_service.core.exceptions import InternalServerError
from catalog_service.core.logging_config import logger

SALT_BYTES = 16

password_hasher = PasswordHasher()


def generate_salt() -> str:
    """Return a new random salt, base64 encoded for storage."""
    return base64.b64encode(secrets.token_bytes(SALT_BYTES)).decode("ascii")


def hash_password(password: str, salt: str) -> str:
    """Hash a password with the given stored salt.

    Raises InternalServerError if the salt cannot be decoded or hashing fails.
    """
    try:
        raw_salt = base64.b64decode(salt.encode("ascii"), validate=True)
    except (binascii.Error, ValueError) as e:
        logger.warning(f"Illegal salt in store: {e}")
        raise InternalServerError()
    try:
        return password_hasher.hash(password, salt=raw_salt)
    except HashingError as e:
        logger.warning(f"Failed to hash password: {e}")
        raise InternalServerError()


def verify_password(password_hash: str, password: str) -> bool:
    """Return True if password matches the stored hash.

    A hash that cannot be parsed is an integrity failure, not a mismatch.
    """
    try:
        return password_hasher.verify(password_hash, password)
    except VerifyMismatchError:
        return False
    except InvalidHashError as e:
        logger.warning(f"Illegal password hash in store: {e}")
        raise InternalServerError()
    except VerificationError:
        return False
