"""
bcrypt credentials for marketplace profiles.

The cost factor comes from ``BCRYPT_ROUNDS``; hashes stored with another
cost still verify and are upgraded on the next successful login.
"""
import logging
from typing import Optional

import bcrypt

from adwise.core.config import settings

logger = logging.getLogger(__name__)

# bcrypt ignores everything past the first 72 bytes of the secret
BCRYPT_SECRET_BYTES = 72


def _secret(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_SECRET_BYTES]


def _cost(stored_hash: str) -> Optional[int]:
    # $2b$<cost>$<salt+digest>
    parts = stored_hash.split("$")
    if len(parts) != 4 or not parts[1].startswith("2") or not parts[2].isdigit():
        return None
    return int(parts[2])


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_secret(password), salt).decode("ascii")


def verify_password(password: str, stored_hash: Optional[str]) -> bool:
    """True when ``password`` matches the profile's stored hash.

    A profile whose stored value is not a bcrypt hash never authenticates.
    """
    if not password or not stored_hash or _cost(stored_hash) is None:
        return False
    try:
        return bcrypt.checkpw(_secret(password), stored_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed; refusing login")
        return False


def needs_rehash(stored_hash: str) -> bool:
    return _cost(stored_hash) != settings.BCRYPT_ROUNDS
