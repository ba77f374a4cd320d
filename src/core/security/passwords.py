"""Password hashing with bcrypt."""

import bcrypt

from core.utils.constants import BCRYPT_ROUNDS


def hash_password(password: str, *, rounds: int = BCRYPT_ROUNDS) -> str:
    """Return a salted bcrypt hash of ``password``."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
