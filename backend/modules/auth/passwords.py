"""Password hashing with bcrypt."""

import base64
import hashlib

import bcrypt


def _prepare_password(password: str) -> bytes:
    """Pre-hash with SHA-256 so passwords longer than bcrypt's 72 bytes still count."""
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_prepare_password(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_prepare_password(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False
