from __future__ import annotations

import logging

import bcrypt

logger = logging.getLogger(__name__)


def hash_password(password: str, work_factor: int) -> str:
    """
    Hash password with bcrypt.

    Args:
        password: Plain text password
        work_factor: bcrypt cost (log2 rounds), from configuration

    Returns:
        Bcrypt hash string
    """
    salt = bcrypt.gensalt(rounds=work_factor)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash with constant-time comparison.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError as e:
        logger.error("error checking password hash with bcrypt: %s", e)
        return False
