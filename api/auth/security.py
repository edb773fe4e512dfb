"""
Auth security helpers.
"""

from __future__ import annotations

import random

import bcrypt

CODE_DIGITS = 6


class AuthSecurityError(RuntimeError):
    pass


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def generate_code(digits: int = CODE_DIGITS) -> str:
    """
    Uniform numeric code with no leading zero, e.g. 100000..999999.

    Not cryptographic: codes are single-use and only sent to the account's
    own mailbox.
    """
    low = 10 ** (digits - 1)
    return str(random.randint(low, (low * 10) - 1))
