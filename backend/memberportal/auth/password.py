"""Staff credential hashing.

Staff accounts are provisioned with an Argon2id hash of password + pepper
(``PASSWORD_PEPPER``). When the retention job anonymizes a member, the stored
credential is replaced by a marker that no password can verify against.
"""

import os
import re
import secrets

from argon2 import PasswordHasher, Type


_hasher = PasswordHasher(
    memory_cost=65536,  # 64 MB
    time_cost=3,
    parallelism=4,
    hash_len=32,
    salt_len=16,
    type=Type.ID,
)

# argon2 hashes always start with "$", so this prefix can never verify
UNUSABLE_PASSWORD_PREFIX = "!"

_STRENGTH_RULES = [
    (re.compile(r'[A-Z]'), "Password must contain at least one uppercase letter"),
    (re.compile(r'[a-z]'), "Password must contain at least one lowercase letter"),
    (re.compile(r'\d'), "Password must contain at least one digit"),
    (re.compile(r'[!@#$%^&*(),.?":{}|<>_\-+=\[\]\\\/~`]'), "Password must contain at least one special character"),
]

MIN_PASSWORD_LENGTH = 8


def _get_pepper() -> str:
    pepper = os.getenv('PASSWORD_PEPPER')
    if not pepper:
        raise ValueError("PASSWORD_PEPPER environment variable is not set")
    return pepper


def hash_password(password: str) -> str:
    """Argon2id hash of the peppered password.

    Raises:
        ValueError: If the password is empty or PASSWORD_PEPPER is not set
    """
    if not password:
        raise ValueError("Password cannot be empty")

    return _hasher.hash(password + _get_pepper())


def make_unusable_password_hash() -> str:
    return UNUSABLE_PASSWORD_PREFIX + secrets.token_hex(32)


def validate_password_strength(password: str) -> tuple[bool, str]:
    """Check a new staff password.

    Returns:
        (True, "") when acceptable, otherwise (False, first failing rule)
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"

    for pattern, message in _STRENGTH_RULES:
        if not pattern.search(password):
            return False, message

    return True, ""
