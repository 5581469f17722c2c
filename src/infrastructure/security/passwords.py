"""Password policy and bcrypt hashing."""

from typing import Final

import bcrypt

PASSWORD_MIN_LENGTH: Final[int] = 6
# bcrypt only looks at the first 72 bytes of its input
PASSWORD_MAX_BYTES: Final[int] = 72


def password_policy_violations(password: str) -> list[str]:
    """List the password rules that ``password`` breaks.

    A valid password has at least six characters and contains a digit, a
    lower-case letter, an upper-case letter and a non-alphanumeric character.

    Args:
        password: Candidate password.

    Returns:
        list[str]: Human readable messages, empty when the password is valid.
    """
    violations: list[str] = []
    if len(password) < PASSWORD_MIN_LENGTH:
        violations.append(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
        )
    if len(password.encode()) > PASSWORD_MAX_BYTES:
        violations.append(f"Password must not exceed {PASSWORD_MAX_BYTES} bytes")
    if not any(ch.isdigit() for ch in password):
        violations.append("Password must contain at least one digit")
    if not any(ch.islower() for ch in password):
        violations.append("Password must contain at least one lower-case letter")
    if not any(ch.isupper() for ch in password):
        violations.append("Password must contain at least one upper-case letter")
    if all(ch.isalnum() for ch in password):
        violations.append(
            "Password must contain at least one non-alphanumeric character"
        )
    return violations


def hash_password(password: str) -> str:
    """Hash ``password`` with a fresh bcrypt salt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored bcrypt hash.

    Malformed hashes and over-long passwords never match.
    """
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        return False
