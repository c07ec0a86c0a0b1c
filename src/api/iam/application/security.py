"""Password hashing and password policy.

Uses bcrypt with automatic salt generation. bcrypt only considers the
first 72 bytes of a password, so longer passwords are refused by the
policy rather than silently truncated.
"""

import secrets
from functools import lru_cache

import bcrypt

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72


def password_policy_errors(password: str) -> list[str]:
    """Check a password against the registration policy.

    Args:
        password: The plaintext password

    Returns:
        Human-readable violations; empty when the password is acceptable
    """
    errors: list[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        errors.append(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long.")
    if not any(c.isdigit() for c in password):
        errors.append("Password must contain a digit.")
    if not any(c.islower() for c in password):
        errors.append("Password must contain a lowercase letter.")
    if not any(c.isupper() for c in password):
        errors.append("Password must contain an uppercase letter.")
    if all(c.isalnum() for c in password):
        errors.append("Password must contain a non-alphanumeric character.")
    return errors


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: The plaintext password to hash

    Returns:
        The bcrypt hash as a string
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash using constant-time comparison.

    Args:
        password: The plaintext password to verify
        password_hash: The bcrypt hash to verify against

    Returns:
        True if the password matches the hash, False otherwise
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode())
    except ValueError:
        # Malformed stored hash or over-long password
        return False


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """A bcrypt hash no submitted password is expected to match.

    Checked against when the principal does not exist, so that an
    unknown email costs as much bcrypt time as a wrong password.
    """
    return hash_password(secrets.token_urlsafe(32))
