"""
Authentication for Reading Adventure players.

Handles username/password registration and login with bcrypt hashing.
"""

from __future__ import annotations

import logging

import bcrypt

from adventure_game.persistence import AdventureDB, UserRecord, UsernameTakenError

logger = logging.getLogger(__name__)

__all__ = [
    "InvalidCredentialsError",
    "UsernameTakenError",
    "authenticate",
    "hash_password",
    "register",
    "verify_password",
]


class InvalidCredentialsError(Exception):
    """Raised when a username/password pair does not match a user."""


def hash_password(password: str, rounds: int = 10) -> str:
    """
    Hash a password using bcrypt with automatic salt generation.

    Args:
        password: The plaintext password
        rounds: bcrypt cost factor

    Returns:
        The bcrypt hash as a string
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a stored bcrypt hash.

    Returns False for a wrong password and for a malformed hash.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Invalid hash format
        return False


def _check_credentials(username: str, password: str) -> None:
    if not username or not username.strip():
        raise InvalidCredentialsError("Username cannot be empty")
    if not password:
        raise InvalidCredentialsError("Password cannot be empty")


def register(db: AdventureDB, username: str, password: str, rounds: int = 10) -> int:
    """
    Create a new player account.

    Returns:
        The new user's id

    Raises:
        InvalidCredentialsError: If username or password is empty
        UsernameTakenError: If the username already exists
    """
    _check_credentials(username, password)
    user_id = db.create_user(username, hash_password(password, rounds))
    logger.info("Registered user %s (id=%d)", username, user_id)
    return user_id


def authenticate(db: AdventureDB, username: str, password: str) -> UserRecord:
    """
    Look up *username* and check *password*.

    Raises:
        InvalidCredentialsError: If the user is unknown or the password is wrong
    """
    _check_credentials(username, password)
    user = db.get_user_by_username(username)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", username)
        raise InvalidCredentialsError("Invalid username or password")
    return user
