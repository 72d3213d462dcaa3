"""
Authentication Module

User registration and login. Passwords are hashed with salted scrypt;
the ledger itself only ever stores and compares the opaque hash string.
"""

import hashlib
import hmac
import re
import secrets
from typing import Optional

from .config import LedgerConfig, get_config
from .identifiers import generate_user_id
from .logging_config import get_logger, log_action
from .money import ZERO, AmountLike, parse_amount
from .storage import LedgerStore
from .users import User

_USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]{4,20}$")
_EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+$")
_FULL_NAME_PATTERN = re.compile(r"^[a-zA-Z\s]{2,50}$")
_ACCOUNT_NUMBER_PATTERN = re.compile(r"^[a-zA-Z0-9]{8,16}$")

MIN_PASSWORD_LENGTH = 6


def is_valid_username(username: Optional[str]) -> bool:
    """4-20 letters, digits or underscores"""
    return bool(username) and _USERNAME_PATTERN.match(username) is not None


def is_valid_password(password: Optional[str]) -> bool:
    return bool(password) and len(password) >= MIN_PASSWORD_LENGTH


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and _EMAIL_PATTERN.match(email) is not None


def is_valid_full_name(full_name: Optional[str]) -> bool:
    """2-50 letters and spaces"""
    return bool(full_name) and _FULL_NAME_PATTERN.match(full_name) is not None


def is_valid_account_number(account_number: Optional[str]) -> bool:
    return bool(account_number) and _ACCOUNT_NUMBER_PATTERN.match(account_number) is not None


def is_valid_amount(amount: Optional[AmountLike], config: Optional[LedgerConfig] = None) -> bool:
    """Positive and no larger than the configured single-transaction maximum"""
    config = config or get_config()
    value = parse_amount(amount)
    return value is not None and ZERO < value <= config.max_transaction_amount


def hash_password(password: str, salt: Optional[str] = None) -> str:
    """Hash a password with scrypt. Returns `salt$hexdigest`."""
    if salt is None:
        salt = secrets.token_hex(16)
    digest = hashlib.scrypt(
        password.encode(),
        salt=salt.encode(),
        n=16384, r=8, p=1
    ).hex()
    return f"{salt}${digest}"


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against a stored `salt$hexdigest`"""
    salt, sep, _ = password_hash.partition("$")
    if not sep:
        return False
    return hmac.compare_digest(hash_password(password, salt), password_hash)


class AuthService:
    """
    Registers and authenticates users
    """

    def __init__(self, store: LedgerStore):
        self.store = store
        self.logger = get_logger("bank_ledger.auth")

    def register(self, username: str, password: str, full_name: str, email: str) -> Optional[User]:
        """
        Register a new user

        Returns:
            The created user, or None if any field is invalid or the
            username is already taken
        """
        if not is_valid_username(username):
            return self._reject("register", "invalid username")
        if not is_valid_password(password):
            return self._reject("register", "invalid password")
        if not is_valid_full_name(full_name):
            return self._reject("register", "invalid full name")
        if not is_valid_email(email):
            return self._reject("register", "invalid email")

        if self.store.users.username_exists(username):
            return self._reject("register", "username already taken")

        user = User(
            user_id=generate_user_id(),
            username=username,
            password_hash=hash_password(password),
            full_name=full_name,
            email=email
        )

        if not self.store.users.save(user):
            return self._reject("register", "user id collision")

        log_action(self.logger, "info", "User registered",
                   user_id=user.user_id, action="register", resource=username)
        return user

    def login(self, username: str, password: str) -> Optional[User]:
        """Return the user if the credentials match, else None"""
        if not username or not username.strip() or not password or not password.strip():
            return None

        user = self.store.users.find_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            return self._reject("login", "bad credentials")

        log_action(self.logger, "info", "User logged in",
                   user_id=user.user_id, action="login", resource=username)
        return user

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self.store.users.find_by_id(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.store.users.find_by_username(username)

    def _reject(self, action: str, reason: str) -> None:
        log_action(self.logger, "warning", f"Rejected {action}: {reason}", action=action)
        return None
