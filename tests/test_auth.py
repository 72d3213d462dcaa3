"""
Test suite for registration, login and input validation
"""

import pytest
from decimal import Decimal

from bank_ledger.auth import (
    AuthService, hash_password, verify_password,
    is_valid_username, is_valid_password, is_valid_email,
    is_valid_full_name, is_valid_account_number, is_valid_amount
)
from bank_ledger.config import LedgerConfig
from bank_ledger.storage import LedgerStore


class TestPasswordHashing:
    """Test scrypt password hashing"""

    def test_hash_format(self):
        password_hash = hash_password("secret123")
        salt, digest = password_hash.split("$")

        assert len(salt) == 32
        assert len(digest) == 128
        assert "secret123" not in password_hash

    def test_salts_differ(self):
        assert hash_password("secret123") != hash_password("secret123")

    def test_fixed_salt_is_deterministic(self):
        assert hash_password("secret123", "abc") == hash_password("secret123", "abc")

    def test_verify(self):
        password_hash = hash_password("secret123")

        assert verify_password("secret123", password_hash)
        assert not verify_password("secret124", password_hash)
        assert not verify_password("secret123", "not-a-hash")


class TestValidators:
    """Test field validators"""

    @pytest.mark.parametrize("username,expected", [
        ("john", True),
        ("john_doe_99", True),
        ("abc", False),
        ("a" * 21, False),
        ("john doe", False),
        ("", False),
        (None, False),
    ])
    def test_username(self, username, expected):
        assert is_valid_username(username) is expected

    def test_password(self):
        assert is_valid_password("123456")
        assert not is_valid_password("12345")
        assert not is_valid_password(None)

    def test_email(self):
        assert is_valid_email("jane.doe+bank@example.com")
        assert not is_valid_email("jane.example.com")
        assert not is_valid_email("")

    def test_full_name(self):
        assert is_valid_full_name("Jane Doe")
        assert not is_valid_full_name("J")
        assert not is_valid_full_name("Jane D0e")

    def test_account_number(self):
        assert is_valid_account_number("ACC0123456789")
        assert not is_valid_account_number("ACC-12")
        assert not is_valid_account_number("ACC01234567890123")

    def test_amount(self):
        config = LedgerConfig(max_transaction_amount=Decimal("1000"))

        assert is_valid_amount("0.01", config)
        assert is_valid_amount(Decimal("1000"), config)
        assert not is_valid_amount("1000.01", config)
        assert not is_valid_amount("0", config)
        assert not is_valid_amount("abc", config)


class TestAuthService:
    """Test the registration and login flow"""

    def setup_method(self):
        self.store = LedgerStore()
        self.auth = AuthService(self.store)

    def test_register(self):
        user = self.auth.register("jane_doe", "secret123", "Jane Doe", "jane@example.com")

        assert user is not None
        assert user.user_id.startswith("USER_")
        assert user.password_hash != "secret123"
        assert self.store.users.find_by_id(user.user_id) is user
        assert self.auth.get_user_by_username("jane_doe") is user
        assert self.auth.get_user_by_id(user.user_id) is user

    def test_duplicate_username_rejected(self):
        assert self.auth.register("jane_doe", "secret123", "Jane Doe", "jane@example.com")
        assert self.auth.register("jane_doe", "other1234", "Jane Other", "other@example.com") is None
        assert self.store.users.count() == 1

    @pytest.mark.parametrize("fields", [
        ("ab", "secret123", "Jane Doe", "jane@example.com"),
        ("jane_doe", "123", "Jane Doe", "jane@example.com"),
        ("jane_doe", "secret123", "J4ne", "jane@example.com"),
        ("jane_doe", "secret123", "Jane Doe", "not-an-email"),
    ])
    def test_invalid_fields_rejected(self, fields):
        assert self.auth.register(*fields) is None
        assert self.store.users.count() == 0

    def test_login(self):
        user = self.auth.register("jane_doe", "secret123", "Jane Doe", "jane@example.com")

        assert self.auth.login("jane_doe", "secret123") is user
        assert self.auth.login("jane_doe", "wrong-password") is None
        assert self.auth.login("nobody", "secret123") is None
        assert self.auth.login("   ", "secret123") is None
        assert self.auth.login("jane_doe", "") is None
