"""
Test suite for the account service

Tests opening accounts, parameter validation, rollback on failure and
closing.
"""

import pytest
from decimal import Decimal

from bank_ledger import account_service as account_service_module
from bank_ledger.account_service import AccountService
from bank_ledger.accounts import CheckingAccount, ProductType, SavingsAccount
from bank_ledger.config import LedgerConfig
from bank_ledger.storage import LedgerStore
from bank_ledger.users import User


class TestAccountService:
    """Test account lifecycle"""

    def setup_method(self):
        """Set up test fixtures"""
        self.store = LedgerStore()
        self.config = LedgerConfig()
        self.service = AccountService(self.store, self.config)
        self.user = User(
            user_id="USER_TEST0001",
            username="jane_doe",
            password_hash="salt$hash",
            full_name="Jane Doe",
            email="jane@example.com"
        )
        self.store.users.save(self.user)

    def test_create_checking_account(self):
        """Test opening a checking account"""
        account = self.service.create_checking_account(self.user, "100", "50")

        assert isinstance(account, CheckingAccount)
        assert account.balance == Decimal('100')
        assert account.overdraft_limit == Decimal('50')
        assert self.store.accounts.find_by_account_number(account.account_number) is account
        assert self.user.get_account_by_number(account.account_number) is account

    def test_create_savings_account(self):
        """Test opening a savings account with configured rules"""
        account = self.service.create_savings_account(self.user, Decimal('200'), Decimal('0.12'))

        assert isinstance(account, SavingsAccount)
        assert account.interest_rate == Decimal('0.12')
        assert account.minimum_balance == self.config.savings_minimum_balance
        assert account.max_monthly_withdrawals == self.config.savings_max_monthly_withdrawals
        assert account.withdrawal_penalty == self.config.savings_withdrawal_penalty

    def test_defaults_applied(self):
        """Test default overdraft and interest rate"""
        checking = self.service.create_account(self.user, 0, ProductType.CHECKING)
        savings = self.service.create_account(self.user, 0, ProductType.SAVINGS)

        assert checking.overdraft_limit == self.config.checking_default_overdraft_limit
        assert savings.interest_rate == self.config.savings_default_interest_rate

    def test_account_numbers_are_unique(self):
        """Test many accounts get distinct numbers"""
        numbers = {
            self.service.create_checking_account(self.user, 0).account_number
            for _ in range(50)
        }
        assert len(numbers) == 50
        assert self.store.accounts.count() == 50
        assert len(self.user.accounts) == 50

    @pytest.mark.parametrize("kwargs", [
        {"initial_balance": "-1", "product_type": ProductType.CHECKING},
        {"initial_balance": "abc", "product_type": ProductType.CHECKING},
        {"initial_balance": "0", "product_type": ProductType.CHECKING, "overdraft_limit": "-5"},
        {"initial_balance": "0", "product_type": ProductType.SAVINGS, "interest_rate": "-0.01"},
        {"initial_balance": "0", "product_type": ProductType.SAVINGS, "interest_rate": "1.5"},
    ])
    def test_invalid_parameters_rejected(self, kwargs):
        """Test invalid opening parameters leave nothing behind"""
        assert self.service.create_account(self.user, **kwargs) is None
        assert self.store.accounts.count() == 0
        assert self.user.accounts == []

    def test_missing_user_rejected(self):
        assert self.service.create_checking_account(None, "10") is None
        assert self.store.accounts.count() == 0

    def test_rollback_when_user_attach_fails(self, monkeypatch):
        """Test the store entry is removed if the user refuses the account"""
        monkeypatch.setattr(self.user, "add_account", lambda account: False)

        assert self.service.create_checking_account(self.user, "10") is None
        assert self.store.accounts.count() == 0

    def test_number_collision_exhausts_attempts(self, monkeypatch):
        """Test a taken account number is never reused"""
        monkeypatch.setattr(account_service_module, "generate_account_number",
                            lambda: "ACC0000000001")
        self.store.accounts.save(CheckingAccount(account_number="ACC0000000001"))

        assert self.service.create_checking_account(self.user, "10") is None
        assert self.store.accounts.count() == 1
        assert self.user.accounts == []

    def test_get_account(self):
        account = self.service.create_checking_account(self.user, "10")

        assert self.service.get_account(account.account_number) is account
        assert self.service.get_account("ACC9999999999") is None
        assert self.service.account_exists(account.account_number)
        assert not self.service.account_exists("ACC9999999999")

    def test_balance_and_type_lookups(self):
        checking = self.service.create_checking_account(self.user, "10.50")
        savings = self.service.create_savings_account(self.user, "300")

        assert self.service.get_account_balance(checking.account_number) == Decimal('10.50')
        assert self.service.get_account_balance("ACC9999999999") == Decimal('-1')
        assert self.service.get_account_type(checking.account_number) == "CHECKING"
        assert self.service.get_account_type(savings.account_number) == "SAVINGS"
        assert self.service.get_account_type("ACC9999999999") is None

    def test_get_user_accounts(self):
        first = self.service.create_checking_account(self.user, "1")
        second = self.service.create_savings_account(self.user, "200")

        assert self.service.get_user_accounts(self.user.user_id) == [first, second]
        assert self.service.get_user_accounts("USER_UNKNOWN1") == []

    def test_close_account(self):
        """Test closing is one-way and persisted"""
        account = self.service.create_checking_account(self.user, "10")

        assert self.service.close_account(account.account_number)
        assert not self.store.accounts.find_by_account_number(account.account_number).is_active
        # Closing again still succeeds and the account stays closed
        assert self.service.close_account(account.account_number)
        assert not account.is_active

    def test_close_unknown_account(self):
        assert not self.service.close_account("ACC9999999999")
