"""
End-to-end scenarios across the services

Covers the full customer journey without the HTTP layer: register, open
products, move money, run the billing cycle and read the history back.
"""

from decimal import Decimal

from bank_ledger.bank import BankingSystem
from bank_ledger.config import LedgerConfig
from bank_ledger.records import TransactionKind


class TestCustomerJourney:
    """Full lifecycle on one banking system"""

    def setup_method(self):
        self.system = BankingSystem(config=LedgerConfig())
        self.accounts = self.system.account_service
        self.transactions = self.system.transaction_service

    def test_checking_overdraft_scenario(self):
        user = self.system.auth_service.register("alice_w", "secret123", "Alice W", "alice@example.com")
        checking = self.accounts.create_checking_account(user, "100", "50")

        assert self.transactions.withdraw(checking.account_number, "120")
        assert self.accounts.get_account_balance(checking.account_number) == Decimal('-20')
        assert not self.transactions.withdraw(checking.account_number, "40")
        assert self.accounts.get_account_balance(checking.account_number) == Decimal('-20')

    def test_savings_interest_scenario(self):
        user = self.system.auth_service.register("bob_smith", "secret123", "Bob Smith", "bob@example.com")
        savings = self.accounts.create_savings_account(user, "200", "0.12")

        assert self.system.apply_monthly_interest() == {savings.account_number: Decimal('2.00')}
        assert self.accounts.get_account_balance(savings.account_number) == Decimal('202')
        assert savings.transactions[-1].kind == TransactionKind.INTEREST

    def test_two_customers_exchange_money(self):
        alice = self.system.auth_service.register("alice_w", "secret123", "Alice W", "alice@example.com")
        bob = self.system.auth_service.register("bob_smith", "secret123", "Bob Smith", "bob@example.com")
        alice_checking = self.accounts.create_checking_account(alice, "1000")
        bob_savings = self.accounts.create_savings_account(bob, "500")

        assert self.transactions.transfer(alice_checking.account_number, bob_savings.account_number,
                                          "250", "Rent share")
        assert self.transactions.transfer(bob_savings.account_number, alice_checking.account_number, "100")

        assert alice.total_balance() == Decimal('850')
        assert bob.total_balance() == Decimal('650')

        alice_history = self.transactions.get_transaction_history(alice_checking.account_number)
        assert [r.kind for r in alice_history] == [TransactionKind.TRANSFER_OUT, TransactionKind.TRANSFER_IN]
        assert alice_history[0].counterparty_account_number == bob_savings.account_number
        assert self.system.store.transactions.count(bob_savings.account_number) == 2

        logged_in = self.system.auth_service.login("bob_smith", "secret123")
        assert self.accounts.get_user_accounts(logged_in.user_id) == [bob_savings]

    def test_closed_account_is_frozen(self):
        user = self.system.auth_service.register("carol_k", "secret123", "Carol K", "carol@example.com")
        checking = self.accounts.create_checking_account(user, "100")
        savings = self.accounts.create_savings_account(user, "500")

        assert self.accounts.close_account(savings.account_number)

        assert not self.transactions.deposit(savings.account_number, "10")
        assert not self.transactions.withdraw(savings.account_number, "10")
        assert not self.transactions.transfer(checking.account_number, savings.account_number, "10")
        assert self.system.apply_monthly_interest() == {}
        assert savings.balance == Decimal('500')
        # Still listed under the user and readable
        assert savings in user.accounts
        assert self.transactions.get_transaction_history(savings.account_number) == []

    def test_every_account_stays_consistent(self):
        user = self.system.auth_service.register("dave_r", "secret123", "Dave R", "dave@example.com")
        checking = self.accounts.create_checking_account(user, "300", "200")
        savings = self.accounts.create_savings_account(user, "1000", "0.06")

        self.transactions.deposit(checking.account_number, "45.55")
        self.transactions.withdraw(checking.account_number, "500")
        self.transactions.transfer(savings.account_number, checking.account_number, "250.10")
        self.system.apply_monthly_interest()
        self.transactions.withdraw(savings.account_number, "10000")
        self.system.reset_monthly_withdrawals()

        for account in self.system.store.accounts.find_all():
            assert account.is_balance_consistent()
            indexed = self.system.store.transactions.find_by_account(account.account_number)
            assert indexed == account.transactions
