"""
Banking System Facade

Wires one ledger store into the auth, account and transaction services
and runs the once-per-billing-cycle jobs a scheduler would trigger.
"""

from decimal import Decimal
from typing import Dict, Optional

from .account_service import AccountService
from .accounts import SavingsAccount
from .auth import AuthService
from .config import LedgerConfig, get_config
from .logging_config import get_logger, log_action
from .storage import LedgerStore
from .transaction_service import TransactionService


class BankingSystem:
    """Ledger store plus every service built on it"""

    def __init__(self, store: Optional[LedgerStore] = None, config: Optional[LedgerConfig] = None):
        self.config = config or get_config()
        self.store = store or LedgerStore()
        self.auth_service = AuthService(self.store)
        self.account_service = AccountService(self.store, self.config)
        self.transaction_service = TransactionService(self.store, self.config)
        self.logger = get_logger("bank_ledger.bank")

    def apply_monthly_interest(self) -> Dict[str, Decimal]:
        """
        Credit a month of interest to every active savings account

        Returns:
            Interest credited, keyed by account number
        """
        credited: Dict[str, Decimal] = {}
        for account in self.store.accounts.find_all():
            if not isinstance(account, SavingsAccount) or not account.is_active:
                continue
            with self.store.lock_accounts(account.account_number):
                mark = len(account.transactions)
                credited[account.account_number] = account.apply_monthly_interest(self.config.amount_precision)
                self.store.accounts.update(account)
                for record in account.transactions[mark:]:
                    self.store.transactions.save(record)

        log_action(self.logger, "info", "Monthly interest posted",
                   action="apply_monthly_interest",
                   extra={"accounts": len(credited),
                          "total": str(sum(credited.values(), Decimal('0')))})
        return credited

    def reset_monthly_withdrawals(self) -> int:
        """Start a new billing cycle for every account; returns how many were reset"""
        accounts = self.store.accounts.find_all()
        for account in accounts:
            with self.store.lock_accounts(account.account_number):
                account.reset_monthly_withdrawals()
                self.store.accounts.update(account)

        log_action(self.logger, "info", "Monthly withdrawal counters reset",
                   action="reset_monthly_withdrawals", extra={"accounts": len(accounts)})
        return len(accounts)

    def get_system_stats(self) -> Dict[str, int]:
        return {
            "total_users": self.store.users.count(),
            "total_accounts": self.store.accounts.count(),
            "total_transactions": self.store.transactions.total_count(),
        }

    def reset(self) -> None:
        """Drop all users, accounts and transactions"""
        self.store.clear_all()
