"""
User Module

A bank customer and the accounts they own.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from .accounts import Account, CheckingAccount, SavingsAccount
from .money import ZERO


@dataclass(eq=False)
class User:
    """
    Bank customer.

    `accounts` holds references to the same Account objects the ledger
    store indexes. Nothing keeps the two in sync automatically; the
    account service updates both when it opens an account.
    """
    user_id: str
    username: str
    password_hash: str
    full_name: str
    email: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    accounts: List[Account] = field(default_factory=list, repr=False)

    def add_account(self, account: Optional[Account]) -> bool:
        """Attach an account. Rejects None and account numbers already held."""
        if account is None:
            return False
        if self.get_account_by_number(account.account_number) is not None:
            return False
        self.accounts.append(account)
        return True

    def remove_account(self, account_number: str) -> bool:
        account = self.get_account_by_number(account_number)
        if account is None:
            return False
        self.accounts.remove(account)
        return True

    def get_account_by_number(self, account_number: str) -> Optional[Account]:
        for account in self.accounts:
            if account.account_number == account_number:
                return account
        return None

    def checking_accounts(self) -> List[Account]:
        return [a for a in self.accounts if isinstance(a, CheckingAccount)]

    def savings_accounts(self) -> List[Account]:
        return [a for a in self.accounts if isinstance(a, SavingsAccount)]

    def total_balance(self) -> Decimal:
        """Sum of balances across all owned accounts"""
        return sum((account.balance for account in self.accounts), ZERO)

    def to_dict(self) -> dict:
        """Public view of the user; the password hash is never included"""
        return {
            "user_id": self.user_id,
            "username": self.username,
            "full_name": self.full_name,
            "email": self.email,
            "created_at": self.created_at.isoformat(),
            "account_numbers": [a.account_number for a in self.accounts],
            "total_balance": str(self.total_balance()),
        }
