"""
Transaction Record Module

Immutable ledger entries produced by accounts. Each balance-changing
operation appends exactly one record to the account that produced it.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from .money import to_decimal


class TransactionKind(Enum):
    """Categories of ledger entries"""
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER_OUT = "TRANSFER_OUT"
    TRANSFER_IN = "TRANSFER_IN"
    INTEREST = "INTEREST"
    WITHDRAWAL_PENALTY = "WITHDRAWAL_PENALTY"

    @property
    def sign(self) -> int:
        """+1 for entries that credit the account, -1 for debits"""
        if self in (TransactionKind.DEPOSIT, TransactionKind.TRANSFER_IN, TransactionKind.INTEREST):
            return 1
        return -1

    @property
    def is_credit(self) -> bool:
        return self.sign > 0


@dataclass(frozen=True)
class TransactionRecord:
    """
    One ledger entry.

    `amount` is always non-negative; the direction comes from `kind`.
    `counterparty_account_number` is only set on transfer legs.
    """
    transaction_id: str
    account_number: str
    amount: Decimal
    kind: TransactionKind
    description: str = ""
    counterparty_account_number: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        object.__setattr__(self, 'amount', to_decimal(self.amount))
        if self.amount < 0:
            raise ValueError("Transaction amount must not be negative")

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign of its effect on the account balance"""
        return self.amount * self.kind.sign

    @property
    def is_transfer(self) -> bool:
        return self.kind in (TransactionKind.TRANSFER_OUT, TransactionKind.TRANSFER_IN)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary"""
        return {
            "transaction_id": self.transaction_id,
            "account_number": self.account_number,
            "counterparty_account_number": self.counterparty_account_number,
            "amount": str(self.amount),
            "kind": self.kind.value,
            "description": self.description,
            "created_at": self.created_at.isoformat(),
        }
