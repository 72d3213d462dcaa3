"""
Account Module

Checking and savings accounts. An account owns its balance and an
append-only list of transaction records; every balance change goes
through deposit, withdraw, transfer, receive_transfer or one of the
savings-only operations (interest, excess-withdrawal penalty), and each
of them appends exactly one record.

Product-specific withdrawal behaviour is expressed through two hooks:
`can_withdraw` (eligibility) and `_after_withdrawal` (side effect run
after every successful debit).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import ClassVar, List, Optional

from .identifiers import generate_transaction_id
from .money import DEFAULT_PRECISION, ZERO, AmountLike, parse_amount, round_amount, to_decimal
from .records import TransactionKind, TransactionRecord


class ProductType(Enum):
    """Account products"""
    CHECKING = "checking"
    SAVINGS = "savings"


# Savings product defaults
SAVINGS_MINIMUM_BALANCE = Decimal('100.00')
SAVINGS_MAX_MONTHLY_WITHDRAWALS = 6
SAVINGS_WITHDRAWAL_PENALTY = Decimal('25.00')
SAVINGS_DEFAULT_INTEREST_RATE = Decimal('0.025')


@dataclass(eq=False)
class Account(ABC):
    """
    Base account.

    Accounts compare by identity; two accounts are the same only if they
    are the same object. `initial_balance` is captured at construction so
    the balance can always be re-derived from the transaction list.
    """
    account_number: str
    balance: Decimal = ZERO
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    transactions: List[TransactionRecord] = field(default_factory=list, repr=False)
    is_active: bool = True
    initial_balance: Decimal = field(init=False)

    product_type: ClassVar[ProductType]

    def __post_init__(self):
        self.balance = to_decimal(self.balance)
        self.initial_balance = self.balance

    @property
    def account_type(self) -> str:
        """Product name in upper case, e.g. CHECKING"""
        return self.product_type.name

    @abstractmethod
    def can_withdraw(self, amount: Decimal) -> bool:
        """Product-specific eligibility rule for a debit of `amount`"""

    @abstractmethod
    def _after_withdrawal(self) -> None:
        """Product-specific side effect after a successful debit"""

    @abstractmethod
    def revert_withdrawal_count(self) -> None:
        """Take back the counter increment of a debit that was compensated"""

    @abstractmethod
    def reset_monthly_withdrawals(self) -> None:
        """Start a new billing cycle"""

    def available_balance(self) -> Decimal:
        """Funds a debit may draw on"""
        return self.balance

    def deposit(self, amount: AmountLike, description: str = "Deposit") -> bool:
        """Credit the account. Non-positive amounts are rejected."""
        amount = parse_amount(amount)
        if amount is None or amount <= ZERO:
            return False

        self._post(TransactionKind.DEPOSIT, amount, description)
        return True

    def withdraw(self, amount: AmountLike, description: str = "Withdrawal") -> bool:
        """Debit the account if the product rules and funds allow it"""
        amount = self._debit_amount(amount)
        if amount is None:
            return False

        self._post(TransactionKind.WITHDRAWAL, amount, description)
        self._after_withdrawal()
        return True

    def transfer(self, amount: AmountLike, to_account_number: str,
                 description: Optional[str] = None) -> bool:
        """
        Debit the outgoing leg of a transfer.

        The destination is not credited here; the caller completes the
        transfer with `receive_transfer` on the destination account.
        """
        amount = self._debit_amount(amount)
        if amount is None:
            return False

        self._post(
            TransactionKind.TRANSFER_OUT,
            amount,
            description or f"Transfer to {to_account_number}",
            counterparty=to_account_number
        )
        self._after_withdrawal()
        return True

    def receive_transfer(self, amount: AmountLike, from_account_number: str,
                         description: Optional[str] = None) -> None:
        """
        Credit the incoming leg of a transfer. Amount checks are the caller's job.

        Raises:
            ValueError: for a negative amount, before the balance is touched
        """
        self._post(
            TransactionKind.TRANSFER_IN,
            amount,
            description or f"Transfer from {from_account_number}",
            counterparty=from_account_number
        )

    def close_account(self) -> None:
        """Deactivate the account. There is no way back."""
        self.is_active = False

    def get_recent_transactions(self, count: int) -> List[TransactionRecord]:
        """Last `count` records in chronological order"""
        if count <= 0:
            return []
        return list(self.transactions[-count:])

    def is_balance_consistent(self) -> bool:
        """Check that the balance equals the initial balance plus all signed records"""
        expected = self.initial_balance + sum(
            (record.signed_amount for record in self.transactions), ZERO
        )
        return expected == self.balance

    def _debit_amount(self, amount: AmountLike) -> Optional[Decimal]:
        """Return the parsed amount if a debit of it is allowed, else None"""
        amount = parse_amount(amount)
        if amount is None or amount <= ZERO:
            return None
        if not self.can_withdraw(amount):
            return None
        if self.available_balance() < amount:
            return None
        return amount

    def _post(self, kind: TransactionKind, amount: AmountLike, description: str,
              counterparty: Optional[str] = None) -> TransactionRecord:
        """Build the record, then apply its signed amount. A rejected amount leaves the account untouched."""
        record = TransactionRecord(
            transaction_id=generate_transaction_id(kind),
            account_number=self.account_number,
            amount=amount,
            kind=kind,
            description=description,
            counterparty_account_number=counterparty
        )
        self.balance += record.signed_amount
        self.transactions.append(record)
        return record


@dataclass(eq=False)
class CheckingAccount(Account):
    """
    Everyday account with an optional overdraft.

    A debit is allowed while balance plus overdraft limit covers it, so
    the balance may go negative down to -overdraft_limit.
    """
    overdraft_limit: Decimal = ZERO
    monthly_withdrawals: int = 0

    product_type: ClassVar[ProductType] = ProductType.CHECKING

    def __post_init__(self):
        super().__post_init__()
        self.overdraft_limit = to_decimal(self.overdraft_limit)
        if self.overdraft_limit < ZERO:
            raise ValueError("Overdraft limit must not be negative")

    def can_withdraw(self, amount: Decimal) -> bool:
        # Closed accounts pass this check; the service layer is what keeps
        # them from transacting.
        return not self.is_active or (self.balance + self.overdraft_limit) >= to_decimal(amount)

    def available_balance(self) -> Decimal:
        return self.balance + self.overdraft_limit

    def _after_withdrawal(self) -> None:
        self.monthly_withdrawals += 1
        # TODO: charge an overdraft fee once fee schedules are configurable

    def revert_withdrawal_count(self) -> None:
        if self.monthly_withdrawals > 0:
            self.monthly_withdrawals -= 1

    def set_overdraft_limit(self, limit: AmountLike) -> bool:
        limit = parse_amount(limit)
        if limit is None or limit < ZERO:
            return False
        self.overdraft_limit = limit
        return True

    def reset_monthly_withdrawals(self) -> None:
        self.monthly_withdrawals = 0


@dataclass(eq=False)
class SavingsAccount(Account):
    """
    Interest-bearing account with a monthly withdrawal cap and a
    minimum balance that debits may not break.
    """
    interest_rate: Decimal = SAVINGS_DEFAULT_INTEREST_RATE
    withdrawals_this_month: int = 0
    withdrawal_penalty: Decimal = SAVINGS_WITHDRAWAL_PENALTY
    minimum_balance: Decimal = SAVINGS_MINIMUM_BALANCE
    max_monthly_withdrawals: int = SAVINGS_MAX_MONTHLY_WITHDRAWALS

    product_type: ClassVar[ProductType] = ProductType.SAVINGS

    def __post_init__(self):
        super().__post_init__()
        self.interest_rate = to_decimal(self.interest_rate)
        self.withdrawal_penalty = to_decimal(self.withdrawal_penalty)
        self.minimum_balance = to_decimal(self.minimum_balance)
        if not ZERO <= self.interest_rate <= Decimal('1'):
            raise ValueError("Interest rate must be between 0 and 1")
        if self.withdrawal_penalty < ZERO:
            raise ValueError("Withdrawal penalty must not be negative")

    def can_withdraw(self, amount: Decimal) -> bool:
        if not self.is_active:
            return False
        if self.withdrawals_this_month >= self.max_monthly_withdrawals:
            return False
        if (self.balance - to_decimal(amount)) < self.minimum_balance:
            return False
        return True

    def _after_withdrawal(self) -> None:
        self.withdrawals_this_month += 1

        # Only reachable if a debit bypassed the cap check in can_withdraw
        if self.withdrawals_this_month > self.max_monthly_withdrawals:
            self._post(
                TransactionKind.WITHDRAWAL_PENALTY,
                self.withdrawal_penalty,
                "Excess withdrawal penalty"
            )

    def apply_monthly_interest(self, precision: int = DEFAULT_PRECISION) -> Decimal:
        """
        Credit one month of interest.

        The annual rate is divided by 12 and the result rounded to cents,
        so the recorded amount is exactly what the balance gained.

        Returns:
            The interest credited
        """
        interest = round_amount(self.balance * (self.interest_rate / Decimal('12')), precision)
        self._post(TransactionKind.INTEREST, interest, "Monthly interest credit")
        return interest

    def revert_withdrawal_count(self) -> None:
        if self.withdrawals_this_month > 0:
            self.withdrawals_this_month -= 1

    def reset_monthly_withdrawals(self) -> None:
        """Start a new billing cycle"""
        self.withdrawals_this_month = 0

    def projected_annual_interest(self) -> Decimal:
        return self.balance * self.interest_rate

    def set_interest_rate(self, rate: AmountLike) -> bool:
        rate = parse_amount(rate)
        if rate is None or not ZERO <= rate <= Decimal('1'):
            return False
        self.interest_rate = rate
        return True

    def set_withdrawal_penalty(self, penalty: AmountLike) -> bool:
        penalty = parse_amount(penalty)
        if penalty is None or penalty < ZERO:
            return False
        self.withdrawal_penalty = penalty
        return True
