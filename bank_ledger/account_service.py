"""
Account Service Module

Opens, looks up and closes accounts against the ledger store. Failures
are reported as None / False; nothing here raises for a rejected request.
"""

from decimal import Decimal
from typing import List, Optional

from .accounts import Account, CheckingAccount, ProductType, SavingsAccount
from .config import LedgerConfig, get_config
from .identifiers import generate_account_number
from .logging_config import get_logger, log_action
from .money import ZERO, AmountLike, parse_amount
from .storage import LedgerStore
from .users import User


class AccountService:
    """
    Manages account lifecycle
    """

    def __init__(self, store: LedgerStore, config: Optional[LedgerConfig] = None):
        self.store = store
        self.config = config or get_config()
        self.logger = get_logger("bank_ledger.accounts")

    def create_account(
        self,
        user: Optional[User],
        initial_balance: AmountLike,
        product_type: ProductType,
        overdraft_limit: Optional[AmountLike] = None,
        interest_rate: Optional[AmountLike] = None
    ) -> Optional[Account]:
        """
        Open a new account for a user

        Args:
            user: Owner of the account
            initial_balance: Opening balance, must not be negative
            product_type: CHECKING or SAVINGS
            overdraft_limit: Checking only, must not be negative
            interest_rate: Savings only, annual rate between 0 and 1

        Returns:
            The new account, or None if any input is invalid or the
            account could not be stored and attached to the user
        """
        if user is None:
            return self._reject("create_account", "no owner given")

        balance = parse_amount(initial_balance)
        if balance is None or balance < ZERO:
            return self._reject("create_account", "invalid initial balance", user)

        account_number = self._next_account_number()
        if account_number is None:
            return self._reject("create_account", "could not allocate an account number", user)

        if product_type == ProductType.CHECKING:
            limit = self._resolve(overdraft_limit, self.config.checking_default_overdraft_limit)
            if limit is None or limit < ZERO:
                return self._reject("create_account", "invalid overdraft limit", user)
            account: Account = CheckingAccount(
                account_number=account_number,
                balance=balance,
                overdraft_limit=limit
            )
        elif product_type == ProductType.SAVINGS:
            rate = self._resolve(interest_rate, self.config.savings_default_interest_rate)
            if rate is None or not ZERO <= rate <= Decimal('1'):
                return self._reject("create_account", "invalid interest rate", user)
            account = SavingsAccount(
                account_number=account_number,
                balance=balance,
                interest_rate=rate,
                withdrawal_penalty=self.config.savings_withdrawal_penalty,
                minimum_balance=self.config.savings_minimum_balance,
                max_monthly_withdrawals=self.config.savings_max_monthly_withdrawals
            )
        else:
            return self._reject("create_account", f"unknown product type {product_type!r}", user)

        if not self.store.accounts.save(account):
            return self._reject("create_account", "account number already stored", user)

        if not user.add_account(account):
            # Do not leave an orphan visible in the store
            self.store.delete_account(account.account_number)
            return self._reject("create_account", "user already holds this account", user)

        self.store.users.update(user)

        log_action(
            self.logger, "info", "Account opened",
            user_id=user.user_id,
            action="create_account",
            resource=account.account_number,
            extra={"product_type": product_type.value, "initial_balance": str(balance)}
        )
        return account

    def create_checking_account(self, user: Optional[User], initial_balance: AmountLike,
                                overdraft_limit: Optional[AmountLike] = None) -> Optional[CheckingAccount]:
        return self.create_account(user, initial_balance, ProductType.CHECKING,
                                   overdraft_limit=overdraft_limit)

    def create_savings_account(self, user: Optional[User], initial_balance: AmountLike,
                               interest_rate: Optional[AmountLike] = None) -> Optional[SavingsAccount]:
        return self.create_account(user, initial_balance, ProductType.SAVINGS,
                                   interest_rate=interest_rate)

    def get_account(self, account_number: str) -> Optional[Account]:
        return self.store.accounts.find_by_account_number(account_number)

    def get_user_accounts(self, user_id: str) -> List[Account]:
        """Accounts attached to a user, in the order they were opened"""
        user = self.store.users.find_by_id(user_id)
        if user is None:
            return []
        return list(user.accounts)

    def close_account(self, account_number: str) -> bool:
        """Close an account and write it back"""
        account = self.get_account(account_number)
        if account is None:
            self._reject("close_account", "account not found", resource=account_number)
            return False

        account.close_account()
        self.store.accounts.update(account)
        log_action(self.logger, "info", "Account closed",
                   action="close_account", resource=account_number)
        return True

    def account_exists(self, account_number: str) -> bool:
        return self.store.accounts.exists(account_number)

    def get_account_balance(self, account_number: str) -> Decimal:
        """Current balance, or -1 if the account does not exist"""
        account = self.get_account(account_number)
        return account.balance if account is not None else Decimal('-1')

    def get_account_type(self, account_number: str) -> Optional[str]:
        account = self.get_account(account_number)
        return account.account_type if account is not None else None

    def _next_account_number(self) -> Optional[str]:
        for _ in range(self.config.account_number_max_attempts):
            number = generate_account_number()
            if not self.store.accounts.exists(number):
                return number
        return None

    @staticmethod
    def _resolve(value: Optional[AmountLike], default: Decimal) -> Optional[Decimal]:
        if value is None:
            return default
        return parse_amount(value)

    def _reject(self, action: str, reason: str, user: Optional[User] = None,
                resource: Optional[str] = None) -> None:
        log_action(
            self.logger, "warning", f"Rejected {action}: {reason}",
            user_id=user.user_id if user else None,
            action=action,
            resource=resource
        )
        return None
