"""
Transaction Service Module

Deposits, withdrawals and transfers addressed by account number. The
service resolves accounts from the ledger store, lets the account apply
the balance change, writes the account back and mirrors the new records
into the store's transaction index.

Every operation answers True/False (or a list / None for reads); a
rejected request never raises.
"""

from typing import List, Optional

from .accounts import Account
from .auth import is_valid_amount
from .config import LedgerConfig, get_config
from .logging_config import get_logger, log_action
from .money import AmountLike, parse_amount
from .records import TransactionRecord
from .storage import LedgerStore


class TransactionService:
    """
    Processes balance-changing operations and serves transaction history
    """

    def __init__(self, store: LedgerStore, config: Optional[LedgerConfig] = None):
        self.store = store
        self.config = config or get_config()
        self.logger = get_logger("bank_ledger.transactions")

    def deposit(self, account_number: str, amount: AmountLike, description: str = "Deposit") -> bool:
        """Credit an active account"""
        value = parse_amount(amount)
        if not is_valid_amount(value, self.config):
            return self._reject("deposit", "invalid amount", account_number)

        account = self._active_account(account_number)
        if account is None:
            return self._reject("deposit", "account missing or closed", account_number)

        with self.store.lock_accounts(account_number):
            mark = len(account.transactions)
            if not account.deposit(value, description):
                return self._reject("deposit", "refused by account", account_number)
            self._persist(account, mark)

        log_action(self.logger, "info", "Deposit posted", action="deposit",
                   resource=account_number, extra={"amount": str(value)})
        return True

    def withdraw(self, account_number: str, amount: AmountLike, description: str = "Withdrawal") -> bool:
        """Debit an active account if its product rules allow it"""
        value = parse_amount(amount)
        if not is_valid_amount(value, self.config):
            return self._reject("withdraw", "invalid amount", account_number)

        account = self._active_account(account_number)
        if account is None:
            return self._reject("withdraw", "account missing or closed", account_number)

        with self.store.lock_accounts(account_number):
            mark = len(account.transactions)
            if not account.withdraw(value, description):
                return self._reject("withdraw", "withdrawal not permitted or insufficient funds",
                                    account_number)
            self._persist(account, mark)

        log_action(self.logger, "info", "Withdrawal posted", action="withdraw",
                   resource=account_number, extra={"amount": str(value)})
        return True

    def transfer(self, from_account_number: str, to_account_number: str,
                 amount: AmountLike, description: Optional[str] = None) -> bool:
        """
        Move funds between two active accounts

        The source is debited first, then the destination credited, with
        both accounts locked for the whole exchange. If the credit leg
        raises, the debit is compensated by crediting the source back and
        taking back its withdrawal count, and the transfer reports failure.

        Args:
            from_account_number: Account to debit
            to_account_number: Account to credit
            amount: Positive amount to move
            description: Optional text for the outgoing record

        Returns:
            True if both legs were posted
        """
        value = parse_amount(amount)
        if not is_valid_amount(value, self.config):
            return self._reject("transfer", "invalid amount", from_account_number)

        source = self._active_account(from_account_number)
        destination = self._active_account(to_account_number)
        if source is None or destination is None:
            return self._reject("transfer", "account missing or closed", from_account_number)

        with self.store.lock_accounts(from_account_number, to_account_number):
            # The source must qualify before anything is debited
            if not source.can_withdraw(value) or source.available_balance() < value:
                return self._reject("transfer", "withdrawal not permitted or insufficient funds",
                                    from_account_number)

            source_mark = len(source.transactions)
            destination_mark = len(destination.transactions)

            if not source.transfer(value, to_account_number, description):
                return self._reject("transfer", "refused by source account", from_account_number)

            try:
                destination.receive_transfer(value, from_account_number)
            except Exception:
                self.logger.exception(
                    f"Credit leg failed for transfer {from_account_number} -> {to_account_number}; "
                    "compensating source"
                )
                source.receive_transfer(value, to_account_number,
                                        f"Reversal of transfer to {to_account_number}")
                source.revert_withdrawal_count()
                self._persist(source, source_mark)
                self._persist(destination, destination_mark)
                return False

            self._persist(source, source_mark)
            self._persist(destination, destination_mark)

        log_action(
            self.logger, "info", "Transfer posted", action="transfer",
            resource=from_account_number,
            extra={"to": to_account_number, "amount": str(value)}
        )
        return True

    def get_transaction_history(self, account_number: str) -> List[TransactionRecord]:
        """All records of an account, oldest first; empty for unknown accounts"""
        account = self.store.accounts.find_by_account_number(account_number)
        if account is None:
            return []
        return list(account.transactions)

    def get_recent_transactions(self, account_number: str, count: Optional[int] = None) -> List[TransactionRecord]:
        """Last `count` records of an account, oldest first"""
        if count is None:
            count = self.config.recent_transactions_default
        account = self.store.accounts.find_by_account_number(account_number)
        if account is None:
            return []
        return account.get_recent_transactions(count)

    def get_transaction(self, transaction_id: str) -> Optional[TransactionRecord]:
        return self.store.transactions.find_by_id(transaction_id)

    def _active_account(self, account_number: str) -> Optional[Account]:
        account = self.store.accounts.find_by_account_number(account_number)
        if account is None or not account.is_active:
            return None
        return account

    def _persist(self, account: Account, mark: int) -> None:
        """Write an account back and index the records appended since `mark`"""
        self.store.accounts.update(account)
        for record in account.transactions[mark:]:
            self.store.transactions.save(record)

    def _reject(self, action: str, reason: str, account_number: str) -> bool:
        log_action(self.logger, "warning", f"Rejected {action}: {reason}",
                   action=action, resource=account_number)
        return False
