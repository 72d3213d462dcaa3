"""
Ledger Store Module

In-memory indexes for accounts, users and transaction records. The three
repositories are independent: there are no foreign keys, no cascading
deletes and no referential checks between them. Deleting a user leaves
its accounts in the account index and vice versa.

Each repository guards its own dictionary with a re-entrant lock, and the
store hands out per-account locks so a transfer can hold both of its
accounts for the duration of the debit and credit.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from .accounts import Account
from .records import TransactionRecord
from .users import User


class AccountRepository:
    """Account number -> Account"""

    def __init__(self):
        self._accounts: Dict[str, Account] = {}
        self._lock = threading.RLock()

    def save(self, account: Optional[Account]) -> bool:
        """Insert a new account. Fails if the account number is taken."""
        if account is None:
            return False
        with self._lock:
            if account.account_number in self._accounts:
                return False
            self._accounts[account.account_number] = account
            return True

    def find_by_account_number(self, account_number: str) -> Optional[Account]:
        with self._lock:
            return self._accounts.get(account_number)

    def update(self, account: Optional[Account]) -> bool:
        """Replace an existing account. Fails if the account number is unknown."""
        if account is None:
            return False
        with self._lock:
            if account.account_number not in self._accounts:
                return False
            self._accounts[account.account_number] = account
            return True

    def delete(self, account_number: str) -> bool:
        with self._lock:
            return self._accounts.pop(account_number, None) is not None

    def exists(self, account_number: str) -> bool:
        with self._lock:
            return account_number in self._accounts

    def find_all(self) -> List[Account]:
        with self._lock:
            return list(self._accounts.values())

    def count(self) -> int:
        with self._lock:
            return len(self._accounts)

    def clear(self) -> None:
        with self._lock:
            self._accounts.clear()


class UserRepository:
    """User id -> User, with a username lookup"""

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._lock = threading.RLock()

    def save(self, user: Optional[User]) -> bool:
        """Insert a new user. Fails if the user id is taken."""
        if user is None:
            return False
        with self._lock:
            if user.user_id in self._users:
                return False
            self._users[user.user_id] = user
            return True

    def find_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def find_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return user
            return None

    def username_exists(self, username: str) -> bool:
        return self.find_by_username(username) is not None

    def update(self, user: Optional[User]) -> bool:
        """Replace an existing user. Fails if the user id is unknown."""
        if user is None:
            return False
        with self._lock:
            if user.user_id not in self._users:
                return False
            self._users[user.user_id] = user
            return True

    def delete(self, user_id: str) -> bool:
        with self._lock:
            return self._users.pop(user_id, None) is not None

    def exists(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._users

    def find_all(self) -> List[User]:
        with self._lock:
            return list(self._users.values())

    def count(self) -> int:
        with self._lock:
            return len(self._users)

    def clear(self) -> None:
        with self._lock:
            self._users.clear()


class TransactionRepository:
    """
    Account number -> ordered list of records, plus an id -> record index.

    This is a secondary index, separate from the list each Account keeps.
    """

    def __init__(self):
        self._by_account: Dict[str, List[TransactionRecord]] = {}
        self._by_id: Dict[str, TransactionRecord] = {}
        self._lock = threading.RLock()

    def save(self, record: Optional[TransactionRecord]) -> bool:
        """Append a record under its account number. Fails on a duplicate id."""
        if record is None:
            return False
        with self._lock:
            if record.transaction_id in self._by_id:
                return False
            self._by_id[record.transaction_id] = record
            self._by_account.setdefault(record.account_number, []).append(record)
            return True

    def find_by_account(self, account_number: str) -> List[TransactionRecord]:
        with self._lock:
            return list(self._by_account.get(account_number, []))

    def find_recent_by_account(self, account_number: str, count: int) -> List[TransactionRecord]:
        """Last `count` records of an account, oldest first"""
        if count <= 0:
            return []
        with self._lock:
            return list(self._by_account.get(account_number, [])[-count:])

    def find_by_id(self, transaction_id: str) -> Optional[TransactionRecord]:
        with self._lock:
            return self._by_id.get(transaction_id)

    def update(self, record: Optional[TransactionRecord]) -> bool:
        """Replace the stored record with the same id. Fails if the id is unknown."""
        if record is None:
            return False
        with self._lock:
            existing = self._by_id.get(record.transaction_id)
            if existing is None or existing.account_number != record.account_number:
                return False
            records = self._by_account[record.account_number]
            records[records.index(existing)] = record
            self._by_id[record.transaction_id] = record
            return True

    def delete(self, account_number: str) -> bool:
        """Drop every record indexed under an account number"""
        with self._lock:
            records = self._by_account.pop(account_number, None)
            if records is None:
                return False
            for record in records:
                self._by_id.pop(record.transaction_id, None)
            return True

    def exists(self, transaction_id: str) -> bool:
        with self._lock:
            return transaction_id in self._by_id

    def count(self, account_number: Optional[str] = None) -> int:
        """Records of one account, or of every account when none is given"""
        if account_number is None:
            return self.total_count()
        with self._lock:
            return len(self._by_account.get(account_number, []))

    def total_count(self) -> int:
        with self._lock:
            return len(self._by_id)

    def clear(self) -> None:
        with self._lock:
            self._by_account.clear()
            self._by_id.clear()


class LedgerStore:
    """
    The three repositories plus per-account locks.

    One instance is created by whoever assembles the system and passed
    to the services that need it.
    """

    def __init__(self):
        self.users = UserRepository()
        self.accounts = AccountRepository()
        self.transactions = TransactionRepository()
        self._account_locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, account_number: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._account_locks.get(account_number)
            if lock is None:
                lock = threading.RLock()
                self._account_locks[account_number] = lock
            return lock

    @contextmanager
    def lock_accounts(self, *account_numbers: str) -> Iterator[None]:
        """Hold the locks of the given accounts, acquired in sorted order"""
        locks = [self._lock_for(number) for number in sorted(set(account_numbers))]
        for lock in locks:
            lock.acquire()
        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()

    def delete_account(self, account_number: str) -> bool:
        """Remove an account from the account index along with its lock entry"""
        with self.lock_accounts(account_number):
            deleted = self.accounts.delete(account_number)
        with self._locks_guard:
            self._account_locks.pop(account_number, None)
        return deleted

    def clear_all(self) -> None:
        """Empty every index"""
        self.users.clear()
        self.accounts.clear()
        self.transactions.clear()
        with self._locks_guard:
            self._account_locks.clear()
