"""
Identifier Generation Module

Generates user ids, account numbers and transaction ids. The ledger only
relies on uniqueness and equality of these strings, never on their shape.
"""

import secrets
import uuid

from .records import TransactionKind

_ID_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

_TRANSACTION_PREFIXES = {
    TransactionKind.DEPOSIT: "DEP",
    TransactionKind.WITHDRAWAL: "WTH",
    TransactionKind.TRANSFER_OUT: "TRF",
    TransactionKind.TRANSFER_IN: "TRF",
    TransactionKind.INTEREST: "INT",
    TransactionKind.WITHDRAWAL_PENALTY: "PEN",
}


def generate_user_id() -> str:
    """Generate a user id such as USER_AB12CD34"""
    return "USER_" + "".join(secrets.choice(_ID_ALPHABET) for _ in range(8))


def generate_account_number(prefix: str = "ACC") -> str:
    """Generate an account number: prefix followed by ten digits"""
    return f"{prefix}{uuid.uuid4().int % 10**10:010d}"


def generate_transaction_id(kind: TransactionKind) -> str:
    """Generate a transaction id prefixed by its kind"""
    return f"{_TRANSACTION_PREFIXES[kind]}-{uuid.uuid4().hex[:16].upper()}"
