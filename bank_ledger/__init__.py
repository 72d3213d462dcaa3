"""
Bank Ledger

A single-process banking ledger with checking and savings accounts,
per-product withdrawal rules and an append-only transaction history
for every balance-changing operation. All amounts use Decimal.
"""

__version__ = "1.0.0"
