"""Bank account entity used across the test suite."""

from .account import (
    AccountOpened,
    BankAccount,
    MoneyDeposited,
    MoneyWithdrawn,
    OwnerChanged,
)

__all__ = [
    "BankAccount",
    "AccountOpened",
    "MoneyDeposited",
    "MoneyWithdrawn",
    "OwnerChanged",
]
