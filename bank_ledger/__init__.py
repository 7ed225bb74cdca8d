"""
Bank Ledger

A single-bank ledger of customer accounts, deposits, withdrawals and loans
backed by one aggregate reserve pool, using Decimal money throughout.
"""

__version__ = "1.0.0"

from .accounts import Account, AccountSnapshot, AccountState
from .currency import Currency, Money
from .errors import (
    AccountNotFoundError,
    AmountError,
    DuplicateAccountError,
    ErrorKind,
    InsufficientFundsError,
    InsufficientReservesError,
    InvalidDepositAmountError,
    InvalidLoanAmountError,
    InvalidWithdrawalAmountError,
    LedgerError,
)
from .ledger import Ledger

__all__ = [
    "Account",
    "AccountNotFoundError",
    "AccountSnapshot",
    "AccountState",
    "AmountError",
    "Currency",
    "DuplicateAccountError",
    "ErrorKind",
    "InsufficientFundsError",
    "InsufficientReservesError",
    "InvalidDepositAmountError",
    "InvalidLoanAmountError",
    "InvalidWithdrawalAmountError",
    "Ledger",
    "LedgerError",
    "Money",
]
