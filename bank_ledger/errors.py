"""
Ledger Error Module

Exception hierarchy for rejected ledger operations. Every error carries an
ErrorKind tag plus the offending amount and, where one exists, the value it
was checked against, so callers can branch on the kind instead of parsing
message text.
"""

from enum import Enum
from typing import Any, Dict, Optional

from .currency import Money


class ErrorKind(Enum):
    """Classification of ledger rule violations"""
    INVALID_DEPOSIT_AMOUNT = "invalid_deposit_amount"
    INVALID_WITHDRAWAL_AMOUNT = "invalid_withdrawal_amount"
    INVALID_LOAN_AMOUNT = "invalid_loan_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INSUFFICIENT_RESERVES = "insufficient_reserves"
    ACCOUNT_NOT_FOUND = "account_not_found"
    DUPLICATE_ACCOUNT = "duplicate_account"


def _format_amount(amount: Optional[Money]) -> str:
    if amount is None:
        return "n/a"
    return amount.to_string()


class LedgerError(Exception):
    """Base class for all ledger rule violations"""

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        amount: Optional[Money] = None,
        available: Optional[Money] = None,
        holder_id: Optional[str] = None,
        reason: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.amount = amount
        self.available = available
        self.holder_id = holder_id
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        """Structured representation for logs and callers"""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "amount": str(self.amount.amount) if self.amount is not None else None,
            "available": str(self.available.amount) if self.available is not None else None,
            "holder_id": self.holder_id,
            "reason": self.reason,
        }


class AmountError(LedgerError):
    """An amount fell outside the bounds allowed for an operation"""

    label = "amount"

    def __init__(self, amount: Money, reason: str, holder_id: Optional[str] = None):
        super().__init__(
            f"Invalid {self.label} amount: {_format_amount(amount)}. Reason: {reason}",
            amount=amount,
            holder_id=holder_id,
            reason=reason
        )


class InvalidDepositAmountError(AmountError):
    """Deposit (or repayment) amount is non-positive or above the deposit ceiling"""
    kind = ErrorKind.INVALID_DEPOSIT_AMOUNT
    label = "deposit"


class InvalidWithdrawalAmountError(AmountError):
    """Withdrawal amount is non-positive or above the withdrawal ceiling"""
    kind = ErrorKind.INVALID_WITHDRAWAL_AMOUNT
    label = "withdrawal"


class InvalidLoanAmountError(AmountError):
    """
    Loan amount is non-positive or above the loan ceiling, a repayment exceeds
    the outstanding loan, or an outstanding loan blocks closing the account
    """
    kind = ErrorKind.INVALID_LOAN_AMOUNT
    label = "loan"


class InsufficientFundsError(LedgerError):
    """Withdrawal exceeds the account's balance"""
    kind = ErrorKind.INSUFFICIENT_FUNDS

    def __init__(self, amount: Money, available: Money, holder_id: Optional[str] = None):
        super().__init__(
            f"Insufficient funds for withdrawal. Requested: {_format_amount(amount)}, "
            f"Available: {_format_amount(available)}",
            amount=amount,
            available=available,
            holder_id=holder_id,
            reason="Amount exceeds account balance"
        )


class InsufficientReservesError(LedgerError):
    """Requested amount exceeds the bank's aggregate reserves"""
    kind = ErrorKind.INSUFFICIENT_RESERVES

    def __init__(self, amount: Money, available: Money, holder_id: Optional[str] = None):
        super().__init__(
            f"Insufficient reserves. Requested: {_format_amount(amount)}, "
            f"Available: {_format_amount(available)}",
            amount=amount,
            available=available,
            holder_id=holder_id,
            reason="Amount exceeds bank reserves"
        )


class AccountNotFoundError(LedgerError):
    """No account matches the holder identifier"""
    kind = ErrorKind.ACCOUNT_NOT_FOUND

    def __init__(self, holder_id: str):
        super().__init__(
            f"No account found for account holder: {holder_id}",
            holder_id=holder_id,
            reason="Unknown account holder"
        )


class DuplicateAccountError(LedgerError):
    """An account already exists for the holder identifier"""
    kind = ErrorKind.DUPLICATE_ACCOUNT

    def __init__(self, holder_id: str):
        super().__init__(
            f"An account with these details already exists: {holder_id}",
            holder_id=holder_id,
            reason="Account holder already has an account"
        )
