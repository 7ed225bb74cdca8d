"""
Account Module

A customer account holds a balance and an outstanding loan balance. It only
enforces the rules it can check against its own state (no withdrawing or
repaying more than is present); limits, reserves and uniqueness belong to
the Ledger that owns it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from .currency import Money
from .errors import InsufficientFundsError, InvalidLoanAmountError


class AccountState(Enum):
    """Account lifecycle states while the account is held by a ledger"""
    ACTIVE = "active"                       # No outstanding loan
    ACTIVE_WITH_LOAN = "active_with_loan"   # Loan balance above zero, cannot be closed


@dataclass(frozen=True)
class AccountSnapshot:
    """Read-only view of an account handed out to ledger callers"""
    holder_id: str
    balance: Money
    loan_balance: Money
    state: AccountState

    @property
    def has_outstanding_loan(self) -> bool:
        return self.loan_balance.is_positive()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "holder_id": self.holder_id,
            "balance": str(self.balance.amount),
            "loan_balance": str(self.loan_balance.amount),
            "currency": self.balance.currency.code,
            "state": self.state.value,
        }


class Account:
    """
    Bank account for one holder

    The initial balance is taken as given; the caller is responsible for
    validating it before constructing the account.
    """

    def __init__(self, holder_id: str, balance: Money):
        self._holder_id = holder_id
        self._balance = balance
        self._loan_balance = Money.zero(balance.currency)

    def __repr__(self) -> str:
        return (
            f"Account({self._holder_id!r}, balance={self._balance.to_string()}, "
            f"loan_balance={self._loan_balance.to_string()})"
        )

    @property
    def holder_id(self) -> str:
        return self._holder_id

    @property
    def balance(self) -> Money:
        return self._balance

    @property
    def loan_balance(self) -> Money:
        return self._loan_balance

    @property
    def has_outstanding_loan(self) -> bool:
        return self._loan_balance.is_positive()

    @property
    def state(self) -> AccountState:
        if self.has_outstanding_loan:
            return AccountState.ACTIVE_WITH_LOAN
        return AccountState.ACTIVE

    def snapshot(self) -> AccountSnapshot:
        """Capture the current balances as an immutable view"""
        return AccountSnapshot(
            holder_id=self._holder_id,
            balance=self._balance,
            loan_balance=self._loan_balance,
            state=self.state
        )

    def check_amount_in_account(self, amount: Money) -> None:
        """
        Check that the balance covers the amount

        Raises:
            InsufficientFundsError: If amount exceeds the current balance
        """
        if self._balance < amount:
            raise InsufficientFundsError(amount, self._balance, holder_id=self._holder_id)

    def deposit(self, amount: Money) -> None:
        self._balance = self._balance + amount

    def withdraw(self, amount: Money) -> None:
        self.check_amount_in_account(amount)
        self._balance = self._balance - amount

    def check_amount_in_loan_balance(self, amount: Money) -> None:
        """
        Check that a repayment does not exceed the outstanding loan

        Raises:
            InvalidLoanAmountError: If amount exceeds the loan balance
        """
        if amount > self._loan_balance:
            raise InvalidLoanAmountError(
                amount, "Repayment amount exceeds loan balance", holder_id=self._holder_id
            )

    def add_to_loan_balance(self, amount: Money) -> None:
        self._loan_balance = self._loan_balance + amount

    def subtract_from_loan_balance(self, amount: Money) -> None:
        self.check_amount_in_loan_balance(amount)
        self._loan_balance = self._loan_balance - amount
