"""
Bank Ledger Engine

Owns every customer account together with the bank-wide reserve pool.
Each operation validates amount bounds and reserve sufficiency before it
touches an account, then moves the reserve by the same amount, so the
reserve column stays in step with account activity. Reserves are tracked
independently and are never recomputed from account balances.
"""

from contextlib import contextmanager
from threading import RLock
from typing import Dict, Iterator, List, Optional

from .accounts import Account, AccountSnapshot
from .config import LedgerConfig
from .currency import AmountLike, Currency, Money, to_money
from .errors import (
    AccountNotFoundError,
    DuplicateAccountError,
    InsufficientReservesError,
    InvalidDepositAmountError,
    InvalidLoanAmountError,
    InvalidWithdrawalAmountError,
    LedgerError,
)
from .logging_config import get_logger, log_action


class Ledger:
    """
    Single-bank ledger with configurable deposit, withdrawal and loan ceilings

    All public operations run under one re-entrant lock per ledger, so the
    validate / mutate account / mutate reserves sequence is observed as a
    single step by other callers.
    """

    def __init__(
        self,
        max_deposit: AmountLike,
        max_withdrawal: AmountLike,
        max_loan: AmountLike,
        currency: Currency = Currency.USD
    ):
        self.currency = currency
        self._max_deposit = to_money(max_deposit, currency)
        self._max_withdrawal = to_money(max_withdrawal, currency)
        self._max_loan = to_money(max_loan, currency)
        self._accounts: Dict[str, Account] = {}
        self._reserves = Money.zero(currency)
        self._lock = RLock()
        self.logger = get_logger("bank_ledger.ledger")

    @classmethod
    def from_config(cls, config: LedgerConfig) -> 'Ledger':
        """Build a ledger from configuration, seeding the opening reserves"""
        ledger = cls(
            max_deposit=config.max_deposit,
            max_withdrawal=config.max_withdrawal,
            max_loan=config.max_loan,
            currency=Currency.from_code(config.currency)
        )
        opening = to_money(config.initial_reserves, ledger.currency)
        if opening.is_negative():
            raise ValueError(f"Initial reserves cannot be negative: {opening.to_string()}")
        if opening.is_positive():
            ledger.add_to_reserves(opening)
        return ledger

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, holder_id: object) -> bool:
        return holder_id in self._accounts

    def __repr__(self) -> str:
        return (
            f"Ledger(accounts={len(self._accounts)}, reserves={self._reserves.to_string()})"
        )

    @contextmanager
    def _operation(self, action: str, holder_id: Optional[str] = None,
                   amount: Optional[Money] = None) -> Iterator[None]:
        """Run one ledger operation under the lock, logging rejections"""
        with self._lock:
            try:
                yield
            except LedgerError as e:
                log_action(
                    self.logger, "warning", f"{action} rejected: {e}",
                    action=action,
                    holder_id=holder_id,
                    amount=str(amount.amount) if amount is not None else None,
                    reserves=str(self._reserves.amount),
                    error_kind=e.kind.value
                )
                raise

    def _log_success(self, action: str, holder_id: Optional[str], amount: Money) -> None:
        log_action(
            self.logger, "info", f"{action} completed",
            action=action,
            holder_id=holder_id,
            amount=str(amount.amount),
            reserves=str(self._reserves.amount)
        )

    def _money(self, amount: AmountLike) -> Money:
        return to_money(amount, self.currency)

    # Limits

    @property
    def max_deposit(self) -> Money:
        return self._max_deposit

    @property
    def max_withdrawal(self) -> Money:
        return self._max_withdrawal

    @property
    def max_loan(self) -> Money:
        return self._max_loan

    def get_max_deposit(self) -> Money:
        return self._max_deposit

    def get_max_withdrawal(self) -> Money:
        return self._max_withdrawal

    def get_max_loan(self) -> Money:
        return self._max_loan

    # Setters only affect validations that run after them

    def set_max_deposit(self, max_deposit: AmountLike) -> None:
        limit = self._money(max_deposit)
        with self._lock:
            previous, self._max_deposit = self._max_deposit, limit
        self._log_limit_change("max_deposit", previous, limit)

    def set_max_withdrawal(self, max_withdrawal: AmountLike) -> None:
        limit = self._money(max_withdrawal)
        with self._lock:
            previous, self._max_withdrawal = self._max_withdrawal, limit
        self._log_limit_change("max_withdrawal", previous, limit)

    def set_max_loan(self, max_loan: AmountLike) -> None:
        limit = self._money(max_loan)
        with self._lock:
            previous, self._max_loan = self._max_loan, limit
        self._log_limit_change("max_loan", previous, limit)

    def _log_limit_change(self, name: str, previous: Money, limit: Money) -> None:
        log_action(
            self.logger, "info", f"{name} changed",
            action=f"set_{name}",
            amount=str(limit.amount),
            extra={"previous": str(previous.amount)}
        )

    # Validation

    def check_deposit_amount(self, amount: AmountLike) -> None:
        """
        Validate a deposit amount against the deposit ceiling

        Raises:
            InvalidDepositAmountError: If amount <= 0 or amount > max deposit
        """
        amount = self._money(amount)
        if not amount.is_positive():
            raise InvalidDepositAmountError(amount, "Amount must be greater than zero")
        if amount > self._max_deposit:
            raise InvalidDepositAmountError(amount, "Amount exceeds the maximum allowed deposit limit")

    def check_withdrawal_amount(self, amount: AmountLike) -> None:
        """
        Validate a withdrawal amount against the withdrawal ceiling

        Raises:
            InvalidWithdrawalAmountError: If amount <= 0 or amount > max withdrawal
        """
        amount = self._money(amount)
        if not amount.is_positive():
            raise InvalidWithdrawalAmountError(amount, "Amount must be greater than zero")
        if amount > self._max_withdrawal:
            raise InvalidWithdrawalAmountError(amount, "Amount exceeds the maximum allowed withdrawal limit")

    def check_loan_amount(self, amount: AmountLike) -> None:
        """
        Validate a loan amount against the loan ceiling

        Raises:
            InvalidLoanAmountError: If amount <= 0 or amount > max loan
        """
        amount = self._money(amount)
        if not amount.is_positive():
            raise InvalidLoanAmountError(amount, "Amount must be greater than zero")
        if amount > self._max_loan:
            raise InvalidLoanAmountError(amount, "Amount exceeds the maximum allowed loan limit")

    def check_amount_in_reserves(self, amount: AmountLike) -> None:
        """
        Check the reserves can cover an amount

        Raises:
            InsufficientReservesError: If amount exceeds current reserves
        """
        amount = self._money(amount)
        if self._reserves < amount:
            raise InsufficientReservesError(amount, self._reserves)

    # Reserves

    def get_reserves(self) -> Money:
        return self._reserves

    @property
    def reserves(self) -> Money:
        return self._reserves

    def add_to_reserves(self, amount: AmountLike) -> Money:
        """Increase reserves unconditionally and return the new total"""
        amount = self._money(amount)
        with self._lock:
            self._reserves = self._reserves + amount
            return self._reserves

    def subtract_from_reserves(self, amount: AmountLike) -> Money:
        """
        Decrease reserves and return the new total

        Raises:
            InsufficientReservesError: If amount exceeds current reserves
        """
        amount = self._money(amount)
        with self._lock:
            self.check_amount_in_reserves(amount)
            self._reserves = self._reserves - amount
            return self._reserves

    # Accounts

    def _find_account(self, holder_id: str) -> Account:
        account = self._accounts.get(holder_id)
        if account is None:
            raise AccountNotFoundError(holder_id)
        return account

    def get_account(self, holder_id: str) -> AccountSnapshot:
        """
        Get a read-only view of the account for a holder

        Raises:
            AccountNotFoundError: If no account matches holder_id exactly
        """
        with self._lock:
            return self._find_account(holder_id).snapshot()

    def has_account(self, holder_id: str) -> bool:
        return holder_id in self._accounts

    def list_accounts(self) -> List[AccountSnapshot]:
        """All accounts in the order they were opened"""
        with self._lock:
            return [account.snapshot() for account in self._accounts.values()]

    def get_account_balance(self, holder_id: str) -> Money:
        with self._lock:
            return self._find_account(holder_id).balance

    def get_loan_balance(self, holder_id: str) -> Money:
        with self._lock:
            return self._find_account(holder_id).loan_balance

    def total_deposits(self) -> Money:
        """Sum of current account balances (informational, not the reserve)"""
        with self._lock:
            return sum(
                (account.balance for account in self._accounts.values()),
                Money.zero(self.currency)
            )

    def total_loans_outstanding(self) -> Money:
        """Sum of outstanding loan balances across all accounts"""
        with self._lock:
            return sum(
                (account.loan_balance for account in self._accounts.values()),
                Money.zero(self.currency)
            )

    def add_account(self, holder_id: str, initial_deposit: AmountLike) -> AccountSnapshot:
        """
        Open an account with an initial deposit

        Args:
            holder_id: Unique identifier of the account holder
            initial_deposit: Opening balance, validated like any deposit

        Returns:
            Snapshot of the new account

        Raises:
            InvalidDepositAmountError: If the initial deposit is out of bounds
            DuplicateAccountError: If the holder already has an account
        """
        amount = self._money(initial_deposit)
        with self._operation("add_account", holder_id, amount):
            self.check_deposit_amount(amount)
            if holder_id in self._accounts:
                raise DuplicateAccountError(holder_id)

            account = Account(holder_id, amount)
            self._accounts[holder_id] = account
            self.add_to_reserves(amount)

            self._log_success("add_account", holder_id, amount)
            return account.snapshot()

    def remove_account(self, holder_id: str) -> AccountSnapshot:
        """
        Close an account and pay its balance out of the reserves

        The reserve check happens before the account is removed, so a
        rejected closure leaves both the account and the reserves as they were.

        Returns:
            Final snapshot of the closed account

        Raises:
            AccountNotFoundError: If the holder has no account
            InvalidLoanAmountError: If a loan balance is still outstanding
            InsufficientReservesError: If reserves cannot cover the balance
        """
        with self._operation("remove_account", holder_id):
            account = self._find_account(holder_id)
            if account.has_outstanding_loan:
                raise InvalidLoanAmountError(
                    account.loan_balance,
                    "Loan balance must be 0 to close account",
                    holder_id=holder_id
                )
            balance = account.balance
            self.check_amount_in_reserves(balance)

            final = account.snapshot()
            del self._accounts[holder_id]
            self.subtract_from_reserves(balance)

            self._log_success("remove_account", holder_id, balance)
            return final

    def deposit(self, holder_id: str, amount: AmountLike) -> AccountSnapshot:
        """
        Deposit into an account

        Raises:
            InvalidDepositAmountError: If amount is out of bounds
            AccountNotFoundError: If the holder has no account
        """
        amount = self._money(amount)
        with self._operation("deposit", holder_id, amount):
            self.check_deposit_amount(amount)
            account = self._find_account(holder_id)
            account.deposit(amount)
            self.add_to_reserves(amount)

            self._log_success("deposit", holder_id, amount)
            return account.snapshot()

    def withdraw(self, holder_id: str, amount: AmountLike) -> AccountSnapshot:
        """
        Withdraw from an account

        Checks run in order: amount bounds, reserves, account lookup,
        account balance.

        Raises:
            InvalidWithdrawalAmountError: If amount is out of bounds
            InsufficientReservesError: If reserves cannot cover the amount
            AccountNotFoundError: If the holder has no account
            InsufficientFundsError: If the account balance cannot cover the amount
        """
        amount = self._money(amount)
        with self._operation("withdraw", holder_id, amount):
            self.check_withdrawal_amount(amount)
            self.check_amount_in_reserves(amount)
            account = self._find_account(holder_id)
            account.withdraw(amount)
            self.subtract_from_reserves(amount)

            self._log_success("withdraw", holder_id, amount)
            return account.snapshot()

    def approve_loan(self, holder_id: str, amount: AmountLike) -> AccountSnapshot:
        """
        Disburse a loan to an account holder out of the reserves

        Raises:
            InvalidLoanAmountError: If amount is out of bounds
            InsufficientReservesError: If reserves cannot cover the loan
            AccountNotFoundError: If the holder has no account
        """
        amount = self._money(amount)
        with self._operation("approve_loan", holder_id, amount):
            self.check_loan_amount(amount)
            self.check_amount_in_reserves(amount)
            account = self._find_account(holder_id)
            account.add_to_loan_balance(amount)
            self.subtract_from_reserves(amount)

            self._log_success("approve_loan", holder_id, amount)
            return account.snapshot()

    def repay_loan(self, holder_id: str, amount: AmountLike) -> AccountSnapshot:
        """
        Repay part or all of an outstanding loan

        Repayments are bounded by the deposit ceiling.

        Raises:
            InvalidDepositAmountError: If amount is out of deposit bounds
            AccountNotFoundError: If the holder has no account
            InvalidLoanAmountError: If amount exceeds the outstanding loan
        """
        amount = self._money(amount)
        with self._operation("repay_loan", holder_id, amount):
            self.check_deposit_amount(amount)
            account = self._find_account(holder_id)
            account.subtract_from_loan_balance(amount)
            self.add_to_reserves(amount)

            self._log_success("repay_loan", holder_id, amount)
            return account.snapshot()
