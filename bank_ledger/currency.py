"""
Money and Currency Module

ISO 4217 currency codes with their minor-unit precision, an immutable Money
value and helpers for turning user input into Decimal. NEVER uses float for
monetary values: floats are routed through str() before they become Decimal.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext, localcontext
from dataclasses import dataclass
from enum import Enum
from typing import Union
import re

# Set global decimal context for financial precision
getcontext().prec = 28

AmountLike = Union['Money', Decimal, int, float, str]

CURRENCY_SYMBOLS = "$€£¥"
NUMBER_PATTERN = re.compile(r'[-+]?[\d.,]+')


class Currency(Enum):
    """ISO 4217 Currency Codes with precision info"""
    USD = ("USD", 2)  # US Dollar, 2 decimal places
    EUR = ("EUR", 2)  # Euro, 2 decimal places
    GBP = ("GBP", 2)  # British Pound, 2 decimal places
    JPY = ("JPY", 0)  # Japanese Yen, 0 decimal places
    CAD = ("CAD", 2)  # Canadian Dollar, 2 decimal places
    CHF = ("CHF", 2)  # Swiss Franc, 2 decimal places

    def __init__(self, code: str, precision: int):
        self.code = code
        self.precision = precision

    @classmethod
    def from_code(cls, code: str) -> 'Currency':
        """Look up a currency by its ISO code (case-insensitive)"""
        try:
            return cls[code.strip().upper()]
        except KeyError:
            raise ValueError(f"Unsupported currency code: {code}")


@dataclass(frozen=True)
class Money:
    """
    Immutable money representation with currency and proper precision.
    All monetary values MUST use this class or raw Decimal.
    """
    amount: Decimal
    currency: Currency

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))

        object.__setattr__(self, 'amount', validate_decimal_precision(self.amount, self.currency))

    @classmethod
    def zero(cls, currency: Currency) -> 'Money':
        return cls(Decimal('0'), currency)

    def _check_currency(self, other: 'Money', verb: str) -> None:
        if self.currency != other.currency:
            raise ValueError(f"Cannot {verb} {self.currency.code} and {other.currency.code}")

    def __add__(self, other: 'Money') -> 'Money':
        self._check_currency(other, "add")
        with _exact_context(self.amount, other.amount, self.currency):
            return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        self._check_currency(other, "subtract")
        with _exact_context(self.amount, other.amount, self.currency):
            return Money(self.amount - other.amount, self.currency)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Money):
            return False
        return self.amount == other.amount and self.currency == other.currency

    def __hash__(self) -> int:
        return hash((self.amount, self.currency))

    def __lt__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount >= other.amount

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.amount == Decimal('0')

    def is_positive(self) -> bool:
        """Check if amount is positive"""
        return self.amount > Decimal('0')

    def is_negative(self) -> bool:
        """Check if amount is negative"""
        return self.amount < Decimal('0')

    def to_string(self) -> str:
        """Format for display"""
        if self.currency.precision == 0:
            return f"{self.currency.code} {self.amount:,.0f}"
        else:
            return f"{self.currency.code} {self.amount:,.{self.currency.precision}f}"

    def __str__(self) -> str:
        return self.to_string()


def decimal_from_string(value: str) -> Decimal:
    """
    Safely convert string to Decimal, handling common formats

    Args:
        value: String representation of number

    Returns:
        Decimal value

    Raises:
        ValueError: If string cannot be converted to valid Decimal
    """
    if not value or not isinstance(value, str):
        raise ValueError("Value must be a non-empty string")

    text = value.strip()
    try:
        return Decimal(text)
    except InvalidOperation:
        pass

    # Only currency symbols and whitespace may be dropped
    clean_value = re.sub(r'[\s' + CURRENCY_SYMBOLS + r']', '', text)
    if not NUMBER_PATTERN.fullmatch(clean_value):
        raise ValueError(f"Cannot convert '{value}' to Decimal")

    if ',' in clean_value and '.' in clean_value:
        # Both comma and dot - assume comma is thousands separator
        clean_value = clean_value.replace(',', '')
    elif ',' in clean_value and clean_value.count(',') == 1:
        # Single comma - decimal separator unless followed by a thousands group
        parts = clean_value.split(',')
        if len(parts[1]) <= 2:
            clean_value = clean_value.replace(',', '.')
        else:
            clean_value = clean_value.replace(',', '')
    elif ',' in clean_value:
        clean_value = clean_value.replace(',', '')

    try:
        return Decimal(clean_value)
    except InvalidOperation:
        raise ValueError(f"Cannot convert '{value}' to Decimal")


def validate_decimal_precision(value: Decimal, currency: Currency) -> Decimal:
    """
    Validate and round decimal to currency precision

    Args:
        value: Decimal to validate
        currency: Currency defining precision

    Returns:
        Properly rounded Decimal
    """
    with localcontext() as ctx:
        if value.is_finite():
            # Enough digits for the integer part plus the minor units
            ctx.prec = max(ctx.prec, value.adjusted() + currency.precision + 2)
        return value.quantize(
            Decimal(1).scaleb(-currency.precision),
            rounding=ROUND_HALF_UP
        )


def _exact_context(a: Decimal, b: Decimal, currency: Currency):
    """Decimal context wide enough to add or subtract a and b without rounding"""
    ctx = getcontext().copy()
    ctx.prec = max(ctx.prec, max(a.adjusted(), b.adjusted()) + currency.precision + 3)
    return localcontext(ctx)


def to_money(value: AmountLike, currency: Currency) -> Money:
    """
    Coerce an amount given by a caller into Money of the given currency

    Accepts Money (currency must match), Decimal, int, float (via str) or a
    string parsed with decimal_from_string.
    """
    if isinstance(value, Money):
        if value.currency != currency:
            raise ValueError(
                f"Amount currency {value.currency.code} does not match ledger currency {currency.code}"
            )
        return value

    if isinstance(value, bool):
        raise TypeError("Boolean is not a valid monetary amount")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        amount = decimal_from_string(value)
    else:
        raise TypeError(f"Unsupported amount type: {type(value).__name__}")

    if not amount.is_finite():
        raise ValueError(f"Amount must be a finite number, got {value!r}")

    return Money(amount, currency)
