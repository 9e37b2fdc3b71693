"""
Money value object.

Represents monetary amounts with fixed two-decimal precision and
Decimal arithmetic. The marketplace settles in a single currency, so
amounts carry no currency code.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Union

from shared.exceptions import DataValidationError, InvalidAmountError

CENTS = Decimal('0.01')
MAX_AMOUNT = Decimal('1E12')

Amount = Union[int, str, Decimal, float]


@dataclass(frozen=True)
class Money:
    """
    Immutable money value object.

    All monetary calculations preserve precision using Decimal arithmetic
    and are quantized to cents with ROUND_HALF_UP.
    """

    amount: Decimal

    def __init__(self, amount: Union[Amount, Money]):
        if isinstance(amount, Money):
            decimal_amount = amount.amount
        else:
            decimal_amount = _to_decimal(amount)

        if not decimal_amount.is_finite():
            raise DataValidationError(f"Amount cannot be infinite or NaN: {amount}")

        # Reasonable bounds check
        if abs(decimal_amount) > MAX_AMOUNT:
            raise DataValidationError(f"Amount too large: {decimal_amount}")

        decimal_amount = decimal_amount.quantize(CENTS, rounding=ROUND_HALF_UP)

        # Use object.__setattr__ since this is a frozen dataclass
        object.__setattr__(self, 'amount', decimal_amount)

    @classmethod
    def zero(cls) -> Money:
        """Create zero money."""
        return cls(Decimal('0'))

    @classmethod
    def parse_positive(cls, value: Amount) -> Money:
        """
        Strictly parse a caller-supplied amount.

        Unlike the constructor, nothing is rounded: the value must be a
        finite, positive number with at most two decimal places.

        Raises:
            InvalidAmountError: If the value does not meet those rules
        """
        if isinstance(value, bool):
            raise InvalidAmountError(value, "not a number")
        try:
            decimal_value = _to_decimal(value)
        except DataValidationError:
            raise InvalidAmountError(value, "not a number")

        if not decimal_value.is_finite():
            raise InvalidAmountError(value, "must be finite")
        if decimal_value <= 0:
            raise InvalidAmountError(value, "must be positive")
        if decimal_value > MAX_AMOUNT:
            raise InvalidAmountError(value, "too large")
        if decimal_value != decimal_value.quantize(CENTS):
            raise InvalidAmountError(value, "at most two decimal places")
        try:
            return cls(decimal_value)
        except DataValidationError as e:
            raise InvalidAmountError(value, e.message)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            raise TypeError(f"Cannot add Money and {type(other)}")
        return Money(self.amount + other.amount)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            raise TypeError(f"Cannot subtract {type(other)} from Money")
        return Money(self.amount - other.amount)

    def __mul__(self, factor: Union[int, str, Decimal]) -> Money:
        """Multiply Money by a numeric factor."""
        decimal_factor = _to_decimal(factor)
        if not decimal_factor.is_finite():
            raise DataValidationError(f"Multiplication factor cannot be infinite or NaN: {factor}")
        return Money(self.amount * decimal_factor)

    def __rmul__(self, factor: Union[int, str, Decimal]) -> Money:
        return self.__mul__(factor)

    def __neg__(self) -> Money:
        return Money(-self.amount)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Money):
            return False
        return self.amount == other.amount

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            raise TypeError(f"Cannot compare Money and {type(other)}")
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        return self < other or self == other

    def __gt__(self, other: Money) -> bool:
        return not self <= other

    def __ge__(self, other: Money) -> bool:
        return not self < other

    def __hash__(self) -> int:
        return hash(self.amount)

    def __str__(self) -> str:
        return f"{self.amount}"

    def __repr__(self) -> str:
        return f"Money(amount={self.amount})"

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    def to_string(self, precision: int = 2) -> str:
        """Format as string with specified decimal precision."""
        format_str = f"{{:.{precision}f}}"
        return format_str.format(self.amount)


def _to_decimal(value: Amount) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        # str() keeps floats from dragging binary noise into the amount
        return Decimal(str(value).strip())
    except (ValueError, TypeError, InvalidOperation) as e:
        raise DataValidationError(f"Invalid amount format: {value} ({str(e)})")


def sum_money(money_list: Iterable[Money]) -> Money:
    """Sum Money objects; an empty iterable sums to zero."""
    total = Money.zero()
    for money in money_list:
        total = total + money
    return total
