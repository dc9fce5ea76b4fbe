"""Exact monetary amounts.

Amounts are stored as an integer count of the currency's minor unit (cents for
EUR) together with an ISO currency code. Arithmetic that can produce fractions
of a minor unit (multiplication, division, ratios) is carried out with
``Decimal`` and rounded half-to-even before a new Amount is built, so no
Amount ever holds a fractional minor unit.
"""

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation, localcontext
from typing import Iterable, Sequence, Union

from ledgerbook.domain.errors import (
    CurrencyMismatchError,
    InvalidAmountFormatError,
    ValidationError,
)

DEFAULT_CURRENCY = "EUR"

# code -> (symbol, decimal places)
CURRENCIES: dict[str, tuple[str, int]] = {
    "EUR": ("€", 2),
    "USD": ("$", 2),
    "GBP": ("£", 2),
    "CHF": ("CHF", 2),
    "JPY": ("¥", 0),
}

_GERMAN_THOUSANDS = re.compile(r"\d\.\d{3}[,\s]")
_GERMAN_DECIMALS = re.compile(r",\d{2}$")
_CURRENCY_SYMBOLS = re.compile(r"[€$£¥]")

# Enough digits for any realistic ledger total without intermediate rounding.
_PRECISION = 60

Number = Union[int, str, Decimal, float]


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValidationError(f"Not a number: {value!r}")
    if isinstance(value, float):
        # str() gives the shortest repr, so 0.1 becomes Decimal("0.1")
        return Decimal(str(value))
    if isinstance(value, (int, str)):
        try:
            return Decimal(value)
        except InvalidOperation:
            raise ValidationError(f"Not a number: {value!r}")
    raise ValidationError(f"Not a number: {value!r}")


def _round_half_even(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_HALF_EVEN))


def decimal_places(currency: str) -> int:
    """Return the number of minor-unit digits for a currency."""
    return CURRENCIES.get(currency, (currency, 2))[1]


def currency_symbol(currency: str) -> str:
    """Return the display symbol for a currency (the code if unknown)."""
    return CURRENCIES.get(currency, (currency, 2))[0]


@dataclass(frozen=True)
class Amount:
    """Immutable money value in integer minor units."""

    minor_units: int
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        if isinstance(self.minor_units, bool) or not isinstance(self.minor_units, int):
            raise ValidationError(
                f"Minor units must be an integer, got {type(self.minor_units).__name__}"
            )
        if not self.currency:
            raise ValidationError("Currency code must not be empty")

    # Construction

    @classmethod
    def from_decimal(cls, value: Number, currency: str = DEFAULT_CURRENCY) -> "Amount":
        """Create an amount from a major-unit value.

        The value is scaled to minor units and rounded half-to-even, so
        ``Amount.from_decimal("123.455")`` is 123.46 and
        ``Amount.from_decimal("123.445")`` is 123.44.
        """
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            scaled = _to_decimal(value).scaleb(decimal_places(currency))
            if not scaled.is_finite():
                raise ValidationError(f"Amount must be finite, got {value!r}")
            return cls(_round_half_even(scaled), currency)

    @classmethod
    def from_minor_units(cls, minor_units: int, currency: str = DEFAULT_CURRENCY) -> "Amount":
        """Create an amount from an integer count of minor units."""
        return cls(minor_units, currency)

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> "Amount":
        """Return a zero amount."""
        return cls(0, currency)

    @classmethod
    def parse(cls, text: str, currency: str = DEFAULT_CURRENCY) -> "Amount":
        """Parse an amount from user input.

        German notation ("1.234,56") is detected when a dot is followed by
        three digits and a comma or space, or when the string ends in a comma
        and two digits. Otherwise the text is read as international notation
        ("1234.56"). Whitespace and currency symbols are ignored.

        Args:
            text: Amount string
            currency: Currency of the resulting amount

        Returns:
            Parsed Amount

        Raises:
            InvalidAmountFormatError: If the text is not a decimal number
        """
        if text is None:
            raise InvalidAmountFormatError("")

        # The thousands check needs the space that may follow "1.234"
        unstripped = _CURRENCY_SYMBOLS.sub("", text)
        cleaned = unstripped.strip()
        if _GERMAN_THOUSANDS.search(unstripped) or _GERMAN_DECIMALS.search(cleaned):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        cleaned = "".join(cleaned.split())

        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            raise InvalidAmountFormatError(text)
        if not value.is_finite():
            raise InvalidAmountFormatError(text)
        return cls.from_decimal(value, currency)

    # Arithmetic

    def _require_same_currency(self, other: "Amount", operation: str) -> None:
        if not isinstance(other, Amount):
            raise ValidationError(f"Cannot {operation} Amount and {type(other).__name__}")
        if other.currency != self.currency:
            raise CurrencyMismatchError(self.currency, other.currency, operation)

    def add(self, other: "Amount") -> "Amount":
        self._require_same_currency(other, "add")
        return Amount(self.minor_units + other.minor_units, self.currency)

    def subtract(self, other: "Amount") -> "Amount":
        self._require_same_currency(other, "subtract")
        return Amount(self.minor_units - other.minor_units, self.currency)

    def multiply(self, factor: Number) -> "Amount":
        """Multiply by a factor, rounding half-to-even to whole minor units."""
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            product = Decimal(self.minor_units) * _to_decimal(factor)
            return Amount(_round_half_even(product), self.currency)

    def divide(self, divisor: Number) -> "Amount":
        """Divide by a divisor, rounding half-to-even to whole minor units.

        Use ``distribute`` when the parts have to add back up to the original.
        """
        divisor = _to_decimal(divisor)
        if divisor == 0:
            raise ValidationError("Cannot divide an amount by zero")
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            quotient = Decimal(self.minor_units) / divisor
            return Amount(_round_half_even(quotient), self.currency)

    def negate(self) -> "Amount":
        return Amount(-self.minor_units, self.currency)

    def abs(self) -> "Amount":
        return Amount(abs(self.minor_units), self.currency)

    __add__ = add
    __sub__ = subtract
    __neg__ = negate
    __abs__ = abs

    def __mul__(self, factor: Number) -> "Amount":
        if isinstance(factor, Amount):
            return NotImplemented
        return self.multiply(factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: Number) -> "Amount":
        if isinstance(divisor, Amount):
            return NotImplemented
        return self.divide(divisor)

    # Comparison

    def compare(self, other: "Amount") -> int:
        """Return -1, 0 or 1 as this amount is less than, equal to or greater than other."""
        self._require_same_currency(other, "compare")
        if self.minor_units < other.minor_units:
            return -1
        if self.minor_units > other.minor_units:
            return 1
        return 0

    def __lt__(self, other: "Amount") -> bool:
        return self.compare(other) < 0

    def __le__(self, other: "Amount") -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: "Amount") -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: "Amount") -> bool:
        return self.compare(other) >= 0

    def is_zero(self) -> bool:
        return self.minor_units == 0

    def is_positive(self) -> bool:
        return self.minor_units > 0

    def is_negative(self) -> bool:
        return self.minor_units < 0

    # Distribution

    def distribute(self, parts: int) -> list["Amount"]:
        """Split the amount into ``parts`` pieces that add up exactly.

        The remainder of the division is handed out one minor unit at a time,
        starting with the first part:

            Amount.from_decimal("100.00").distribute(3)
            -> 33.34, 33.33, 33.33
        """
        if isinstance(parts, bool) or not isinstance(parts, int) or parts <= 0:
            raise ValidationError(f"Cannot distribute into {parts!r} parts")

        # divmod with a positive divisor never yields a negative remainder
        base, remainder = divmod(self.minor_units, parts)
        return [
            Amount(base + 1 if index < remainder else base, self.currency)
            for index in range(parts)
        ]

    def distribute_by_ratio(self, ratios: Sequence[Number]) -> list["Amount"]:
        """Split the amount proportionally to ``ratios``.

        Each part is rounded half-to-even; whatever the rounding gained or
        lost is added to the part with the largest ratio (the first one if
        several share the maximum), so the parts always add up exactly.
        """
        if not ratios:
            raise ValidationError("At least one ratio is required")

        with localcontext() as ctx:
            ctx.prec = _PRECISION
            values = [_to_decimal(ratio) for ratio in ratios]
            total = sum(values, Decimal(0))
            if total == 0:
                raise ValidationError("Ratios must not sum to zero")

            parts = [_round_half_even(Decimal(self.minor_units) * (value / total)) for value in values]

        imbalance = self.minor_units - sum(parts)
        if imbalance:
            largest = values.index(max(values))
            parts[largest] += imbalance
        return [Amount(part, self.currency) for part in parts]

    # Aggregation

    @classmethod
    def sum(cls, amounts: Iterable["Amount"], currency: str = DEFAULT_CURRENCY) -> "Amount":
        """Add up amounts of one currency.

        An empty iterable yields zero in ``currency``; a mixed-currency list
        raises CurrencyMismatchError.
        """
        iterator = iter(amounts)
        try:
            total = next(iterator)
        except StopIteration:
            return cls.zero(currency)
        for amount in iterator:
            total = total.add(amount)
        return total

    # Conversion and display

    def to_decimal(self) -> Decimal:
        """Return the value in major units as an exact Decimal."""
        return Decimal(self.minor_units).scaleb(-decimal_places(self.currency))

    def format(self) -> str:
        """Render the amount in German notation, e.g. ``-1.234,56 €``."""
        places = decimal_places(self.currency)
        integer_part, fraction_part = divmod(abs(self.minor_units), 10**places)

        digits = str(integer_part)
        groups = []
        while digits:
            groups.insert(0, digits[-3:])
            digits = digits[:-3]
        text = ".".join(groups)
        if places:
            text = f"{text},{fraction_part:0{places}d}"

        sign = "-" if self.minor_units < 0 else ""
        return f"{sign}{text} {currency_symbol(self.currency)}"

    def __str__(self) -> str:
        return self.format()
