"""Parsing of "Path=Value" specifications used on the command line."""

from decimal import Decimal, InvalidOperation

from ledgerbook.domain.amount import Amount
from ledgerbook.domain.entities import PositionInput


def split_assignment(spec: str) -> tuple[str, str]:
    """Split "Account : Path=Value" at the last '='.

    Raises:
        ValueError: If there is no '=' or either side is empty
    """
    path, sep, value = spec.rpartition("=")
    if not sep or not path.strip() or not value.strip():
        raise ValueError(f"Expected ACCOUNT=VALUE, got '{spec}'")
    return path.strip(), value.strip()


def parse_decimal(value_str: str) -> Decimal:
    """Parse a plain number, accepting a decimal comma ("19,5").

    Raises:
        ValueError: If the value is not a finite number
    """
    text = value_str.strip().replace(" ", "")
    if "," in text and "." not in text:
        text = text.replace(",", ".")
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse number '{value_str}'")
    if not value.is_finite():
        raise ValueError(f"Could not parse number '{value_str}'")
    return value


def parse_position(spec: str, currency: str) -> PositionInput:
    """Parse "Ausgaben : Büro=-12,50" into a PositionInput.

    The amount accepts German and plain notation (see Amount.parse).

    Raises:
        ValueError: If the spec is malformed
        InvalidAmountFormatError: If the amount cannot be parsed
    """
    path, value = split_assignment(spec)
    return PositionInput(account_path=path, amount=Amount.parse(value, currency))
