"""Amount text normalization and parsing.

Turns whatever the user typed into an amount string the converter can work
with: digits plus one decimal point, at most 2 fraction digits, no leading
zeros and at most 10 integer digits. Both ``.`` and ``,`` are accepted as the
decimal separator.
"""
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from moneytransfer.currency.catalog import Currency
from moneytransfer.utils.errors import InputError, InputIssue

MAX_FRACTION_DIGITS = 2
MAX_INTEGER_DIGITS = 10

_DIGITS = "0123456789"
_SEPARATORS = ".,"
_SEPARATOR_RE = re.compile(r"[.,]")
_NUMBER_RE = re.compile(r"^(\d+\.?\d*|\.\d+)$")


def normalize(raw_text: str) -> str:
    """Normalize user-typed amount text.

    Idempotent: ``normalize(normalize(s)) == normalize(s)``.

    Args:
        raw_text: Text as typed, e.g. ``"1 234,567"``

    Returns:
        Normalized text, e.g. ``"1234.56"``
    """
    filtered = "".join(ch for ch in raw_text or "" if ch in _DIGITS or ch in _SEPARATORS)

    parts = _SEPARATOR_RE.split(filtered)
    if len(parts) > 2:
        # First separator is the decimal point, the rest are dropped
        fraction = "".join(parts[1:])[:MAX_FRACTION_DIGITS]
        text = parts[0] + "." + fraction
    else:
        text = filtered.replace(",", ".")

    dot = text.find(".")
    if dot != -1:
        text = text[: dot + 1 + MAX_FRACTION_DIGITS]

    while len(text) > 1 and text.startswith("0") and not text.startswith("0."):
        text = text[1:]

    dot = text.find(".")
    if dot != -1:
        if dot > MAX_INTEGER_DIGITS:
            text = text[:MAX_INTEGER_DIGITS] + text[dot:]
    elif len(text) > MAX_INTEGER_DIGITS:
        text = text[:MAX_INTEGER_DIGITS]

    return text


def parse(text: str) -> Optional[Decimal]:
    """Parse amount text into a Decimal; None when empty or not a number."""
    if not text:
        return None
    candidate = text.strip().replace(",", ".")
    if not _NUMBER_RE.match(candidate):
        return None
    try:
        return Decimal(candidate)
    except InvalidOperation:
        return None


def is_over_limit(amount: Decimal, currency: Currency) -> bool:
    return amount > 0 and amount > currency.limit


def validate_amount(text: str, currency: Currency) -> Decimal:
    """
    Validate amount text for sending in ``currency``.

    Args:
        text: Amount text (normalized or not)
        currency: Currency the amount is expressed in

    Returns:
        Parsed amount

    Raises:
        InputError: If the amount is empty, not positive or over the limit
    """
    amount = parse(text)
    if amount is None:
        raise InputError(InputIssue.EMPTY, f"No amount entered: {text!r}")
    if amount <= 0:
        raise InputError(InputIssue.NOT_POSITIVE, f"Amount must be positive, got: {amount}")
    if is_over_limit(amount, currency):
        raise InputError(
            InputIssue.OVER_LIMIT,
            f"Maximum sending amount: {currency.limit} {currency.code}",
        )
    return amount


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half up."""
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
