"""Conversion provider interface."""
from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from moneytransfer.currency.models import ConversionResult
from moneytransfer.currency.normalizer import quantize_money
from moneytransfer.utils.errors import ValidationError


class ConversionProvider(ABC):
    """Abstract base class for conversion rate sources."""

    NAME: str = "base"

    @abstractmethod
    async def convert(self, from_code: str, to_code: str, amount: Decimal) -> ConversionResult:
        """Convert ``amount`` of ``from_code`` into ``to_code``.

        Raises:
            ProviderError: On network, decoding or server failure
        """

    async def convert_reverse(self, from_code: str, to_code: str, amount: Decimal) -> ConversionResult:
        """Work out how much ``from_code`` is needed to receive ``amount`` of ``to_code``.

        The forward rate is fetched for 1 unit and the target amount divided
        by it, so the returned rate still reads ``from -> to``.
        """
        unit = await self.convert(from_code, to_code, Decimal("1"))
        source_amount = quantize_money(amount / unit.rate)
        return ConversionResult(
            from_currency=unit.from_currency,
            to_currency=unit.to_currency,
            source_amount=source_amount,
            target_amount=amount,
            rate=unit.rate,
        )

    @staticmethod
    def check_currency_pair(from_code: str, to_code: str) -> None:
        """Reject codes that cannot go into a request: 3 uppercase ASCII letters only."""
        for code in (from_code, to_code):
            if not (isinstance(code, str) and len(code) == 3 and code.isascii() and code.isalpha() and code.isupper()):
                raise ValidationError(f"Currency code must be 3 uppercase letters, got {code!r}")
