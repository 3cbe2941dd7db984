"""
Fixture provider for tests and offline development.
Serves conversions from a fixed rate table, no network involved.
"""
from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Dict, Optional, Tuple

from moneytransfer.currency.models import ConversionResult
from moneytransfer.currency.normalizer import quantize_money
from moneytransfer.providers.base import ConversionProvider
from moneytransfer.utils.logging import get_logger

logger = get_logger(__name__)


# 1 unit of the first currency = rate units of the second
FIXTURE_RATES: Dict[Tuple[str, str], Decimal] = {
    ("PLN", "UAH"): Decimal("7.23"),
    ("PLN", "EUR"): Decimal("0.23"),
    ("PLN", "GBP"): Decimal("0.20"),
    ("EUR", "PLN"): Decimal("4.35"),
    ("EUR", "UAH"): Decimal("31.45"),
    ("EUR", "GBP"): Decimal("0.87"),
    ("GBP", "PLN"): Decimal("5.00"),
    ("GBP", "EUR"): Decimal("1.15"),
    ("GBP", "UAH"): Decimal("36.15"),
    ("UAH", "PLN"): Decimal("0.138"),
    ("UAH", "EUR"): Decimal("0.032"),
    ("UAH", "GBP"): Decimal("0.028"),
}

DEFAULT_RATE = Decimal("1.0")


class FixtureProvider(ConversionProvider):
    """
    Deterministic provider backed by a rate table.

    Useful for:
    - Testing the orchestrator without HTTP calls
    - Running the CLI without network access

    Reverse conversions use the same directed rate as forward ones, so a
    convert followed by convert_reverse gives back the original amount.
    """

    NAME = "fixture"

    def __init__(
        self,
        rates: Optional[Dict[Tuple[str, str], Decimal]] = None,
        delay_seconds: float = 0.0,
    ):
        self.rates = dict(FIXTURE_RATES if rates is None else rates)
        self.delay_seconds = delay_seconds

    def rate_for(self, from_code: str, to_code: str) -> Decimal:
        if from_code == to_code:
            return Decimal("1")
        rate = self.rates.get((from_code, to_code))
        if rate is None:
            logger.debug(f"FixtureProvider: no rate for {from_code}/{to_code}, using {DEFAULT_RATE}")
            return DEFAULT_RATE
        return rate

    async def _simulate_latency(self) -> None:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

    async def convert(self, from_code: str, to_code: str, amount: Decimal) -> ConversionResult:
        await self._simulate_latency()
        rate = self.rate_for(from_code, to_code)
        return ConversionResult(
            from_currency=from_code,
            to_currency=to_code,
            source_amount=amount,
            target_amount=quantize_money(amount * rate),
            rate=rate,
        )

    async def convert_reverse(self, from_code: str, to_code: str, amount: Decimal) -> ConversionResult:
        await self._simulate_latency()
        rate = self.rate_for(from_code, to_code)
        return ConversionResult(
            from_currency=from_code,
            to_currency=to_code,
            source_amount=quantize_money(amount / rate),
            target_amount=amount,
            rate=rate,
        )
