"""Tests for one-shot conversions."""
from decimal import Decimal

import pytest

from moneytransfer.currency.service import ConversionService
from moneytransfer.providers import FixtureProvider
from moneytransfer.utils.errors import InputError, ProviderError, ProviderErrorKind


class TimeoutProvider(FixtureProvider):
    async def convert(self, from_code, to_code, amount):
        raise ProviderError(ProviderErrorKind.TIMEOUT)


@pytest.mark.asyncio
async def test_convert_emits_events(sink):
    service = ConversionService(FixtureProvider(), sink)
    result = await service.convert("GBP", "EUR", Decimal("10"))

    assert result.target_amount == Decimal("11.50")
    assert sink.names() == [ConversionService.EVENT_START, ConversionService.EVENT_SUCCESS]
    assert sink.events[0][1] == {"from": "GBP", "to": "EUR", "amount": "10", "reverse": False}


@pytest.mark.asyncio
async def test_convert_reverse(sink):
    service = ConversionService(FixtureProvider(), sink)
    result = await service.convert_reverse("PLN", "UAH", Decimal("723"))

    assert result.source_amount == Decimal("100.00")
    assert sink.events[0][1]["reverse"] is True


@pytest.mark.asyncio
async def test_convert_failure_is_tracked_and_raised(sink):
    service = ConversionService(TimeoutProvider(), sink)

    with pytest.raises(ProviderError):
        await service.convert("PLN", "UAH", Decimal("100"))

    assert sink.names() == [ConversionService.EVENT_START, ConversionService.EVENT_FAIL]
    name, error, attributes = sink.errors[0]
    assert error.kind is ProviderErrorKind.TIMEOUT
    assert attributes == {"error": "Request timed out"}


@pytest.mark.asyncio
async def test_convert_rejects_non_positive_amount(sink):
    service = ConversionService(FixtureProvider(), sink)
    with pytest.raises(InputError):
        await service.convert("PLN", "UAH", Decimal("0"))
    assert sink.names() == []
