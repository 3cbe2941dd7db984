"""One-shot conversions with lifecycle events.

For callers that convert once and wait for the answer (the CLI ``convert``
command). Interactive screens use :class:`ConversionOrchestrator` instead.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from moneytransfer.currency.models import ConversionRequest, ConversionResult
from moneytransfer.events import Event, EventSink, EventType, NullSink
from moneytransfer.providers.base import ConversionProvider
from moneytransfer.utils.errors import ProviderError


class ConversionService:
    EVENT_START = "ConversionService_Convert_Start"
    EVENT_SUCCESS = "ConversionService_Convert_Success"
    EVENT_FAIL = "ConversionService_Convert_Fail"

    def __init__(self, provider: ConversionProvider, sink: Optional[EventSink] = None):
        self._provider = provider
        self._sink = sink if sink is not None else NullSink()

    async def convert(self, from_code: str, to_code: str, amount: Decimal) -> ConversionResult:
        request = ConversionRequest(from_currency=from_code, to_currency=to_code, amount=amount)
        return await self._tracked(request, reverse=False)

    async def convert_reverse(self, from_code: str, to_code: str, amount: Decimal) -> ConversionResult:
        """Find the ``from_code`` amount that yields ``amount`` of ``to_code``."""
        request = ConversionRequest(from_currency=from_code, to_currency=to_code, amount=amount)
        return await self._tracked(request, reverse=True)

    async def _tracked(self, request: ConversionRequest, reverse: bool) -> ConversionResult:
        attributes = {
            "from": request.from_currency,
            "to": request.to_currency,
            "amount": str(request.amount),
            "reverse": reverse,
        }
        self._sink.track_event(Event(name=self.EVENT_START, attributes=attributes))

        call = self._provider.convert_reverse if reverse else self._provider.convert
        try:
            result = await call(request.from_currency, request.to_currency, request.amount)
        except ProviderError as e:
            self._sink.track_event(Event(
                name=self.EVENT_FAIL,
                attributes={"error": str(e)},
                type=EventType.SEVERE,
                error=e,
            ))
            raise

        self._sink.track_event(Event(name=self.EVENT_SUCCESS, attributes=result.to_attributes()))
        return result
