"""Live FX-rate provider over HTTP."""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict

import httpx

from moneytransfer.currency.models import ConversionResult
from moneytransfer.providers.base import ConversionProvider
from moneytransfer.utils.decorators import log_execution
from moneytransfer.utils.errors import ProviderError, ProviderErrorKind, ValidationError
from moneytransfer.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_ENDPOINT = "https://my.transfergo.com/api/fx-rates"
DEFAULT_TIMEOUT = 10.0

_REQUIRED_FIELDS = ("from", "to", "rate", "fromAmount", "toAmount")


class HttpConversionProvider(ConversionProvider):
    """Calls ``GET <endpoint>?from=..&to=..&amount=..`` and decodes the JSON body.

    Failures are never retried here; the caller decides when to ask again.
    """

    NAME = "http"

    def __init__(self, endpoint: str = DEFAULT_ENDPOINT, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.endpoint = endpoint
        self.timeout = float(timeout)
        self.headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def _check_endpoint(self) -> httpx.URL:
        try:
            url = httpx.URL(self.endpoint)
        except (httpx.InvalidURL, TypeError) as e:
            raise ProviderError(ProviderErrorKind.INVALID_URL, detail=str(e))
        if url.scheme not in ("http", "https") or not url.host:
            raise ProviderError(ProviderErrorKind.INVALID_URL, detail=self.endpoint)
        return url

    @log_execution(log_args=False, log_result=False)
    async def convert(self, from_code: str, to_code: str, amount: Decimal) -> ConversionResult:
        url = self._check_endpoint()
        try:
            self.check_currency_pair(from_code, to_code)
        except ValidationError as e:
            raise ProviderError(ProviderErrorKind.INVALID_URL, detail=str(e))
        params ={"from": from_code, "to": to_code, "amount": format(amount, "f")}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, headers=self.headers) as client:
                resp = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            logger.error(f"FX rate request timed out after {self.timeout}s: {e}")
            raise ProviderError(ProviderErrorKind.TIMEOUT, detail=str(e))
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise ProviderError(ProviderErrorKind.INVALID_URL, detail=str(e))
        except httpx.HTTPError as e:
            logger.error(f"FX rate request failed: {e}")
            raise ProviderError(ProviderErrorKind.UNKNOWN, detail=str(e))

        logger.debug(f"FX rate response {resp.status_code}: {resp.text[:200]}")

        if not 200 <= resp.status_code <= 299:
            raise ProviderError(ProviderErrorKind.SERVER_ERROR, status_code=resp.status_code)

        try:
            data = resp.json(parse_float=Decimal)
        except ValueError as e:
            logger.error(f"Failed to decode FX rate response: {e}")
            raise ProviderError(ProviderErrorKind.DECODING_ERROR, detail=str(e))

        return self._parse_body(data)

    def _parse_body(self, data: Any) -> ConversionResult:
        if not isinstance(data, dict):
            raise ProviderError(ProviderErrorKind.DECODING_ERROR, detail="body is not a JSON object")
        missing = [name for name in _REQUIRED_FIELDS if data.get(name) is None]
        if missing:
            logger.error(f"FX rate response missing fields: {missing}")
            raise ProviderError(ProviderErrorKind.DECODING_ERROR, detail=f"missing fields: {missing}")

        try:
            values: Dict[str, Decimal] = {
                name: Decimal(str(data[name])) for name in ("rate", "fromAmount", "toAmount")
            }
        except (InvalidOperation, ValueError) as e:
            raise ProviderError(ProviderErrorKind.DECODING_ERROR, detail=str(e))
        if not all(value.is_finite() for value in values.values()):
            raise ProviderError(ProviderErrorKind.DECODING_ERROR, detail="non-finite number in body")

        try:
            return ConversionResult(
                from_currency=str(data["from"]),
                to_currency=str(data["to"]),
                source_amount=values["fromAmount"],
                target_amount=values["toAmount"],
                rate=values["rate"],
            )
        except ValidationError as e:
            raise ProviderError(ProviderErrorKind.INVALID_RESPONSE, detail=str(e))
