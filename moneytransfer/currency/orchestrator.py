"""Debounced conversion state machine behind a conversion screen.

One orchestrator serves one screen. Input changes are coalesced by a
debounce timer; when it fires, a single provider call is issued. Every
issued request gets a sequence number, and only the request carrying the
current number may touch state. Older calls are left to finish on their own
and their outcome is dropped, so a slow response can never overwrite the
result for newer input.

All mutating methods must be called from inside the running event loop.
"""
from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Callable, Coroutine, List, Optional, Set, Union

from moneytransfer.currency.catalog import CATALOG, PLN, UAH, Currency, CurrencyCatalog
from moneytransfer.currency.models import (
    ConversionPhase,
    ConversionRequest,
    ConversionResult,
    OrchestratorState,
)
from moneytransfer.currency.normalizer import normalize, validate_amount
from moneytransfer.events import Event, EventSink, EventType, NullSink
from moneytransfer.providers.base import ConversionProvider
from moneytransfer.utils.errors import InputError, InputIssue, ProviderError, ProviderErrorKind
from moneytransfer.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5

Listener = Callable[[OrchestratorState], None]
CurrencyRef = Union[Currency, str]


class ConversionOrchestrator:
    """Owns the from/to/amount of a conversion screen and its settled result."""

    EVENT_START = "ConversionOrchestrator_Convert_Start"
    EVENT_SUCCESS = "ConversionOrchestrator_Convert_Success"
    EVENT_FAIL = "ConversionOrchestrator_Convert_Fail"

    def __init__(
        self,
        provider: ConversionProvider,
        sink: Optional[EventSink] = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        from_currency: CurrencyRef = PLN,
        to_currency: CurrencyRef = UAH,
        amount_text: str = "",
        catalog: CurrencyCatalog = CATALOG,
    ) -> None:
        self._provider = provider
        self._sink = sink if sink is not None else NullSink()
        self._catalog = catalog
        self.debounce_seconds = debounce_seconds

        self._state = OrchestratorState(
            raw_amount_text=normalize(amount_text),
            from_currency=self._resolve(from_currency),
            to_currency=self._resolve(to_currency),
        )
        self._sequence = 0
        self._debounce_task: Optional[asyncio.Task] = None
        self._request_task: Optional[asyncio.Task] = None
        # Retired requests keep running; hold references until they finish
        self._background: Set[asyncio.Task] = set()
        self._listeners: List[Listener] = []
        self._closed = False

    # Public API -----------------------------------------------
    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with every new state snapshot.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_amount(self, raw_text: str) -> None:
        text = normalize(raw_text)
        if text == self._state.raw_amount_text:
            return
        self._ensure_open()
        self._state = replace(self._state, raw_amount_text=text)
        self._schedule(debounce=True)

    def set_from_currency(self, currency: CurrencyRef) -> None:
        resolved = self._resolve(currency)
        if resolved == self._state.from_currency:
            return
        self._ensure_open()
        self._state = replace(self._state, from_currency=resolved)
        self._schedule(debounce=True)

    def set_to_currency(self, currency: CurrencyRef) -> None:
        resolved = self._resolve(currency)
        if resolved == self._state.to_currency:
            return
        self._ensure_open()
        self._state = replace(self._state, to_currency=resolved)
        self._schedule(debounce=True)

    def swap_currencies(self) -> None:
        self._ensure_open()
        self._state = replace(
            self._state,
            from_currency=self._state.to_currency,
            to_currency=self._state.from_currency,
        )
        self._schedule(debounce=True)

    def convert_now(self) -> Optional[asyncio.Task]:
        """Convert the current input right away, skipping the debounce.

        Used for the initial conversion when a screen appears and for a
        user-triggered retry after a failure.

        Returns:
            The request task, or None when the input is not convertible
        """
        self._ensure_open()
        return self._schedule(debounce=False)

    async def wait_until_settled(self) -> OrchestratorState:
        """Wait for the active debounce timer and request to finish."""
        while True:
            pending = [
                task
                for task in (self._debounce_task, self._request_task)
                if task is not None and not task.done()
            ]
            if not pending:
                return self._state
            await asyncio.wait(pending)

    async def drain(self) -> None:
        """Wait for every outstanding task, retired ones included."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def close(self) -> None:
        """Tear the screen down. Outstanding work can no longer touch state."""
        if self._closed:
            return
        self._retire()
        self._closed = True
        self._listeners.clear()

    # Internal --------------------------------------------------
    def _resolve(self, currency: CurrencyRef) -> Currency:
        if isinstance(currency, Currency):
            return currency
        resolved = self._catalog.by_code(currency)
        if resolved is None:
            raise InputError(InputIssue.UNKNOWN_CURRENCY, f"Unsupported currency: {currency}")
        return resolved

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("ConversionOrchestrator is closed")

    def _retire(self) -> int:
        """Revoke the right of pending and in-flight work to mutate state."""
        self._sequence += 1
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None
        self._request_task = None
        return self._sequence

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    def _transition(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("State listener failed")

    def _track(self, event: Event) -> None:
        try:
            self._sink.track_event(event)
        except Exception as e:
            logger.warning(f"Event sink {self._sink.__class__.__name__} failed on {event.name}: {e}")

    def _go_idle(self, error: InputError) -> None:
        logger.debug(f"Input not convertible ({error.issue.value}): {error}")
        self._transition(
            settled_result=None,
            last_error=None,
            error_message=None,
            in_flight=False,
            phase=ConversionPhase.IDLE,
            over_limit=error.issue is InputIssue.OVER_LIMIT,
        )

    def _schedule(self, debounce: bool) -> Optional[asyncio.Task]:
        sequence = self._retire()
        try:
            validate_amount(self._state.raw_amount_text, self._state.from_currency)
        except InputError as e:
            self._go_idle(e)
            return None

        if not debounce:
            return self._issue(sequence)

        task = self._spawn(self._debounce(sequence))
        self._debounce_task = task
        self._transition(phase=ConversionPhase.DEBOUNCING, in_flight=False, over_limit=False)
        return task

    async def _debounce(self, sequence: int) -> None:
        await asyncio.sleep(self.debounce_seconds)
        if sequence != self._sequence or self._closed:
            return
        self._issue(sequence)

    def _issue(self, sequence: int) -> Optional[asyncio.Task]:
        state = self._state
        try:
            amount = validate_amount(state.raw_amount_text, state.from_currency)
        except InputError as e:
            self._go_idle(e)
            return None

        request = ConversionRequest(
            from_currency=state.from_currency.code,
            to_currency=state.to_currency.code,
            amount=amount,
        )
        # The task only starts at the next await, after the transition below
        task = self._spawn(self._run_request(sequence, request))
        self._request_task = task
        self._transition(
            phase=ConversionPhase.REQUESTING,
            in_flight=True,
            last_error=None,
            error_message=None,
            over_limit=False,
        )
        if self._is_current(sequence):
            self._track(Event(
                name=self.EVENT_START,
                attributes={"from": request.from_currency, "to": request.to_currency, "amount": str(amount)},
            ))
        return task

    async def _run_request(self, sequence: int, request: ConversionRequest) -> None:
        try:
            result = await self._provider.convert(request.from_currency, request.to_currency, request.amount)
        except ProviderError as e:
            self._accept_error(sequence, request, e)
        except Exception as e:
            logger.exception(f"Unexpected failure converting {request}")
            self._accept_error(sequence, request, ProviderError(ProviderErrorKind.UNKNOWN, detail=str(e)))
        else:
            self._accept_result(sequence, request, result)

    def _is_current(self, sequence: int) -> bool:
        return not self._closed and sequence == self._sequence

    def _accept_result(self, sequence: int, request: ConversionRequest, result: ConversionResult) -> None:
        if not self._is_current(sequence):
            logger.debug(f"Discarding result of superseded request #{sequence}: {request}")
            return
        self._transition(
            settled_result=result,
            last_error=None,
            error_message=None,
            in_flight=False,
            phase=ConversionPhase.SETTLED,
        )
        self._track(Event(name=self.EVENT_SUCCESS, attributes=result.to_attributes()))

    def _accept_error(self, sequence: int, request: ConversionRequest, error: ProviderError) -> None:
        if not self._is_current(sequence):
            logger.debug(f"Discarding failure of superseded request #{sequence}: {error!r}")
            return
        logger.warning(f"Conversion {request.from_currency}->{request.to_currency} failed: {error!r}")
        self._transition(
            settled_result=None,
            last_error=error.kind,
            error_message=str(error),
            in_flight=False,
            phase=ConversionPhase.FAILED,
        )
        self._track(Event(
            name=self.EVENT_FAIL,
            attributes={
                "error": str(error),
                "from": request.from_currency,
                "to": request.to_currency,
                "amount": str(request.amount),
            },
            type=EventType.SEVERE,
            error=error,
        ))
