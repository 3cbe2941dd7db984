"""Conversion data contracts shared by providers, the orchestrator and the UI."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from moneytransfer.currency.catalog import Currency, PLN, UAH
from moneytransfer.currency.normalizer import parse
from moneytransfer.utils.errors import InputError, InputIssue, ProviderErrorKind, ValidationError


@dataclass(frozen=True)
class ConversionRequest:
    """One conversion attempt, built when a request is issued."""

    from_currency: str
    to_currency: str
    amount: Decimal

    def __post_init__(self):
        if self.amount <= 0:
            raise InputError(InputIssue.NOT_POSITIVE, f"Amount must be positive, got: {self.amount}")


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a conversion.

    ``rate`` always reads as: 1 unit of ``from_currency`` = ``rate`` units of
    ``to_currency``.
    """

    from_currency: str
    to_currency: str
    source_amount: Decimal
    target_amount: Decimal
    rate: Decimal
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if self.rate is None or self.rate <= 0:
            raise ValidationError(f"Invalid rate: {self.rate}")

    @property
    def currency_pair(self) -> str:
        return f"{self.from_currency}/{self.to_currency}"

    def to_attributes(self) -> Dict[str, Any]:
        return {
            "from": self.from_currency,
            "to": self.to_currency,
            "amount": str(self.source_amount),
            "converted_amount": str(self.target_amount),
            "rate": str(self.rate),
        }

    def __str__(self) -> str:
        return (
            f"{self.source_amount} {self.from_currency} = {self.target_amount} {self.to_currency} "
            f"(1 {self.from_currency} = {self.rate} {self.to_currency})"
        )


class ConversionPhase(Enum):
    """Where the orchestrator is in its request cycle."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    REQUESTING = "requesting"
    SETTLED = "settled"
    FAILED = "failed"


@dataclass(frozen=True)
class OrchestratorState:
    """Snapshot of a conversion screen, replaced on every transition."""

    raw_amount_text: str = ""
    from_currency: Currency = PLN
    to_currency: Currency = UAH
    settled_result: Optional[ConversionResult] = None
    in_flight: bool = False
    last_error: Optional[ProviderErrorKind] = None
    error_message: Optional[str] = None
    phase: ConversionPhase = ConversionPhase.IDLE
    over_limit: bool = False

    @property
    def amount(self) -> Optional[Decimal]:
        return parse(self.raw_amount_text)

    @property
    def converted_amount(self) -> Optional[Decimal]:
        if self.settled_result is None:
            return None
        return self.settled_result.target_amount
