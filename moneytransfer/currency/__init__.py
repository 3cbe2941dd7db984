"""Currency catalog, amount handling and conversion models.

The orchestrator and service live in their own modules and are imported
from there, since they depend on :mod:`moneytransfer.providers`.
"""

from .catalog import CATALOG, EUR, GBP, PLN, UAH, Currency, CurrencyCatalog
from .models import ConversionPhase, ConversionRequest, ConversionResult, OrchestratorState
from .normalizer import is_over_limit, normalize, parse, quantize_money, validate_amount

__all__ = [
    "CATALOG",
    "ConversionPhase",
    "ConversionRequest",
    "ConversionResult",
    "Currency",
    "CurrencyCatalog",
    "EUR",
    "GBP",
    "OrchestratorState",
    "PLN",
    "UAH",
    "is_over_limit",
    "normalize",
    "parse",
    "quantize_money",
    "validate_amount",
]
