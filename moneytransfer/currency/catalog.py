"""Supported currencies and their sending limits."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple


_FLAGS = {
    "PLN": "🇵🇱",
    "EUR": "🇩🇪",
    "GBP": "🇬🇧",
    "UAH": "🇺🇦",
}


@dataclass(frozen=True, eq=False)
class Currency:
    """A currency the app can send, identified by its ISO code.

    Two currencies are equal when their codes match, whatever their other
    fields say.
    """

    code: str
    display_name: str
    country: str
    limit: Decimal

    def __post_init__(self):
        if len(self.code) != 3:
            raise ValueError(f"Currency code must be exactly 3 characters, got '{self.code}'")
        if self.limit <= 0:
            raise ValueError(f"limit must be positive, got {self.limit}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Currency):
            return NotImplemented
        return self.code == other.code

    def __hash__(self) -> int:
        return hash(self.code)

    @property
    def flag(self) -> str:
        return _FLAGS.get(self.code.upper(), "🏳️")

    def __str__(self) -> str:
        return self.code


PLN = Currency(code="PLN", display_name="Polish Zloty", country="Poland", limit=Decimal("20000"))
EUR = Currency(code="EUR", display_name="Euro", country="Germany", limit=Decimal("5000"))
GBP = Currency(code="GBP", display_name="British Pound", country="Great Britain", limit=Decimal("1000"))
UAH = Currency(code="UAH", display_name="Ukrainian Hryvnia", country="Ukraine", limit=Decimal("50000"))


class CurrencyCatalog:
    """Read-only, ordered set of supported currencies."""

    def __init__(self, currencies: Tuple[Currency, ...]):
        self._currencies = tuple(currencies)

    def all(self) -> Tuple[Currency, ...]:
        return self._currencies

    def by_code(self, code: str) -> Optional[Currency]:
        """Look up a currency by code, ignoring case. Unknown codes give None."""
        if not code:
            return None
        wanted = code.strip().upper()
        for currency in self._currencies:
            if currency.code == wanted:
                return currency
        return None

    def codes(self) -> Tuple[str, ...]:
        return tuple(c.code for c in self._currencies)

    def __iter__(self):
        return iter(self._currencies)

    def __len__(self) -> int:
        return len(self._currencies)


CATALOG = CurrencyCatalog((PLN, EUR, GBP, UAH))
