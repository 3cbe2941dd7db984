"""Pytest configuration and fixtures."""
import asyncio
import logging
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest
import yaml

from moneytransfer.currency.models import ConversionResult
from moneytransfer.currency.normalizer import quantize_money
from moneytransfer.events import EventSink
from moneytransfer.providers import ConversionProvider, FixtureProvider


def _config_data(**overrides) -> Dict[str, Any]:
    data = {
        'app': {
            'name': 'Test App',
            'version': '0.1.0',
            'debug': True
        },
        'provider': {
            'kind': 'fixture',
            'fixture': {'delay_seconds': 0},
            'http': {'endpoint': 'https://fx.example.test/api/fx-rates', 'timeout': 5},
        },
        'converter': {
            'debounce_seconds': 0.01,
            'default_from': 'PLN',
            'default_to': 'UAH',
            'default_amount': '100.00',
        },
        'events': {
            'console': {'enabled': False, 'print_parameters': True},
            'logging': {'enabled': False},
        },
        'security': {'policy': 'warn'},
        'logging': {
            'level': 'WARNING',
            'format': 'text'
        }
    }
    for section, values in overrides.items():
        if isinstance(values, dict):
            data.setdefault(section, {}).update(values)
        else:
            data[section] = values
    return data


@pytest.fixture
def make_config_file():
    """Write a temporary config file; keyword arguments override top-level sections."""
    paths: List[str] = []

    def _make(**overrides) -> str:
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            yaml.dump(_config_data(**overrides), f)
            paths.append(f.name)
            return f.name

    yield _make

    for path in paths:
        Path(path).unlink(missing_ok=True)


@pytest.fixture
def temp_config_file(make_config_file):
    """Create a temporary config file for testing."""
    return make_config_file()


@pytest.fixture(autouse=True)
def restore_logging():
    """Drop handlers installed by Config loading so later tests start clean."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if not type(handler).__module__.startswith("_pytest"):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    logging.disable(logging.NOTSET)


class RecordingSink(EventSink):
    """Keeps every event in memory."""

    def __init__(self):
        self.events: List[Tuple[str, Optional[Dict[str, Any]]]] = []
        self.errors: List[Tuple[str, BaseException, Optional[Dict[str, Any]]]] = []

    def record(self, event_name, attributes=None):
        self.events.append((event_name, attributes))

    def record_error(self, event_name, error, attributes=None):
        self.errors.append((event_name, error, attributes))

    def names(self) -> List[str]:
        return [name for name, _ in self.events] + [name for name, _, _ in self.errors]


class RecordingProvider(FixtureProvider):
    """Fixture provider that remembers what it was asked."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calls: List[Tuple[str, str, Decimal]] = []

    async def convert(self, from_code, to_code, amount):
        self.calls.append((from_code, to_code, amount))
        return await super().convert(from_code, to_code, amount)


class GatedProvider(ConversionProvider):
    """Provider whose calls block until the test resolves or fails them."""

    NAME = "gated"

    def __init__(self):
        self.calls: List[Tuple[str, str, Decimal]] = []
        self._gates: List[asyncio.Future] = []

    async def convert(self, from_code, to_code, amount):
        gate = asyncio.get_running_loop().create_future()
        self.calls.append((from_code, to_code, amount))
        self._gates.append(gate)
        outcome = await gate
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def resolve(self, index: int, rate: Decimal = Decimal("7.23")) -> None:
        from_code, to_code, amount = self.calls[index]
        self._gates[index].set_result(ConversionResult(
            from_currency=from_code,
            to_currency=to_code,
            source_amount=amount,
            target_amount=quantize_money(amount * rate),
            rate=rate,
        ))

    def fail(self, index: int, error: BaseException) -> None:
        self._gates[index].set_result(error)

    async def wait_for_calls(self, count: int, timeout: float = 1.0) -> None:
        async def _poll():
            while len(self.calls) < count:
                await asyncio.sleep(0.001)

        await asyncio.wait_for(_poll(), timeout=timeout)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def fixture_provider():
    return RecordingProvider()


@pytest.fixture
def gated_provider():
    return GatedProvider()
