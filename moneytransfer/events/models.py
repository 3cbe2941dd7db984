from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class EventType(Enum):
    ANALYTIC = "analytic"
    WARNING = "warning"
    SEVERE = "severe"


@dataclass(frozen=True)
class Event:
    """A named lifecycle event with optional attributes."""

    name: str
    attributes: Optional[Dict[str, Any]] = None
    type: EventType = EventType.ANALYTIC
    error: Optional[BaseException] = field(default=None, compare=False)
