"""Device security checks.

Detection itself is delegated to probe callables supplied by the host; this
module runs them, reports what was found and applies the configured policy.
"""
from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, FrozenSet, Mapping, Optional

from moneytransfer.events import Event, EventSink, EventType, NullSink
from moneytransfer.utils.errors import ConfigurationError
from moneytransfer.utils.logging import get_logger

logger = get_logger(__name__)


class WarningKind(Enum):
    JAILBROKEN = "Device is jailbroken"
    DEBUGGER_ATTACHED = "Debugger is attached"
    REVERSE_ENGINEERED = "App may be reverse engineered"
    SIMULATOR = "Running on simulator"
    TAMPERED = "App binary has been tampered"
    INTEGRITY_COMPROMISED = "App integrity is compromised"

    @property
    def message(self) -> str:
        return self.value


CRITICAL_WARNINGS: FrozenSet[WarningKind] = frozenset({
    WarningKind.JAILBROKEN,
    WarningKind.TAMPERED,
    WarningKind.REVERSE_ENGINEERED,
})


class ThreatLevel(Enum):
    CRITICAL = "Critical security threat detected"
    MODERATE = "Moderate security threat detected"
    LOW = "Low security threat detected"


_THREAT_LEVELS: Dict[WarningKind, ThreatLevel] = {
    WarningKind.JAILBROKEN: ThreatLevel.CRITICAL,
    WarningKind.DEBUGGER_ATTACHED: ThreatLevel.MODERATE,
    WarningKind.REVERSE_ENGINEERED: ThreatLevel.CRITICAL,
    WarningKind.SIMULATOR: ThreatLevel.LOW,
    WarningKind.TAMPERED: ThreatLevel.CRITICAL,
    WarningKind.INTEGRITY_COMPROMISED: ThreatLevel.CRITICAL,
}


@dataclass(frozen=True)
class SecurityReport:
    warnings: FrozenSet[WarningKind] = frozenset()
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def critical_warnings(self) -> FrozenSet[WarningKind]:
        return self.warnings & CRITICAL_WARNINGS

    @property
    def is_clean(self) -> bool:
        return not self.warnings


class SecurityPolicy(Enum):
    """What to do with a report that has warnings."""

    WARN = "warn"
    BLOCK = "block"

    @classmethod
    def from_config(cls, value: str) -> "SecurityPolicy":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(
                f"Invalid security policy: {value}. Must be one of {[p.value for p in cls]}"
            )

    def allows(self, report: SecurityReport) -> bool:
        if self is SecurityPolicy.BLOCK:
            return report.is_clean
        return not report.critical_warnings


class SecurityChecker(ABC):
    @abstractmethod
    def check(self) -> SecurityReport:
        """Inspect the environment and report what was found."""


Probe = Callable[[], bool]


def debugger_attached() -> bool:
    return sys.gettrace() is not None


def default_probes() -> Dict[WarningKind, Probe]:
    return {WarningKind.DEBUGGER_ATTACHED: debugger_attached}


class ProbeSecurityChecker(SecurityChecker):
    """Runs one probe per warning kind and collects the ones that fire."""

    EVENT_STARTED = "SecurityManager_Check_Started"
    EVENT_COMPLETED = "SecurityManager_Check_Completed"
    EVENT_THREAT = "SecurityManager_Threat_Detected"
    EVENT_FAILED = "SecurityManager_Check_Failed"

    def __init__(
        self,
        probes: Optional[Mapping[WarningKind, Probe]] = None,
        sink: Optional[EventSink] = None,
    ):
        self.probes: Dict[WarningKind, Probe] = dict(default_probes() if probes is None else probes)
        self._sink = sink if sink is not None else NullSink()

    def check(self) -> SecurityReport:
        self._sink.track_event(Event(name=self.EVENT_STARTED))

        found = set()
        for kind, probe in self.probes.items():
            try:
                detected = bool(probe())
            except Exception as e:
                logger.warning(f"Security probe {kind.name} failed: {e}")
                self._sink.track_event(Event(
                    name=self.EVENT_FAILED,
                    attributes={"probe": kind.name, "error": str(e)},
                    type=EventType.WARNING,
                ))
                continue
            if detected:
                found.add(kind)
                level = _THREAT_LEVELS[kind]
                self._sink.track_event(Event(
                    name=self.EVENT_THREAT,
                    attributes={"threat": level.value, "warning": kind.message},
                    type=EventType.SEVERE,
                ))

        report = SecurityReport(warnings=frozenset(found))
        self._sink.track_event(Event(
            name=self.EVENT_COMPLETED,
            attributes={
                "passed": not report.critical_warnings,
                "warningCount": len(report.warnings),
                "warnings": sorted(w.message for w in report.warnings),
            },
        ))
        return report
