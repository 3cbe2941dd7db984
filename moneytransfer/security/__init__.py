from .checker import (
    CRITICAL_WARNINGS,
    ProbeSecurityChecker,
    SecurityChecker,
    SecurityPolicy,
    SecurityReport,
    ThreatLevel,
    WarningKind,
    debugger_attached,
    default_probes,
)

__all__ = [
    "CRITICAL_WARNINGS",
    "ProbeSecurityChecker",
    "SecurityChecker",
    "SecurityPolicy",
    "SecurityReport",
    "ThreatLevel",
    "WarningKind",
    "debugger_attached",
    "default_probes",
]
