"""Capability probing: the probe catalog and the detector that runs it."""

from .catalog import CapabilityProbeCatalog, Probe, ProbeKind
from .detector import (
    PACKAGE_PROBE_SOQL,
    CapabilityDetector,
    ProbeOutcome,
    ProbeResult,
    dedupe_capabilities,
)

__all__ = [
    "PACKAGE_PROBE_SOQL",
    "CapabilityDetector",
    "CapabilityProbeCatalog",
    "Probe",
    "ProbeKind",
    "ProbeOutcome",
    "ProbeResult",
    "dedupe_capabilities",
]
