"""Capability detection by speculative probing.

The platform exposes no single endpoint listing the active cloud products,
so presence is inferred: installed package namespaces are matched against
the catalog and every object probe runs a minimal existence query.  A probe
that errors (unknown sObject, missing permission, transport failure after
retries) only means "absent"; it never aborts detection or affects other
probes.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from structlog.stdlib import BoundLogger

from orginventory.clients.base import RemoteHandle
from orginventory.core.log_events import LogEvents
from orginventory.core.logger import UnifiedLogger
from orginventory.core.retry import RetryPolicy
from orginventory.inventory.models import CapabilityList, OrganizationInfo

from .catalog import CapabilityProbeCatalog, Probe, ProbeKind

__all__ = [
    "PACKAGE_PROBE_SOQL",
    "CapabilityDetector",
    "ProbeOutcome",
    "ProbeResult",
    "dedupe_capabilities",
]

PACKAGE_PROBE_SOQL = "SELECT Id, NamespacePrefix, Status FROM PackageLicense ORDER BY NamespacePrefix"


class ProbeOutcome(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class ProbeResult:
    """Outcome of evaluating a single probe; ``detail`` holds the discarded error."""

    probe: Probe
    outcome: ProbeOutcome
    detail: str | None = None

    @property
    def present(self) -> bool:
        return self.outcome is ProbeOutcome.PRESENT


def dedupe_capabilities(names: Iterable[str]) -> CapabilityList:
    """Keep the first occurrence of every capability name."""

    return CapabilityList.from_names(names)


class CapabilityDetector:
    """Run the probe catalog against one org and reduce the evidence."""

    def __init__(
        self,
        catalog: CapabilityProbeCatalog,
        retry_policy: RetryPolicy,
        *,
        logger: BoundLogger | None = None,
    ) -> None:
        self._catalog = catalog
        self._retry = retry_policy
        self._log = logger or UnifiedLogger.get(__name__).bind(component="probes.detector")

    @property
    def catalog(self) -> CapabilityProbeCatalog:
        return self._catalog

    def detect_capabilities(
        self,
        organization: OrganizationInfo | None,
        handle: RemoteHandle,
    ) -> CapabilityList:
        """Return the deduplicated capability list, base capability first."""

        log = self._log.bind(org_id=organization.id if organization else None)
        names: list[str] = [self._catalog.base_capability]
        results = [*self.evaluate_package_probes(handle), *self.evaluate_object_probes(handle)]
        for result in results:
            self._fold(names, result)

        capabilities = dedupe_capabilities(names)
        log.info(
            LogEvents.PROBE_DETECTION_FINISH,
            capabilities=list(capabilities.names()),
            probes_failed=sum(1 for result in results if result.outcome is ProbeOutcome.FAILED),
        )
        return capabilities

    def evaluate_package_probes(self, handle: RemoteHandle) -> list[ProbeResult]:
        """Match installed namespaces against the package catalog.

        One result is produced per matching package, in package order.  When
        the package list cannot be fetched the source is skipped and no
        results are produced.
        """

        try:
            records = self._retry.with_retry(
                lambda: handle.query(PACKAGE_PROBE_SOQL),
                "probe:package_based:PackageLicense",
            )
        except Exception as exc:  # noqa: BLE001 - package source is optional evidence
            self._log.warning(LogEvents.PROBE_PACKAGES_SKIPPED, error=str(exc))
            return []

        results: list[ProbeResult] = []
        for record in records:
            prefix = _namespace_of(record)
            capability = self._catalog.package_capability(prefix)
            if capability is None:
                continue
            self._log.debug(LogEvents.PROBE_PACKAGE_MATCHED, namespace=prefix, capability=capability)
            probe = Probe(ProbeKind.PACKAGE_BASED, str(prefix), capability)
            results.append(ProbeResult(probe, ProbeOutcome.PRESENT))
        return results

    def evaluate_object_probes(self, handle: RemoteHandle) -> list[ProbeResult]:
        return [self.evaluate_object_probe(probe, handle) for probe in self._catalog.object_probes]

    def evaluate_object_probe(self, probe: Probe, handle: RemoteHandle) -> ProbeResult:
        """Evaluate one object probe in isolation; errors become ``FAILED``."""

        soql = probe.soql
        if soql is None:
            msg = f"Probe {probe.discriminator} is not object-based"
            raise ValueError(msg)
        try:
            records: Sequence[Any] = self._retry.with_retry(
                lambda: handle.query(soql),
                probe.operation_name,
            )
        except Exception as exc:  # noqa: BLE001 - a failing probe means "absent"
            self._log.info(
                LogEvents.PROBE_OBJECT_FAILED,
                sobject=probe.discriminator,
                capability=probe.capability_name,
                error=str(exc),
            )
            return ProbeResult(probe, ProbeOutcome.FAILED, detail=str(exc))

        if records:
            self._log.debug(
                LogEvents.PROBE_OBJECT_PRESENT,
                sobject=probe.discriminator,
                capability=probe.capability_name,
            )
            return ProbeResult(probe, ProbeOutcome.PRESENT)
        self._log.debug(
            LogEvents.PROBE_OBJECT_ABSENT,
            sobject=probe.discriminator,
            capability=probe.capability_name,
        )
        return ProbeResult(probe, ProbeOutcome.ABSENT)

    @staticmethod
    def _fold(names: list[str], result: ProbeResult) -> None:
        if result.outcome is ProbeOutcome.PRESENT:
            names.append(result.probe.capability_name)


def _namespace_of(record: Mapping[str, Any]) -> str | None:
    value = record.get("NamespacePrefix")
    return str(value) if value else None
