"""Fixed catalog of capability probes.

Probes are data: package probes map an installed namespace prefix to a
capability, object probes name an sObject whose non-empty existence query
implies a capability.  The catalog is built once from configuration and is
immutable afterwards.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from orginventory.config.models import ProbeCatalogConfig

__all__ = ["CapabilityProbeCatalog", "Probe", "ProbeKind"]


class ProbeKind(str, Enum):
    PACKAGE_BASED = "package_based"
    OBJECT_BASED = "object_based"


@dataclass(slots=True, frozen=True)
class Probe:
    """Single probe; ``discriminator`` is a namespace prefix or an sObject name."""

    kind: ProbeKind
    discriminator: str
    capability_name: str

    @property
    def soql(self) -> str | None:
        """Minimal existence query for object probes, ``None`` for package probes."""

        if self.kind is ProbeKind.OBJECT_BASED:
            return f"SELECT Id FROM {self.discriminator} LIMIT 1"
        return None

    @property
    def operation_name(self) -> str:
        return f"probe:{self.kind.value}:{self.discriminator}"


@dataclass(slots=True, frozen=True)
class CapabilityProbeCatalog:
    """Immutable probe catalog with exact, case-sensitive prefix lookup."""

    base_capability: str
    package_probes: tuple[Probe, ...] = ()
    object_probes: tuple[Probe, ...] = ()
    _by_prefix: Mapping[str, Probe] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for probe in self.package_probes:
            if probe.kind is not ProbeKind.PACKAGE_BASED:
                msg = f"Expected package-based probe, got {probe.kind.value}: {probe.discriminator}"
                raise ValueError(msg)
        for probe in self.object_probes:
            if probe.kind is not ProbeKind.OBJECT_BASED:
                msg = f"Expected object-based probe, got {probe.kind.value}: {probe.discriminator}"
                raise ValueError(msg)
        index: dict[str, Probe] = {}
        for probe in self.package_probes:
            index.setdefault(probe.discriminator, probe)
        object.__setattr__(self, "_by_prefix", MappingProxyType(index))

    @classmethod
    def from_config(cls, config: ProbeCatalogConfig) -> CapabilityProbeCatalog:
        return cls(
            base_capability=config.base_capability,
            package_probes=tuple(
                Probe(ProbeKind.PACKAGE_BASED, entry.prefix, entry.capability)
                for entry in config.package_based
            ),
            object_probes=tuple(
                Probe(ProbeKind.OBJECT_BASED, entry.object_name, entry.capability)
                for entry in config.object_based
            ),
        )

    @classmethod
    def from_mappings(
        cls,
        *,
        base_capability: str = "Salesforce Platform",
        packages: Mapping[str, str] | None = None,
        objects: Iterable[tuple[str, str]] = (),
    ) -> CapabilityProbeCatalog:
        """Build a catalog from plain ``prefix -> capability`` and ``(object, capability)`` data."""

        return cls(
            base_capability=base_capability,
            package_probes=tuple(
                Probe(ProbeKind.PACKAGE_BASED, prefix, capability)
                for prefix, capability in (packages or {}).items()
            ),
            object_probes=tuple(
                Probe(ProbeKind.OBJECT_BASED, object_name, capability)
                for object_name, capability in objects
            ),
        )

    def package_capability(self, namespace_prefix: str | None) -> str | None:
        """Return the capability mapped to ``namespace_prefix``, if any."""

        if not namespace_prefix:
            return None
        probe = self._by_prefix.get(namespace_prefix)
        return probe.capability_name if probe else None

    def __len__(self) -> int:
        return len(self.package_probes) + len(self.object_probes)
