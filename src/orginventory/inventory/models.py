"""Data models for the org inventory report."""
from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

__all__ = [
    "Capability",
    "CapabilityList",
    "CapabilityStatus",
    "CustomSettingRecord",
    "IntegrationInfo",
    "InventoryReport",
    "NamedCredentialRecord",
    "OrganizationInfo",
    "PackageRecord",
    "PermissionSetLicenseRecord",
    "SectionFailure",
    "UserLicenseRecord",
]


class CapabilityStatus(str, Enum):
    """Status of a detected capability; only ``Enabled`` is produced today."""

    ENABLED = "Enabled"


@dataclass(slots=True, frozen=True)
class Capability:
    """Named optional feature of the org, identified by ``name``."""

    name: str
    status: CapabilityStatus = CapabilityStatus.ENABLED

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "status": self.status.value}


@dataclass(slots=True, frozen=True)
class CapabilityList:
    """Ordered capabilities with unique names, first-seen order preserved."""

    items: tuple[Capability, ...] = ()

    def __post_init__(self) -> None:
        names = [capability.name for capability in self.items]
        if len(names) != len(set(names)):
            msg = "CapabilityList entries must have unique names"
            raise ValueError(msg)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> CapabilityList:
        """Build a list from capability names, keeping the first of each name."""

        return cls(tuple(Capability(name) for name in dict.fromkeys(names)))

    def __iter__(self) -> Iterator[Capability]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> Capability:
        return self.items[index]

    def __contains__(self, name: object) -> bool:
        return any(capability.name == name for capability in self.items)

    def names(self) -> tuple[str, ...]:
        return tuple(capability.name for capability in self.items)

    def to_list(self) -> list[dict[str, str]]:
        return [capability.to_dict() for capability in self.items]


def _optional_str(record: Mapping[str, Any], key: str) -> str | None:
    value = record.get(key)
    if value is None:
        return None
    text = str(value)
    return text or None


def _int(record: Mapping[str, Any], key: str) -> int:
    value = record.get(key)
    if value is None or value == "":
        return 0
    return int(value)


@dataclass(slots=True, frozen=True)
class OrganizationInfo:
    """Identity of the inventoried org."""

    id: str
    name: str
    organization_type: str
    is_sandbox: bool
    instance_name: str

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> OrganizationInfo:
        return cls(
            id=str(record.get("Id") or ""),
            name=str(record.get("Name") or ""),
            organization_type=str(record.get("OrganizationType") or ""),
            is_sandbox=bool(record.get("IsSandbox", False)),
            instance_name=str(record.get("InstanceName") or ""),
        )


@dataclass(slots=True, frozen=True)
class PackageRecord:
    """Installed managed package (``PackageLicense`` row)."""

    id: str
    namespace_prefix: str | None
    status: str
    allowed_licenses: int = 0
    used_licenses: int = 0
    created_date: str | None = None
    expiration_date: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> PackageRecord:
        return cls(
            id=str(record.get("Id") or ""),
            namespace_prefix=_optional_str(record, "NamespacePrefix"),
            status=str(record.get("Status") or ""),
            allowed_licenses=_int(record, "AllowedLicenses"),
            used_licenses=_int(record, "UsedLicenses"),
            created_date=_optional_str(record, "CreatedDate"),
            expiration_date=_optional_str(record, "ExpirationDate"),
        )

    @property
    def is_unlimited(self) -> bool:
        return self.allowed_licenses == -1


@dataclass(slots=True, frozen=True)
class UserLicenseRecord:
    id: str
    name: str
    master_label: str
    status: str
    total_licenses: int
    used_licenses: int

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> UserLicenseRecord:
        return cls(
            id=str(record.get("Id") or ""),
            name=str(record.get("Name") or ""),
            master_label=str(record.get("MasterLabel") or ""),
            status=str(record.get("Status") or ""),
            total_licenses=_int(record, "TotalLicenses"),
            used_licenses=_int(record, "UsedLicenses"),
        )


@dataclass(slots=True, frozen=True)
class PermissionSetLicenseRecord:
    id: str
    master_label: str
    status: str
    total_licenses: int
    used_licenses: int
    expiration_date: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> PermissionSetLicenseRecord:
        return cls(
            id=str(record.get("Id") or ""),
            master_label=str(record.get("MasterLabel") or ""),
            status=str(record.get("Status") or ""),
            total_licenses=_int(record, "TotalLicenses"),
            used_licenses=_int(record, "UsedLicenses"),
            expiration_date=_optional_str(record, "ExpirationDate"),
        )


@dataclass(slots=True, frozen=True)
class NamedCredentialRecord:
    id: str
    developer_name: str
    master_label: str
    endpoint: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> NamedCredentialRecord:
        return cls(
            id=str(record.get("Id") or ""),
            developer_name=str(record.get("DeveloperName") or ""),
            master_label=str(record.get("MasterLabel") or ""),
            endpoint=_optional_str(record, "Endpoint"),
        )


@dataclass(slots=True, frozen=True)
class CustomSettingRecord:
    id: str
    developer_name: str
    master_label: str

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> CustomSettingRecord:
        return cls(
            id=str(record.get("Id") or ""),
            developer_name=str(record.get("DeveloperName") or ""),
            master_label=str(record.get("MasterLabel") or ""),
        )


@dataclass(slots=True, frozen=True)
class IntegrationInfo:
    """Integration points of the org."""

    named_credentials: tuple[NamedCredentialRecord, ...] = ()
    custom_settings: tuple[CustomSettingRecord, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.named_credentials and not self.custom_settings


@dataclass(slots=True, frozen=True)
class SectionFailure:
    """Marker recorded when a non-critical section could not be fetched."""

    section: str
    operation: str
    error: str


@dataclass(slots=True, frozen=True)
class InventoryReport:
    """Immutable aggregate produced by one inventory run."""

    organization: OrganizationInfo
    capabilities: CapabilityList
    installed_packages: tuple[PackageRecord, ...] = ()
    user_licenses: tuple[UserLicenseRecord, ...] = ()
    permission_set_licenses: tuple[PermissionSetLicenseRecord, ...] = ()
    integrations: IntegrationInfo = field(default_factory=IntegrationInfo)
    failures: tuple[SectionFailure, ...] = ()

    @property
    def partial(self) -> bool:
        """True when at least one non-critical section failed."""

        return bool(self.failures)

    def failed_sections(self) -> tuple[str, ...]:
        return tuple(failure.section for failure in self.failures)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible mapping of the whole report."""

        return {
            "organization": asdict(self.organization),
            "capabilities": self.capabilities.to_list(),
            "installed_packages": [asdict(record) for record in self.installed_packages],
            "user_licenses": [asdict(record) for record in self.user_licenses],
            "permission_set_licenses": [asdict(record) for record in self.permission_set_licenses],
            "integrations": {
                "named_credentials": [asdict(record) for record in self.integrations.named_credentials],
                "custom_settings": [asdict(record) for record in self.integrations.custom_settings],
            },
            "failures": [asdict(failure) for failure in self.failures],
        }
