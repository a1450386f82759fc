"""Assemble a full org inventory from independent queries.

Only the organization record is load-bearing: if it cannot be fetched after
retries the run fails with :class:`CriticalSectionError`.  Every other
section is isolated the same way capability probes are; a section that fails
after retries contributes an empty value and a :class:`SectionFailure`
marker, and the remaining sections are still collected.
"""
from __future__ import annotations

import contextvars
import time
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, TypeVar

from structlog.stdlib import BoundLogger

from orginventory.clients.base import RemoteHandle
from orginventory.config.models import InventoryConfig
from orginventory.core.errors import CriticalSectionError, OperationFailedError
from orginventory.core.log_events import LogEvents
from orginventory.core.logger import UnifiedLogger
from orginventory.core.retry import RetryPolicy
from orginventory.probes.catalog import CapabilityProbeCatalog
from orginventory.probes.detector import CapabilityDetector

from .models import (
    CapabilityList,
    CustomSettingRecord,
    IntegrationInfo,
    InventoryReport,
    NamedCredentialRecord,
    OrganizationInfo,
    PackageRecord,
    PermissionSetLicenseRecord,
    SectionFailure,
    UserLicenseRecord,
)

__all__ = ["InventoryAssembler", "SECTION_ORDER", "SOQL"]

R = TypeVar("R")

SOQL: Mapping[str, str] = {
    "Organization": (
        "SELECT Id, Name, OrganizationType, IsSandbox, InstanceName FROM Organization LIMIT 1"
    ),
    "PackageLicense": (
        "SELECT Id, NamespacePrefix, Status, AllowedLicenses, UsedLicenses, CreatedDate, "
        "ExpirationDate FROM PackageLicense ORDER BY NamespacePrefix"
    ),
    "UserLicense": (
        "SELECT Id, Name, MasterLabel, Status, TotalLicenses, UsedLicenses "
        "FROM UserLicense ORDER BY Name"
    ),
    "PermissionSetLicense": (
        "SELECT Id, MasterLabel, Status, TotalLicenses, UsedLicenses, ExpirationDate "
        "FROM PermissionSetLicense ORDER BY MasterLabel"
    ),
    "NamedCredential": (
        "SELECT Id, DeveloperName, MasterLabel, Endpoint FROM NamedCredential ORDER BY DeveloperName"
    ),
    "CustomSetting": (
        "SELECT Id, DeveloperName, MasterLabel FROM CustomObject "
        "WHERE CustomSetting = true ORDER BY DeveloperName"
    ),
}

SECTION_ORDER: tuple[str, ...] = (
    "capabilities",
    "installed_packages",
    "user_licenses",
    "permission_set_licenses",
    "named_credentials",
    "custom_settings",
)

@dataclass(slots=True, frozen=True)
class _SectionOutcome:
    value: Any
    failure: SectionFailure | None = None


class InventoryAssembler:
    """Orchestrate the inventory queries and the capability detector."""

    def __init__(
        self,
        config: InventoryConfig,
        retry_policy: RetryPolicy,
        detector: CapabilityDetector,
        *,
        logger: BoundLogger | None = None,
    ) -> None:
        self._config = config
        self._retry = retry_policy
        self._detector = detector
        self._log = logger or UnifiedLogger.get(__name__).bind(component="inventory.assembler")

    @classmethod
    def from_config(
        cls,
        config: InventoryConfig,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> InventoryAssembler:
        """Wire the retry policy, probe catalog and detector from ``config``."""

        retry_policy = RetryPolicy.from_settings(config.performance.retry, sleep=sleep)
        catalog = CapabilityProbeCatalog.from_config(config.probe_catalog)
        return cls(config, retry_policy, CapabilityDetector(catalog, retry_policy))

    # ------------------------------------------------------------------
    # Individual sections
    # ------------------------------------------------------------------

    def _query(self, handle: RemoteHandle, sobject: str) -> list[dict[str, Any]]:
        soql = SOQL[sobject]
        return self._retry.with_retry(lambda: handle.query(soql), f"query:{sobject}")

    def fetch_organization(self, handle: RemoteHandle) -> OrganizationInfo:
        """Return the org identity or raise :class:`CriticalSectionError`."""

        try:
            records = self._query(handle, "Organization")
        except OperationFailedError as exc:
            raise CriticalSectionError("organization", exc.cause) from exc
        if not records:
            raise CriticalSectionError("organization", LookupError("No organization record returned"))
        return OrganizationInfo.from_record(records[0])

    def list_packages(self, handle: RemoteHandle) -> tuple[PackageRecord, ...]:
        return tuple(PackageRecord.from_record(r) for r in self._query(handle, "PackageLicense"))

    def list_user_licenses(self, handle: RemoteHandle) -> tuple[UserLicenseRecord, ...]:
        return tuple(UserLicenseRecord.from_record(r) for r in self._query(handle, "UserLicense"))

    def list_permission_set_licenses(
        self, handle: RemoteHandle
    ) -> tuple[PermissionSetLicenseRecord, ...]:
        return tuple(
            PermissionSetLicenseRecord.from_record(r)
            for r in self._query(handle, "PermissionSetLicense")
        )

    def list_named_credentials(self, handle: RemoteHandle) -> tuple[NamedCredentialRecord, ...]:
        return tuple(
            NamedCredentialRecord.from_record(r) for r in self._query(handle, "NamedCredential")
        )

    def list_custom_settings(self, handle: RemoteHandle) -> tuple[CustomSettingRecord, ...]:
        return tuple(CustomSettingRecord.from_record(r) for r in self._query(handle, "CustomSetting"))

    def list_integrations(self, handle: RemoteHandle) -> IntegrationInfo:
        """Fetch the configured integration types; failures propagate."""

        types = self._config.detection_rules.integrations.types
        return IntegrationInfo(
            named_credentials=self.list_named_credentials(handle) if "NamedCredential" in types else (),
            custom_settings=self.list_custom_settings(handle) if "CustomSetting" in types else (),
        )

    def detect_capabilities(
        self,
        handle: RemoteHandle,
        organization: OrganizationInfo | None = None,
    ) -> CapabilityList:
        return self._detector.detect_capabilities(organization, handle)

    # ------------------------------------------------------------------
    # Full inventory
    # ------------------------------------------------------------------

    def build_inventory(self, handle: RemoteHandle) -> InventoryReport:
        """Fetch every section and merge them into one immutable report."""

        self._log.info(LogEvents.INVENTORY_BUILD_START)
        organization = self.fetch_organization(handle)
        log = self._log.bind(org_id=organization.id, org_name=organization.name)

        fetchers = self._section_fetchers(handle, organization)
        outcomes = self._collect(fetchers)

        def value(section: str, default: R) -> R:
            outcome = outcomes.get(section)
            return default if outcome is None or outcome.failure else outcome.value

        failures = tuple(
            outcomes[section].failure
            for section in SECTION_ORDER
            if section in outcomes and outcomes[section].failure is not None
        )
        report = InventoryReport(
            organization=organization,
            capabilities=value(
                "capabilities",
                CapabilityList.from_names([self._detector.catalog.base_capability]),
            ),
            installed_packages=value("installed_packages", ()),
            user_licenses=value("user_licenses", ()),
            permission_set_licenses=value("permission_set_licenses", ()),
            integrations=IntegrationInfo(
                named_credentials=value("named_credentials", ()),
                custom_settings=value("custom_settings", ()),
            ),
            failures=failures,  # type: ignore[arg-type]
        )
        log.info(
            LogEvents.INVENTORY_BUILD_FINISH,
            capabilities=len(report.capabilities),
            packages=len(report.installed_packages),
            failed_sections=list(report.failed_sections()),
        )
        return report

    def _section_fetchers(
        self,
        handle: RemoteHandle,
        organization: OrganizationInfo,
    ) -> dict[str, tuple[str, Callable[[], Any]]]:
        fetchers: dict[str, tuple[str, Callable[[], Any]]] = {
            "capabilities": (
                "detect_capabilities",
                lambda: self.detect_capabilities(handle, organization),
            ),
            "installed_packages": ("query:PackageLicense", lambda: self.list_packages(handle)),
            "user_licenses": ("query:UserLicense", lambda: self.list_user_licenses(handle)),
            "permission_set_licenses": (
                "query:PermissionSetLicense",
                lambda: self.list_permission_set_licenses(handle),
            ),
        }
        types = self._config.detection_rules.integrations.types
        if "NamedCredential" in types:
            fetchers["named_credentials"] = (
                "query:NamedCredential",
                lambda: self.list_named_credentials(handle),
            )
        if "CustomSetting" in types:
            fetchers["custom_settings"] = (
                "query:CustomSetting",
                lambda: self.list_custom_settings(handle),
            )
        return fetchers

    def _collect(
        self,
        fetchers: Mapping[str, tuple[str, Callable[[], Any]]],
    ) -> dict[str, _SectionOutcome]:
        max_workers = self._config.performance.max_workers
        if max_workers <= 1:
            return {
                section: self._run_isolated(section, operation, fetch)
                for section, (operation, fetch) in fetchers.items()
            }

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="inventory") as pool:
            futures = {
                section: pool.submit(
                    contextvars.copy_context().run, self._run_isolated, section, operation, fetch
                )
                for section, (operation, fetch) in fetchers.items()
            }
            return {section: future.result() for section, future in futures.items()}

    def _run_isolated(
        self,
        section: str,
        operation: str,
        fetch: Callable[[], Any],
    ) -> _SectionOutcome:
        try:
            return _SectionOutcome(value=fetch())
        except Exception as exc:  # noqa: BLE001 - non-critical sections degrade to a marker
            cause = exc.cause if isinstance(exc, OperationFailedError) else exc
            self._log.warning(
                LogEvents.INVENTORY_SECTION_FAILED,
                section=section,
                operation=operation,
                error=str(cause),
            )
            return _SectionOutcome(
                value=None,
                failure=SectionFailure(section=section, operation=operation, error=str(cause)),
            )
