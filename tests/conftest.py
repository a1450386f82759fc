"""Shared pytest fixtures for orginventory tests."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Generator, Iterable, Mapping
from pathlib import Path
from typing import Any

import pytest
import structlog

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from orginventory.config.loader import get_config  # noqa: E402
from orginventory.config.models import InventoryConfig  # noqa: E402
from orginventory.core.errors import QueryError  # noqa: E402
from orginventory.core.logger import UnifiedLogger  # noqa: E402
from orginventory.core.retry import RetryPolicy  # noqa: E402
from orginventory.inventory.assembler import SOQL  # noqa: E402
from orginventory.probes.catalog import CapabilityProbeCatalog  # noqa: E402
from orginventory.probes.detector import PACKAGE_PROBE_SOQL  # noqa: E402

Response = list[Mapping[str, Any]] | BaseException | Callable[[], list[Mapping[str, Any]]]


class FakeOrg:
    """In-memory org answering SOQL from a ``query -> response`` table.

    A response is a list of records, an exception to raise, or a callable
    producing records (useful for "fail twice then succeed" sequences).
    Queries missing from the table fail like an unsupported sObject.
    """

    def __init__(self, responses: Mapping[str, Response] | None = None) -> None:
        self.responses: dict[str, Response] = dict(responses or {})
        self.calls: list[str] = []
        self.closed = False

    def query(self, soql: str) -> list[dict[str, Any]]:
        self.calls.append(soql)
        response = self.responses.get(soql)
        if response is None:
            msg = f"INVALID_TYPE: sObject type is not supported for query: {soql}"
            raise QueryError(msg, soql=soql, status_code=400)
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            response = response()
        return [dict(record) for record in response]

    def close(self) -> None:
        self.closed = True

    def count(self, soql: str) -> int:
        return self.calls.count(soql)


class RecordingSleep:
    """Sleep replacement recording requested delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def fail_then(results: Iterable[list[Mapping[str, Any]] | BaseException]) -> Callable[[], list]:
    """Return a callable that yields ``results`` one call at a time."""

    iterator = iter(results)

    def _next() -> list[Mapping[str, Any]]:
        item = next(iterator)
        if isinstance(item, BaseException):
            raise item
        return list(item)

    return _next


ORGANIZATION_RECORD: dict[str, Any] = {
    "attributes": {"type": "Organization"},
    "Id": "00D000000000001",
    "Name": "Acme Corp",
    "OrganizationType": "Enterprise Edition",
    "IsSandbox": False,
    "InstanceName": "NA42",
}


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    UnifiedLogger.reset()
    yield
    UnifiedLogger.reset()
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    structlog.reset_defaults()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def retry_policy(recording_sleep: RecordingSleep) -> RetryPolicy:
    return RetryPolicy(max_attempts=3, base_delay=0.1, sleep=recording_sleep)


@pytest.fixture
def default_config() -> InventoryConfig:
    return get_config()


@pytest.fixture
def default_catalog(default_config: InventoryConfig) -> CapabilityProbeCatalog:
    return CapabilityProbeCatalog.from_config(default_config.probe_catalog)


@pytest.fixture
def organization_record() -> dict[str, Any]:
    return dict(ORGANIZATION_RECORD)


@pytest.fixture
def fake_org_factory() -> Callable[..., FakeOrg]:
    def _factory(responses: Mapping[str, Response] | None = None, **extra: Response) -> FakeOrg:
        return FakeOrg({**(responses or {}), **extra})

    return _factory


@pytest.fixture
def populated_org() -> FakeOrg:
    """Org with every inventory section populated and Case/Opportunity probes present."""

    return FakeOrg(
        {
            SOQL["Organization"]: [ORGANIZATION_RECORD],
            PACKAGE_PROBE_SOQL: [
                {"Id": "050A", "NamespacePrefix": "HealthCloudGA", "Status": "Active"},
                {"Id": "050B", "NamespacePrefix": "acme_tools", "Status": "Active"},
            ],
            SOQL["PackageLicense"]: [
                {
                    "attributes": {"type": "PackageLicense"},
                    "Id": "050A",
                    "NamespacePrefix": "HealthCloudGA",
                    "Status": "Active",
                    "AllowedLicenses": -1,
                    "UsedLicenses": 12,
                    "CreatedDate": "2023-01-15T10:00:00.000+0000",
                    "ExpirationDate": None,
                },
                {
                    "Id": "050B",
                    "NamespacePrefix": "acme_tools",
                    "Status": "Active",
                    "AllowedLicenses": 50,
                    "UsedLicenses": 3,
                    "CreatedDate": "2024-03-01T08:30:00.000+0000",
                    "ExpirationDate": "2025-03-01",
                },
            ],
            SOQL["UserLicense"]: [
                {
                    "Id": "100A",
                    "Name": "Salesforce",
                    "MasterLabel": "Salesforce",
                    "Status": "Active",
                    "TotalLicenses": 100,
                    "UsedLicenses": 87,
                }
            ],
            SOQL["PermissionSetLicense"]: [
                {
                    "Id": "0PLA",
                    "MasterLabel": "Health Cloud Platform",
                    "Status": "Active",
                    "TotalLicenses": 20,
                    "UsedLicenses": 5,
                    "ExpirationDate": None,
                }
            ],
            SOQL["NamedCredential"]: [
                {
                    "Id": "0XAA",
                    "DeveloperName": "Billing_API",
                    "MasterLabel": "Billing API",
                    "Endpoint": "https://billing.example.com",
                }
            ],
            SOQL["CustomSetting"]: [
                {"Id": "01IA", "DeveloperName": "Feature_Flags", "MasterLabel": "Feature Flags"}
            ],
            "SELECT Id FROM Case LIMIT 1": [{"Id": "500A"}],
            "SELECT Id FROM Opportunity LIMIT 1": [{"Id": "006A"}],
            "SELECT Id FROM Campaign LIMIT 1": [],
        }
    )
