"""Tests for inventory report models."""

from __future__ import annotations

from typing import Any

import pytest

from orginventory.inventory.models import (
    Capability,
    CapabilityList,
    InventoryReport,
    OrganizationInfo,
    PackageRecord,
    SectionFailure,
)


@pytest.mark.unit
class TestCapabilityList:
    def test_from_names_dedupes(self) -> None:
        capabilities = CapabilityList.from_names(["Salesforce Platform", "Health Cloud", "Health Cloud"])

        assert capabilities.names() == ("Salesforce Platform", "Health Cloud")
        assert len(capabilities) == 2
        assert "Health Cloud" in capabilities
        assert "Sales Cloud" not in capabilities
        assert capabilities[0] == Capability("Salesforce Platform")

    def test_rejects_duplicate_items(self) -> None:
        with pytest.raises(ValueError, match="unique names"):
            CapabilityList((Capability("A"), Capability("A")))

    def test_to_list(self) -> None:
        assert CapabilityList.from_names(["A"]).to_list() == [{"name": "A", "status": "Enabled"}]


@pytest.mark.unit
class TestRecords:
    def test_organization_from_record(self, organization_record: dict[str, Any]) -> None:
        org = OrganizationInfo.from_record(organization_record)

        assert org == OrganizationInfo(
            id="00D000000000001",
            name="Acme Corp",
            organization_type="Enterprise Edition",
            is_sandbox=False,
            instance_name="NA42",
        )

    def test_package_from_record_with_missing_fields(self) -> None:
        package = PackageRecord.from_record({"Id": "050A", "NamespacePrefix": "", "Status": "Active"})

        assert package.namespace_prefix is None
        assert package.allowed_licenses == 0
        assert package.expiration_date is None
        assert not package.is_unlimited

    def test_unlimited_package(self) -> None:
        package = PackageRecord.from_record({"Id": "050A", "AllowedLicenses": -1, "UsedLicenses": 4})

        assert package.is_unlimited
        assert package.used_licenses == 4


@pytest.mark.unit
def test_report_to_dict_and_partial_flag(organization_record: dict[str, Any]) -> None:
    report = InventoryReport(
        organization=OrganizationInfo.from_record(organization_record),
        capabilities=CapabilityList.from_names(["Salesforce Platform"]),
        failures=(SectionFailure("user_licenses", "query:UserLicense", "boom"),),
    )

    payload = report.to_dict()

    assert report.partial
    assert report.failed_sections() == ("user_licenses",)
    assert payload["organization"]["name"] == "Acme Corp"
    assert payload["capabilities"] == [{"name": "Salesforce Platform", "status": "Enabled"}]
    assert payload["integrations"] == {"named_credentials": [], "custom_settings": []}
    assert payload["failures"] == [
        {"section": "user_licenses", "operation": "query:UserLicense", "error": "boom"}
    ]
