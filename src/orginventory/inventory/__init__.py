"""Inventory report models.

The assembler lives in :mod:`orginventory.inventory.assembler`; it is not
re-exported here because the probe detector imports these models.
"""

from __future__ import annotations

from .models import (
    Capability,
    CapabilityList,
    CapabilityStatus,
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
