"""Render inventory sections as JSON, Markdown or plain text."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from dataclasses import asdict
from enum import Enum
from typing import Any

from orginventory.inventory.models import (
    CapabilityList,
    IntegrationInfo,
    InventoryReport,
    PackageRecord,
    PermissionSetLicenseRecord,
    UserLicenseRecord,
)

__all__ = [
    "ReportFormat",
    "format_date",
    "format_package_licenses",
    "render_capabilities",
    "render_integrations",
    "render_inventory",
    "render_packages",
    "render_permission_set_licenses",
    "render_user_licenses",
]

NOT_AVAILABLE = "N/A"
NEVER = "Never"


class ReportFormat(str, Enum):
    JSON = "json"
    MARKDOWN = "markdown"
    TEXT = "text"


def format_date(value: str | None) -> str:
    """Shorten a Salesforce date or datetime to ``YYYY-MM-DD``."""

    if not value:
        return ""
    return value.split("T", 1)[0]


def format_package_licenses(package: PackageRecord) -> str:
    allowed = "Unlimited" if package.is_unlimited else str(package.allowed_licenses)
    return f"{package.used_licenses}/{allowed}"


def _expiration(value: str | None) -> str:
    return format_date(value) if value else NEVER


def _dump_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _table(header: Sequence[str], rows: Sequence[Sequence[str]]) -> list[str]:
    lines = [
        "| " + " | ".join(header) + " |",
        "|" + "|".join("-" * (len(column) + 2) for column in header) + "|",
    ]
    lines.extend("| " + " | ".join(row) + " |" for row in rows)
    return lines


def _dispatch(
    fmt: ReportFormat,
    *,
    json_payload: Callable[[], Any],
    markdown: Callable[[], list[str]],
    text: Callable[[], list[str]],
) -> str:
    fmt = ReportFormat(fmt)
    if fmt is ReportFormat.JSON:
        return _dump_json(json_payload())
    lines = markdown() if fmt is ReportFormat.MARKDOWN else text()
    return "\n".join(lines).rstrip("\n") + "\n"


# ----------------------------------------------------------------------
# Section bodies shared by the standalone renderers and the full report
# ----------------------------------------------------------------------


def _capabilities_md(capabilities: CapabilityList) -> list[str]:
    if not len(capabilities):
        return ["No cloud products found."]
    return _table(
        ("Product Name", "Status"),
        [(capability.name, capability.status.value) for capability in capabilities],
    )


def _capabilities_text(capabilities: CapabilityList) -> list[str]:
    if not len(capabilities):
        return ["No cloud products found."]
    return [f"- {capability.name} ({capability.status.value})" for capability in capabilities]


def _packages_md(packages: Sequence[PackageRecord]) -> list[str]:
    if not packages:
        return ["No installed packages found."]
    return _table(
        ("Namespace", "Status", "Licenses", "Created Date", "Expiration Date"),
        [
            (
                package.namespace_prefix or NOT_AVAILABLE,
                package.status,
                format_package_licenses(package),
                format_date(package.created_date),
                _expiration(package.expiration_date),
            )
            for package in packages
        ],
    )


def _packages_text(packages: Sequence[PackageRecord]) -> list[str]:
    if not packages:
        return ["No installed packages found."]
    lines: list[str] = []
    for package in packages:
        lines.extend(
            [
                f"Namespace: {package.namespace_prefix or NOT_AVAILABLE}",
                f"Status: {package.status}",
                f"Licenses: {format_package_licenses(package)}",
                f"Created Date: {format_date(package.created_date)}",
                f"Expiration Date: {_expiration(package.expiration_date)}",
                "",
            ]
        )
    return lines


def _user_licenses_md(licenses: Sequence[UserLicenseRecord]) -> list[str]:
    if not licenses:
        return ["No user licenses found."]
    return _table(
        ("License Name", "Status", "Used/Total"),
        [
            (license.master_label, license.status, f"{license.used_licenses}/{license.total_licenses}")
            for license in licenses
        ],
    )


def _user_licenses_text(licenses: Sequence[UserLicenseRecord]) -> list[str]:
    if not licenses:
        return ["No user licenses found."]
    return [
        f"- {license.master_label}: {license.status} "
        f"({license.used_licenses}/{license.total_licenses})"
        for license in licenses
    ]


def _psl_md(licenses: Sequence[PermissionSetLicenseRecord]) -> list[str]:
    if not licenses:
        return ["No permission set licenses found."]
    return _table(
        ("License Name", "Status", "Used/Total", "Expiration Date"),
        [
            (
                license.master_label,
                license.status,
                f"{license.used_licenses}/{license.total_licenses}",
                _expiration(license.expiration_date),
            )
            for license in licenses
        ],
    )


def _psl_text(licenses: Sequence[PermissionSetLicenseRecord]) -> list[str]:
    if not licenses:
        return ["No permission set licenses found."]
    lines: list[str] = []
    for license in licenses:
        lines.append(
            f"- {license.master_label}: {license.status} "
            f"({license.used_licenses}/{license.total_licenses})"
        )
        lines.append(f"  Expires: {_expiration(license.expiration_date)}")
    return lines


def _integrations_md(integrations: IntegrationInfo, heading: str) -> list[str]:
    if integrations.is_empty:
        return ["No integration points found."]
    lines: list[str] = []
    if integrations.named_credentials:
        lines.extend([f"{heading} Named Credentials", ""])
        lines.extend(
            _table(
                ("Name", "Label", "Endpoint"),
                [
                    (cred.developer_name, cred.master_label, cred.endpoint or NOT_AVAILABLE)
                    for cred in integrations.named_credentials
                ],
            )
        )
        lines.append("")
    if integrations.custom_settings:
        lines.extend([f"{heading} Custom Settings", ""])
        lines.extend(
            _table(
                ("Name", "Label"),
                [
                    (setting.developer_name, setting.master_label)
                    for setting in integrations.custom_settings
                ],
            )
        )
        lines.append("")
    return lines


def _integrations_text(integrations: IntegrationInfo) -> list[str]:
    if integrations.is_empty:
        return ["No integration points found."]
    lines: list[str] = []
    if integrations.named_credentials:
        lines.append("Named Credentials:")
        lines.extend(
            f"- {cred.developer_name} ({cred.master_label}): {cred.endpoint or NOT_AVAILABLE}"
            for cred in integrations.named_credentials
        )
        lines.append("")
    if integrations.custom_settings:
        lines.append("Custom Settings:")
        lines.extend(
            f"- {setting.developer_name} ({setting.master_label})"
            for setting in integrations.custom_settings
        )
        lines.append("")
    return lines


def _integrations_json(integrations: IntegrationInfo) -> dict[str, Any]:
    return {
        "named_credentials": [asdict(cred) for cred in integrations.named_credentials],
        "custom_settings": [asdict(setting) for setting in integrations.custom_settings],
    }


# ----------------------------------------------------------------------
# Standalone section renderers
# ----------------------------------------------------------------------


def render_capabilities(capabilities: CapabilityList, fmt: ReportFormat) -> str:
    return _dispatch(
        fmt,
        json_payload=capabilities.to_list,
        markdown=lambda: ["# Cloud Products", "", *_capabilities_md(capabilities)],
        text=lambda: ["Cloud Products:", "", *_capabilities_text(capabilities)],
    )


def render_packages(packages: Sequence[PackageRecord], fmt: ReportFormat) -> str:
    return _dispatch(
        fmt,
        json_payload=lambda: [asdict(package) for package in packages],
        markdown=lambda: ["# Installed Packages", "", *_packages_md(packages)],
        text=lambda: ["Installed Packages", "", *_packages_text(packages)],
    )


def render_user_licenses(licenses: Sequence[UserLicenseRecord], fmt: ReportFormat) -> str:
    return _dispatch(
        fmt,
        json_payload=lambda: [asdict(license) for license in licenses],
        markdown=lambda: ["# User Licenses", "", *_user_licenses_md(licenses)],
        text=lambda: ["User Licenses:", "", *_user_licenses_text(licenses)],
    )


def render_permission_set_licenses(
    licenses: Sequence[PermissionSetLicenseRecord],
    fmt: ReportFormat,
) -> str:
    return _dispatch(
        fmt,
        json_payload=lambda: [asdict(license) for license in licenses],
        markdown=lambda: ["# Permission Set Licenses", "", *_psl_md(licenses)],
        text=lambda: ["Permission Set Licenses:", "", *_psl_text(licenses)],
    )


def render_integrations(integrations: IntegrationInfo, fmt: ReportFormat) -> str:
    return _dispatch(
        fmt,
        json_payload=lambda: _integrations_json(integrations),
        markdown=lambda: ["# Integration Points", "", *_integrations_md(integrations, "##")],
        text=lambda: ["Integration Points:", "", *_integrations_text(integrations)],
    )


# ----------------------------------------------------------------------
# Full report
# ----------------------------------------------------------------------


def render_inventory(report: InventoryReport, fmt: ReportFormat) -> str:
    """Render the complete inventory.

    Markdown and text output end with an "Incomplete Sections" block when the
    report is partial; JSON carries the same information under ``failures``.
    """

    return _dispatch(
        fmt,
        json_payload=report.to_dict,
        markdown=lambda: _inventory_md(report),
        text=lambda: _inventory_text(report),
    )


def _organization_lines(report: InventoryReport) -> list[str]:
    org = report.organization
    return [
        f"- Name: {org.name}",
        f"- Type: {org.organization_type}",
        f"- Is Sandbox: {'Yes' if org.is_sandbox else 'No'}",
        f"- Instance: {org.instance_name}",
    ]


def _inventory_md(report: InventoryReport) -> list[str]:
    lines = ["# Salesforce Org Inventory", ""]
    lines += ["## Organization Information", "", *_organization_lines(report), ""]

    lines += ["## Enabled Cloud Products", ""]
    lines += [f"- {name}" for name in report.capabilities.names()] or ["No cloud products found."]
    lines.append("")

    lines += ["## Installed Packages", "", *_packages_md(report.installed_packages), ""]
    lines += ["## User Licenses", "", *_user_licenses_md(report.user_licenses), ""]
    lines += [
        "## Permission Set Licenses",
        "",
        *_psl_md(report.permission_set_licenses),
        "",
    ]
    lines += ["## Integration Points", "", *_integrations_md(report.integrations, "###"), ""]

    if report.partial:
        lines += ["## Incomplete Sections", ""]
        lines += _table(
            ("Section", "Operation", "Error"),
            [(f.section, f.operation, f.error) for f in report.failures],
        )
    return lines


def _inventory_text(report: InventoryReport) -> list[str]:
    lines = ["Salesforce Org Inventory", ""]
    lines += ["Organization Information:", *_organization_lines(report), ""]

    lines.append("Enabled Cloud Products:")
    lines += [f"- {name}" for name in report.capabilities.names()] or ["No cloud products found."]
    lines.append("")

    lines += ["Installed Packages:", *_packages_text(report.installed_packages), ""]
    lines += ["User Licenses:", *_user_licenses_text(report.user_licenses), ""]
    lines += ["Permission Set Licenses:", *_psl_text(report.permission_set_licenses), ""]
    lines += ["Integration Points:", *_integrations_text(report.integrations), ""]

    if report.partial:
        lines.append("Incomplete Sections:")
        lines += [f"- {f.section} ({f.operation}): {f.error}" for f in report.failures]
    return lines
