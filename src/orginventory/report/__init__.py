"""Report rendering and output."""

from .formatters import (
    ReportFormat,
    format_date,
    format_package_licenses,
    render_capabilities,
    render_integrations,
    render_inventory,
    render_packages,
    render_permission_set_licenses,
    render_user_licenses,
)
from .writer import resolve_output_path, write_output

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
    "resolve_output_path",
    "write_output",
]
