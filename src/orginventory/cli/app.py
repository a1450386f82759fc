"""Typer application exposing the inventory commands.

Every command resolves a connection, runs one inventory operation and either
prints the rendered result to stdout or writes it to ``--output-file``.
Structured logs go to stderr.  Exit codes: 0 success, 1 inventory or
connection failure, 2 configuration error.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import typer
from pydantic import ValidationError

from orginventory.clients.base import RemoteHandle
from orginventory.clients.connection import resolve_connection
from orginventory.config.environment import load_connection_settings
from orginventory.config.loader import load_config
from orginventory.config.models import InventoryConfig
from orginventory.core.errors import ConfigurationError, InventoryError
from orginventory.core.log_events import LogEvents
from orginventory.core.logger import LogConfig, LogFormat, UnifiedLogger
from orginventory.inventory.assembler import InventoryAssembler
from orginventory.report import (
    ReportFormat,
    render_capabilities,
    render_integrations,
    render_inventory,
    render_packages,
    render_permission_set_licenses,
    render_user_licenses,
    write_output,
)

__all__ = ["app", "create_app", "run"]

EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2

Producer = Callable[[InventoryAssembler, RemoteHandle, ReportFormat], str]


@dataclass(frozen=True)
class CommandOptions:
    """Options shared by every inventory command."""

    target_org: str | None
    instance_url: str | None
    access_token: str | None
    output_file: Path | None
    format: ReportFormat
    config: Path | None
    verbose: bool


def _fail(message: str, code: int) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code=code)


def _load_config(options: CommandOptions) -> InventoryConfig:
    try:
        return load_config(options.config)
    except ConfigurationError as exc:
        raise _fail(str(exc), EXIT_CONFIG_ERROR) from exc


def _configure_logging(config: InventoryConfig, *, verbose: bool) -> None:
    level = "DEBUG" if verbose else config.logging.level
    UnifiedLogger.configure(LogConfig(level=level, format=LogFormat(config.logging.format)))


def execute(command: str, description: str, options: CommandOptions, produce: Producer) -> None:
    """Run ``produce`` against the resolved org and emit its output."""

    config = _load_config(options)
    _configure_logging(config, verbose=options.verbose)
    run_id = str(uuid.uuid4())
    UnifiedLogger.bind(
        run_id=run_id,
        command=command,
        org=options.target_org or options.instance_url,
    )
    log = UnifiedLogger.get(__name__).bind(component="cli")

    try:
        try:
            settings = load_connection_settings(
                instance_url=options.instance_url,
                access_token=options.access_token,
            )
        except ValidationError as exc:
            raise _fail(f"Invalid connection settings: {exc}", EXIT_CONFIG_ERROR) from exc

        log.info(LogEvents.CLI_RUN_START, output_file=str(options.output_file or ""))
        typer.echo(f"Fetching {description}...", err=True)
        try:
            client = resolve_connection(config, target_org=options.target_org, settings=settings)
        except InventoryError as exc:
            raise _fail(str(exc), EXIT_FAILURE) from exc

        try:
            assembler = InventoryAssembler.from_config(config)
            content = produce(assembler, client, options.format)
        except InventoryError as exc:
            log.error(LogEvents.CLI_RUN_ERROR, error=str(exc), error_type=type(exc).__name__)
            raise _fail(f"Error fetching {description}: {exc}", EXIT_FAILURE) from exc
        finally:
            client.close()

        if options.output_file is not None:
            path = write_output(content, options.output_file)
            log.info(LogEvents.CLI_OUTPUT_WRITTEN, path=str(path), format=options.format.value)
            typer.echo(f"Saved {description} to {path}")
        else:
            typer.echo(content, nl=False)
        log.info(LogEvents.CLI_RUN_FINISH)
    finally:
        UnifiedLogger.reset()


# ----------------------------------------------------------------------
# Producers
# ----------------------------------------------------------------------


def _produce_inventory(assembler: InventoryAssembler, handle: RemoteHandle, fmt: ReportFormat) -> str:
    report = assembler.build_inventory(handle)
    if report.partial:
        sections = ", ".join(report.failed_sections())
        typer.echo(f"Warning: inventory is incomplete, failed sections: {sections}", err=True)
    return render_inventory(report, fmt)


def _produce_packages(assembler: InventoryAssembler, handle: RemoteHandle, fmt: ReportFormat) -> str:
    return render_packages(assembler.list_packages(handle), fmt)


def _produce_user_licenses(
    assembler: InventoryAssembler, handle: RemoteHandle, fmt: ReportFormat
) -> str:
    return render_user_licenses(assembler.list_user_licenses(handle), fmt)


def _produce_permission_set_licenses(
    assembler: InventoryAssembler, handle: RemoteHandle, fmt: ReportFormat
) -> str:
    return render_permission_set_licenses(assembler.list_permission_set_licenses(handle), fmt)


def _produce_integrations(
    assembler: InventoryAssembler, handle: RemoteHandle, fmt: ReportFormat
) -> str:
    return render_integrations(assembler.list_integrations(handle), fmt)


def _produce_capabilities(
    assembler: InventoryAssembler, handle: RemoteHandle, fmt: ReportFormat
) -> str:
    organization = assembler.fetch_organization(handle)
    return render_capabilities(assembler.detect_capabilities(handle, organization), fmt)


# ----------------------------------------------------------------------
# Application
# ----------------------------------------------------------------------


def _register(
    app: typer.Typer,
    name: str,
    description: str,
    produce: Producer,
    help_text: str,
) -> None:
    def command(
        target_org: str | None = typer.Option(
            None,
            "--target-org",
            "-o",
            help="Username or alias of an org authorised in the Salesforce CLI",
        ),
        instance_url: str | None = typer.Option(
            None,
            "--instance-url",
            help="Org instance URL (overrides ORGINV_INSTANCE_URL)",
        ),
        access_token: str | None = typer.Option(
            None,
            "--access-token",
            help="Session access token (overrides ORGINV_ACCESS_TOKEN)",
        ),
        output_file: Path | None = typer.Option(
            None,
            "--output-file",
            "-f",
            help="Path to the file the result is saved to",
        ),
        output_format: ReportFormat = typer.Option(
            ReportFormat.JSON,
            "--format",
            "-F",
            case_sensitive=False,
            help="Output format",
        ),
        config: Path | None = typer.Option(
            None,
            "--config",
            "-c",
            help="Path to an inventory configuration file (defaults to the packaged one)",
        ),
        verbose: bool = typer.Option(
            False,
            "--verbose",
            "-v",
            help="Enable verbose (DEBUG-level) logging output",
        ),
    ) -> None:
        options = CommandOptions(
            target_org=target_org,
            instance_url=instance_url,
            access_token=access_token,
            output_file=output_file,
            format=output_format,
            config=config,
            verbose=verbose,
        )
        execute(name, description, options, produce)

    command.__doc__ = help_text
    app.command(name=name)(command)


def create_app() -> typer.Typer:
    """Create the Typer application with every inventory command registered."""

    app = typer.Typer(
        name="orginventory",
        help="Inventory a Salesforce org: products, packages, licenses and integrations.",
        add_completion=False,
        no_args_is_help=True,
    )
    _register(
        app,
        "all",
        "comprehensive org inventory",
        _produce_inventory,
        "Get a comprehensive inventory of the org.",
    )
    _register(app, "list", "installed packages", _produce_packages, "List installed packages.")
    _register(app, "licenses", "user licenses", _produce_user_licenses, "List user licenses.")
    _register(
        app,
        "permission-sets",
        "permission set licenses",
        _produce_permission_set_licenses,
        "List permission set licenses.",
    )
    _register(
        app,
        "integrations",
        "integration points",
        _produce_integrations,
        "List integration points (named credentials and custom settings).",
    )
    _register(
        app,
        "cloud-products",
        "cloud products",
        _produce_capabilities,
        "Detect the cloud products enabled in the org.",
    )
    return app


app = create_app()


def run() -> None:
    """Console-script entry point."""

    app()


if __name__ == "__main__":
    run()
