"""Resolve a connection to the target org.

Credentials come, in order of precedence, from explicit arguments or the
``ORGINV_`` environment (both carried by ConnectionSettings), or from an org
already authorised in the Salesforce CLI (``sf org display --target-org <alias> --json``).
"""

from __future__ import annotations

import json
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import requests

from orginventory.config.environment import ConnectionSettings
from orginventory.config.models import InventoryConfig
from orginventory.core.errors import ConnectionResolutionError
from orginventory.core.log_events import LogEvents
from orginventory.core.logger import UnifiedLogger

from .salesforce import SalesforceClient

__all__ = ["OrgCredentials", "fetch_sf_cli_credentials", "resolve_connection"]

CommandRunner = Callable[[Sequence[str]], subprocess.CompletedProcess[str]]


@dataclass(frozen=True)
class OrgCredentials:
    instance_url: str
    access_token: str
    api_version: str | None = None


def _run_command(args: Sequence[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(list(args), capture_output=True, text=True, check=False, timeout=120)


def fetch_sf_cli_credentials(
    target_org: str,
    *,
    runner: CommandRunner = _run_command,
) -> OrgCredentials:
    """Read the access token of an authorised org from the Salesforce CLI."""

    args = ("sf", "org", "display", "--target-org", target_org, "--json")
    try:
        completed = runner(args)
    except FileNotFoundError as exc:
        msg = "Salesforce CLI ('sf') is not installed or not on PATH"
        raise ConnectionResolutionError(msg) from exc
    except subprocess.TimeoutExpired as exc:
        msg = f"Timed out reading credentials for org '{target_org}' from the Salesforce CLI"
        raise ConnectionResolutionError(msg) from exc

    try:
        payload: dict[str, Any] = json.loads(completed.stdout or "{}")
    except json.JSONDecodeError as exc:
        msg = f"Unexpected output from 'sf org display' for '{target_org}'"
        raise ConnectionResolutionError(msg) from exc

    result = payload.get("result") or {}
    if completed.returncode != 0 or payload.get("status", 0) != 0:
        detail = payload.get("message") or completed.stderr.strip() or "unknown error"
        msg = f"Salesforce CLI could not display org '{target_org}': {detail}"
        raise ConnectionResolutionError(msg)

    instance_url = result.get("instanceUrl")
    access_token = result.get("accessToken")
    if not instance_url or not access_token:
        msg = f"Org '{target_org}' has no active session in the Salesforce CLI"
        raise ConnectionResolutionError(msg)
    return OrgCredentials(
        instance_url=str(instance_url),
        access_token=str(access_token),
        api_version=result.get("apiVersion"),
    )


def resolve_connection(
    config: InventoryConfig,
    *,
    target_org: str | None = None,
    settings: ConnectionSettings | None = None,
    runner: CommandRunner = _run_command,
    session: requests.Session | None = None,
) -> SalesforceClient:
    """Return a :class:`SalesforceClient` for the requested org."""

    log = UnifiedLogger.get(__name__).bind(component="clients.connection")
    log.info(LogEvents.CONNECTION_RESOLVE_START, target_org=target_org)

    credentials: OrgCredentials | None = None
    if (
        settings is not None
        and settings.instance_url is not None
        and settings.access_token is not None
    ):
        credentials = OrgCredentials(
            instance_url=settings.instance_url,
            access_token=settings.access_token.get_secret_value(),
            api_version=settings.api_version,
        )
    elif target_org:
        try:
            credentials = fetch_sf_cli_credentials(target_org, runner=runner)
        except ConnectionResolutionError as exc:
            log.error(LogEvents.CONNECTION_RESOLVE_ERROR, target_org=target_org, error=str(exc))
            raise

    if credentials is None:
        msg = (
            "No connection available: pass --target-org, or provide "
            "--instance-url/--access-token (ORGINV_INSTANCE_URL/ORGINV_ACCESS_TOKEN)"
        )
        log.error(LogEvents.CONNECTION_RESOLVE_ERROR, target_org=target_org, error=msg)
        raise ConnectionResolutionError(msg)

    return SalesforceClient.from_config(
        config,
        instance_url=credentials.instance_url,
        access_token=credentials.access_token,
        api_version=credentials.api_version,
        session=session,
    )
