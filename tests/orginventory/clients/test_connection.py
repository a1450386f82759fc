"""Tests for connection resolution."""

from __future__ import annotations

import json
import subprocess
from collections.abc import Sequence
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from orginventory.clients.connection import fetch_sf_cli_credentials, resolve_connection
from orginventory.config.environment import ConnectionSettings
from orginventory.config.models import InventoryConfig
from orginventory.core.errors import ConnectionResolutionError


class _Runner:
    def __init__(
        self,
        payload: Any = None,
        *,
        returncode: int = 0,
        stderr: str = "",
        error: Exception | None = None,
    ) -> None:
        self.payload = payload
        self.returncode = returncode
        self.stderr = stderr
        self.error = error
        self.calls: list[Sequence[str]] = []

    def __call__(self, args: Sequence[str]) -> subprocess.CompletedProcess[str]:
        self.calls.append(tuple(args))
        if self.error is not None:
            raise self.error
        stdout = self.payload if isinstance(self.payload, str) else json.dumps(self.payload)
        return subprocess.CompletedProcess(list(args), self.returncode, stdout, self.stderr)


def _sf_ok(**result: Any) -> dict[str, Any]:
    base = {
        "instanceUrl": "https://acme.my.salesforce.com",
        "accessToken": "00Dxx!token",
        "apiVersion": "60.0",
        "username": "admin@acme.com",
    }
    base.update(result)
    return {"status": 0, "result": base}


def _session() -> MagicMock:
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.mark.unit
class TestFetchSfCliCredentials:
    def test_reads_session_from_cli(self) -> None:
        runner = _Runner(_sf_ok())

        credentials = fetch_sf_cli_credentials("acme", runner=runner)

        assert runner.calls == [("sf", "org", "display", "--target-org", "acme", "--json")]
        assert credentials.instance_url == "https://acme.my.salesforce.com"
        assert credentials.access_token == "00Dxx!token"
        assert credentials.api_version == "60.0"

    def test_cli_missing(self) -> None:
        with pytest.raises(ConnectionResolutionError, match="not installed"):
            fetch_sf_cli_credentials("acme", runner=_Runner(error=FileNotFoundError("sf")))

    def test_cli_timeout(self) -> None:
        error = subprocess.TimeoutExpired(cmd="sf", timeout=120)

        with pytest.raises(ConnectionResolutionError, match="Timed out"):
            fetch_sf_cli_credentials("acme", runner=_Runner(error=error))

    def test_cli_reports_error(self) -> None:
        runner = _Runner(
            {"status": 1, "message": "No authorization information found for ghost."},
            returncode=1,
        )

        with pytest.raises(ConnectionResolutionError, match="No authorization information"):
            fetch_sf_cli_credentials("ghost", runner=runner)

    def test_unparseable_output(self) -> None:
        with pytest.raises(ConnectionResolutionError, match="Unexpected output"):
            fetch_sf_cli_credentials("acme", runner=_Runner("Warning: not json"))

    def test_missing_token(self) -> None:
        with pytest.raises(ConnectionResolutionError, match="no active session"):
            fetch_sf_cli_credentials("acme", runner=_Runner(_sf_ok(accessToken=None)))


@pytest.mark.unit
class TestResolveConnection:
    def test_explicit_settings_win_over_cli(self, default_config: InventoryConfig) -> None:
        runner = _Runner(_sf_ok())
        settings = ConnectionSettings(
            instance_url="https://direct.my.salesforce.com",
            access_token="direct-token",
        )

        client = resolve_connection(
            default_config,
            target_org="acme",
            settings=settings,
            runner=runner,
            session=_session(),
        )

        assert client.instance_url == "https://direct.my.salesforce.com"
        assert client.api_version == "59.0"
        assert runner.calls == []

    def test_falls_back_to_cli(self, default_config: InventoryConfig) -> None:
        session = _session()

        client = resolve_connection(
            default_config,
            target_org="acme",
            settings=ConnectionSettings(_env_file=None),
            runner=_Runner(_sf_ok()),
            session=session,
        )

        assert client.instance_url == "https://acme.my.salesforce.com"
        assert client.api_version == "60.0"
        assert session.headers["Authorization"] == "Bearer 00Dxx!token"

    def test_url_without_token_uses_cli(
        self, default_config: InventoryConfig, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("ORGINV_ACCESS_TOKEN", raising=False)
        runner = _Runner(_sf_ok())

        client = resolve_connection(
            default_config,
            target_org="acme",
            settings=ConnectionSettings(
                instance_url="https://direct.my.salesforce.com", _env_file=None
            ),
            runner=runner,
            session=_session(),
        )

        assert client.instance_url == "https://acme.my.salesforce.com"
        assert len(runner.calls) == 1

    def test_nothing_to_connect_with(self, default_config: InventoryConfig) -> None:
        with pytest.raises(ConnectionResolutionError, match="No connection available"):
            resolve_connection(default_config, settings=None, runner=_Runner(_sf_ok()))
