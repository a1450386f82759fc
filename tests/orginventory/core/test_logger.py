import json
from typing import Any

import pytest

from orginventory.core.log_events import LogEvents
from orginventory.core.logger import LogConfig, LogFormat, UnifiedLogger


def _bind_mandatory(log: Any) -> Any:
    return log.bind(run_id="run-1", org="acme", command="all", component="cli")


def test_unified_logger_json_output(capfd: Any) -> None:
    UnifiedLogger.configure(LogConfig(format=LogFormat.JSON, level="INFO"))
    logger = _bind_mandatory(UnifiedLogger.get(__name__))

    logger.info(LogEvents.CLI_RUN_START, output_file="inventory.json")

    _, err = capfd.readouterr()
    payload = json.loads(err.strip())

    assert payload["message"] == "cli.run.start"
    assert payload["output_file"] == "inventory.json"
    assert payload["level"] == "info"
    assert "timestamp" in payload
    assert "missing_context" not in payload


def test_unified_logger_missing_context_report(capfd: Any) -> None:
    UnifiedLogger.configure(LogConfig(format=LogFormat.JSON, level="INFO"))
    logger = UnifiedLogger.get(__name__)
    logger.info(LogEvents.INVENTORY_BUILD_START, org="acme")

    _, err = capfd.readouterr()
    payload = json.loads(err.strip())

    assert sorted(payload["missing_context"]) == ["command", "component", "run_id"]


def test_unified_logger_redacts_access_token(capfd: Any) -> None:
    UnifiedLogger.configure(LogConfig(format=LogFormat.JSON, level="INFO"))
    logger = _bind_mandatory(UnifiedLogger.get(__name__))

    logger.info(LogEvents.CONNECTION_RESOLVE_START, access_token="00Dxx!secret")

    _, err = capfd.readouterr()
    assert "00Dxx!secret" not in err
    assert json.loads(err.strip())["access_token"] == "***REDACTED***"


def test_unified_logger_key_value_output(capfd: Any) -> None:
    UnifiedLogger.configure(LogConfig(format=LogFormat.KEY_VALUE, level="INFO"))
    logger = _bind_mandatory(UnifiedLogger.get(__name__))

    logger.warning(LogEvents.INVENTORY_SECTION_FAILED, section="user_licenses")

    _, err = capfd.readouterr()
    line = err.strip()
    assert line.startswith("timestamp=")
    assert "inventory.section.failed" in line
    assert "section='user_licenses'" in line


def test_unified_logger_level_filters_debug(capfd: Any) -> None:
    UnifiedLogger.configure(LogConfig(format=LogFormat.JSON, level="INFO"))
    logger = _bind_mandatory(UnifiedLogger.get(__name__))

    logger.debug(LogEvents.HTTP_QUERY_PAGE, page_index=0)

    _, err = capfd.readouterr()
    assert err.strip() == ""


def test_bound_context_is_cleared_by_reset(capfd: Any) -> None:
    UnifiedLogger.configure(LogConfig(format=LogFormat.JSON, level="INFO"))
    logger = UnifiedLogger.get(__name__).bind(component="cli", org="acme", command="all")

    UnifiedLogger.bind(run_id="bound-run")
    logger.info(LogEvents.CLI_RUN_START)
    UnifiedLogger.reset()
    logger.info(LogEvents.CLI_RUN_FINISH)

    _, err = capfd.readouterr()
    first, second = (json.loads(line) for line in err.strip().splitlines())
    assert first["run_id"] == "bound-run"
    assert "run_id" not in second
    assert second["missing_context"] == ["run_id"]


@pytest.mark.unit
def test_log_event_values_are_dotted() -> None:
    assert LogEvents.RETRY_ATTEMPTS_EXHAUSTED.value == "retry.attempts.exhausted"
    assert LogEvents.PROBE_OBJECT_FAILED.value == "probe.object.failed"
    assert LogEvents.CONFIG_LOAD_FINISH.value == "config.load.finish"
