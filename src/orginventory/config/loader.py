"""Configuration loading utilities."""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from orginventory.core.errors import ConfigurationError
from orginventory.core.log_events import LogEvents
from orginventory.core.logger import UnifiedLogger

from .models import InventoryConfig

__all__ = ["DEFAULT_CONFIG_RESOURCE", "get_config", "load_config", "load_raw_config"]

DEFAULT_CONFIG_RESOURCE = "default.yaml"


def _read_default_text() -> str:
    return resources.files("orginventory.configs").joinpath(DEFAULT_CONFIG_RESOURCE).read_text(
        encoding="utf-8"
    )


def load_raw_config(path: Path | None = None) -> dict[str, Any]:
    """Return the raw YAML mapping from ``path`` or from the packaged default."""

    if path is None:
        text = _read_default_text()
        source = f"orginventory.configs/{DEFAULT_CONFIG_RESOURCE}"
    else:
        resolved = path.expanduser()
        if not resolved.exists():
            msg = f"Configuration file not found: {resolved}"
            raise ConfigurationError(msg)
        text = resolved.read_text(encoding="utf-8")
        source = str(resolved)

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in {source}: {exc}"
        raise ConfigurationError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Configuration root must be a mapping in {source}"
        raise ConfigurationError(msg)
    return data


def load_config(path: Path | None = None) -> InventoryConfig:
    """Load and validate configuration; any failure is a :class:`ConfigurationError`."""

    log = UnifiedLogger.get(__name__).bind(component="config.loader")
    try:
        data = load_raw_config(path)
        config = InventoryConfig.model_validate(data)
    except ValidationError as exc:
        log.error(LogEvents.CONFIG_LOAD_ERROR, path=str(path) if path else None, error=str(exc))
        msg = f"Invalid configuration: {exc}"
        raise ConfigurationError(msg) from exc
    except ConfigurationError as exc:
        log.error(LogEvents.CONFIG_LOAD_ERROR, path=str(path) if path else None, error=str(exc))
        raise

    catalog = config.probe_catalog
    log.info(
        LogEvents.CONFIG_LOAD_FINISH,
        path=str(path) if path else None,
        package_probes=len(catalog.package_based),
        object_probes=len(catalog.object_based),
    )
    return config


@lru_cache(maxsize=1)
def get_config() -> InventoryConfig:
    """Return the packaged default configuration, loaded once per process."""

    return load_config()
