"""Configuration models for the inventory tooling."""

from __future__ import annotations

import re
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt, field_validator

__all__ = [
    "ConnectionConfig",
    "DetectionRulesConfig",
    "IntegrationsConfig",
    "InventoryConfig",
    "LoggingConfig",
    "ObjectProbeConfig",
    "PackageProbeConfig",
    "PerformanceConfig",
    "ProbeCatalogConfig",
    "RateLimitConfig",
    "RetrySettings",
    "SecurityConfig",
]

_SOBJECT_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")

BatchSize = Annotated[int, Field(ge=200, le=2000)]


class RetrySettings(BaseModel):
    """Retry budget handed to :class:`orginventory.core.retry.RetryPolicy`."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    attempts: PositiveInt = 3
    delay_ms: Annotated[int, Field(ge=0)] = 1000


class PackageProbeConfig(BaseModel):
    """Namespace prefix whose installed package implies a capability."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    prefix: str = Field(min_length=1)
    capability: str = Field(min_length=1)


class ObjectProbeConfig(BaseModel):
    """sObject whose queryable, non-empty presence implies a capability."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    object_name: str
    capability: str = Field(min_length=1)

    @field_validator("object_name", mode="after")
    @classmethod
    def _validate_object_name(cls, value: str) -> str:
        if not _SOBJECT_NAME_RE.match(value):
            msg = f"Invalid sObject name: {value!r}"
            raise ValueError(msg)
        return value


class ProbeCatalogConfig(BaseModel):
    """The fixed, hand maintained probe catalog."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    base_capability: str = Field(default="Salesforce Platform", min_length=1)
    package_based: tuple[PackageProbeConfig, ...] = ()
    object_based: tuple[ObjectProbeConfig, ...] = ()

    @field_validator("package_based", mode="after")
    @classmethod
    def _unique_prefixes(
        cls, value: tuple[PackageProbeConfig, ...]
    ) -> tuple[PackageProbeConfig, ...]:
        seen: set[str] = set()
        for probe in value:
            if probe.prefix in seen:
                msg = f"Duplicate package prefix in probe catalog: {probe.prefix}"
                raise ValueError(msg)
            seen.add(probe.prefix)
        return value


class IntegrationsConfig(BaseModel):
    """Integration point types collected by the integrations section."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    types: tuple[str, ...] = ("NamedCredential", "CustomSetting")


class DetectionRulesConfig(BaseModel):
    """Rules used to infer optional org capabilities."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    cloud_products: ProbeCatalogConfig = Field(default_factory=ProbeCatalogConfig)
    integrations: IntegrationsConfig = Field(default_factory=IntegrationsConfig)


class PerformanceConfig(BaseModel):
    """Query batching, retry and parallelism settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    batch_size: BatchSize = Field(
        default=200,
        description="Records per query page requested through Sforce-Query-Options.",
    )
    retry_attempts: PositiveInt = Field(default=3, description="Attempts per remote call.")
    retry_delay_ms: Annotated[int, Field(ge=0)] = Field(
        default=1000,
        description="Base backoff delay; attempt k waits retry_delay_ms * k.",
    )
    max_workers: PositiveInt = Field(
        default=1,
        description="Worker threads for independent inventory sections (1 = sequential).",
    )

    @property
    def retry(self) -> RetrySettings:
        return RetrySettings(attempts=self.retry_attempts, delay_ms=self.retry_delay_ms)


class RateLimitConfig(BaseModel):
    """Client-side limit of ``requests`` calls per ``window_sec`` seconds."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    requests: PositiveInt = 100
    window_sec: PositiveFloat = 60.0


class SecurityConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)


class LoggingConfig(BaseModel):
    """Structured logging configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level for UnifiedLogger."
    )
    format: Literal["json", "key_value"] = Field(default="json", description="Log renderer.")

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class ConnectionConfig(BaseModel):
    """REST API settings for the Salesforce connection."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    api_version: str = Field(default="59.0", pattern=r"^\d+\.\d$")
    timeout_sec: PositiveFloat = 30.0


class InventoryConfig(BaseModel):
    """Top level configuration for an inventory run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    detection_rules: DetectionRulesConfig = Field(default_factory=DetectionRulesConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)

    @property
    def probe_catalog(self) -> ProbeCatalogConfig:
        return self.detection_rules.cloud_products
