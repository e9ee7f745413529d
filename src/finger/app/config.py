"""
Configuration Module for the finger Service

This module defines the configuration system for the finger WebFinger server, using Pydantic for
settings validation and dependency injection through AppKeys.

The configuration follows these principles:
1. Environment-based configuration with sensible defaults
2. Strong validation and typing through Pydantic
3. Dependency injection pattern using aiohttp's app context

The Settings class is loaded from environment variables prefixed with `WF_` (for example
`WF_PORT=9090`). Command line flags override environment values. All application components
access settings and shared resources through typed AppKeys.
"""

import logging
import os
from typing import Final, Optional

from aiohttp import web
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from finger.app.metrics import MetricsClient
from finger.model.webfinger import WebFingers
from finger.resolve.reader import DEFAULT_FINGER_FILE, DEFAULT_URN_FILE

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080


def default_host() -> str:
    """Listen on all interfaces when running inside the Docker image."""
    if os.getenv("ENV_DOCKER") == "true":
        return "0.0.0.0"
    return DEFAULT_HOST


class Settings(BaseSettings):
    """
    Application settings for the finger service.

    Settings are organized into the following categories:
    - Environment and debugging
    - Network
    - Definition files
    - Monitoring and observability
    """

    model_config = SettingsConfigDict(env_prefix="WF_")

    # Environment and debugging settings
    debug: bool = False
    """
    Enable debug logging.
    Set with WF_DEBUG=true environment variable.
    """

    # Network settings
    host: str = Field(default_factory=default_host)
    """
    Host to listen on. Defaults to 0.0.0.0 when ENV_DOCKER=true, localhost otherwise.
    Set with WF_HOST environment variable.
    """

    port: int = DEFAULT_PORT
    """
    Port to listen on.
    Set with WF_PORT environment variable.
    """

    # Definition files
    urn_file: str = DEFAULT_URN_FILE
    """
    Path to the URN alias file. A missing file is only tolerated at the default path.
    Set with WF_URN_FILE environment variable.
    """

    finger_file: str = DEFAULT_FINGER_FILE
    """
    Path to the resource definition file. A missing file is only tolerated at the default path.
    Set with WF_FINGER_FILE environment variable.
    """

    strict_subjects: bool = False
    """
    Fail startup when two resource keys normalize to the same subject, instead of keeping the
    last definition.
    Set with WF_STRICT_SUBJECTS environment variable.
    """

    # Monitoring and error reporting
    sentry_dsn: Optional[str] = None
    """
    Sentry DSN for error reporting. Optional, no error reporting if not set.
    Set with WF_SENTRY_DSN environment variable.
    """

    statsd_host: Optional[str] = None
    """
    StatsD/Telegraf host for metrics collection. Metrics are disabled if not set.
    Set with WF_STATSD_HOST environment variable.
    """

    statsd_port: int = 8125
    """
    StatsD/Telegraf port for metrics collection.
    Set with WF_STATSD_PORT environment variable.
    """

    statsd_prefix: str = "finger"
    """
    Prefix for all StatsD metrics from this service.
    Set with WF_STATSD_PREFIX environment variable.
    """

    @field_validator("host", "urn_file", "finger_file")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("port")
    @classmethod
    def valid_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError("port must be between 1 and 65535")
        return v

    @property
    def address(self) -> str:
        """The `host:port` address, with brackets around IPv6 hosts."""
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


# Application context keys for dependency injection
SettingsAppKey: Final = web.AppKey("settings", Settings)
"""AppKey for accessing the application settings"""

WebFingersAppKey: Final = web.AppKey("webfingers", WebFingers)
"""AppKey for accessing the immutable WebFinger index"""

LoggerAppKey: Final = web.AppKey("logger", logging.Logger)
"""AppKey for accessing the logger injected into the application"""

MetricsClientAppKey: Final = web.AppKey("metrics_client", MetricsClient)
"""AppKey for accessing the metrics client"""
