"""
Metrics Abstraction Layer for the finger Service

This module provides a small metrics interface with two implementations: a wrapper around the
Telegraf/StatsD client and a no-op client used when no StatsD host is configured.

Key Components:
- MetricsClient: Abstract interface for all metrics operations
- TelegrafCompatibilityClient: Wrapper for TelegrafStatsdClient
- NoOpMetricsClient: No-operation client for disabled metrics
- create_metrics_client: Factory function for backend selection

Metric names are given without the service prefix; the Telegraf client prepends the configured
prefix (`finger` by default).
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

from aio_statsd import TelegrafStatsdClient

logger = logging.getLogger(__name__)


class MetricsClient(ABC):
    """
    Abstract metrics client interface.

    All implementations support counters, gauges and timers, with StatsD-style tag
    dictionaries.
    """

    @abstractmethod
    def increment(
        self,
        name: str,
        value: Union[int, float] = 1,
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Increment a counter metric by the specified value.

        Args:
            name: Metric name (e.g., 'server.request.count')
            value: Amount to increment by (default: 1)
            tag_dict: Optional tags for metric dimensions
        """

    @abstractmethod
    def gauge(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Set a gauge metric to the specified value.

        Args:
            name: Metric name (e.g., 'webfinger.resources')
            value: Current value to set
            tag_dict: Optional tags for metric dimensions
        """

    @abstractmethod
    def timer(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Record a duration in seconds.

        Args:
            name: Metric name (e.g., 'server.request.time')
            value: Duration in seconds
            tag_dict: Optional tags for metric dimensions
        """

    @abstractmethod
    async def close(self) -> None:
        """Flush pending metrics and close any network connection."""


class TelegrafCompatibilityClient(MetricsClient):
    """Delegates to a TelegrafStatsdClient, prefixing every metric name."""

    def __init__(self, telegraf_client: Any, prefix: str = "finger"):
        self.client = telegraf_client
        self.prefix = prefix

    def _key(self, name: str) -> str:
        return f"{self.prefix}.{name}" if self.prefix else name

    def increment(
        self,
        name: str,
        value: Union[int, float] = 1,
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.client.increment(self._key(name), value, tag_dict=tag_dict or {})

    def gauge(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.client.gauge(self._key(name), value, tag_dict=tag_dict or {})

    def timer(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.client.timer(self._key(name), value, tag_dict=tag_dict or {})

    async def close(self) -> None:
        try:
            await self.client.close()
        except Exception as e:
            logger.warning(f"Error closing Telegraf client: {e}")


class NoOpMetricsClient(MetricsClient):
    """No-operation metrics client, used when metrics collection is disabled."""

    def increment(
        self,
        name: str,
        value: Union[int, float] = 1,
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        pass

    def timer(
        self,
        name: str,
        value: Union[int, float],
        tag_dict: Optional[Dict[str, Any]] = None,
    ) -> None:
        pass

    async def close(self) -> None:
        pass


async def create_metrics_client(
    host: Optional[str],
    port: int = 8125,
    prefix: str = "finger",
    debug: bool = False,
) -> MetricsClient:
    """
    Create and connect the metrics client.

    Args:
        host: Telegraf/StatsD host. None disables metrics.
        port: Telegraf/StatsD port
        prefix: Prefix for every metric name
        debug: Enable debug output of the StatsD client

    Returns:
        MetricsClient: A connected Telegraf client, or a no-op client
    """
    if not host:
        logger.debug("No StatsD host configured, metrics are disabled")
        return NoOpMetricsClient()

    telegraf_client = TelegrafStatsdClient(host=host, port=port, debug=debug)
    await telegraf_client.connect()
    logger.info(f"Sending metrics to {host}:{port}")
    return TelegrafCompatibilityClient(telegraf_client, prefix=prefix)
