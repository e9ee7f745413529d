import asyncio
import logging
import os
import signal
from typing import Callable, Optional

import sentry_sdk
from aiohttp import web
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from finger.app.config import (
    LoggerAppKey,
    MetricsClientAppKey,
    Settings,
    SettingsAppKey,
    WebFingersAppKey,
)
from finger.app.handlers.internal import handle_healthz
from finger.app.handlers.webfinger import handle_webfinger
from finger.app.metrics import MetricsClient, create_metrics_client
from finger.app.middleware import (
    recover_middleware,
    request_logger_middleware,
    statsd_middleware,
    timeout_middleware,
)
from finger.model.webfinger import WebFingers

logger = logging.getLogger(__name__)

KEEPALIVE_TIMEOUT = 30.0
"""Maximum time to wait for the next request on a keep-alive connection."""

REQUEST_TIMEOUT = 7 * 24 * 60 * 60.0
"""Ceiling for the whole handling of a single request. A backstop, not a performance target."""

SHUTDOWN_TIMEOUT = 60.0
"""Grace period for in-flight requests to finish once shutdown starts."""


async def lifecycle(app: web.Application):
    app_logger = app[LoggerAppKey]
    metrics_client = app[MetricsClientAppKey]

    metrics_client.gauge("webfinger.resources", len(app[WebFingersAppKey]))
    app_logger.info("Startup complete")

    yield

    await metrics_client.close()
    app_logger.info("Server shutdown complete")


async def start_web_server(
    settings: Optional[Settings] = None,
    webfingers: Optional[WebFingers] = None,
    app_logger: Optional[logging.Logger] = None,
    metrics_client: Optional[MetricsClient] = None,
) -> web.Application:
    """
    Build the web application serving `webfingers`.

    The index is published as is and never modified afterwards. Dependencies that are not given
    are created from `settings`.
    """
    if settings is None:
        settings = Settings()
    if webfingers is None:
        webfingers = {}
    if app_logger is None:
        app_logger = logger
    if metrics_client is None:
        metrics_client = await create_metrics_client(
            settings.statsd_host,
            port=settings.statsd_port,
            prefix=settings.statsd_prefix,
            debug=settings.debug,
        )

    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            send_default_pii=True,
            integrations=[AioHttpIntegration()],
        )

    app = web.Application(
        middlewares=[
            request_logger_middleware(app_logger),
            statsd_middleware,
            recover_middleware(app_logger),
            timeout_middleware(REQUEST_TIMEOUT),
        ]
    )

    app[SettingsAppKey] = settings
    app[WebFingersAppKey] = webfingers
    app[LoggerAppKey] = app_logger
    app[MetricsClientAppKey] = metrics_client

    app.add_routes(
        [
            web.route("*", "/.well-known/webfinger", handle_webfinger),
            web.get("/healthz", handle_healthz),
        ]
    )

    app.cleanup_ctx.append(lifecycle)

    return app


async def serve(
    settings: Settings,
    webfingers: WebFingers,
    stop: asyncio.Event,
    app_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Serve `webfingers` until `stop` is set, then shut down gracefully.

    In-flight requests get SHUTDOWN_TIMEOUT seconds to finish. The drain is shielded, so
    cancelling the serving task does not cut it short.

    Raises:
        OSError: If the listener cannot bind to the configured address
    """
    if app_logger is None:
        app_logger = logger

    app = await start_web_server(settings, webfingers, app_logger)
    runner = web.AppRunner(
        app,
        handle_signals=False,
        access_log=None,
        keepalive_timeout=KEEPALIVE_TIMEOUT,
        shutdown_timeout=SHUTDOWN_TIMEOUT,
    )
    await runner.setup()

    try:
        site = web.TCPSite(runner, settings.host, settings.port)
        await site.start()
        app_logger.info("Starting server on %s", settings.address)

        await stop.wait()
        app_logger.info("Shutting down server")
    finally:
        await asyncio.shield(runner.cleanup())


class InterruptTrap:
    """
    Turns interrupts into a graceful shutdown.

    The first SIGINT (or SIGTERM) sets the stop event. A second SIGINT exits the process
    immediately with status 1.
    """

    def __init__(self, stop: asyncio.Event, force_exit: Callable[[int], None] = os._exit):
        self.stop = stop
        self.force_exit = force_exit
        self.interrupts = 0

    def __call__(self) -> None:
        self.interrupts += 1
        if self.interrupts > 1:
            print("\nForce quit")
            self.force_exit(1)
            return
        print("\nGracefully shutting down. Press Ctrl+C again to force quit")
        self.stop.set()

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        loop.add_signal_handler(signal.SIGINT, self)
        loop.add_signal_handler(signal.SIGTERM, self.stop.set)
