"""
Unit tests for finger.app.middleware

Each middleware is exercised in a minimal application with purpose-built handlers.
"""

import asyncio
import logging
from unittest.mock import Mock, patch

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

from finger.app.config import MetricsClientAppKey
from finger.app.metrics import NoOpMetricsClient
from finger.app.middleware import (
    recover_middleware,
    request_logger_middleware,
    statsd_middleware,
    timeout_middleware,
)

test_logger = logging.getLogger("finger.tests.middleware")


async def handle_ok(request: web.Request):
    return web.Response(text="ok")


async def handle_not_found(request: web.Request):
    raise web.HTTPNotFound(text="Resource not found")


async def handle_panic(request: web.Request):
    raise RuntimeError("handler exploded")


async def handle_slow(request: web.Request):
    await asyncio.sleep(5)
    return web.Response(text="too late")


def make_app(middlewares, metrics_client=None) -> web.Application:
    app = web.Application(middlewares=middlewares)
    app[MetricsClientAppKey] = metrics_client or NoOpMetricsClient()
    app.add_routes(
        [
            web.get("/ok", handle_ok),
            web.get("/missing", handle_not_found),
            web.get("/panic", handle_panic),
            web.get("/slow", handle_slow),
        ]
    )
    return app


def request_records(caplog):
    return [record for record in caplog.records if record.name == test_logger.name]


class TestRequestLoggerMiddleware:
    """Test suite for request_logger_middleware."""

    @pytest.mark.asyncio
    async def test_logs_completed_request(self, caplog):
        app = make_app([request_logger_middleware(test_logger)])

        with caplog.at_level(logging.INFO, logger=test_logger.name):
            async with TestClient(TestServer(app)) as client:
                resp = await client.get("/ok")
                assert resp.status == 200

        records = request_records(caplog)
        assert len(records) == 1
        record = records[0]
        assert record.levelno == logging.INFO
        assert record.getMessage().startswith("Request completed")
        assert record.method == "GET"
        assert record.path == "/ok"
        assert record.status == 200
        assert record.remote == "127.0.0.1"
        assert record.duration >= 0

    @pytest.mark.asyncio
    async def test_logs_client_error(self, caplog):
        app = make_app([request_logger_middleware(test_logger)])

        with caplog.at_level(logging.INFO, logger=test_logger.name):
            async with TestClient(TestServer(app)) as client:
                resp = await client.get("/missing")
                assert resp.status == 404

        record = request_records(caplog)[0]
        assert record.levelno == logging.INFO
        assert record.getMessage().startswith("Client error")
        assert record.status == 404

    @pytest.mark.asyncio
    async def test_logs_server_error(self, caplog):
        app = make_app(
            [request_logger_middleware(test_logger), recover_middleware(test_logger)]
        )

        with caplog.at_level(logging.INFO, logger=test_logger.name):
            async with TestClient(TestServer(app)) as client:
                resp = await client.get("/panic")
                assert resp.status == 500

        records = [
            record
            for record in request_records(caplog)
            if record.getMessage().startswith("Server error")
        ]
        assert len(records) == 1
        assert records[0].levelno == logging.ERROR
        assert records[0].status == 500


class TestRecoverMiddleware:
    """Test suite for recover_middleware."""

    @pytest.mark.asyncio
    @patch("finger.app.middleware.sentry_sdk")
    async def test_panic_becomes_500(self, mock_sentry, caplog):
        metrics_client = Mock()
        app = make_app([recover_middleware(test_logger)], metrics_client=metrics_client)

        with caplog.at_level(logging.ERROR, logger=test_logger.name):
            async with TestClient(TestServer(app)) as client:
                resp = await client.get("/panic")

                assert resp.status == 500
                assert await resp.text() == "Internal Server Error"

                resp = await client.get("/ok")
                assert resp.status == 200

        assert "handler exploded" in caplog.text
        mock_sentry.capture_exception.assert_called_once()
        metrics_client.increment.assert_called_once_with(
            "server.request.exception",
            1,
            tag_dict={"exception": "RuntimeError", "path": "/panic", "method": "GET"},
        )

    @pytest.mark.asyncio
    @patch("finger.app.middleware.sentry_sdk")
    async def test_http_exceptions_pass_through(self, mock_sentry):
        app = make_app([recover_middleware(test_logger)])

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/missing")
            assert resp.status == 404
            assert await resp.text() == "Resource not found"

        mock_sentry.capture_exception.assert_not_called()


class TestTimeoutMiddleware:
    """Test suite for timeout_middleware."""

    @pytest.mark.asyncio
    async def test_slow_request_times_out(self):
        app = make_app([timeout_middleware(0.05)])

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/slow")

            assert resp.status == 503
            assert await resp.text() == "request timed out"

    @pytest.mark.asyncio
    async def test_fast_request(self):
        app = make_app([timeout_middleware(5)])

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/ok")
            assert resp.status == 200


class TestStatsdMiddleware:
    """Test suite for statsd_middleware."""

    @pytest.mark.asyncio
    async def test_records_request(self):
        metrics_client = Mock()
        app = make_app([statsd_middleware], metrics_client=metrics_client)

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/ok")
            assert resp.status == 200

        metrics_client.increment.assert_called_once_with(
            "server.request.count",
            1,
            tag_dict={"path": "/ok", "method": "GET", "status": 200},
        )
        name, duration = metrics_client.timer.call_args.args
        assert name == "server.request.time"
        assert duration >= 0

    @pytest.mark.asyncio
    async def test_records_http_exception_status(self):
        metrics_client = Mock()
        app = make_app([statsd_middleware], metrics_client=metrics_client)

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/missing")
            assert resp.status == 404

        metrics_client.increment.assert_called_once_with(
            "server.request.count",
            1,
            tag_dict={"path": "/missing", "method": "GET", "status": 404},
        )
