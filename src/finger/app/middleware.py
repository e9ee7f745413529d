"""
Request middleware for the finger application.

Middleware factories receive their logger explicitly instead of looking it up in a per-request
context. Applied outermost first:

- request_logger_middleware: one log line per request with method, path, status, remote address
  and duration
- statsd_middleware: request count and timing metrics
- recover_middleware: contains unexpected handler exceptions and answers 500
- timeout_middleware: bounds the total duration of a request
"""

import asyncio
import logging
from time import time

import sentry_sdk
from aiohttp import web

from finger.app.config import MetricsClientAppKey


def request_logger_middleware(logger: logging.Logger):
    @web.middleware
    async def middleware(request: web.Request, handler):
        start_time: float = time()
        status = 500

        try:
            response = await handler(request)
            status = response.status
            return response
        except web.HTTPException as e:
            status = e.status
            raise
        finally:
            duration = time() - start_time
            fields = {
                "method": request.method,
                "path": request.path,
                "status": status,
                "remote": request.remote,
                "duration": duration,
            }
            if status >= 500:
                level, message = logging.ERROR, "Server error"
            elif status >= 400:
                level, message = logging.INFO, "Client error"
            else:
                level, message = logging.INFO, "Request completed"
            logger.log(
                level,
                "%s method=%s path=%s status=%d remote=%s duration=%.6fs",
                message,
                request.method,
                request.path,
                status,
                request.remote,
                duration,
                extra=fields,
            )

    return middleware


@web.middleware
async def statsd_middleware(request: web.Request, handler):
    metrics_client = request.app[MetricsClientAppKey]
    request_method: str = request.method
    request_path = request.path

    start_time: float = time()
    response_status_code = 0

    try:
        response = await handler(request)
        response_status_code = response.status
        return response
    except web.HTTPException as e:
        response_status_code = e.status
        raise
    finally:
        metrics_client.timer(
            "server.request.time",
            time() - start_time,
            tag_dict={"path": request_path, "method": request_method},
        )
        metrics_client.increment(
            "server.request.count",
            1,
            tag_dict={
                "path": request_path,
                "method": request_method,
                "status": response_status_code,
            },
        )


def recover_middleware(logger: logging.Logger):
    """
    Per-request error boundary.

    HTTP exceptions are regular flow control and pass through. Any other exception is logged,
    reported to Sentry and turned into a 500 response, so a failing request never affects the
    listener or other requests.
    """

    @web.middleware
    async def middleware(request: web.Request, handler):
        try:
            return await handler(request)
        except web.HTTPException:
            raise
        except Exception as e:
            logger.exception(
                "Panic handling %s %s: %s: %s",
                request.method,
                request.path,
                type(e).__name__,
                e,
            )
            sentry_sdk.capture_exception(e)
            request.app[MetricsClientAppKey].increment(
                "server.request.exception",
                1,
                tag_dict={
                    "exception": type(e).__name__,
                    "path": request.path,
                    "method": request.method,
                },
            )
            return web.Response(status=500, text="Internal Server Error")

    return middleware


def timeout_middleware(timeout: float):
    @web.middleware
    async def middleware(request: web.Request, handler):
        try:
            return await asyncio.wait_for(handler(request), timeout)
        except asyncio.TimeoutError:
            return web.Response(status=503, text="request timed out")

    return middleware
