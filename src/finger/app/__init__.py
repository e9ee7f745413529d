"""
finger Application Layer

This package implements the web application layer for the finger service, handling HTTP requests
and responses using the aiohttp framework.

Key Components:
- cli.py: Command line entry point (`serve` and `healthcheck`)
- server.py: Web application construction and listener lifecycle
- config.py: Configuration management using Pydantic settings
- middleware.py: Request logging, error containment, timeouts and metrics
- metrics.py: Metrics client abstraction
- handlers/: Request handlers for the public endpoints

The application uses several middleware layers, outermost first:
- Request logging middleware
- Statsd middleware for metrics collection
- Recover middleware that turns unexpected exceptions into 500 responses
- Timeout middleware that bounds the duration of a single request

It provides the following endpoints:
- WebFinger endpoint (/.well-known/webfinger)
- Liveness endpoint (/healthz)
"""
