"""
Shared test configuration and fixtures for finger tests.

Provides the sample resource definitions used across test modules, a built index, and an
aiohttp test client serving that index.
"""

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from finger.app.config import Settings
from finger.app.metrics import NoOpMetricsClient
from finger.app.server import start_web_server
from finger.model.webfinger import Link, WebFinger
from finger.resolve.fingers import build_webfingers


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep WF_* variables of the developer's shell out of the settings under test."""
    for name in (
        "WF_DEBUG",
        "WF_HOST",
        "WF_PORT",
        "WF_URN_FILE",
        "WF_FINGER_FILE",
        "WF_STRICT_SUBJECTS",
        "WF_SENTRY_DSN",
        "WF_STATSD_HOST",
        "ENV_DOCKER",
        "LOGGING_CONFIG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def urn_aliases():
    return {
        "name": "http://webfinger.net/rel/name",
        "avatar": "http://webfinger.net/rel/avatar",
        "profile": "http://webfinger.net/rel/profile-page",
    }


@pytest.fixture
def resources():
    return {
        "user@example.com": {
            "name": "John Doe",
            "avatar": "https://example.com/user/avatar.png",
            "profile": "https://example.com/user",
        },
        "acct:other@example.com": {
            "name": "Jane Doe",
        },
        "https://example.com/user": {
            "name": "John Baz",
            "openid": "https://sso.example.com/",
        },
    }


@pytest.fixture
def webfingers():
    return {
        "acct:user@example.com": WebFinger(
            subject="acct:user@example.com",
            links=[
                Link(
                    rel="http://webfinger.net/rel/profile-page",
                    href="https://example.com/user",
                ),
            ],
            properties={"http://webfinger.net/rel/name": "John Doe"},
        ),
        "acct:other@example.com": WebFinger(
            subject="acct:other@example.com",
            properties={"http://webfinger.net/rel/name": "Jane Doe"},
        ),
        "https://example.com/user": WebFinger(
            subject="https://example.com/user",
            properties={"http://webfinger.net/rel/name": "John Baz"},
        ),
    }


@pytest.fixture
def built_webfingers(resources, urn_aliases):
    return build_webfingers(resources, urn_aliases)


@pytest_asyncio.fixture
async def client(webfingers):
    """Test client for an application serving the `webfingers` fixture."""
    app = await start_web_server(Settings(), webfingers, metrics_client=NoOpMetricsClient())
    async with TestClient(TestServer(app)) as test_client:
        yield test_client
