"""Fixtures for exercising the Locust user against the users app in-process."""

import os

# Keep gevent from patching the interpreter for the rest of the test session;
# must be set before locust is first imported.
os.environ.setdefault("LOCUST_SKIP_MONKEY_PATCH", "1")

from contextlib import nullcontext  # noqa: E402
from urllib.parse import urlsplit  # noqa: E402

import pytest  # noqa: E402
import requests  # noqa: E402
from requests.adapters import BaseAdapter  # noqa: E402
from requests.structures import CaseInsensitiveDict  # noqa: E402


class AppAdapter(BaseAdapter):
    """requests transport that hands each request to a FastAPI ``TestClient``."""

    def __init__(self, test_client):
        super().__init__()
        self.test_client = test_client

    def send(self, request, **kwargs):
        url = urlsplit(request.url)
        path = f"{url.path}?{url.query}" if url.query else url.path
        headers = {}
        if "Content-Type" in request.headers:
            headers["Content-Type"] = request.headers["Content-Type"]

        result = self.test_client.request(request.method, path, content=request.body, headers=headers)

        response = requests.Response()
        response.status_code = result.status_code
        response.reason = result.reason_phrase
        response.headers = CaseInsensitiveDict(result.headers.items())
        response._content = result.content
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


@pytest.fixture
def locustfile(monkeypatch, client):
    """The locustfile module with fresh per-run state, wired to the app."""
    from tests.load import locustfile as module
    from libs.loadtest import session
    from libs.loadtest.metrics import Rate, Trend

    monkeypatch.setattr(module, "setup_data", session.SetupData())
    monkeypatch.setattr(module, "creation_success", Rate("user_creation_success"))
    monkeypatch.setattr(module, "user_list_duration", Trend("user_list_duration"))
    monkeypatch.setitem(module.CUSTOM_METRICS, "user_creation_success", module.creation_success)
    monkeypatch.setitem(module.CUSTOM_METRICS, "user_list_duration", module.user_list_duration)
    # Setup/teardown talk to the app through the test client, which stays open
    monkeypatch.setattr(module, "_client", lambda environment: nullcontext(client))
    return module


@pytest.fixture
def environment(locustfile):
    from locust.env import Environment

    return Environment(user_classes=[locustfile.UsersApiUser])


@pytest.fixture
def api_user(locustfile, environment, client):
    """A ``UsersApiUser`` whose HTTP session is served by the app."""
    user = locustfile.UsersApiUser(environment)
    user.client.mount("http://", AppAdapter(client))
    user.client.mount("https://", AppAdapter(client))
    return user


@pytest.fixture
def sent_requests(environment):
    """Names and outcomes of every request the user reports to Locust."""
    seen = []

    def on_request(name, exception, **kwargs):
        seen.append((name, exception))

    environment.events.request.add_listener(on_request)
    return seen
