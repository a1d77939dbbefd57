"""Pytest shared fixtures for the Okta client tests."""
import json
import pathlib
import sys
import time
from types import SimpleNamespace
from typing import Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from okta_admin.config.settings import OktaConfig
from okta_admin.core.okta import OktaClient

ORG_URL = "https://example.okta.com"
API_BASE = f"{ORG_URL}/api/v1/"
API_TOKEN = "00test-token-abcdef123456"


def make_response(
    status_code: int = 200,
    body=None,
    headers: Optional[dict] = None,
    next_url: Optional[str] = None,
    raw: Optional[bytes] = None,
) -> requests.Response:
    """Build a real ``requests.Response`` carrying a JSON body and Okta headers."""
    resp = requests.Response()
    resp.status_code = status_code
    if raw is not None:
        resp._content = raw
    else:
        resp._content = b"" if body is None else json.dumps(body).encode("utf-8")
    resp.encoding = "utf-8"
    all_headers = {"Content-Type": "application/json"}
    all_headers.update(headers or {})
    if next_url:
        all_headers["Link"] = f'<{API_BASE}self>; rel="self", <{next_url}>; rel="next"'
    resp.headers = CaseInsensitiveDict(all_headers)
    return resp


class FakeTransport:
    """Stand-in for ``requests.request`` that replays queued responses in order."""

    def __init__(self):
        self.calls = []
        self._queue = []

    def queue(self, *args, **kwargs) -> "FakeTransport":
        self._queue.append(make_response(*args, **kwargs))
        return self

    def queue_error(self, exc: Exception) -> "FakeTransport":
        self._queue.append(exc)
        return self

    def __call__(self, method, url, json=None, data=None, headers=None, timeout=None, **kwargs):
        self.calls.append(SimpleNamespace(method=method, url=url, json=json, data=data, headers=headers, timeout=timeout))
        if not self._queue:
            raise AssertionError(f"Unexpected HTTP {method} in unit test: {url}")
        item = self._queue.pop(0)
        if isinstance(item, Exception):
            raise item
        item.url = url
        return item

    @property
    def urls(self):
        return [call.url for call in self.calls]


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from hitting a live Okta org.

    Integration tests are explicitly marked with @pytest.mark.integration and
    are allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _refuse(method, url, *args, **kwargs):
        raise RuntimeError(f"Unexpected network access in tests: {method} {url}")

    monkeypatch.setattr(requests, "request", _refuse)


@pytest.fixture()
def transport(monkeypatch):
    """Queue of canned responses served in place of ``requests.request``."""
    fake = FakeTransport()
    monkeypatch.setattr(requests, "request", fake)
    return fake


@pytest.fixture()
def no_sleep(monkeypatch):
    """Record sleeps instead of waiting."""
    slept = []
    monkeypatch.setattr(time, "sleep", slept.append)
    return slept


@pytest.fixture()
def config():
    return OktaConfig(org_url=ORG_URL, api_token=API_TOKEN, max_retries=2, max_rate_limit_wait=30)


@pytest.fixture()
def client(config):
    return OktaClient(config=config)


@pytest.fixture()
def categories(client, monkeypatch):
    """Rate-limit category of every request sent through ``client``, in order."""
    seen = []
    original = client.do

    def spy(request, category, cancel_event=None):
        seen.append(category)
        return original(request, category, cancel_event=cancel_event)

    monkeypatch.setattr(client, "do", spy)
    return seen
