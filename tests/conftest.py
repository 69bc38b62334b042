"""Shared fixtures: fake container fetcher, fixed clock and a mocked Reality Data API."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from reality_data_client import (
    RealityDataAccessClient,
    RealityDataClientOptions,
)

BASE_URL = "https://api.example.com/realitydata"
REALITY_DATA_ID = "f2065aea-5dcd-49e2-9077-e082dde506bc"
OTHER_ID = "3a1c7e52-8f0b-4d6e-9c21-5b7f0e4d2a18"
PROJECT_ID = "614a3c70-cc9f-4de9-af87-f834002ca19e"
T0 = datetime(2024, 5, 12, 20, 0, 0, tzinfo=timezone.utc)


class FakeFetcher:
    """ContainerFetcher that counts calls and can be told to fail."""

    def __init__(self):
        self.calls = []
        self.fail_with = None

    def fetch_container_url(self, access_token, reality_data_id, project_id, mode):
        self.calls.append((access_token, reality_data_id, project_id, mode))
        if self.fail_with is not None:
            raise self.fail_with
        n = len(self.calls)
        return f"https://blob.example.com/{reality_data_id}?perm={mode.value}&sig=sig{n}"


class FakeApi:
    """Routes for httpx.MockTransport; records every request it sees."""

    def __init__(self):
        self.requests = []
        self.container_status = 200
        self.container_body = None
        self.routes = {}

    def container_payload(self, entity_id, mode_value):
        n = sum(1 for r in self.requests if r.url.path.endswith("/container/"))
        return {
            "container": {
                "_links": {
                    "containerUrl": {
                        "href": f"https://blob.example.com/{entity_id}?sv=2020&sp={mode_value[0].lower()}&sig=s{n}"
                    }
                }
            }
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/container/"):
            if self.container_status != 200:
                return httpx.Response(
                    self.container_status,
                    json={"error": {"code": "Forbidden", "message": "Access denied"}},
                )
            body = self.container_body
            if body is None:
                # path is {base}/{id}/container/
                entity_id = request.url.path.rstrip("/").split("/")[-2]
                body = self.container_payload(entity_id, request.url.params["permissions"])
            return httpx.Response(200, json=body)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": {"code": "NotFound", "message": "Not found"}})
        status, body = route
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, content=json.dumps(body).encode(), headers={"content-type": "application/json"})

    def container_calls(self):
        return [r for r in self.requests if r.url.path.endswith("/container/")]


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def clock():
    """Mutable clock; set clock.now to move time."""

    class _Clock:
        now = T0

        def __call__(self):
            return self.now

    return _Clock()


@pytest.fixture
def client(api, clock):
    http = httpx.Client(transport=httpx.MockTransport(api.handler))
    options = RealityDataClientOptions(base_url=BASE_URL, url_prefix=None)
    with RealityDataAccessClient(options=options, http_client=http, clock=clock) as c:
        yield c
    http.close()
