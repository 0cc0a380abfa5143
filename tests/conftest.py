"""Shared pytest fixtures: a fake JIRA served through httpx.MockTransport."""

import json
import random
from typing import Any, Callable, Dict, List, Tuple, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from jira_gateway.core.config import JiraCredentials, Settings
from jira_gateway.main import build_app
from jira_gateway.services.jira_client import JiraClient
from jira_gateway.services.mock_data import MockTicketSynthesizer

JIRA_URL = "https://example.atlassian.net"

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeJira:
    """Records outgoing requests and answers them from a (method, path) table."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, route: Route) -> None:
        self.routes[(method, path)] = route

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"errorMessages": [f"No route for {request.url.path}"]})
        if callable(route):
            return route(request)
        return route

    def client_factory(self, credentials: JiraCredentials) -> JiraClient:
        return JiraClient.from_credentials(credentials, transport=httpx.MockTransport(self.handler))

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def json_body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


def make_settings(**overrides) -> Settings:
    values = {
        "JIRA_BASE_URL": JIRA_URL,
        "JIRA_EMAIL": "user@example.com",
        "JIRA_API_TOKEN": "token",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def fake_jira() -> FakeJira:
    return FakeJira()


@pytest.fixture
def client(fake_jira: FakeJira) -> TestClient:
    """Gateway configured with default credentials and a fake JIRA."""
    app = build_app(
        settings=make_settings(),
        synthesizer=MockTicketSynthesizer(rng=random.Random(7)),
        client_factory=fake_jira.client_factory,
    )
    return TestClient(app)


@pytest.fixture
def unconfigured_client(fake_jira: FakeJira) -> TestClient:
    """Gateway with no default credentials."""
    app = build_app(
        settings=make_settings(JIRA_BASE_URL="", JIRA_EMAIL="", JIRA_API_TOKEN="", JIRA_CLOUD_SITE=""),
        synthesizer=MockTicketSynthesizer(rng=random.Random(7)),
        client_factory=fake_jira.client_factory,
    )
    return TestClient(app)
