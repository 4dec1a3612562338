import httpx
import pytest
from click.testing import CliRunner

from cli.src import main
from cli.src.client import PulseClient


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner):
    def _invoke(args, **kwargs):
        return runner.invoke(main.cli, args, catch_exceptions=False, **kwargs)
    return _invoke


@pytest.fixture
def server(monkeypatch):
    """Route CLI requests to an in-process handler; returns the list of requests seen."""
    routes = {}
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        key = (request.method, request.url.path)
        if key not in routes:
            return httpx.Response(404, json={"detail": "Not Found"})
        status, body = routes[key]
        return httpx.Response(status, json=body) if body is not None else httpx.Response(status)

    monkeypatch.setattr(
        main, "PulseClient",
        lambda server: PulseClient(server, transport=httpx.MockTransport(handler)),
    )

    class Server:
        requests = seen

        def route(self, method, path, status=200, body=None):
            routes[(method, path)] = (status, body)

    return Server()
