import pytest
import json


def pytest_addoption(parser):
    parser.addoption("--runslow", action="store_true", default=False, help="run slow tests")

def pytest_configure(config):
    config.addinivalue_line("markers", "slow: mark test as slow to run")

def pytest_collection_modifyitems(config, items):

    if config.getoption("--runslow"):
        return
    
    skip_slow = pytest.mark.skip(reason="need --runslow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


class FakeServer:
    """Fake replacement of `http_request`, responses are registered by URL and every
    request made is recorded.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, url, data=b"", *, status=200, headers=None):
        if not isinstance(data, bytes):
            data = (data if isinstance(data, str) else json.dumps(data)).encode()
            if headers is None:
                headers = {"Content-Type": "application/json"}
        self.routes[url] = (status, data, headers or {})

    def __call__(self, method, url, **kwargs):

        from mcapi.http import HttpResponse, HttpError

        self.requests.append((method, url, kwargs))

        query = kwargs.get("query")
        full_url = url
        if query:
            from urllib.parse import urlencode
            query_string = urlencode({k: v for k, v in query.items() if v is not None})
            full_url = f"{url}?{query_string}"

        route = self.routes.get(full_url, self.routes.get(url))
        res = HttpResponse(None)
        if route is None:
            res.status = 404
            raise HttpError(res, method, url)
        
        res.status, res.data, res.headers = route
        if not 200 <= res.status < 300:
            raise HttpError(res, method, url)
        return res


@pytest.fixture
def fake_server(monkeypatch):
    """This fixture replaces the HTTP function of every client module.
    """

    import mcapi.vanilla, mcapi.fabric, mcapi.quilt, mcapi.forge, \
        mcapi.papermc, mcapi.purpurmc, mcapi.hangar, mcapi.mclogs

    server = FakeServer()
    for module in (mcapi.vanilla, mcapi.fabric, mcapi.quilt, mcapi.forge,
        mcapi.papermc, mcapi.purpurmc, mcapi.hangar, mcapi.mclogs):
        monkeypatch.setattr(module, "http_request", server)
    
    return server
