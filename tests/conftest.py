"""
Shared fixtures: an on-disk FileStore under tmp_path, a fake HTTP layer built
on httpx.MockTransport and a small sample catalog.
"""

from typing import Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest

from bundlepm.domain.entities import Catalog
from bundlepm.domain.models import Package, PackageList
from bundlepm.services.http_client import HttpFetcher
from bundlepm.storage.local_file_store import LocalFileStore

Route = Union[Tuple[int, str], Exception]


def make_transport(routes: Dict[str, Route], calls: Optional[List[str]] = None) -> httpx.MockTransport:
    """Serve ``routes`` (url -> (status, body) or an exception to raise); anything else is a 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if calls is not None:
            calls.append(url)
        route = routes.get(url)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, Exception):
            raise route
        status, body = route
        return httpx.Response(status, text=body)

    return httpx.MockTransport(handler)


@pytest.fixture
def store(tmp_path):
    return LocalFileStore(tmp_path / "root")


@pytest.fixture
def http_calls() -> List[str]:
    return []


@pytest.fixture
def make_fetcher(http_calls) -> Callable[[Dict[str, Route]], HttpFetcher]:
    """Build an HttpFetcher (use with ``async with``) that records requested URLs in http_calls."""

    def factory(routes: Dict[str, Route]) -> HttpFetcher:
        return HttpFetcher(transport=make_transport(routes, http_calls))

    return factory


@pytest.fixture
def core_list() -> PackageList:
    return PackageList(
        name="core",
        packages=[
            Package(
                name="base",
                description="Shared helpers",
                version="1.0.0",
                author="alice",
                manifest={"/lib/base.js": "https://example.com/core/base.js"},
            ),
            Package(
                name="tool",
                description="A tool built on base",
                version="0.2.0",
                author="bob",
                dependencies=["core/base"],
                manifest={
                    "/bin/tool.js": "https://example.com/core/tool.js",
                    "/tool.txt": "https://example.com/core/tool.txt",
                },
            ),
        ],
    )


@pytest.fixture
def catalog(core_list) -> Catalog:
    return Catalog([core_list])
