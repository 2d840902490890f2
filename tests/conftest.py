from pathlib import Path
from typing import Dict, List, Tuple, Union

import httpx
import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

Page = Union[str, Tuple[int, str]]


class FakeSite:
    """Serves canned HTML by absolute URL; anything else is a 404."""

    def __init__(self, pages: Dict[str, Page]):
        self.pages = pages
        self.requested: List[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        page = self.pages.get(url)
        if page is None:
            return httpx.Response(404, text="not found")
        if isinstance(page, tuple):
            status, body = page
            return httpx.Response(status, text=body)
        return httpx.Response(200, text=page, headers={"Content-Type": "text/html"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fixture_path():
    def _path(name: str = "test_groups.yaml") -> Path:
        return FIXTURES_DIR / name

    return _path


@pytest.fixture
def make_site():
    def _make(pages: Dict[str, Page]) -> FakeSite:
        return FakeSite(pages)

    return _make
