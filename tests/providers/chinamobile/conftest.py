from __future__ import annotations

import pytest
from aiohttp.test_utils import TestServer

from fake_ecs import FakeECS, make_app


@pytest.fixture
def ecs() -> FakeECS:
    return FakeECS()


@pytest.fixture
async def ecs_server(ecs: FakeECS):
    srv = TestServer(make_app(ecs))
    await srv.start_server()
    yield srv
    await srv.close()


@pytest.fixture
def endpoint(ecs_server: TestServer) -> str:
    return f"http://{ecs_server.host}:{ecs_server.port}"
