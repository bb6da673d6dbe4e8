from __future__ import annotations

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from loguru import logger

from taskflow.config import Settings
from taskflow.server import create_app


@pytest.fixture(autouse=True)
def _detach_log_sinks():
    """Drop sinks bound to a test's captured stderr once it finishes."""
    yield
    logger.remove()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data", secret_key="test-secret-key-for-the-suite-0123456789", bcrypt_rounds=4)


@pytest.fixture
def app(settings: Settings):
    return create_app(settings, enable_cors=False)


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
