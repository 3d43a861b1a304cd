import os

os.environ["CHAIN_ID"] = "1"

from unittest.mock import MagicMock

import pytest
import pytest_asyncio
import structlog
from httpx import ASGITransport, AsyncClient

from estimation.client import EstimateRequest
from estimation.user_op import UserOp
from tests.utils.common_classes import (
    DEFAULTS_FOR_USER_OP,
    ENTRY_POINT,
    TestClient,
)


@pytest_asyncio.fixture(scope="function")
async def client() -> TestClient:
    from app.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="https://localhost"
    ) as client:
        yield TestClient(client)


@pytest.fixture(scope="function")
def user_op() -> UserOp:
    return UserOp(**DEFAULTS_FOR_USER_OP)


@pytest.fixture(scope="function")
def estimate_request(user_op) -> EstimateRequest:
    return EstimateRequest(ENTRY_POINT, user_op)


@pytest.fixture(scope="function")
def w3() -> MagicMock:
    return MagicMock()


@pytest.fixture(scope="session")
def logger():
    return structlog.get_logger("tests")
