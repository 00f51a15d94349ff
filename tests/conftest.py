import os
from datetime import datetime, timezone

import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient

## Load tests/.env if present
_here = os.path.dirname(__file__)
env_path = os.path.join(_here, ".env")
if os.path.exists(env_path):
    load_dotenv(env_path, override=False)

from config import get_config  # noqa: E402
from main import app  # noqa: E402
from utils.security_ut import get_current_user, get_optional_user  # noqa: E402


@pytest.fixture
def buyer():
    return {
        "id": 7,
        "email": "buyer@example.com",
        "name": "Test Buyer",
        "avatar_url": None,
        "currency": "USD",
        "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
    }


@pytest.fixture
def cfg():
    """The live config dict; use monkeypatch.setitem(cfg, ...) to override keys."""
    return get_config()


@pytest.fixture
def client():
    ## No context manager: lifespan (database pool) is not started
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_client(client, buyer):
    app.dependency_overrides[get_current_user] = lambda: buyer
    app.dependency_overrides[get_optional_user] = lambda: buyer
    return client
