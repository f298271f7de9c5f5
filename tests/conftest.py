from __future__ import annotations

import io
import os
import tempfile
from typing import Callable, Iterator

import pytest

_TMP = tempfile.mkdtemp(prefix="handwerk-tests-")
_DB_PATH = os.path.join(_TMP, "catalog.db")

os.environ.update(
    {
        "DATABASE_URL_ASYNC": f"sqlite+aiosqlite:///{_DB_PATH}",
        "STATIC_DIR": os.path.join(_TMP, "static"),
        "STORAGE_BACKEND": "local",
        "SUPABASE_BUCKET": "items",
        "ADMIN_USERNAME": "nikkie",
        "ADMIN_PASSWORD": "haakpen",
        "COOKIE_SECRET": "test-secret",
        "CORS_ALLOW_ORIGINS": "http://localhost:5173",
        "LOG_LEVEL": "WARNING",
    }
)

from fastapi.testclient import TestClient  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402

from handwerk.db import Base  # noqa: E402
from handwerk.main import app  # noqa: E402


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    def _make(width: int = 64, height: int = 48, fmt: str = "PNG", mode: str = "RGB", color=(200, 30, 30)) -> bytes:
        image = Image.new(mode, (width, height), color)
        buf = io.BytesIO()
        image.save(buf, format=fmt)
        return buf.getvalue()

    return _make


@pytest.fixture
def client() -> Iterator[TestClient]:
    sync_engine = create_engine(f"sqlite:///{_DB_PATH}")
    Base.metadata.drop_all(sync_engine)
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin(client: TestClient) -> TestClient:
    response = client.post("/api/admin/login", json={"username": "nikkie", "password": "haakpen"})
    assert response.status_code == 200
    return client
