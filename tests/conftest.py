"""Pytest configuration and fixtures."""
from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Callable, Dict, Iterator

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

# Set test environment before anything imports the module-level app
_SESSION_DIR = Path(tempfile.mkdtemp(prefix="salon-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{(_SESSION_DIR / 'session.db').as_posix()}")
os.environ.setdefault("UPLOADS_DIR", str(_SESSION_DIR / "uploads"))
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci")
os.environ.setdefault("NODE_ENV", "test")

from fastapi.testclient import TestClient
from sqlalchemy import text

from api.app import create_app
from core.auth import create_admin_token
from core.config import Settings
from core.db import create_pool

ADMIN_EMAIL = "admin@nuevatienda.com"
ADMIN_PASSWORD = "password"


@pytest.fixture
def make_settings(tmp_path) -> Callable[..., Settings]:
    """Build Settings pointing at a per-test SQLite file and uploads dir."""

    def _make(**overrides: object) -> Settings:
        values: Dict[str, object] = {
            "DATABASE_URL": f"sqlite:///{(tmp_path / 'salon.db').as_posix()}",
            "UPLOADS_DIR": str(tmp_path / "uploads"),
            "JWT_SECRET": "test-secret-for-ci",
            "ADMIN_EMAIL": ADMIN_EMAIL,
            "ADMIN_PASSWORD": ADMIN_PASSWORD,
            "NODE_ENV": "test",
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def seeded_db(settings) -> Settings:
    """Create and fill a few feature-area tables in the test database."""
    engine = create_pool(settings)
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE productos (id INTEGER PRIMARY KEY, nombre TEXT, precio REAL, stock INTEGER)"
        ))
        conn.execute(text(
            "CREATE TABLE usuarios (id INTEGER PRIMARY KEY, email TEXT, nombre TEXT, password TEXT, rol TEXT)"
        ))
        conn.execute(text(
            "CREATE TABLE servicios (id INTEGER PRIMARY KEY, nombre TEXT, duracion INTEGER)"
        ))
        conn.execute(text(
            "INSERT INTO productos (id, nombre, precio, stock) VALUES "
            "(1, 'Shampoo de keratina', 45000, 12), "
            "(2, 'Acondicionador', 38000, 7), "
            "(3, 'Tinte castaño', 52000, 0)"
        ))
        conn.execute(text(
            "INSERT INTO usuarios (id, email, nombre, password, rol) VALUES "
            "(1, 'ana@example.com', 'Ana', '$2b$10$hashedvalue', 'cliente')"
        ))
        conn.execute(text(
            "INSERT INTO servicios (id, nombre, duracion) VALUES (1, 'Corte', 45), (2, 'Manicure', 60)"
        ))
    engine.dispose()
    return settings


@pytest.fixture
def client(settings) -> Iterator[TestClient]:
    """Test client running the full app (lifespan included)."""
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def seeded_client(seeded_db) -> Iterator[TestClient]:
    with TestClient(create_app(seeded_db)) as c:
        yield c


@pytest.fixture
def admin_headers(settings) -> Dict[str, str]:
    """Bearer header with a freshly issued admin token."""
    return {"Authorization": f"Bearer {create_admin_token(settings, ADMIN_EMAIL)}"}
