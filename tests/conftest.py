from __future__ import annotations

import sys
from pathlib import Path

import pytest

# make sure the repository root is importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bizcard.core import config as core_config  # noqa: E402
from bizcard.core.rate_limiter import reset_limits  # noqa: E402
from bizcard.db import models  # noqa: E402
from bizcard.db import session as db_session  # noqa: E402


def _clear_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Temporary SQLite database with a full teardown so the file is not left locked."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://cards.test")
    _clear_caches()
    reset_limits()

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    _clear_caches()


@pytest.fixture()
def client(temp_db):
    from fastapi.testclient import TestClient

    from bizcard.app import create_app

    with TestClient(create_app(), base_url="https://cards.test") as test_client:
        yield test_client
