import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "robotevent_test.db"
    # Point the app to this temp DB, unprefixed tables
    os.environ["EVENT_DB_PATH"] = str(path)
    os.environ["EVENT_DB_PREFIX"] = ""
    from robotevent.logs import ensure_log_schema
    from robotevent.services.team_svc import ensure_team_schema
    ensure_log_schema()
    ensure_team_schema()
    return str(path)


@pytest.fixture()
def client(tmp_db_path):
    from robotevent.api import app
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("EVENT_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in ("team", "operation_log"):
            conn.execute(f"DELETE FROM {t}")
        conn.commit()
    finally:
        conn.close()
    yield
