from __future__ import annotations

# robotevent/db.py
import math
import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator
import os
import yaml

# DB path resolution order:
# 1) env EVENT_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path (production default)
# 4) fallback: robotevent.db at the project root
_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "robotevent.db")


def _read_config_yaml() -> dict:
    cfg_path = os.path.join(_PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    out = {}
    for k in ("db_path", "test_db_path", "db_prefix"):
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    return out


def get_db_path(_: str | None = None) -> str:
    env_path = os.environ.get("EVENT_DB_PATH")
    cfg = _read_config_yaml()
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and cfg_test:
        path = cfg_test
    elif cfg_db:
        path = cfg_db
    else:
        path = _ROOT_DB

    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


def get_db_prefix() -> str:
    """Table prefix applied to every table name (env EVENT_DB_PREFIX, then config.yaml db_prefix)."""
    env_prefix = os.environ.get("EVENT_DB_PREFIX")
    if env_prefix is not None:
        return env_prefix.strip()
    return _read_config_yaml().get("db_prefix", "")


def table(name: str) -> str:
    return get_db_prefix() + name


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """
    Open a SQLite connection. An explicit db_path wins, otherwise get_db_path().
    Foreign keys are on and rows come back as sqlite3.Row.
    """
    path = db_path or get_db_path()
    conn = sqlite3.connect(
        path,
        detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
        check_same_thread=False,
        isolation_level=None,
    )
    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()


# ===== escaping primitives =====

def bq_sql(name: str) -> str:
    """Strip backticks so an identifier cannot break out of its quotes."""
    return str(name).replace("`", "")


def quote_identifier(name: str) -> str:
    return "`" + bq_sql(name) + "`"


def escape_string(value: str) -> str:
    return str(value).replace("'", "''")


def quote_value(value: Any) -> str:
    """Render a Python value as a SQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float) and not math.isfinite(value):
        return "NULL"
    if isinstance(value, (int, float)):
        return repr(value)
    return "'" + escape_string(value) + "'"


def quote_like(value: str) -> str:
    """
    '%value%' literal for a LIKE pattern with the wildcards in `value` escaped.
    Use together with ESCAPE '\\'.
    """
    s = str(value).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return "'%" + escape_string(s) + "%'"


def fetch_all(conn: sqlite3.Connection, query, params=()) -> list[dict]:
    return [dict(r) for r in conn.execute(str(query), params).fetchall()]


def fetch_one(conn: sqlite3.Connection, query, params=()) -> dict | None:
    row = conn.execute(str(query), params).fetchone()
    return dict(row) if row else None
