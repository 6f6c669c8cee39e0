from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from sqlite3 import Connection
from typing import Any, Dict, Iterator, List, Optional

from ..db import get_conn, table, quote_identifier, fetch_one
from ..domain.db_query import DbQuery
from .validate import get_validator


class EntityNotFound(LookupError):
    pass


class EntityValidationError(ValueError):
    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


TYPE_INT = 1
TYPE_BOOL = 2
TYPE_STRING = 3
TYPE_FLOAT = 4
TYPE_DATE = 5
TYPE_HTML = 6
TYPE_NOTHING = 7

_SQL_TYPES = {
    TYPE_INT: "INTEGER",
    TYPE_BOOL: "INTEGER",
    TYPE_STRING: "TEXT",
    TYPE_FLOAT: "REAL",
    TYPE_DATE: "TEXT",
    TYPE_HTML: "TEXT",
    TYPE_NOTHING: "",
}


@contextmanager
def _use_conn(conn: Optional[Connection]) -> Iterator[Connection]:
    if conn is not None:
        yield conn
    else:
        with get_conn() as c:
            yield c


def _cast(ftype: int, value: Any) -> Any:
    if value is None:
        return None
    if ftype == TYPE_INT:
        return int(value)
    if ftype == TYPE_BOOL:
        return bool(int(value))
    if ftype == TYPE_FLOAT:
        return float(value)
    if ftype in (TYPE_STRING, TYPE_HTML, TYPE_DATE):
        return str(value)
    return value


def _now() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


class ObjectModel:
    """
    Active-record base class.

    Subclasses describe their table in `definition`:

        definition = {
            "table": "team",
            "primary": "team_id",
            "fields": {"name": {"type": TYPE_STRING, "required": True, "validate": "is_generic_name", "size": 255}},
        }

    Every field becomes an instance attribute; `id` holds the primary key
    value once the object is loaded or added.
    """

    TYPE_INT = TYPE_INT
    TYPE_BOOL = TYPE_BOOL
    TYPE_STRING = TYPE_STRING
    TYPE_FLOAT = TYPE_FLOAT
    TYPE_DATE = TYPE_DATE
    TYPE_HTML = TYPE_HTML
    TYPE_NOTHING = TYPE_NOTHING

    definition: Dict[str, Any] = {"table": "", "primary": "", "fields": {}}

    def __init__(self, id: Optional[int] = None, conn: Optional[Connection] = None):
        self.id: Optional[int] = None
        for name in self.definition["fields"]:
            setattr(self, name, None)
        if id is not None:
            self.load(id, conn)

    # ===== schema =====
    @classmethod
    def create_table_sql(cls) -> str:
        d = cls.definition
        cols = [f"{quote_identifier(d['primary'])} INTEGER PRIMARY KEY AUTOINCREMENT"]
        for name, spec in d["fields"].items():
            col = f"{quote_identifier(name)} {_SQL_TYPES.get(spec['type'], '')}".rstrip()
            if spec.get("required"):
                col += " NOT NULL"
            cols.append(col)
        return f"CREATE TABLE IF NOT EXISTS {quote_identifier(table(d['table']))} (\n  " + ",\n  ".join(cols) + "\n)"

    @classmethod
    def ensure_schema(cls, conn: Connection):
        conn.execute(cls.create_table_sql())

    # ===== reading =====
    @classmethod
    def _pk_restriction(cls, id) -> str:
        return f"{quote_identifier(cls.definition['primary'])} = {int(id)}"

    def load(self, id, conn: Optional[Connection] = None) -> bool:
        q = DbQuery().from_(self.definition["table"]).where(self._pk_restriction(id))
        with _use_conn(conn) as c:
            row = fetch_one(c, q)
        if not row:
            self.id = None
            return False
        self.hydrate(row)
        return True

    def hydrate(self, row: Dict[str, Any]) -> "ObjectModel":
        primary = self.definition["primary"]
        if row.get(primary) is not None:
            self.id = int(row[primary])
        for name, spec in self.definition["fields"].items():
            if name in row:
                setattr(self, name, _cast(spec["type"], row[name]))
        return self

    @classmethod
    def exists_in_database(cls, id, conn: Optional[Connection] = None) -> bool:
        q = DbQuery().select("1").from_(cls.definition["table"]).where(cls._pk_restriction(id)).limit(1)
        with _use_conn(conn) as c:
            return fetch_one(c, q) is not None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id}
        for name in self.definition["fields"]:
            out[name] = getattr(self, name, None)
        return out

    # ===== validation =====
    def validate_fields(self) -> List[str]:
        errors: List[str] = []
        for name, spec in self.definition["fields"].items():
            value = getattr(self, name, None)
            if value is None or value == "":
                if spec.get("required"):
                    errors.append(f"{name} is required")
                continue
            size = spec.get("size")
            if size and isinstance(value, str) and len(value) > size:
                errors.append(f"{name} is too long ({size} chars max)")
            validator = spec.get("validate")
            if validator and not get_validator(validator)(value):
                errors.append(f"{name} is invalid")
        return errors

    def get_fields(self) -> Dict[str, Any]:
        """Field values ready to be bound as SQL parameters."""
        out: Dict[str, Any] = {}
        for name, spec in self.definition["fields"].items():
            value = getattr(self, name, None)
            if spec["type"] == TYPE_BOOL and value is not None:
                value = 1 if value else 0
            elif value == "" and not spec.get("required"):
                value = None
            out[name] = value
        return out

    # ===== writing =====
    def add(self, conn: Optional[Connection] = None) -> int:
        fields = self.definition["fields"]
        now = _now()
        if "date_add" in fields and not getattr(self, "date_add", None):
            self.date_add = now
        if "date_upd" in fields:
            self.date_upd = now

        errors = self.validate_fields()
        if errors:
            raise EntityValidationError(errors)

        values = self.get_fields()
        cols = ", ".join(quote_identifier(c) for c in values)
        placeholders = ",".join(["?"] * len(values))
        sql = f"INSERT INTO {quote_identifier(table(self.definition['table']))}({cols}) VALUES({placeholders})"
        with _use_conn(conn) as c:
            cur = c.execute(sql, list(values.values()))
            c.commit()
        self.id = int(cur.lastrowid)
        return self.id

    def update(self, conn: Optional[Connection] = None) -> bool:
        if self.id is None:
            raise EntityNotFound(f"{self.definition['table']}_not_found")
        if "date_upd" in self.definition["fields"]:
            self.date_upd = _now()

        errors = self.validate_fields()
        if errors:
            raise EntityValidationError(errors)

        values = self.get_fields()
        assignments = ", ".join(f"{quote_identifier(c)}=?" for c in values)
        sql = (
            f"UPDATE {quote_identifier(table(self.definition['table']))} SET {assignments} "
            f"WHERE {quote_identifier(self.definition['primary'])}=?"
        )
        with _use_conn(conn) as c:
            cur = c.execute(sql, [*values.values(), self.id])
            c.commit()
        if cur.rowcount == 0:
            raise EntityNotFound(f"{self.definition['table']}_not_found")
        return True

    def delete(self, conn: Optional[Connection] = None) -> bool:
        if self.id is None:
            return False
        q = DbQuery().type("DELETE").from_(self.definition["table"]).where(self._pk_restriction(self.id))
        with _use_conn(conn) as c:
            cur = c.execute(q.build())
            c.commit()
        removed = cur.rowcount > 0
        if removed:
            self.id = None
        return removed
