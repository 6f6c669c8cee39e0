from __future__ import annotations

from enum import Enum

from ..db import get_db_prefix, quote_identifier


class MissingFromTarget(ValueError):
    """Raised by DbQuery.build() when no table was registered with from_()."""


class StatementType(str, Enum):
    SELECT = "SELECT"
    DELETE = "DELETE"


class DbQuery:
    """
    Fluent SQL query builder.

    Clause fragments are accumulated through chained calls and rendered by
    build() in a fixed order: SELECT/DELETE, FROM, joins, WHERE, GROUP BY,
    HAVING, ORDER BY, LIMIT.

    Only table names and join aliases are quoted. Every other fragment is
    raw SQL, so callers must escape embedded values (see db.quote_value and
    db.quote_like) before passing them in.

    A fragment is skipped when it is falsy ("" or None); the string "0" is
    kept and rendered as written.

        q = DbQuery().select("t.*").from_("team", "t").where("t.team_id = 3")
        sql = q.build()
    """

    def __init__(self, prefix: str | None = None):
        self.prefix = get_db_prefix() if prefix is None else prefix
        self.query = {
            "type": StatementType.SELECT,
            "select": [],
            "from": [],
            "join": [],
            "where": [],
            "group": [],
            "having": [],
            "order": [],
            "limit": {"offset": 0, "limit": 0},
        }

    def type(self, kind) -> "DbQuery":
        """Set the statement type (SELECT or DELETE); other values are ignored."""
        try:
            self.query["type"] = StatementType(kind)
        except ValueError:
            pass
        return self

    def select(self, fields: str) -> "DbQuery":
        if fields:
            self.query["select"].append(fields)
        return self

    def from_(self, table: str, alias: str | None = None) -> "DbQuery":
        if table:
            self.query["from"].append(quote_identifier(self.prefix + table) + (f" {alias}" if alias else ""))
        return self

    def join(self, join: str) -> "DbQuery":
        """Add a complete join clause, e.g. "RIGHT JOIN `product` p ON ..."."""
        if join:
            self.query["join"].append(join)
        return self

    def _typed_join(self, keyword: str, table: str, alias: str | None, on: str | None) -> "DbQuery":
        clause = f"{keyword} {quote_identifier(self.prefix + table)}"
        if alias:
            clause += f" {quote_identifier(alias)}"
        if on:
            clause += f" ON {on}"
        return self.join(clause)

    def left_join(self, table: str, alias: str | None = None, on: str | None = None) -> "DbQuery":
        return self._typed_join("LEFT JOIN", table, alias, on)

    def inner_join(self, table: str, alias: str | None = None, on: str | None = None) -> "DbQuery":
        return self._typed_join("INNER JOIN", table, alias, on)

    def left_outer_join(self, table: str, alias: str | None = None, on: str | None = None) -> "DbQuery":
        return self._typed_join("LEFT OUTER JOIN", table, alias, on)

    def natural_join(self, table: str, alias: str | None = None) -> "DbQuery":
        # natural joins never take an ON clause
        return self._typed_join("NATURAL JOIN", table, alias, None)

    def right_join(self, table: str, alias: str | None = None, on: str | None = None) -> "DbQuery":
        return self._typed_join("RIGHT JOIN", table, alias, on)

    def where(self, restriction: str) -> "DbQuery":
        """Add a WHERE restriction; restrictions are combined with AND."""
        if restriction:
            self.query["where"].append(restriction)
        return self

    def having(self, restriction: str) -> "DbQuery":
        """Add a HAVING restriction; restrictions are combined with AND."""
        if restriction:
            self.query["having"].append(restriction)
        return self

    def order_by(self, fields: str) -> "DbQuery":
        """Add ORDER BY fields, e.g. "name, t.date_add DESC"."""
        if fields:
            self.query["order"].append(fields)
        return self

    def group_by(self, fields: str) -> "DbQuery":
        if fields:
            self.query["group"].append(fields)
        return self

    def limit(self, limit, offset=0) -> "DbQuery":
        """Replace the limit/offset pair. A negative offset becomes 0; limit 0 disables LIMIT."""
        offset = _to_int(offset)
        if offset < 0:
            offset = 0
        self.query["limit"] = {"offset": offset, "limit": _to_int(limit)}
        return self

    def build(self) -> str:
        q = self.query
        if q["type"] == StatementType.SELECT:
            sql = "SELECT " + (",\n".join(q["select"]) if q["select"] else "*") + "\n"
        else:
            sql = q["type"].value + " "

        if not q["from"]:
            raise MissingFromTarget("Table name not set in DbQuery object. Cannot build a valid SQL query.")

        sql += "FROM " + ", ".join(q["from"]) + "\n"

        if q["join"]:
            sql += "\n".join(q["join"]) + "\n"
        if q["where"]:
            sql += "WHERE (" + ") AND (".join(q["where"]) + ")\n"
        if q["group"]:
            sql += "GROUP BY " + ", ".join(q["group"]) + "\n"
        if q["having"]:
            sql += "HAVING (" + ") AND (".join(q["having"]) + ")\n"
        if q["order"]:
            sql += "ORDER BY " + ", ".join(q["order"]) + "\n"

        lim = q["limit"]
        if lim["limit"]:
            sql += "LIMIT " + (f"{lim['offset']}, " if lim["offset"] else "") + str(lim["limit"])

        return sql

    def __str__(self) -> str:
        return self.build()


def _to_int(x) -> int:
    try:
        return int(x)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(x))
    except (TypeError, ValueError, OverflowError):
        return 0
