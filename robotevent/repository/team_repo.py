from __future__ import annotations

from sqlite3 import Connection
from typing import Optional

from ..db import quote_identifier, quote_like, quote_value, fetch_all, fetch_one
from ..domain.db_query import DbQuery

# columns the list endpoint may sort on
ORDERABLE = ("team_id", "name", "email", "institution", "country", "date_add", "date_upd")

_COLUMNS = (
    "t.team_id AS id, t.name, t.email, t.website, t.slogan, t.institution, "
    "t.country, t.state, t.city, t.image, t.date_add, t.date_upd"
)


def _filtered(q: Optional[str], country: Optional[str]) -> DbQuery:
    query = DbQuery().from_("team", "t")
    if q:
        like = quote_like(q)
        query.where(
            f"t.name LIKE {like} ESCAPE '\\' OR t.email LIKE {like} ESCAPE '\\' "
            f"OR t.institution LIKE {like} ESCAPE '\\'"
        )
    if country:
        query.where(f"t.country = {quote_value(country)}")
    return query


def build_list_query(
    q: Optional[str] = None,
    country: Optional[str] = None,
    order: str = "team_id",
    direction: str = "ASC",
) -> DbQuery:
    query = _filtered(q, country)
    col = order if order in ORDERABLE else "team_id"
    dirn = "DESC" if str(direction).upper() == "DESC" else "ASC"
    query.order_by(f"t.{quote_identifier(col)} {dirn}")
    return query


def list_page(conn: Connection, page: int, size: int, **filters):
    query = build_list_query(**filters).select(_COLUMNS).limit(size, (page - 1) * size)
    return fetch_all(conn, query)


def count(conn: Connection, q: Optional[str] = None, country: Optional[str] = None) -> int:
    query = _filtered(q, country).select("COUNT(1) AS c")
    return int(fetch_one(conn, query)["c"])


def email_taken(conn: Connection, email: str, exclude_id: Optional[int] = None) -> bool:
    query = DbQuery().select("1").from_("team").where(f"LOWER(email) = LOWER({quote_value(email)})").limit(1)
    if exclude_id is not None:
        query.where(f"team_id != {int(exclude_id)}")
    return fetch_one(conn, query) is not None
