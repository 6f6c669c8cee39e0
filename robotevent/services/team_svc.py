from __future__ import annotations

import logging
from typing import Any

from ..db import get_conn
from ..logs import LogContext
from ..entities.object_model import EntityNotFound
from ..entities.team import Team
from ..repository import team_repo

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "email", "website", "slogan", "institution", "country", "state", "city", "image")


def ensure_team_schema():
    with get_conn() as conn:
        Team.ensure_schema(conn)
        conn.commit()


def _load(conn, team_id: int) -> Team:
    team = Team(team_id, conn)
    if team.id is None:
        raise EntityNotFound("team_not_found")
    return team


def create_team(data: dict[str, Any], log: LogContext) -> int:
    with get_conn() as conn:
        email = data.get("email")
        if email and team_repo.email_taken(conn, email):
            raise ValueError("email_taken")
        team = Team()
        for k in EDITABLE_FIELDS:
            if k in data:
                setattr(team, k, data[k])
        new_id = team.add(conn)
    logger.info("team created id=%s", new_id)
    log.set_entity("TEAM", str(new_id))
    log.set_after(team.to_dict())
    return new_id


def get_team(team_id: int) -> dict:
    with get_conn() as conn:
        return _load(conn, team_id).to_dict()


def update_team(team_id: int, changes: dict[str, Any], log: LogContext) -> dict:
    """
    Partial update: only keys present in `changes` are written.
    Returns the updated team as dict.
    """
    unknown = [k for k in changes if k not in EDITABLE_FIELDS]
    if unknown:
        raise ValueError(f"unknown fields: {', '.join(sorted(unknown))}")

    with get_conn() as conn:
        team = _load(conn, team_id)
        before = team.to_dict()
        email = changes.get("email")
        if email and team_repo.email_taken(conn, email, exclude_id=team.id):
            raise ValueError("email_taken")
        for k, v in changes.items():
            setattr(team, k, v)
        team.update(conn)
        after = team.to_dict()

    log.set_entity("TEAM", str(team_id))
    log.set_before(before)
    log.set_after(after)
    return after


def delete_team(team_id: int, log: LogContext) -> None:
    with get_conn() as conn:
        team = _load(conn, team_id)
        before = team.to_dict()
        if not team.delete(conn):
            raise EntityNotFound("team_not_found")
    logger.info("team deleted id=%s", team_id)
    log.set_entity("TEAM", str(team_id))
    log.set_before(before)


def list_teams(
    page: int = 1,
    size: int = 20,
    q: str | None = None,
    country: str | None = None,
    order: str = "team_id",
    direction: str = "ASC",
) -> tuple[int, list[dict]]:
    page = max(1, int(page))
    with get_conn() as conn:
        total = team_repo.count(conn, q=q, country=country)
        items = team_repo.list_page(conn, page, size, q=q, country=country, order=order, direction=direction)
    return total, items
