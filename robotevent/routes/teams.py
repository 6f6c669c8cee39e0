from __future__ import annotations

from typing import Optional
from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from ..logs import LogContext
from ..entities.object_model import EntityNotFound
from ..services.team_svc import create_team, get_team, update_team, delete_team, list_teams

router = APIRouter()


class TeamCreate(BaseModel):
    name: str
    email: str
    website: Optional[str] = None
    slogan: Optional[str] = None
    institution: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    image: Optional[str] = None


class TeamUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    slogan: Optional[str] = None
    institution: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    image: Optional[str] = None


@router.get("/api/teams")
def api_team_list(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    q: Optional[str] = None,
    country: Optional[str] = None,
    order: str = "team_id",
    direction: str = Query("ASC", pattern=r"^(ASC|DESC|asc|desc)$"),
):
    total, items = list_teams(page, size, q=q, country=country, order=order, direction=direction)
    return {"total": total, "items": items}


@router.get("/api/teams/{team_id}")
def api_team_get(team_id: int):
    try:
        return get_team(team_id)
    except EntityNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/teams", status_code=201)
def api_team_create(body: TeamCreate):
    log = LogContext("CREATE_TEAM")
    log.set_payload(body.dict())
    try:
        new_id = create_team(body.dict(), log)
        log.write("OK")
        return {"message": "ok", "id": new_id}
    except ValueError as ve:
        log.write("ERROR", str(ve))
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/api/teams/{team_id}")
def api_team_update(team_id: int, body: TeamUpdate):
    log = LogContext("UPDATE_TEAM")
    changes = body.dict(exclude_unset=True)
    log.set_payload(changes)
    try:
        team = update_team(team_id, changes, log)
        log.write("OK")
        return team
    except EntityNotFound as nf:
        log.write("ERROR", str(nf))
        raise HTTPException(status_code=404, detail=str(nf))
    except ValueError as ve:
        log.write("ERROR", str(ve))
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/api/teams/{team_id}")
def api_team_delete(team_id: int):
    log = LogContext("DELETE_TEAM")
    log.set_payload({"team_id": team_id})
    try:
        delete_team(team_id, log)
        log.write("OK")
        return {"message": "ok"}
    except EntityNotFound as nf:
        log.write("ERROR", str(nf))
        raise HTTPException(status_code=404, detail=str(nf))
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))
