"""
FastAPI app entry point aggregating per-domain routers under robotevent/routes.
Keep as `uvicorn robotevent.api:app`.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .logs import ensure_log_schema
from .services.team_svc import ensure_team_schema

logger = logging.getLogger(__name__)

app = FastAPI(title="robotevent-api", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    ensure_log_schema()
    ensure_team_schema()
    logger.info("schema ready")


# Include routers (split by business domain)
from .routes import base as base_routes
from .routes import teams as teams_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(teams_routes.router)
app.include_router(logs_routes.router)
