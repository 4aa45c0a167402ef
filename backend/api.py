"""
REST API for the pickleball matcher backend.
Thin wrappers around services and persistence.

Every error response has the shape {"error": message}.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Annotated, Any, AsyncGenerator, Generator

from fastapi import FastAPI, HTTPException, Path, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, StrictBool
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.config import get_cors_origins, get_default_courts, get_log_level
from backend.matching import NotEnoughPlayersError, SeededRNG
from backend.persistence import get_connection, init_db
from backend.persistence.db import get_db_path
from backend.services import (
    InvalidNameError,
    InvalidPhoneError,
    MatchService,
    PlayerNotFoundError,
    RosterService,
)

logging.basicConfig(level=get_log_level())
logger = logging.getLogger(__name__)

# Largest value an SQLite INTEGER column holds
SQLITE_MAX_INT = 2**63 - 1

RowId = Annotated[int, Field(ge=1, le=SQLITE_MAX_INT)]


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("Starting Pickleball Matcher API")
    init_db(db_path=get_db_path())
    yield
    logger.info("Shutting down Pickleball Matcher API")


# ---------- FastAPI app ----------
app = FastAPI(
    title="Pickleball Matcher API",
    description="Roster management and randomized doubles match generation",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Error rendering ----------


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": _validation_message(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ---------- Request models ----------


class CreatePlayerRequest(BaseModel):
    name: str | None = None


class AvailabilityRequest(BaseModel):
    available: StrictBool


class PhoneRequest(BaseModel):
    phone: str | None = None


class CreateMatchRequest(BaseModel):
    """One court of a client-generated round. playerIds: serving pair, then receiving pair."""
    model_config = ConfigDict(populate_by_name=True)

    player_ids: list[RowId] = Field(..., alias="playerIds")
    match_group: int = Field(..., alias="matchGroup", ge=1, le=SQLITE_MAX_INT)
    num_courts: int = Field(..., alias="numCourts", ge=1, le=SQLITE_MAX_INT)


class GenerateRoundRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    num_courts: int | None = Field(None, alias="numCourts", ge=1, le=SQLITE_MAX_INT)
    seed: int | None = Field(None, description="RNG seed for a reproducible shuffle")


# ---------- Health ----------


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ---------- Players ----------


@app.post("/players", status_code=201)
def create_player(req: CreatePlayerRequest) -> dict[str, Any]:
    """Register a player. New players start available."""
    with db_conn() as conn:
        try:
            player = RosterService().register(conn, req.name)
        except InvalidNameError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return player.to_dict()


@app.get("/players")
def list_players() -> list[dict[str, Any]]:
    """All players, available first, newest first."""
    with db_conn() as conn:
        return [p.to_dict() for p in RosterService().list_players(conn)]


@app.get("/players/available")
def list_available_players() -> list[dict[str, Any]]:
    with db_conn() as conn:
        return [p.to_dict() for p in RosterService().list_available(conn)]


@app.delete("/players/{player_id}")
def delete_player(player_id: Annotated[int, Path(le=SQLITE_MAX_INT)]) -> dict[str, Any]:
    """Remove a player and every match they appear in."""
    with db_conn() as conn:
        try:
            RosterService().remove(conn, player_id)
        except PlayerNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return {"success": True}


@app.patch("/players/{player_id}/availability")
def set_player_availability(player_id: Annotated[int, Path(le=SQLITE_MAX_INT)], req: AvailabilityRequest) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            player = RosterService().set_availability(conn, player_id, req.available)
        except PlayerNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return player.to_dict()


@app.patch("/players/{player_id}/phone")
def set_player_phone(player_id: Annotated[int, Path(le=SQLITE_MAX_INT)], req: PhoneRequest) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            player = RosterService().set_phone(conn, player_id, req.phone)
        except InvalidPhoneError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except PlayerNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return player.to_dict()


# ---------- Matches ----------


@app.get("/matches/next-group")
def get_next_group(
    num_courts: int | None = Query(default=None, alias="numCourts", ge=1, le=SQLITE_MAX_INT),
) -> dict[str, int]:
    """Next group number for this court count. Not a reservation."""
    with db_conn() as conn:
        courts = num_courts if num_courts is not None else get_default_courts()
        return {"nextGroup": MatchService().next_group(conn, courts)}


@app.post("/matches", status_code=201)
def create_match(req: CreateMatchRequest) -> dict[str, Any]:
    """Persist one court. Clients call this once per court with a shared matchGroup."""
    with db_conn() as conn:
        try:
            match = MatchService().record_match(conn, req.player_ids, req.match_group, req.num_courts)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return match.to_dict()


@app.post("/matches/generate", status_code=201)
def generate_matches(req: GenerateRoundRequest | None = None) -> dict[str, Any]:
    """Shuffle available players onto courts and store the round atomically."""
    num_courts = req.num_courts if req and req.num_courts is not None else get_default_courts()
    rng = SeededRNG(req.seed if req else None)
    with db_conn() as conn:
        try:
            generated = MatchService().generate_round(conn, num_courts, rng)
        except NotEnoughPlayersError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return generated.to_dict()


@app.get("/matches")
def list_matches() -> list[dict[str, Any]]:
    """All matches with player names, newest group first."""
    with db_conn() as conn:
        return [m.to_dict() for m in MatchService().list_matches(conn)]


@app.get("/matches/groups")
def list_match_groups() -> list[dict[str, Any]]:
    """Rounds newest first, with the available players each one left off its courts."""
    with db_conn() as conn:
        return [r.to_dict() for r in MatchService().list_rounds(conn)]


# ---------- Run with: uvicorn backend.api:app --reload ----------
