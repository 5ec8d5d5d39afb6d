"""Simulation API endpoints."""

import asyncio
from collections.abc import Awaitable, Mapping

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from bgsim.api.dependencies import get_simulation_service
from bgsim.api.errors import error_response
from bgsim.core.errors import ErrorCode
from bgsim.core.logging_config import get_logger
from bgsim.models.snapshot_models import (
    BattleSnapshot,
    SimulationOptions,
    SimulationResponse,
    SimulationResult,
)
from bgsim.services.simulator import SimulationService

router = APIRouter()
logger = get_logger(__name__)

# How often a waiting simulate request checks for a closed connection
DISCONNECT_POLL_SECONDS = 0.25
HTTP_499_CLIENT_CLOSED_REQUEST = 499


class ClientDisconnected(Exception):
    """Raised when the caller closes the connection mid-simulation."""

    pass


def _positive_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        number = int(value.strip())
    except ValueError:
        return None
    return number if number > 0 else None


def parse_simulation_options(query_params: Mapping[str, str]) -> SimulationOptions:
    """Read ``iterations``, ``timeoutMs`` and ``threads`` from a query string.

    Parameter names are matched ignoring case. Missing, unparseable and
    non-positive values fall back to the option's default.
    """
    params = {key.lower(): value for key, value in query_params.items()}
    values = {
        "iterations": _positive_int(params.get("iterations")),
        "timeout_ms": _positive_int(params.get("timeoutms")),
        "thread_count": _positive_int(params.get("threads")),
    }
    return SimulationOptions(**{k: v for k, v in values.items() if v is not None})


async def _await_unless_disconnected(request: Request, pending: Awaitable[SimulationResult | None]):
    task = asyncio.ensure_future(pending)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()


async def _simulation_response(
    request: Request, pending: Awaitable[SimulationResult | None]
) -> Response:
    try:
        result = await _await_unless_disconnected(request, pending)
    except ClientDisconnected:
        logger.info(f"Client disconnected during {request.url.path}")
        return error_response(ErrorCode.CLIENT_CLOSED_REQUEST, HTTP_499_CLIENT_CLOSED_REQUEST)

    if result is None:
        return error_response(ErrorCode.SIMULATION_FAILED, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(SimulationResponse.from_result(result).model_dump())


@router.get("/simulate/from-current")
async def simulate_from_current(
    request: Request,
    service: SimulationService = Depends(get_simulation_service),
) -> Response:
    """Simulate the combat of the live Battlegrounds match."""
    if not service.is_in_battlegrounds():
        return error_response(ErrorCode.NOT_IN_BATTLEGROUNDS, status.HTTP_400_BAD_REQUEST)

    options = parse_simulation_options(request.query_params)
    return await _simulation_response(request, service.simulate_current(options))


@router.post("/simulate")
async def simulate_custom(
    request: Request,
    service: SimulationService = Depends(get_simulation_service),
) -> Response:
    """Simulate a caller-supplied battle snapshot (JSON body)."""
    body = await request.body()
    if not body.strip():
        return error_response(ErrorCode.EMPTY_BODY, status.HTTP_400_BAD_REQUEST)

    try:
        snapshot = BattleSnapshot.model_validate_json(body)
    except ValidationError as e:
        logger.info(
            "Rejected simulate body",
            extra={"extra_data": {"errors": e.error_count()}},
        )
        return error_response(ErrorCode.INVALID_BODY, status.HTTP_400_BAD_REQUEST)

    options = parse_simulation_options(request.query_params)
    return await _simulation_response(request, service.simulate_custom(snapshot, options))
