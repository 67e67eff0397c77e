"""Connection details endpoint: provisions a room, an agent, and a participant token."""
from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from ..core.config import Settings, get_settings
from ..core.errors import PayloadError, ProvisioningError, error_response
from ..services.provisioning import SessionProvisioner

logger = logging.getLogger(__name__)

router = APIRouter()

NO_STORE_HEADERS = {"Cache-Control": "no-store"}


def get_provisioner(settings: Settings = Depends(get_settings)) -> SessionProvisioner:
    """FastAPI dependency; fails with ``ConfigurationError`` before any identity exists."""

    return SessionProvisioner.from_settings(settings)


@router.post("/connection-details")
async def create_connection_details(
    request: Request,
    provisioner: SessionProvisioner = Depends(get_provisioner),
) -> Response:
    """Dispatch the card agent to a fresh room and return the recipient's credentials."""

    try:
        body = await _read_json(request)
        details = await provisioner.provision(body)
    except ProvisioningError as exc:
        logger.error("Provisioning failed: %s", exc.message)
        return error_response(exc.message)
    except Exception:  # noqa: BLE001 - every failure maps to the same 500 contract
        logger.exception("Unexpected provisioning failure")
        return error_response("An unexpected error occurred")

    return JSONResponse(content=details.model_dump(by_alias=True), headers=NO_STORE_HEADERS)


async def _read_json(request: Request) -> object:
    raw = await request.body()
    if not raw:
        raise PayloadError("cardData not found in the request body")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PayloadError(f"Request body is not valid JSON: {exc.msg}") from exc
