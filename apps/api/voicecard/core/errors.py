"""Error taxonomy shared by the provisioning service and the client driver."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi.responses import JSONResponse


class ProvisioningError(RuntimeError):
    """Base class for failures that abort a provisioning request."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(ProvisioningError):
    """Raised when required secrets or service URLs are missing."""


class PayloadError(ProvisioningError):
    """Raised when the application payload is absent or incomplete."""


class DispatchUnavailable(ProvisioningError):
    """Raised when the agent orchestration service cannot be reached or rejects a call."""


class TransportError(RuntimeError):
    """Raised when the realtime session fails to establish or drops."""


class CardNotFoundError(LookupError):
    """Raised when no card document exists for an identifier."""

    def __init__(self, collection_id: str) -> None:
        super().__init__(f"No card found for '{collection_id}'")
        self.collection_id = collection_id


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    """Build the ``{error, timestamp}`` body used by every failing endpoint."""

    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )
