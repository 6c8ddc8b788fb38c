"""Shared FastAPI dependencies."""

from __future__ import annotations

from typing import Iterator, Optional

from fastapi import Header, HTTPException

from bodytrack.core.config import get_settings
from bodytrack.services.measurements_client import (
    AuthenticationError,
    MeasurementNotFoundError,
    MeasurementsAPIError,
    MeasurementsClient,
    MeasurementsUnavailableError,
)


def get_measurements_client(
    authorization: Optional[str] = Header(None),
) -> Iterator[MeasurementsClient]:
    """Client for the remote API, closed after the request.

    Forwards the caller's bearer token when present.
    """
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[len("bearer "):].strip()
    client = MeasurementsClient.from_settings(get_settings(), token=token)
    try:
        yield client
    finally:
        client.close()


def api_error_to_http(error: MeasurementsAPIError) -> HTTPException:
    """Map a remote API failure onto the response returned to our caller."""
    if isinstance(error, AuthenticationError):
        return HTTPException(status_code=401, detail=error.message)
    if isinstance(error, MeasurementNotFoundError):
        return HTTPException(status_code=404, detail=error.message)
    if isinstance(error, MeasurementsUnavailableError):
        return HTTPException(status_code=503, detail=error.message)
    return HTTPException(status_code=502, detail=error.message)
