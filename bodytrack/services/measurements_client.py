"""REST client for the remote measurements API (persistence).

Every response is wrapped in an envelope::

    {"success": true, "data": {...}, "message": "..."}

Single records come back under ``data.bodyMetrics``; history pages under
``data.metrics`` with ``data.pagination``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, TypeVar, Union

import requests
from pydantic import BaseModel, ValidationError

from bodytrack.core.config import Settings, get_settings
from bodytrack.schemas.measurement import (
    MeasurementCreate,
    MeasurementPage,
    MeasurementRecord,
    MeasurementUpdate,
    Pagination,
)

logger = logging.getLogger(__name__)

MeasurementId = Union[int, str]

RESOURCE = "/body-measurements"
MALFORMED_RESPONSE = "Malformed response from measurements API"

ModelT = TypeVar("ModelT", bound=BaseModel)


class MeasurementsAPIError(Exception):
    """The remote API rejected a request or returned an unusable response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationError(MeasurementsAPIError):
    pass


class MeasurementNotFoundError(MeasurementsAPIError):
    pass


class MeasurementsUnavailableError(MeasurementsAPIError):
    """Connection refused, DNS failure or timeout."""


class MeasurementsClient:
    """Thin wrapper over the measurements endpoints.

    Usage::

        client = MeasurementsClient.from_settings(token="...")
        record = client.get_measurement(42)
        client.update_measurement(42, {"waist": 80.0})
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = 10.0,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token or None
        self.timeout = timeout
        self._http = http or requests.Session()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        token: Optional[str] = None,
    ) -> "MeasurementsClient":
        settings = settings or get_settings()
        return cls(
            settings.measurements_api_url,
            token=token or settings.measurements_api_token,
            timeout=settings.request_timeout_seconds,
        )

    def close(self) -> None:
        """Release pooled connections."""
        self._http.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the envelope's ``data``."""
        url = f"{self.base_url}{endpoint}"
        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = self._http.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            logger.warning("Measurements API unreachable: %s %s: %s", method, url, e)
            raise MeasurementsUnavailableError("Measurements API is unreachable") from e
        except requests.RequestException as e:
            logger.warning("Measurements API request failed: %s %s: %s", method, url, e)
            raise MeasurementsAPIError(str(e)) from e

        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None

        message = None
        if isinstance(body, dict):
            message = body.get("message")

        if status in (401, 403):
            raise AuthenticationError(message or "Authentication required", status)
        if status == 404:
            raise MeasurementNotFoundError(message or "Measurement not found", status)
        if status >= 400:
            logger.warning("Measurements API error: %s %s -> %s", method, url, status)
            raise MeasurementsAPIError(message or f"HTTP error! status: {status}", status)

        if status == 204:
            return None
        if not isinstance(body, dict):
            raise MeasurementsAPIError(MALFORMED_RESPONSE, status)
        if body.get("success") is False:
            raise MeasurementsAPIError(message or "Request failed", status)
        return body.get("data")

    @staticmethod
    def _parse(model: type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning("Malformed %s from measurements API: %s", model.__name__, e)
            raise MeasurementsAPIError(MALFORMED_RESPONSE) from e

    def _record(self, data: Any) -> MeasurementRecord:
        if isinstance(data, dict) and isinstance(data.get("bodyMetrics"), dict):
            data = data["bodyMetrics"]
        if not isinstance(data, dict):
            raise MeasurementsAPIError("Response carries no measurement")
        return self._parse(MeasurementRecord, data)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check_health(self, root_url: Optional[str] = None) -> bool:
        """True if the API root answers 200."""
        try:
            response = self._http.get(root_url or self.base_url, timeout=self.timeout)
        except requests.RequestException:
            return False
        return response.status_code == 200

    def get_history(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> MeasurementPage:
        """One page of measurement history, newest first."""
        params: dict[str, Any] = {"page": page, "limit": limit}
        if start_date:
            params["startDate"] = start_date
        if end_date:
            params["endDate"] = end_date

        data = self._request("GET", f"{RESOURCE}/history", params=params) or {}
        if not isinstance(data, dict):
            raise MeasurementsAPIError(MALFORMED_RESPONSE)
        # Older deployments return "items" instead of "metrics"
        raw_items = data.get("metrics")
        if raw_items is None:
            raw_items = data.get("items") or []
        if not isinstance(raw_items, list):
            raise MeasurementsAPIError(MALFORMED_RESPONSE)
        items = [self._parse(MeasurementRecord, item) for item in raw_items]
        pagination = self._parse(Pagination, data.get("pagination") or {})
        return MeasurementPage(items=items, pagination=pagination)

    def get_measurement(self, measurement_id: MeasurementId) -> MeasurementRecord:
        return self._record(self._request("GET", f"{RESOURCE}/{measurement_id}"))

    def create_measurement(self, payload: dict[str, Any]) -> MeasurementRecord:
        """POST a new entry. `payload` uses wire names (measurementDate)."""
        body = MeasurementCreate.model_validate(payload).model_dump(
            by_alias=True, exclude_none=True
        )
        record = self._record(self._request("POST", RESOURCE, json=body))
        logger.info("Measurement created: %s (%s)", record.id, record.measurement_date)
        return record

    def update_measurement(
        self, measurement_id: MeasurementId, payload: dict[str, Any]
    ) -> MeasurementRecord:
        """PUT only the given fields; explicit None clears a stored value."""
        body = MeasurementUpdate.model_validate(payload).model_dump(
            by_alias=True, exclude_unset=True
        )
        record = self._record(self._request("PUT", f"{RESOURCE}/{measurement_id}", json=body))
        logger.info("Measurement %s updated: %s", measurement_id, sorted(body))
        return record

    def delete_measurement(self, measurement_id: MeasurementId) -> str:
        data = self._request("DELETE", f"{RESOURCE}/{measurement_id}")
        logger.info("Measurement %s deleted", measurement_id)
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return "Measurement deleted"
