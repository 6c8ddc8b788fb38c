"""Tests for MeasurementsClient without hitting the network.

The requests.Session is replaced by a Mock; each test inspects the request the
client built and feeds back a canned envelope.
"""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest
import requests
from pydantic import ValidationError

from bodytrack.services.measurements_client import (
    MALFORMED_RESPONSE,
    AuthenticationError,
    MeasurementNotFoundError,
    MeasurementsAPIError,
    MeasurementsClient,
    MeasurementsUnavailableError,
)

RECORD = {
    "id": 7,
    "userId": 1,
    "measurementDate": "2024-03-01",
    "chest": "95.50",
    "waist": "78.00",
    "hips": None,
    "neck": "",
    "notes": "morning",
    "created_at": "2024-03-01T08:00:00.000Z",
    "updated_at": "2024-03-01T08:00:00.000Z",
}


def _response(status_code: int = 200, body=None):
    if body is None:
        return Mock(status_code=status_code, json=Mock(side_effect=ValueError("no body")))
    return Mock(status_code=status_code, json=lambda: body)


def _client(response=None, token: str | None = "secret", **kwargs):
    http = Mock()
    if response is not None:
        http.request.return_value = response
    return MeasurementsClient("http://api.test/api/", token=token, http=http, **kwargs), http


class TestRequests:
    def test_get_measurement_parses_record(self):
        client, http = _client(_response(body={"success": True, "data": {"bodyMetrics": RECORD}}))
        record = client.get_measurement(7)

        assert record.id == 7
        assert record.chest == 95.5
        assert record.waist == 78.0
        assert record.neck is None
        assert record.measurement_date == "2024-03-01"

        method, url = http.request.call_args.args
        assert (method, url) == ("GET", "http://api.test/api/body-measurements/7")
        headers = http.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer secret"

    def test_no_token_no_auth_header(self):
        client, http = _client(_response(body={"success": True, "data": RECORD}), token="")
        client.get_measurement(7)
        assert "Authorization" not in http.request.call_args.kwargs["headers"]

    def test_timeout_passed_through(self):
        client, http = _client(_response(body={"success": True, "data": RECORD}), timeout=3.5)
        client.get_measurement(7)
        assert http.request.call_args.kwargs["timeout"] == 3.5

    def test_history_params_and_pagination(self):
        body = {
            "success": True,
            "data": {
                "metrics": [RECORD, {**RECORD, "id": 6, "measurementDate": "2024-02-20"}],
                "pagination": {"currentPage": 2, "totalPages": 3, "totalItems": 25, "itemsPerPage": 10},
            },
        }
        client, http = _client(_response(body=body))
        page = client.get_history(page=2, limit=10, start_date="2024-01-01")

        assert [r.id for r in page.items] == [7, 6]
        assert page.pagination.current_page == 2
        assert page.pagination.total_items == 25
        params = http.request.call_args.kwargs["params"]
        assert params == {"page": 2, "limit": 10, "startDate": "2024-01-01"}

    def test_history_falls_back_to_items(self):
        body = {"success": True, "data": {"items": [RECORD], "pagination": {}}}
        client, _ = _client(_response(body=body))
        page = client.get_history()
        assert len(page.items) == 1
        assert page.pagination.current_page == 1

    def test_create_sends_present_fields(self):
        client, http = _client(_response(201, {"success": True, "data": {"bodyMetrics": RECORD}}))
        client.create_measurement({"measurementDate": "2024-03-01", "chest": 95.5, "notes": None})

        assert http.request.call_args.args[0] == "POST"
        assert http.request.call_args.kwargs["json"] == {"measurementDate": "2024-03-01", "chest": 95.5}

    def test_create_rejects_negative(self):
        client, http = _client(_response(body={"success": True, "data": RECORD}))
        with pytest.raises(ValidationError):
            client.create_measurement({"measurementDate": "2024-03-01", "chest": -1})
        http.request.assert_not_called()

    def test_update_sends_only_given_fields_with_nulls(self):
        client, http = _client(_response(body={"success": True, "data": {"bodyMetrics": RECORD}}))
        client.update_measurement(7, {"waist": 80.0, "chest": None})

        method, url = http.request.call_args.args
        assert (method, url) == ("PUT", "http://api.test/api/body-measurements/7")
        assert http.request.call_args.kwargs["json"] == {"waist": 80.0, "chest": None}

    def test_update_refuses_to_clear_date(self):
        client, http = _client(_response(body={"success": True, "data": RECORD}))
        with pytest.raises(ValidationError):
            client.update_measurement(7, {"measurementDate": None})
        http.request.assert_not_called()

    def test_delete_returns_message(self):
        body = {"success": True, "data": {"message": "Body measurements deleted successfully"}}
        client, http = _client(_response(body=body))
        assert client.delete_measurement(7) == "Body measurements deleted successfully"
        assert http.request.call_args.args[0] == "DELETE"

    def test_delete_no_content(self):
        client, _ = _client(_response(204))
        assert client.delete_measurement(7) == "Measurement deleted"


class TestErrors:
    def test_not_found(self):
        client, _ = _client(_response(404, {"success": False, "message": "Body measurements not found"}))
        with pytest.raises(MeasurementNotFoundError) as exc:
            client.get_measurement(99)
        assert exc.value.status_code == 404
        assert exc.value.message == "Body measurements not found"

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth(self, status):
        client, _ = _client(_response(status, {"success": False}))
        with pytest.raises(AuthenticationError):
            client.get_measurement(7)

    def test_server_error_without_body(self):
        client, _ = _client(_response(500))
        with pytest.raises(MeasurementsAPIError) as exc:
            client.get_measurement(7)
        assert exc.value.status_code == 500
        assert "500" in exc.value.message

    def test_unsuccessful_envelope(self):
        client, _ = _client(_response(200, {"success": False, "message": "Invalid date"}))
        with pytest.raises(MeasurementsAPIError, match="Invalid date"):
            client.get_measurement(7)

    def test_connection_error(self):
        client, http = _client()
        http.request.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(MeasurementsUnavailableError):
            client.get_measurement(7)

    def test_timeout(self):
        client, http = _client()
        http.request.side_effect = requests.exceptions.Timeout("slow")
        with pytest.raises(MeasurementsUnavailableError):
            client.get_history()

    def test_record_missing_from_response(self):
        client, _ = _client(_response(body={"success": True, "data": None}))
        with pytest.raises(MeasurementsAPIError):
            client.get_measurement(7)

    def test_malformed_record(self):
        client, _ = _client(_response(body={"success": True, "data": {"bodyMetrics": {"id": 1}}}))
        with pytest.raises(MeasurementsAPIError) as exc:
            client.get_measurement(1)
        assert exc.value.message == MALFORMED_RESPONSE
        assert isinstance(exc.value.__cause__, ValidationError)

    def test_malformed_history_entry(self):
        body = {"success": True, "data": {"metrics": [RECORD, {"id": 2, "chest": "wide"}]}}
        client, _ = _client(_response(body=body))
        with pytest.raises(MeasurementsAPIError, match="Malformed"):
            client.get_history()

    @pytest.mark.parametrize("data", [["not", "a", "page"], {"metrics": "nope"}])
    def test_malformed_history_page(self, data):
        client, _ = _client(_response(body={"success": True, "data": data}))
        with pytest.raises(MeasurementsAPIError, match="Malformed"):
            client.get_history()

    def test_malformed_pagination(self):
        body = {"success": True, "data": {"metrics": [], "pagination": {"totalItems": "many"}}}
        client, _ = _client(_response(body=body))
        with pytest.raises(MeasurementsAPIError, match="Malformed"):
            client.get_history()


class TestHealthAndSettings:
    def test_check_health(self):
        client, http = _client()
        http.get.return_value = Mock(status_code=200)
        assert client.check_health("http://api.test")
        http.get.side_effect = requests.exceptions.ConnectionError()
        assert not client.check_health()

    def test_from_settings(self, monkeypatch):
        from bodytrack.core.config import get_settings

        monkeypatch.setenv("MEASUREMENTS_API_TOKEN", "from-env")
        monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "4")
        get_settings.cache_clear()

        client = MeasurementsClient.from_settings()
        assert client.base_url == "http://measurements.test/api"
        assert client.token == "from-env"
        assert client.timeout == 4.0

        assert MeasurementsClient.from_settings(token="caller").token == "caller"

    def test_default_http_session(self):
        with patch("bodytrack.services.measurements_client.requests.Session") as session_cls:
            MeasurementsClient("http://api.test")
        session_cls.assert_called_once_with()

    def test_close_releases_http_session(self):
        client, http = _client()
        client.close()
        http.close.assert_called_once_with()

    def test_dependency_forwards_token_and_closes(self):
        from bodytrack.api.deps import get_measurements_client

        dependency = get_measurements_client(authorization="Bearer caller-token")
        client = next(dependency)
        assert client.token == "caller-token"
        with patch.object(client, "_http") as http:
            with pytest.raises(StopIteration):
                next(dependency)
        http.close.assert_called_once_with()
