"""Tests for the FastAPI service: body negotiation, errors, 404s, and rate limiting."""

# pylint: disable=missing-class-docstring,missing-function-docstring,redefined-outer-name

import pytest
from fastapi.testclient import TestClient

from tabled.web import app as app_module
from tabled.web.app import app, reset_rate_limits
from tabled.web.rate_limit import FixedWindowRateLimiter


@pytest.fixture
def client():
    """TestClient with a fresh rate-limit budget (lifespan events run)."""
    reset_rate_limits()
    with TestClient(app) as test_client:
        yield test_client
    reset_rate_limits()


def post_text(client: TestClient, text: str, params: dict | None = None):
    return client.post("/format", content=text, headers={"Content-Type": "text/plain"}, params=params)


# ===========================================================================
# GET /health
# ===========================================================================


class TestHealth:

    def test_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "tabled"}


# ===========================================================================
# POST /format
# ===========================================================================


class TestFormatBodies:

    def test_plain_text(self, client, scenario_a_input, scenario_a_output):
        response = post_text(client, scenario_a_input)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == scenario_a_output

    def test_other_text_subtype(self, client, scenario_a_input, scenario_a_output):
        response = client.post("/format", content=scenario_a_input, headers={"Content-Type": "text/csv"})
        assert response.text == scenario_a_output

    def test_json_data_field(self, client, scenario_a_input, scenario_a_output):
        response = client.post("/format", json={"data": scenario_a_input})
        assert response.status_code == 200
        assert response.text == scenario_a_output

    def test_json_text_field(self, client, scenario_a_input, scenario_a_output):
        response = client.post("/format", json={"text": scenario_a_input})
        assert response.text == scenario_a_output

    def test_data_preferred_over_text(self, client, scenario_a_input):
        response = client.post("/format", json={"data": scenario_a_input, "text": "x,y\n1,2"})
        assert "John Smith" in response.text

    def test_non_string_data_falls_back_to_text(self, client, scenario_a_input):
        response = client.post("/format", json={"data": 5, "text": scenario_a_input})
        assert response.status_code == 200
        assert "John Smith" in response.text

    @pytest.mark.parametrize("payload", [{"data": 5}, {"other": "a,b"}, ["a,b"]])
    def test_json_without_string_field(self, client, payload):
        response = client.post("/format", json=payload)
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"

    def test_malformed_json(self, client):
        response = client.post("/format", content="{not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"

    def test_unsupported_content_type(self, client):
        response = client.post("/format", content=b"a,b", headers={"Content-Type": "application/octet-stream"})
        assert response.status_code == 400
        assert "plain text or JSON" in response.json()["message"]

    def test_text_body_with_byte_order_mark(self, client, scenario_a_input, scenario_a_output):
        body = b"\xef\xbb\xbf" + scenario_a_input.encode("utf-8")
        response = client.post("/format", content=body, headers={"Content-Type": "text/plain; charset=utf-8"})
        assert response.status_code == 200
        assert response.text == scenario_a_output

    def test_json_data_with_byte_order_mark(self, client, scenario_a_input, scenario_a_output):
        response = client.post("/format", json={"data": "\ufeff" + scenario_a_input})
        assert response.text == scenario_a_output


class TestFormatErrors:

    def test_empty_text(self, client):
        response = post_text(client, "   \n ")
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request", "message": "Input data cannot be empty"}

    def test_empty_json_data(self, client):
        response = client.post("/format", json={"data": ""})
        assert response.status_code == 400
        assert response.json()["message"] == "Input data cannot be empty"

    def test_unparsable(self, client):
        response = post_text(client, "+-----+\n+-----+")
        assert response.status_code == 400
        assert response.json() == {"error": "Parse error", "message": "Could not parse input data as a table"}

    @pytest.mark.parametrize("max_width", ["10", "19", "abc", "-5"])
    def test_invalid_max_width(self, client, max_width):
        response = post_text(client, "a,b", params={"maxWidth": max_width})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid parameter", "message": "maxWidth must be a number >= 20"}

    def test_parse_error_reported_before_max_width(self, client):
        response = post_text(client, "+-----+\n+-----+", params={"maxWidth": "abc"})
        assert response.status_code == 400
        assert response.json()["error"] == "Parse error"

    def test_empty_reported_before_max_width(self, client):
        response = post_text(client, "\ufeff  ", params={"maxWidth": "5"})
        assert response.status_code == 400
        assert response.json()["message"] == "Input data cannot be empty"

    def test_internal_error(self, client, monkeypatch):
        def boom(*_args, **_kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(app_module, "format_table", boom)
        response = post_text(client, "a,b")
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error", "message": "boom"}


class TestFormatMaxWidth:

    def test_custom_width_splits(self, client, contacts_csv):
        response = post_text(client, contacts_csv, params={"maxWidth": "30"})
        assert response.status_code == 200
        assert all(len(line) <= 30 for line in response.text.splitlines())
        assert response.text.count("\n\n") == 3

    def test_minimum_width_accepted(self, client):
        response = post_text(client, "a,b", params={"maxWidth": "20"})
        assert response.status_code == 200

    def test_empty_value_uses_default(self, client, contacts_csv):
        response = post_text(client, contacts_csv, params={"maxWidth": ""})
        assert response.status_code == 200
        assert "\n\n" not in response.text


# ===========================================================================
# Request body size
# ===========================================================================


class TestBodySizeLimit:

    def test_oversized_body_rejected(self, client, monkeypatch):
        monkeypatch.setattr(app_module, "MAX_BODY_BYTES", 64)
        response = post_text(client, "a,b\n" * 17)
        assert response.status_code == 413
        assert response.json() == {"error": "Payload too large", "message": "Request body must not exceed 64 bytes"}

    def test_body_at_limit_accepted(self, client, monkeypatch):
        monkeypatch.setattr(app_module, "MAX_BODY_BYTES", 64)
        response = post_text(client, "a,b\n" * 16)
        assert response.status_code == 200

    def test_configured_limit_applies(self, client):
        response = post_text(client, "x" * (app_module.MAX_BODY_BYTES + 1))
        assert response.status_code == 413

    def test_oversized_json_rejected(self, client, monkeypatch):
        monkeypatch.setattr(app_module, "MAX_BODY_BYTES", 64)
        response = client.post("/format", json={"data": "a,b\n" * 20})
        assert response.status_code == 413

    def test_chunked_body_counted(self, client, monkeypatch):
        monkeypatch.setattr(app_module, "MAX_BODY_BYTES", 64)
        chunks = (b"a,b\n" * 8 for _ in range(3))
        response = client.post("/format", content=chunks, headers={"Content-Type": "text/plain"})
        assert response.status_code == 413
        assert response.json()["error"] == "Payload too large"


# ===========================================================================
# Unknown routes
# ===========================================================================


class TestNotFound:

    def test_unknown_path(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "Not found"
        assert body["message"] == "Endpoint GET /nope not found"
        assert body["availableEndpoints"] == {"GET /health": "Health check", "POST /format": "Format tabular data as markdown table"}

    def test_wrong_method(self, client):
        response = client.get("/format")
        assert response.status_code == 404
        assert response.json()["message"] == "Endpoint GET /format not found"


# ===========================================================================
# Rate limiting
# ===========================================================================


class TestRateLimiting:

    def test_headers_on_every_response(self, client):
        response = client.get("/health")
        assert response.headers["RateLimit-Limit"] == str(app_module.RATE_LIMIT_MAX)
        assert int(response.headers["RateLimit-Remaining"]) == app_module.RATE_LIMIT_MAX - 1

    def test_over_limit_rejected(self, client, monkeypatch):
        now = [0.0]
        monkeypatch.setattr(app_module, "_RATE_LIMITER", FixedWindowRateLimiter(2, 60, clock=lambda: now[0]))

        assert client.get("/health").status_code == 200
        assert post_text(client, "a,b").status_code == 200

        response = client.get("/health")
        assert response.status_code == 429
        assert response.json()["error"] == "Too many requests"
        assert response.headers["RateLimit-Remaining"] == "0"

        now[0] += 60
        assert client.get("/health").status_code == 200

    def test_not_found_counts_against_limit(self, client, monkeypatch):
        monkeypatch.setattr(app_module, "_RATE_LIMITER", FixedWindowRateLimiter(1, 60, clock=lambda: 0.0))
        assert client.get("/nope").status_code == 404
        assert client.get("/health").status_code == 429
