"""
Tests for the DIY Hub API.
"""

import json

import pytest
from fastapi.testclient import TestClient

from diy_hub.api.app import create_app
from diy_hub.config import Settings
from diy_hub.errors import UpstreamAuthError, UpstreamRateLimitError

MATERIAL = {"name": "Paint", "quantity": 2, "category": "Finishing"}
PROJECT = {"description": "My kitchen faucet drips constantly", "context": {"experienceLevel": "beginner"}}
STEP = {"stepTitle": "Shut off water", "projectTitle": "Fix a Leaky Faucet"}


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["endpoints"]["enhance"] == "POST /api/enhance-material"


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["status"] == "healthy"
    assert data["service"] == "diy-hub-backend"
    assert data["modelConfigured"] is True
    assert "timestamp" in data


def test_enhance_material_then_cached(client, fake_client, material_response):
    """Identical material requests reach the model once."""
    fake_client.responses = [material_response]

    first = client.post("/api/enhance-material", json=MATERIAL)
    second = client.post("/api/enhance-material", json=MATERIAL)

    assert first.status_code == 200
    assert first.json() == {"success": True, "data": {"recommendation": material_response}, "cached": False}
    assert second.json()["cached"] is True
    assert len(fake_client.calls) == 1


def test_generate_project_normalizes_plan(client, fake_client, project_response):
    """Legacy step fields come back in canonical form."""
    fake_client.responses = [project_response]

    response = client.post("/api/generate-project", json=PROJECT)

    assert response.status_code == 200
    plan = response.json()["data"]
    assert [step["stepNumber"] for step in plan["steps"]] == [1, 2]
    assert all("instruction" in step for step in plan["steps"])
    assert plan["tools"][0]["alternatives"] == []


def test_explain_step_retries_transient_failure(client, fake_client, recording_sleep, step_response):
    """A fenced, retried explanation is still served."""
    fake_client.responses = [UpstreamRateLimitError("busy", 429), "```json\n" + json.dumps(step_response) + "\n```"]

    response = client.post("/api/explain-step", json=STEP)

    assert response.status_code == 200
    assert response.json()["data"] == step_response
    assert recording_sleep.delays == [1.0]


@pytest.mark.parametrize(
    "path,message",
    [
        ("/api/enhance-material", "Material data is required"),
        ("/api/generate-project", "Project data is required"),
        ("/api/explain-step", "Step data is required"),
    ],
)
def test_missing_body_is_rejected(client, fake_client, path, message):
    """Requests without a body never reach the model."""
    response = client.post(path)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Validation error", "message": message}
    assert fake_client.calls == []


def test_invalid_quantity_is_rejected(client, fake_client):
    """Non-positive quantities fail validation."""
    response = client.post("/api/enhance-material", json={"name": "Paint", "quantity": 0})

    assert response.status_code == 400
    assert "positive" in response.json()["message"]
    assert fake_client.calls == []


def test_malformed_json_is_rejected(client):
    """An unparseable body is a validation error."""
    response = client.post(
        "/api/enhance-material",
        content="{not json",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "Validation error"


def test_auth_failure_hides_details(client, fake_client):
    """Upstream auth errors render as a configuration error without retry."""
    fake_client.responses = [UpstreamAuthError("Invalid upstream API key: sk-secret", 401)]

    response = client.post("/api/enhance-material", json=MATERIAL)

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Configuration error"
    assert "sk-secret" not in data["message"]
    assert len(fake_client.calls) == 1


def test_upstream_rate_limit_after_retries(client, fake_client, recording_sleep):
    """Exhausted upstream rate limiting surfaces as 429."""
    fake_client.responses = [UpstreamRateLimitError("busy", 429) for _ in range(3)]

    response = client.post("/api/enhance-material", json=MATERIAL)

    assert response.status_code == 429
    assert response.json()["error"] == "Rate limit exceeded"
    assert recording_sleep.delays == [1.0, 2.0]


def test_undecodable_output_after_retries(client, fake_client):
    """Model output that never parses renders as an invalid-response error."""
    fake_client.responses = ["I cannot help with that."] * 3

    response = client.post("/api/generate-project", json=PROJECT)

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Invalid response",
        "message": "Received invalid response from AI service. Please try again.",
    }


def test_contract_failure_is_generic(client, fake_client):
    """Structurally invalid output renders as the generic server error."""
    fake_client.responses = [{"explanation": "only this"}] * 3

    response = client.post("/api/explain-step", json=STEP)

    assert response.status_code == 500
    assert response.json()["error"] == "Internal server error"


def test_cache_stats_and_clear(client, fake_client, material_response):
    """Stats reflect stored entries and DELETE empties the cache."""
    fake_client.responses = [material_response]
    client.post("/api/enhance-material", json=MATERIAL)

    stats = client.get("/api/cache-stats").json()["data"]["cacheStats"]
    assert stats["count"] == 1
    assert stats["misses"] == 1
    assert stats["approxKeyBytes"] == 64
    assert stats["approxValueBytes"] > 0

    cleared = client.delete("/api/cache").json()
    assert cleared["success"] is True
    assert cleared["deletedCount"] == 1
    assert client.get("/api/cache-stats").json()["data"]["cacheStats"]["count"] == 0


def test_unknown_endpoint(client):
    """Unknown routes render the error envelope."""
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "error": "Not found",
        "message": "Endpoint GET /api/nope not found",
    }


def test_rate_limit_headers(client):
    """Admitted API requests carry rate limit headers."""
    response = client.get("/api/health")

    assert response.headers["RateLimit-Limit"] == "50"
    assert response.headers["RateLimit-Remaining"] == "49"


def test_rate_limit_rejection(fake_client, recording_sleep):
    """Requests beyond the per-client limit get a 429 with Retry-After."""
    limited = Settings(anthropic_api_key="test-key", rate_limit_max=2, rate_limit_window_seconds=60)
    app = create_app(app_settings=limited, model_client=fake_client, sleep=recording_sleep)

    with TestClient(app) as tc:
        assert tc.get("/api/health").status_code == 200
        assert tc.get("/api/health").status_code == 200
        response = tc.get("/api/health")
        # The root endpoint is not gated
        assert tc.get("/").status_code == 200

    assert response.status_code == 429
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "Too many requests"
    assert 1 <= data["retryAfter"] <= 60
    assert response.headers["Retry-After"] == str(data["retryAfter"])


def test_oversized_body_is_rejected(client, fake_client):
    """Bodies over the size limit get a 413 and never reach the model."""
    body = dict(MATERIAL, specification="x" * (5 * 1024 * 1024))

    response = client.post("/api/enhance-material", json=body)

    assert response.status_code == 413
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "Payload too large"
    assert fake_client.calls == []
    # Rejected before the rate gate counted it
    assert client.get("/api/health").headers["RateLimit-Remaining"] == "49"


def test_body_limit_is_configurable(fake_client, recording_sleep, material_response):
    """The body size limit comes from settings."""
    small = Settings(anthropic_api_key="test-key", max_body_bytes=200)
    app = create_app(app_settings=small, model_client=fake_client, sleep=recording_sleep)
    fake_client.responses = [material_response]

    with TestClient(app) as tc:
        accepted = tc.post("/api/enhance-material", json=MATERIAL)
        rejected = tc.post("/api/enhance-material", json=dict(MATERIAL, unit="y" * 300))

    assert accepted.status_code == 200
    assert rejected.status_code == 413
    assert len(fake_client.calls) == 1
