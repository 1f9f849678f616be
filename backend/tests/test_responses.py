"""Response envelope, error mapping and request size limit"""

from sayitright.core.errors import (
    ConflictError,
    ErrorCode,
    PayloadTooLargeError,
    TooManyRequestsError,
    code_for_status,
)
from sayitright.core.responses import ok


def test_ok_wraps_payload():
    assert ok({"a": 1}) == {"ok": True, "data": {"a": 1}}
    assert ok([]) == {"ok": True, "data": []}
    assert ok(None) == {"ok": True, "data": None}


def test_ok_without_payload():
    assert ok() == {"ok": True}


def test_ok_does_not_double_wrap():
    payload = {"ok": True, "data": {"x": 1}}
    assert ok(payload) is payload


def test_status_code_mapping():
    assert code_for_status(400) == ErrorCode.BAD_REQUEST
    assert code_for_status(409) == ErrorCode.CONFLICT
    assert code_for_status(429) == ErrorCode.TOO_MANY_REQUESTS
    assert code_for_status(418) == ErrorCode.INTERNAL_SERVER_ERROR
    assert code_for_status(502) == ErrorCode.INTERNAL_SERVER_ERROR


def test_error_defaults():
    assert ConflictError().message == "Conflict"
    assert TooManyRequestsError().code == "TOO_MANY_REQUESTS"
    assert PayloadTooLargeError().code == "BAD_REQUEST"


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "data": {"status": "up", "version": "1.0.0"}}


async def test_unknown_route_enveloped(client):
    response = await client.get("/v1/nope")
    assert response.status_code == 404
    body = response.json()
    assert body["ok"] is False
    assert body["error"]["code"] == "NOT_FOUND"


async def test_validation_error_envelope(client):
    response = await client.post("/v1/ai/generate-email", json={"draft": "short", "language": "fr"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"]["code"] == "BAD_REQUEST"
    assert body["error"]["message"] == "Bad Request"
    fields = {d["field"] for d in body["error"]["details"]}
    assert {"draft", "language"} <= fields


async def test_payload_too_large(client):
    response = await client.post(
        "/v1/ai/generate-email",
        content=b"{}",
        headers={"content-type": "application/json", "content-length": str(2 * 1024 * 1024)},
    )
    assert response.status_code == 413
    assert response.json()["error"]["code"] == "BAD_REQUEST"


async def test_missing_auth(client):
    response = await client.get("/v1/archives")
    assert response.status_code == 401
    assert response.json()["error"] == {
        "code": "UNAUTHORIZED",
        "message": "Not authenticated",
        "details": None,
    }


async def test_bad_scheme(client):
    response = await client.get("/v1/notes", headers={"Authorization": "Basic abc"})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid authentication scheme"
