"""Tests for the CORS and debug logging middleware."""

from fastapi.testclient import TestClient

from dmsproxy.auth.verifier import StaticTokenVerifier
from dmsproxy.config import ProxyConfig
from dmsproxy.server.app import create_app
from dmsproxy.server.middleware.debug_logging import redact_headers

SECRET_TOKEN = "s3cr3t-id-token"

PREFLIGHT_HEADERS = {
    "Origin": "https://dms.example.com",
    "Access-Control-Request-Method": "POST",
    "Access-Control-Request-Headers": "authorization,content-type",
}


def test_redact_headers():
    headers = {"Authorization": f"Bearer {SECRET_TOKEN}", "cookie": "session=1", "content-type": "application/json"}

    redacted = redact_headers(headers)

    assert redacted == {"Authorization": "***", "cookie": "***", "content-type": "application/json"}


def test_debug_dump_never_writes_bearer_token(recording_backend, capsys):
    verifier = StaticTokenVerifier({SECRET_TOKEN: "u-operator"})
    app = create_app(ProxyConfig(debug=True), backend=recording_backend, verifier=verifier, show_banner=False)

    with TestClient(app) as test_client:
        response = test_client.post(
            "/query",
            json={"table": "loss_reason", "action": "delete", "filters": [{"column": "id", "value": 1}]},
            headers={"Authorization": f"Bearer {SECRET_TOKEN}"},
        )

    assert response.status_code == 200
    err = capsys.readouterr().err
    assert "REQUEST: POST /query" in err
    assert "***" in err
    assert SECRET_TOKEN not in err


def test_wildcard_origins_do_not_allow_credentials(recording_backend, verifier):
    app = create_app(ProxyConfig(), backend=recording_backend, verifier=verifier, show_banner=False)

    with TestClient(app) as test_client:
        response = test_client.options("/query", headers=PREFLIGHT_HEADERS)

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "access-control-allow-credentials" not in response.headers


def test_explicit_origins_allow_credentials(recording_backend, verifier):
    config = ProxyConfig(cors_origins=["https://dms.example.com"])
    app = create_app(config, backend=recording_backend, verifier=verifier, show_banner=False)

    with TestClient(app) as test_client:
        response = test_client.options("/query", headers=PREFLIGHT_HEADERS)

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://dms.example.com"
    assert response.headers["access-control-allow-credentials"] == "true"
