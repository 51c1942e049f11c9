import pytest
from fastapi.testclient import TestClient

from placesapi.main import app, cors_options


@pytest.mark.parametrize("raw", ["", "  ", " , ", "*", "https://a.test,*"])
def test_wildcard_origins_never_allow_credentials(raw):
    options = cors_options(raw)
    assert "*" in options["allow_origins"]
    assert options["allow_credentials"] is False


def test_explicit_origins_allow_credentials():
    options = cors_options(" https://a.test , https://b.test ")
    assert options == {"allow_origins": ["https://a.test", "https://b.test"], "allow_credentials": True}


def test_default_preflight_has_no_credentials_header():
    resp = TestClient(app).options(
        "/api/countries",
        headers={"Origin": "https://elsewhere.test", "Access-Control-Request-Method": "GET"},
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"
    assert "access-control-allow-credentials" not in resp.headers
