from fastapi.testclient import TestClient

from app.main import create_app


def test_home_says_hello_to_unset_environment(client, monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("NODE_ENV", raising=False)
    r = client.get("/")
    assert r.status_code == 200
    assert r.json() == {"message": "Hello not yet set world!"}


def test_home_uses_environment_name(client, monkeypatch):
    monkeypatch.setenv("NODE_ENV", "production")
    monkeypatch.setenv("APP_ENV", "development")
    r = client.get("/")
    assert r.json() == {"message": "Hello development world!"}


def test_security_headers_present(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.headers["content-security-policy"] == "default-src 'self'"
    assert r.headers["x-content-type-options"] == "nosniff"
    assert r.headers["referrer-policy"] == "no-referrer"
    assert r.headers["x-permitted-cross-domain-policies"] == "none"


def test_cors_allows_configured_origin(client):
    r = client.get("/", headers={"Origin": "http://localhost:3000"})
    assert r.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_cors_rejects_unknown_origin(client):
    r = client.get("/", headers={"Origin": "https://somerandomwebsite.com"})
    assert "access-control-allow-origin" not in r.headers


def test_lifespan_drains_pending_claims(gateway, provider, firestore_db):
    with TestClient(create_app(identity_gateway=gateway, firestore_db=firestore_db)) as client:
        r = client.post("/user/sign-up", json={"email": "ada@example.com", "password": "secret1", "displayName": "Ada"})
        assert r.status_code == 201
    assert provider.claims == {"uid-1": {"regularUser": True}}


def test_home_falls_back_to_node_env(client, monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.setenv("NODE_ENV", "production")
    r = client.get("/")
    assert r.json() == {"message": "Hello production world!"}
