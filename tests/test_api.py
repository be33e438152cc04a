"""
HTTP adapter tests using FastAPI's TestClient.

The mapping store, settings and services are overridden with in-memory
versions on a fake clock. The startup hook (which builds the configured store)
is not run because the client is not used as a context manager.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import START_TIME, ScriptedGenerator, UnavailableStore
from shortener.api.endpoints import get_resolve_service, get_shorten_service, get_stats_service
from shortener.core.rate_limit import limiter
from shortener.core.store_manager import get_mapping_store, get_settings
from shortener.main import app
from shortener.services.redirect_service import ResolveService
from shortener.services.stats_service import StatsService
from shortener.services.url_service import ShortenService


@pytest.fixture
def client(memory_store, settings, clock):
    app.dependency_overrides[get_mapping_store] = lambda: memory_store
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_shorten_service] = lambda: ShortenService(memory_store, settings, clock=clock)
    app.dependency_overrides[get_resolve_service] = lambda: ResolveService(memory_store, clock=clock)
    app.dependency_overrides[get_stats_service] = lambda: StatsService(memory_store, clock=clock)
    limiter.enabled = False

    yield TestClient(app)

    app.dependency_overrides.clear()
    limiter.enabled = True


class TestHealth:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy"}

    def test_root(self, client):
        assert client.get("/").json()["message"] == "URL Shortener Service"


class TestShortenEndpoint:

    def test_structured_body(self, client, memory_store):
        resp = client.post("/shorten", json={"url": "example.com", "ttl": 10})

        assert resp.status_code == 201
        body = resp.json()
        assert body["original_url"] == "https://example.com"
        assert body["short_url"] == f"https://sho.rt/{body['short_code']}"
        stored = memory_store.mappings[body["short_code"]]
        assert stored.expires_at == stored.created_at + 600
        assert body["expires_at"] == stored.expires_at

    def test_bare_json_string(self, client, memory_store):
        resp = client.post("/shorten", content='"https://already-has-scheme.test"')

        assert resp.status_code == 201
        assert resp.json()["original_url"] == "https://already-has-scheme.test"

    def test_plain_text_body(self, client):
        resp = client.post(
            "/shorten", content="example.org/a?b=c", headers={"Content-Type": "text/plain"}
        )

        assert resp.status_code == 201
        assert resp.json()["original_url"] == "https://example.org/a?b=c"

    def test_malformed_ttl_still_created(self, client):
        resp = client.post("/shorten", json={"url": "example.com", "ttl": "tomorrow"})
        assert resp.status_code == 201

    @pytest.mark.parametrize("payload", [{"url": ""}, {"ttl": 5}, {"url": "   "}])
    def test_missing_url_is_bad_request(self, client, memory_store, payload):
        resp = client.post("/shorten", json=payload)

        assert resp.status_code == 400
        assert memory_store.mappings == {}

    def test_empty_body_is_bad_request(self, client):
        assert client.post("/shorten", content=b"").status_code == 400

    def test_invalid_utf8_body_is_bad_request(self, client, memory_store):
        resp = client.post("/shorten", content=b"example.com/\xff")

        assert resp.status_code == 400
        assert memory_store.mappings == {}

    def test_storage_failure_is_server_error(self, client, settings):
        app.dependency_overrides[get_shorten_service] = lambda: ShortenService(UnavailableStore(), settings)

        resp = client.post("/shorten", json={"url": "example.com"})

        assert resp.status_code == 500

    def test_exhausted_codes_is_conflict(self, client, memory_store, settings, clock):
        app.dependency_overrides[get_shorten_service] = lambda: ShortenService(
            memory_store, settings, generator=ScriptedGenerator(["taken001"] * 10), clock=clock
        )
        assert client.post("/shorten", json={"url": "first.test"}).status_code == 201

        resp = client.post("/shorten", json={"url": "second.test"})

        assert resp.status_code == 409
        assert list(memory_store.mappings) == ["taken001"]


class TestRedirectEndpoint:

    def test_redirects_and_counts(self, client, memory_store):
        code = client.post("/shorten", json={"url": "example.com/landing", "ttl": 5}).json()["short_code"]

        resp = client.get(f"/{code}", follow_redirects=False)

        assert resp.status_code == 302
        assert resp.headers["location"] == "https://example.com/landing"
        assert memory_store.mappings[code].click_count == 1

    def test_unknown_code(self, client):
        resp = client.get("/nope1234", follow_redirects=False)
        assert resp.status_code == 404

    def test_expired_code(self, client, memory_store, clock):
        code = client.post("/shorten", json={"url": "example.com", "ttl": 1}).json()["short_code"]
        clock.advance(61)

        resp = client.get(f"/{code}", follow_redirects=False)

        assert resp.status_code == 410
        assert memory_store.mappings[code].click_count == 0

    def test_malformed_code(self, client):
        resp = client.get("/bad-code!", follow_redirects=False)
        assert resp.status_code == 400

    def test_custom_alphabet_codes_resolve(self, client, memory_store, settings, clock):
        custom = settings.model_copy(update={"SHORT_CODE_ALPHABET": "ab-_"})
        app.dependency_overrides[get_settings] = lambda: custom
        app.dependency_overrides[get_shorten_service] = lambda: ShortenService(
            memory_store, custom, generator=ScriptedGenerator(["a-b_a-b_"]), clock=clock
        )

        code = client.post("/shorten", json={"url": "example.com"}).json()["short_code"]
        resp = client.get(f"/{code}", follow_redirects=False)
        stats = client.get(f"/stats/{code}")

        assert code == "a-b_a-b_"
        assert resp.status_code == 302
        assert resp.headers["location"] == "https://example.com"
        assert stats.status_code == 200

    def test_code_outside_configured_alphabet(self, client):
        assert client.get("/abcd-123", follow_redirects=False).status_code == 400

    def test_storage_failure(self, client, clock):
        app.dependency_overrides[get_resolve_service] = lambda: ResolveService(UnavailableStore(), clock=clock)

        resp = client.get("/abcd1234", follow_redirects=False)

        assert resp.status_code == 500


class TestStatsEndpoint:

    def test_stats_after_clicks(self, client):
        code = client.post("/shorten", json={"url": "example.com", "ttl": 10}).json()["short_code"]
        client.get(f"/{code}", follow_redirects=False)
        client.get(f"/{code}", follow_redirects=False)

        resp = client.get(f"/stats/{code}")

        assert resp.status_code == 200
        assert resp.json() == {
            "short_code": code,
            "original_url": "https://example.com",
            "created_at": START_TIME,
            "expires_at": START_TIME + 600,
            "click_count": 2,
            "expired": False,
        }

    def test_stats_unknown_code(self, client):
        assert client.get("/stats/missing1").status_code == 404


def test_store_not_initialized_is_server_error():
    limiter.enabled = False
    try:
        resp = TestClient(app).post("/shorten", json={"url": "example.com"})
    finally:
        limiter.enabled = True

    assert resp.status_code == 500
