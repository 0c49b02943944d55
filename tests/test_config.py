"""Tests for settings parsing and the split CORS policy."""

from listing_admin.core.config import Settings


class TestSettings:
    def test_origins_comma_separated(self) -> None:
        conf = Settings(ADMIN_ORIGINS="https://a.test, https://b.test ,")
        assert conf.admin_origins == ["https://a.test", "https://b.test"]

    def test_origins_json_array(self) -> None:
        conf = Settings(PUBLIC_ORIGINS='["https://a.test"]')
        assert conf.public_origins == ["https://a.test"]

    def test_origins_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("PUBLIC_ORIGINS", "https://x.test,https://y.test")
        assert Settings().public_origins == ["https://x.test", "https://y.test"]

    def test_database_url_override(self) -> None:
        assert Settings(DATABASE_URL="sqlite:///tmp.db").sqlalchemy_url == "sqlite:///tmp.db"

    def test_database_url_from_parts(self) -> None:
        conf = Settings(DATABASE_URL=None, DB_USER="u", DB_PASSWORD="p@ss", DB_HOST="db", DB_PORT=5433, DB_NAME="n")
        assert conf.sqlalchemy_url == "postgresql+psycopg2://u:p%40ss@db:5433/n"

    def test_public_prefix(self) -> None:
        assert Settings(API_PREFIX="/api/").public_prefix == "/api/public"


class TestCors:
    def _preflight(self, client, path, origin, method):
        return client.options(
            path,
            headers={"Origin": origin, "Access-Control-Request-Method": method},
        )

    def test_public_origin_can_read_public_listing(self, client) -> None:
        resp = self._preflight(client, "/api/public/properties", "https://www.example.com", "GET")
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "https://www.example.com"

    def test_public_listing_is_get_only(self, client) -> None:
        resp = self._preflight(client, "/api/public/properties", "https://www.example.com", "DELETE")
        assert resp.status_code == 400

    def test_public_origin_cannot_reach_admin_routes(self, client) -> None:
        resp = self._preflight(client, "/api/properties", "https://www.example.com", "GET")
        assert resp.status_code == 400

    def test_admin_origin_gets_full_access(self, client) -> None:
        resp = self._preflight(client, "/api/properties/1", "https://admin.example.com", "PUT")
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "https://admin.example.com"
        assert resp.headers["access-control-allow-credentials"] == "true"
