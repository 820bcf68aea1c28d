"""
Treble API — Application Factory & Configuration Tests
=======================================================

What we test:
    ✅ Startup refuses to build an app without a readable word list
    ✅ Unreachable database → generic 500s and an unhealthy probe, no crash
    ✅ Lifespan logs an unreachable database, keeps serving, disposes on shutdown
    ✅ Configurable API prefix
    ✅ Settings normalization (prefix, CORS list, log level)
"""

import logging
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from treble_api import main as main_module
from treble_api.config import Settings
from treble_api.exceptions import WordListError
from treble_api.main import create_app


class TestStartup:

    def test_missing_word_list_is_fatal(self, tmp_path):
        app_settings = Settings(
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'x.db'}",
            blocked_terms_path=str(tmp_path / "nope.txt"),
        )
        with pytest.raises(WordListError):
            create_app(app_settings)

    def test_dependencies_on_app_state(self, test_settings):
        app = create_app(test_settings)
        assert len(app.state.moderation) == 4
        assert app.state.pattern_service.moderation is app.state.moderation
        assert app.state.settings is test_settings


class TestDatabaseUnavailable:

    @pytest.fixture
    def broken_app(self, tmp_path, blocked_terms_file):
        # SQLite cannot create a file inside a directory that does not exist
        app_settings = Settings(
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'missing-dir' / 'x.db'}",
            blocked_terms_path=blocked_terms_file,
        )
        return create_app(app_settings)

    @pytest.mark.asyncio
    async def test_storage_errors_become_generic_500(self, broken_app):
        transport = ASGITransport(app=broken_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/pattern/s1")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "server_error"
        assert body["message"] == "Server error"
        assert "sqlite" not in response.text.lower()

    @pytest.mark.asyncio
    async def test_health_reports_unhealthy(self, broken_app):
        transport = ASGITransport(app=broken_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "disconnected"

    @pytest.mark.asyncio
    async def test_startup_logs_and_keeps_serving(self, broken_app, monkeypatch, caplog):
        configured = []
        monkeypatch.setattr(main_module, "setup_logging", configured.append)
        database = broken_app.state.database
        monkeypatch.setattr(database, "dispose", AsyncMock(wraps=database.dispose))

        with caplog.at_level(logging.INFO, logger="treble_api"):
            async with broken_app.router.lifespan_context(broken_app):
                transport = ASGITransport(app=broken_app)
                async with AsyncClient(transport=transport, base_url="http://test") as client:
                    response = await client.get("/api/pattern/s1")

                database.dispose.assert_not_awaited()

        assert configured == [broken_app.state.settings.log_level]
        assert "Database connection failed at startup" in caplog.text
        assert response.status_code == 500
        database.dispose.assert_awaited_once()


class TestApiPrefix:

    @pytest.mark.asyncio
    async def test_custom_prefix(self, tmp_path, blocked_terms_file):
        app_settings = Settings(
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'x.db'}",
            blocked_terms_path=blocked_terms_file,
            api_prefix="v2/",
        )
        app = create_app(app_settings)
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            assert (await client.get("/v2/")).status_code == 200
            assert (await client.get("/api/")).status_code == 404


class TestSettings:

    @pytest.mark.parametrize(
        "raw, expected",
        [("/api", "/api"), ("api", "/api"), ("/api/", "/api"), ("", ""), ("/", "")],
    )
    def test_api_prefix_normalized(self, raw, expected):
        assert Settings(api_prefix=raw).api_prefix == expected

    def test_cors_origins_list(self):
        app_settings = Settings(cors_origins=" https://a.example , ,http://b.example ")
        assert app_settings.cors_origins_list == ["https://a.example", "http://b.example"]

    def test_default_cors_origins(self):
        assert Settings().cors_origins_list == [
            "https://treble.top",
            "https://treble-yo.vercel.app",
            "http://localhost:3000",
        ]

    def test_log_level_validated(self):
        assert Settings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValueError):
            Settings(log_level="LOUD")
