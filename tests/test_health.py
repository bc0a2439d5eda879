"""
Tests for health check endpoints and the global error envelope.
"""

import sys
import threading
from unittest.mock import Mock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError

from spotjott.config import API_VERSION
from spotjott.main import create_app, install_fatal_handlers
from spotjott.ratelimit import RateLimiter


class TestHealthEndpoints:
    """Test health check endpoints."""

    def test_root_health_check_healthy(self, client):
        """Test root health endpoint when all services are healthy."""
        with patch("spotjott.routes.health.check_database_health") as mock_db, \
             patch("spotjott.routes.health.check_media_health") as mock_media:

            mock_db.return_value = {"status": "ok"}
            mock_media.return_value = {"status": "ok"}

            response = client.get("/health/")

            assert response.status_code == 200
            data = response.json()
            assert data["status"] == "ok"
            assert data["db"]["status"] == "ok"
            assert data["media"]["status"] == "ok"
            assert data["version"] == API_VERSION
            assert "timestamp" in data

    def test_root_health_check_db_down(self, client):
        """Test health endpoint when database is down."""
        with patch("spotjott.routes.health.check_database_health") as mock_db, \
             patch("spotjott.routes.health.check_media_health") as mock_media:

            mock_db.return_value = {"status": "down", "error": "Connection failed"}
            mock_media.return_value = {"status": "ok"}

            response = client.get("/health/")

            assert response.status_code == 200
            data = response.json()
            assert data["status"] == "down"
            assert data["db"]["status"] == "down"
            assert "error" in data["db"]

    def test_root_health_check_media_down(self, client):
        """Test health endpoint when the media store is not writable."""
        with patch("spotjott.routes.health.check_database_health") as mock_db, \
             patch("spotjott.routes.health.check_media_health") as mock_media:

            mock_db.return_value = {"status": "ok"}
            mock_media.return_value = {"status": "down", "error": "Media store is not writable"}

            response = client.get("/health/")

            data = response.json()
            assert data["status"] == "degraded"
            assert data["db"]["status"] == "ok"
            assert data["media"]["status"] == "down"

    def test_database_health_detailed(self, client):
        """Test detailed database health check."""
        with patch("spotjott.routes.health.check_database_health") as mock_health_check, \
             patch("spotjott.routes.health.get_session") as mock_session:

            mock_health_check.return_value = {"status": "ok"}

            mock_db = Mock()
            user_result = Mock()
            user_result.scalar.return_value = 100
            jot_result = Mock()
            jot_result.scalar.return_value = 50
            entry_result = Mock()
            entry_result.scalar.return_value = 25

            mock_db.execute.side_effect = [user_result, jot_result, entry_result]
            mock_session.return_value.__enter__.return_value = mock_db

            response = client.get("/health/db")

            assert response.status_code == 200
            data = response.json()
            assert data["status"] == "ok"
            assert data["tables"] == {"users": 100, "jots": 50, "diary_entries": 25}

    def test_database_health_connection_error(self, client):
        """Test database health when connection fails."""
        with patch("spotjott.routes.health.check_database_health") as mock_health_check:
            mock_health_check.return_value = {"status": "down", "error": "Connection failed"}

            response = client.get("/health/db")

            assert response.status_code == 200
            data = response.json()
            assert data["status"] == "down"
            assert "error" in data
            assert "tables" not in data

    def test_check_database_health_reports_errors(self):
        """check_database_health never raises; it reports the failure."""
        from spotjott.routes.health import check_database_health

        with patch("spotjott.routes.health.get_session") as mock_session:
            mock_session.return_value.__enter__.side_effect = SQLAlchemyError("refused")
            result = check_database_health()

        assert result["status"] == "down"
        assert result["error"].startswith("Database error:")

    def test_media_health(self, client):
        """Test the media store health endpoint."""
        with patch("spotjott.routes.health.media_store") as mock_store:
            mock_store.is_available.return_value = False
            mock_store.root = "/srv/media"

            response = client.get("/health/media")

            data = response.json()
            assert data["status"] == "down"
            assert data["root"] == "/srv/media"


class TestExceptionHandlers:
    """Test global exception handlers."""

    def test_sqlalchemy_exception_handler(self, client):
        """Test SQLAlchemy exception handling."""
        with patch("spotjott.routes.health.check_database_health") as mock_check:
            mock_check.side_effect = SQLAlchemyError("Database connection failed")

            response = client.get("/health/db")

            assert response.status_code == 500
            data = response.json()
            assert data["success"] is False
            assert data["error"] == "Database operation failed"

    def test_general_exception_handler(self, app):
        """Unexpected errors become a generic 500 envelope."""
        client = TestClient(app, raise_server_exceptions=False)
        with patch("spotjott.routes.health.check_database_health") as mock_check:
            mock_check.side_effect = RuntimeError("boom")

            response = client.get("/health/db")

            assert response.status_code == 500
            assert response.json()["success"] is False
            assert response.json()["error"] == "Internal server error"

    @pytest.mark.parametrize("method,path", [("GET", "/api/nothing-here"), ("DELETE", "/api")])
    def test_unknown_route(self, client, method, path):
        response = client.request(method, path)
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": f"Cannot {method} {path}"}

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["status"] == "Running"
        assert data["version"] == API_VERSION


class TestFatalHandlers:
    """Test the uncaught-exception exit policy."""

    def test_server_startup_installs_handlers(self):
        app = create_app(rate_limiter=RateLimiter(max_requests=100, window_seconds=900))
        with patch("spotjott.main.install_fatal_handlers") as mock_install:
            with TestClient(app):
                pass
        mock_install.assert_called_once_with()

    def test_startup_install_can_be_disabled(self, app):
        with patch("spotjott.main.install_fatal_handlers") as mock_install:
            with TestClient(app):
                pass
        mock_install.assert_not_called()

    def test_uncaught_exception_exits_with_status_1(self):
        with patch.object(sys, "excepthook"), patch.object(threading, "excepthook"), \
             patch("spotjott.main.logging.shutdown"), patch("spotjott.main.os._exit") as mock_exit:
            install_fatal_handlers()
            sys.excepthook(RuntimeError, RuntimeError("boom"), None)
            threading.excepthook(Mock(exc_type=ValueError, exc_value=ValueError("bad"), exc_traceback=None))

        assert mock_exit.call_count == 2
        mock_exit.assert_called_with(1)
