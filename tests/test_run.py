from unittest.mock import MagicMock

import run
from app.core.config import settings


def test_main_starts_socket_app(monkeypatch):
    serve = MagicMock()
    monkeypatch.setattr(run.uvicorn, "run", serve)

    run.main()

    serve.assert_called_once()
    assert serve.call_args.args == ("app.main:socket_app",)
    kwargs = serve.call_args.kwargs
    assert kwargs["host"] == settings.API_HOST
    assert kwargs["port"] == settings.API_PORT
    assert kwargs["reload"] == (settings.DEBUG and settings.is_development)


def test_reload_only_in_development(monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    assert settings.is_development is False
    monkeypatch.setattr(settings, "ENVIRONMENT", "Development")
    assert settings.is_development is True
