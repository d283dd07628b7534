"""uvicorn launcher for the HTTP API."""

from __future__ import annotations

from getback.api import serve


def test_serve_hands_app_path_and_flags_to_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(serve.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    assert serve.main(["--host", "0.0.0.0", "--port", "9001", "--workers", "0"]) == 0
    assert calls == [("getback.api.main:app", {"host": "0.0.0.0", "port": 9001, "workers": 1})]


def test_serve_defaults_come_from_environment(monkeypatch):
    calls = []
    monkeypatch.setattr(serve.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
    monkeypatch.setenv("GETBACK_HOST", "10.0.0.5")
    monkeypatch.setenv("GETBACK_PORT", "8123")

    serve.main([])
    assert calls == [{"host": "10.0.0.5", "port": 8123, "workers": 1}]
