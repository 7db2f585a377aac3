import logging
import os
import sys
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

# Ensure the pongrank package is importable
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Avoid startup validation error when importing the app
os.environ.setdefault("ALLOW_CREDENTIALS", "false")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")
from pongrank.exceptions import DomainException, PlayerNotFound, http_problem
from pongrank.main import (
    domain_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
)


def _app() -> FastAPI:
    app = FastAPI()
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/boom")
    def boom():
        raise ValueError("boom")

    @app.get("/missing")
    def missing():
        raise PlayerNotFound("p-1")

    @app.get("/invalid")
    def invalid():
        raise http_problem(status_code=400, detail="Please enter a score", code="match_invalid")

    return app


def test_unhandled_exception_logs_traceback(caplog):
    client = TestClient(_app(), raise_server_exceptions=False)
    with caplog.at_level(logging.ERROR):
        response = client.get("/boom")

    assert response.status_code == 500
    assert response.json()["code"] == "internal_server_error"
    record = next((r for r in caplog.records if r.message == "Unhandled exception"), None)
    assert record is not None
    assert record.exc_info[0] is ValueError
    assert "ValueError: boom" in caplog.text


def test_domain_errors_render_problem_details():
    client = TestClient(_app())

    response = client.get("/missing")
    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json() == {
        "type": "about:blank",
        "title": "Player not found",
        "detail": "player 'p-1' not found",
        "status": 404,
        "instance": None,
        "code": "player_not_found",
    }

    response = client.get("/invalid")
    assert response.status_code == 400
    assert response.json()["code"] == "match_invalid"
    assert response.json()["detail"] == "Please enter a score"
