"""Unit tests for the exception listener registered on the app."""

from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from restwell.core.errors import register_error_handlers
from restwell.core.exceptions import NotFoundException
from restwell.core.exceptions import ServiceUnavailableException
from restwell.core.exceptions import UnauthorizedException
from restwell.core.exceptions import UnprocessableEntityException


class Address(BaseModel):
    city: str


class Signup(BaseModel):
    address: Address


def _build_client() -> TestClient:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/query")
    def query(limit: int) -> dict[str, int]:
        return {"limit": limit}

    @app.get("/not-found")
    def not_found() -> None:
        raise NotFoundException()

    @app.get("/validation")
    def validation_error() -> None:
        exc = UnprocessableEntityException("Validation failed")
        exc.set_errors({"first_name": "required"})
        raise exc

    @app.get("/unavailable")
    def unavailable() -> None:
        raise ServiceUnavailableException("Try again later", retry_after=60)

    @app.get("/http")
    def http_error() -> None:
        raise StarletteHTTPException(status_code=404, detail="Client not found")

    @app.post("/signup")
    def signup(payload: Signup) -> dict[str, str]:
        return {"city": payload.address.city}

    @app.get("/duplicate-issues")
    def duplicate_issues() -> None:
        raise RequestValidationError(
            [
                {"type": "value_error", "loc": ("body", "email"), "msg": "Invalid domain"},
                {"type": "value_error", "loc": ("body", "email"), "msg": "Too long"},
            ]
        )

    @app.get("/http-dict")
    def http_dict_error() -> None:
        raise StarletteHTTPException(status_code=400, detail={"name": "too long"})

    @app.get("/http-challenge")
    def http_challenge() -> None:
        raise StarletteHTTPException(
            status_code=401,
            detail="Login required",
            headers={"WWW-Authenticate": 'Bearer realm="api"'},
        )

    @app.get("/not-modified")
    def not_modified() -> None:
        raise StarletteHTTPException(status_code=304)

    @app.get("/bad-challenge")
    def bad_challenge() -> None:
        raise UnauthorizedException("Login required", challenge='Bearer realm="Z\u00fcrich \u2603"')

    @app.get("/boom")
    def boom() -> None:
        raise RuntimeError("database password is hunter2")

    return TestClient(app, raise_server_exceptions=False)


def test_request_validation_errors_become_field_map() -> None:
    client = _build_client()

    response = client.get("/query")

    assert response.status_code == 422
    assert response.json() == {
        "status_code": 422,
        "message": "Request validation failed",
        "errors": {"limit": "Field required"},
    }


def test_not_found_signal_is_rendered() -> None:
    client = _build_client()

    response = client.get("/not-found")

    assert response.status_code == 404
    assert response.json() == {"status_code": 404, "message": "Not Found"}


def test_validation_signal_is_rendered_with_errors() -> None:
    client = _build_client()

    response = client.get("/validation")

    assert response.status_code == 422
    assert response.json() == {
        "status_code": 422,
        "message": "Validation failed",
        "errors": {"first_name": "required"},
    }


def test_signal_headers_reach_the_client() -> None:
    client = _build_client()

    response = client.get("/unavailable")

    assert response.status_code == 503
    assert response.headers["retry-after"] == "60"
    assert response.json() == {"status_code": 503, "message": "Try again later"}


def test_http_errors_are_wrapped_in_shared_body() -> None:
    client = _build_client()

    response = client.get("/http")

    assert response.status_code == 404
    assert response.json() == {"status_code": 404, "message": "Client not found"}


def test_unknown_route_uses_shared_body() -> None:
    client = _build_client()

    response = client.get("/missing")

    assert response.status_code == 404
    assert response.json() == {"status_code": 404, "message": "Not Found"}


def test_wrong_verb_keeps_allow_header() -> None:
    client = _build_client()

    response = client.post("/not-found")

    assert response.status_code == 405
    assert "GET" in response.headers["allow"]
    assert response.json() == {"status_code": 405, "message": "Method Not Allowed"}


def test_unhandled_errors_do_not_leak_details(caplog: pytest.LogCaptureFixture) -> None:
    client = _build_client()

    with caplog.at_level(logging.ERROR, logger="restwell.core.errors"):
        response = client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"status_code": 500, "message": "Internal server error"}
    assert "hunter2" not in response.text
    assert any("Unhandled exception" in record.getMessage() for record in caplog.records)


def test_nested_body_locations_are_dot_joined() -> None:
    client = _build_client()

    response = client.post("/signup", json={"address": {}})

    assert response.status_code == 422
    assert response.json()["errors"] == {"address.city": "Field required"}


def test_first_issue_per_field_wins() -> None:
    client = _build_client()

    response = client.get("/duplicate-issues")

    assert response.status_code == 422
    assert response.json()["errors"] == {"email": "Invalid domain"}


def test_malformed_json_body_is_reported_on_body() -> None:
    client = _build_client()

    response = client.post("/signup", content=b"{bad", headers={"content-type": "application/json"})

    assert response.status_code == 422
    assert list(response.json()["errors"]) == ["body"]


def test_http_error_with_structured_detail_becomes_errors() -> None:
    client = _build_client()

    response = client.get("/http-dict")

    assert response.status_code == 400
    assert response.json() == {
        "status_code": 400,
        "message": "Bad Request",
        "errors": {"name": "too long"},
    }


def test_http_error_headers_are_kept() -> None:
    client = _build_client()

    response = client.get("/http-challenge")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == 'Bearer realm="api"'
    assert response.json() == {"status_code": 401, "message": "Login required"}


def test_non_error_http_status_is_passed_through() -> None:
    client = _build_client()

    response = client.get("/not-modified")

    assert response.status_code == 304
    assert response.content == b""


def test_unencodable_header_is_dropped_and_status_kept() -> None:
    client = _build_client()

    response = client.get("/bad-challenge")

    assert response.status_code == 401
    assert "www-authenticate" not in response.headers
    assert response.json() == {"status_code": 401, "message": "Login required"}
