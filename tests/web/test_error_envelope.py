# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for exception-to-envelope mapping."""

from __future__ import annotations

import pytest
from starlette.requests import Request
from starlette.routing import Route
from starlette.testclient import TestClient

from stockfly.kernel.exceptions import (
    BusinessException,
    ConflictException,
    ForbiddenException,
    InfrastructureException,
    InvalidRequestException,
    MalformedQueryException,
    RateLimitException,
    ResourceNotFoundException,
    SecurityException,
    UnauthorizedException,
    UnknownFieldException,
    ValidationException,
)
from stockfly.web.adapters.starlette import create_app
from stockfly.web.errors import error_body, status_for


def _raiser(exc: Exception):
    async def endpoint(request: Request):
        raise exc

    return endpoint


def _make_client(exc: Exception) -> TestClient:
    app = create_app(routes=[Route("/boom", _raiser(exc))])
    return TestClient(app, raise_server_exceptions=False)


class TestStatusMapping:
    @pytest.mark.parametrize(
        "exc, status",
        [
            (ValidationException("bad"), 422),
            (ResourceNotFoundException("gone"), 404),
            (ConflictException("duplicate"), 409),
            (MalformedQueryException("bad $top", parameter="$top"), 400),
            (UnknownFieldException("x", "$filter"), 400),
            (InvalidRequestException("bad"), 400),
            (UnauthorizedException("who"), 401),
            (ForbiddenException("no"), 403),
            (SecurityException("no"), 401),
            (RateLimitException("slow down"), 429),
            (BusinessException("rule"), 400),
            (InfrastructureException("db down"), 503),
            (RuntimeError("boom"), 500),
        ],
    )
    def test_status_for(self, exc, status):
        assert status_for(exc) == status

    def test_body_carries_code_and_context(self):
        status, body = error_body(UnknownFieldException("x", "$filter", allowed=["name"]), "/api/categories", "tx")
        assert status == 400
        assert body["success"] is False
        error = body["error"]
        assert error["code"] == "UNKNOWN_FIELD"
        assert error["context"] == {"parameter": "$filter", "field": "x", "allowed": ["name"]}
        assert (error["path"], error["transaction_id"], error["status"]) == ("/api/categories", "tx", 400)

    def test_code_defaults_to_class_name(self):
        _, body = error_body(BusinessException("rule"), "/")
        assert body["error"]["code"] == "BusinessException"
        assert "context" not in body["error"]


class TestHandlers:
    def test_stockfly_exception_rendered(self):
        resp = _make_client(ResourceNotFoundException("Category entry 'x' not found", code="RESOURCE_NOT_FOUND")).get(
            "/boom"
        )
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "RESOURCE_NOT_FOUND"
        assert resp.json()["error"]["transaction_id"] == resp.headers["X-Transaction-Id"]

    def test_unexpected_error_is_masked(self):
        resp = _make_client(RuntimeError("secret detail")).get("/boom")
        assert resp.status_code == 500
        assert resp.json()["error"]["message"] == "Internal server error"
        assert "secret detail" not in resp.text

    def test_unknown_route(self):
        resp = _make_client(RuntimeError()).get("/nowhere")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    def test_wrong_method(self):
        resp = _make_client(RuntimeError()).post("/boom")
        assert resp.status_code == 405
        assert resp.json()["error"]["code"] == "METHOD_NOT_ALLOWED"
