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
"""Tests for SecurityFilter and JWTService."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from stockfly.kernel.exceptions import UnauthorizedException
from stockfly.security.context import SecurityContext
from stockfly.security.jwt import JWTService
from stockfly.web.adapters.starlette import create_app
from stockfly.web.adapters.starlette.filters import SecurityFilter

SECRET = "test-secret-key-with-enough-length!"


@pytest.fixture
def jwt_service() -> JWTService:
    return JWTService(SECRET)


async def _whoami(request: Request) -> JSONResponse:
    context: SecurityContext = request.state.security_context
    auth_error = request.state.auth_error
    return JSONResponse(
        {
            "user_id": context.user_id,
            "roles": list(context.roles),
            "company_id": context.company_id,
            "error": auth_error.code if auth_error else None,
        }
    )


def _make_client(jwt_service: JWTService) -> TestClient:
    return TestClient(create_app(routes=[Route("/api/me", _whoami)], filters=[SecurityFilter(jwt_service)]))


class TestJWTService:
    def test_issue_and_decode(self, jwt_service):
        token = jwt_service.issue("user-1", roles=["ADMIN"], email="a@b.c", company_id="c-1")
        context = jwt_service.to_security_context(token)
        assert context == SecurityContext(user_id="user-1", email="a@b.c", company_id="c-1", roles=("ADMIN",))
        assert context.has_role("ADMIN")

    def test_expired_token(self, jwt_service):
        token = jwt_service.issue("user-1", expires_in=timedelta(seconds=-1))
        with pytest.raises(UnauthorizedException) as exc_info:
            jwt_service.decode(token)
        assert exc_info.value.code == "TOKEN_EXPIRED"

    def test_wrong_signature(self, jwt_service):
        token = JWTService("another-secret-key-with-enough-length").issue("user-1")
        with pytest.raises(UnauthorizedException) as exc_info:
            jwt_service.decode(token)
        assert exc_info.value.code == "INVALID_TOKEN"

    def test_subject_is_required(self, jwt_service):
        token = jwt.encode({"roles": []}, SECRET, algorithm="HS256")
        with pytest.raises(UnauthorizedException):
            jwt_service.decode(token)

    def test_anonymous_context(self):
        assert not SecurityContext.anonymous().is_authenticated


class TestSecurityFilter:
    def test_valid_bearer_token(self, jwt_service):
        token = jwt_service.issue("user-1", roles=["SELLER"], company_id="c-1")
        resp = _make_client(jwt_service).get("/api/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.json() == {"user_id": "user-1", "roles": ["SELLER"], "company_id": "c-1", "error": None}

    def test_scheme_is_case_insensitive(self, jwt_service):
        token = jwt_service.issue("user-1")
        resp = _make_client(jwt_service).get("/api/me", headers={"Authorization": f"bearer {token}"})
        assert resp.json()["user_id"] == "user-1"

    def test_missing_header_is_anonymous(self, jwt_service):
        resp = _make_client(jwt_service).get("/api/me")
        assert resp.json()["user_id"] is None
        assert resp.json()["error"] is None

    def test_invalid_token_is_recorded(self, jwt_service):
        resp = _make_client(jwt_service).get("/api/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 200
        assert resp.json()["user_id"] is None
        assert resp.json()["error"] == "INVALID_TOKEN"

    def test_other_schemes_are_ignored(self, jwt_service):
        resp = _make_client(jwt_service).get("/api/me", headers={"Authorization": "Basic dXNlcjpwYXNz"})
        assert resp.json()["error"] is None
