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
"""Tests for ODataRequestFilter."""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from stockfly.web.adapters.starlette import create_app
from stockfly.web.adapters.starlette.filters import ODataRequestFilter


async def _echo_query(request: Request) -> JSONResponse:
    query = getattr(request.state, "odata_query", "unset")
    if query is None or query == "unset":
        return JSONResponse({"query": query})
    return JSONResponse({"query": query.to_params()})


def _make_client() -> TestClient:
    app = create_app(
        routes=[
            Route("/api/categories", _echo_query, methods=["GET", "POST"]),
            Route("/other", _echo_query),
        ],
        filters=[ODataRequestFilter()],
    )
    return TestClient(app)


class TestODataRequestFilter:
    def test_parsed_query_is_attached(self):
        resp = _make_client().get("/api/categories", params={"$filter": "name eq 'Books'", "$top": "5"})
        assert resp.status_code == 200
        assert resp.json()["query"] == {"$filter": "name eq 'Books'", "$top": "5"}

    def test_no_parameters_means_none(self):
        resp = _make_client().get("/api/categories", params={"page": "2"})
        assert resp.json()["query"] is None

    def test_malformed_query_is_rejected_before_the_handler(self):
        resp = _make_client().get("/api/categories", params={"$top": "-1"})
        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["code"] == "MALFORMED_QUERY"
        assert error["context"] == {"parameter": "$top"}
        assert error["path"] == "/api/categories"

    def test_unsupported_filter_syntax(self):
        resp = _make_client().get("/api/categories", params={"$filter": "name eq 'a' or name eq 'b'"})
        assert resp.status_code == 400
        assert "or" in resp.json()["error"]["message"]

    def test_only_get_is_parsed(self):
        resp = _make_client().post("/api/categories?$top=abc")
        assert resp.status_code == 200
        assert resp.json()["query"] == "unset"

    def test_only_api_paths_are_parsed(self):
        resp = _make_client().get("/other", params={"$top": "abc"})
        assert resp.json()["query"] == "unset"
