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
"""Starlette adapter for actuator endpoints."""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from stockfly.actuator.health import HealthAggregator
from stockfly.odata.cache import ODataCacheStore

_ENDPOINTS = ("health", "odata-cache")


def make_starlette_actuator_routes(
    aggregator: HealthAggregator,
    cache: ODataCacheStore,
    cache_enabled: bool = True,
) -> list[Route]:
    """Build the ``/actuator`` index, health and OData cache routes."""

    async def index_endpoint(request: Request) -> JSONResponse:
        links: dict[str, dict[str, str]] = {"self": {"href": "/actuator"}}
        for eid in _ENDPOINTS:
            links[eid] = {"href": f"/actuator/{eid}"}
        return JSONResponse({"_links": links})

    async def health_endpoint(request: Request) -> JSONResponse:
        result = await aggregator.check()
        return JSONResponse(result.to_dict(), status_code=200 if result.is_up else 503)

    async def cache_endpoint(request: Request) -> JSONResponse:
        data = cache.stats().to_dict()
        data["enabled"] = cache_enabled
        return JSONResponse(data)

    return [
        Route("/actuator", index_endpoint, methods=["GET"]),
        Route("/actuator/health", health_endpoint, methods=["GET"]),
        Route("/actuator/odata-cache", cache_endpoint, methods=["GET"]),
    ]
