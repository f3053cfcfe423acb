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
"""Resource controller: maps the CRUD + OData routes of one resource."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from stockfly.kernel.exceptions import UnauthorizedException
from stockfly.modules.resource import Resource
from stockfly.modules.use_cases import (
    CreateResourceUseCase,
    DeleteResourceUseCase,
    GetResourceUseCase,
    UpdateResourceUseCase,
)
from stockfly.odata.use_case import ListODataUseCase
from stockfly.security.context import SecurityContext
from stockfly.web.adapters.starlette.response import handle_return_value

Handler = Callable[[Request], Awaitable[Response]]


class ResourceController:
    """Routes for ``/api/{resource}``.

    ========  =========================  ======
    GET       /api/{name}                list (OData)
    POST      /api/{name}                create, 201
    GET       /api/{name}/{id}           get
    PATCH     /api/{name}/{id}           partial update
    DELETE    /api/{name}/{id}           delete, 204
    ========  =========================  ======
    """

    def __init__(
        self,
        resource: Resource,
        list_use_case: ListODataUseCase,
        get_use_case: GetResourceUseCase,
        create_use_case: CreateResourceUseCase,
        update_use_case: UpdateResourceUseCase,
        delete_use_case: DeleteResourceUseCase,
        require_auth: bool = True,
    ) -> None:
        self._resource = resource
        self._list = list_use_case
        self._get = get_use_case
        self._create = create_use_case
        self._update = update_use_case
        self._delete = delete_use_case
        self._require_auth = require_auth

    @property
    def base_path(self) -> str:
        return f"/api/{self._resource.name}"

    def routes(self) -> list[Route]:
        base = self.base_path
        return [
            Route(base, self._dispatch(self.handle_list, 200), methods=["GET"], name=f"{self._resource.name}:list"),
            Route(base, self._dispatch(self.handle_create, 201), methods=["POST"], name=f"{self._resource.name}:create"),
            Route(f"{base}/{{id:uuid}}", self._dispatch(self.handle_get, 200), methods=["GET"]),
            Route(f"{base}/{{id:uuid}}", self._dispatch(self.handle_update, 200), methods=["PATCH"]),
            Route(f"{base}/{{id:uuid}}", self._dispatch(self.handle_delete, 204), methods=["DELETE"]),
        ]

    async def handle_list(self, request: Request) -> Any:
        actor = self._actor(request)
        return await self._list.execute(getattr(request.state, "odata_query", None), actor=actor)

    async def handle_get(self, request: Request) -> Any:
        self._actor(request)
        return await self._get.execute(request.path_params["id"], getattr(request.state, "odata_query", None))

    async def handle_create(self, request: Request) -> Any:
        self._actor(request)
        return await self._create.execute(await request.body())

    async def handle_update(self, request: Request) -> Any:
        self._actor(request)
        return await self._update.execute(request.path_params["id"], await request.body())

    async def handle_delete(self, request: Request) -> Any:
        self._actor(request)
        await self._delete.execute(request.path_params["id"])
        return None

    def _actor(self, request: Request) -> str | None:
        """The caller's user id; raises when authentication is required and missing."""
        context: SecurityContext = getattr(request.state, "security_context", None) or SecurityContext.anonymous()
        if self._require_auth and not context.is_authenticated:
            auth_error = getattr(request.state, "auth_error", None)
            if auth_error is not None:
                raise auth_error
            raise UnauthorizedException("Access token not present", code="MISSING_TOKEN")
        return context.user_id

    @staticmethod
    def _dispatch(method: Callable[[Request], Awaitable[Any]], status_code: int) -> Handler:
        async def endpoint(request: Request) -> Response:
            return handle_return_value(await method(request), status_code=status_code)

        return endpoint
