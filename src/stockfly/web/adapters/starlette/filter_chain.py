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
"""Pure ASGI middleware that runs the ordered :class:`WebFilter` chain."""

from __future__ import annotations

from collections.abc import Sequence
from typing import cast

from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from stockfly.core.ordering import get_order
from stockfly.web.ports.filter import WebFilter


class _ResponseRecorder:
    """ASGI ``send`` replacement that collects the downstream response."""

    def __init__(self) -> None:
        self.status_code = 500
        self.headers: list[tuple[bytes, bytes]] = []
        self.body = bytearray()

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status_code = message["status"]
            self.headers = list(message.get("headers", []))
        elif message["type"] == "http.response.body":
            self.body.extend(message.get("body", b""))

    def to_response(self) -> Response:
        response = Response(content=bytes(self.body), status_code=self.status_code)
        response.raw_headers[:] = self.headers
        return response


class WebFilterChainMiddleware:
    """Runs filters in ascending ``@order`` rank around the wrapped app.

    The app's response is recorded in memory and handed back up the chain
    as a :class:`Response`, so filters can inspect the status and set
    headers (``X-Transaction-Id``, ``Retry-After``) before it is sent.
    Non-HTTP scopes bypass the chain.
    """

    def __init__(self, app: ASGIApp, filters: Sequence[WebFilter] = ()) -> None:
        self.app = app
        self._filters = sorted(filters, key=lambda f: get_order(type(f)))

    @property
    def filters(self) -> list[WebFilter]:
        return list(self._filters)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def run_app(request: Request) -> Response:
            recorder = _ResponseRecorder()
            await self.app(scope, receive, recorder)
            return recorder.to_response()

        async def dispatch(index: int, request: Request) -> Response:
            if index == len(self._filters):
                return await run_app(request)
            current = self._filters[index]

            async def call_next(req: Request) -> Response:
                return await dispatch(index + 1, req)

            if current.should_not_filter(request):
                return await call_next(request)
            return cast(Response, await current.do_filter(request, call_next))

        response = await dispatch(0, Request(scope, receive, send))
        await response(scope, receive, send)
