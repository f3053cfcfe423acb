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
"""Stockfly web application factory built on Starlette."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware import Middleware
from starlette.routing import BaseRoute

from stockfly.kernel.exceptions import StockflyException
from stockfly.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from stockfly.web.adapters.starlette.filters import RequestLoggingFilter, TransactionIdFilter
from stockfly.web.errors import global_exception_handler, http_exception_handler
from stockfly.web.ports.filter import WebFilter


def create_app(
    routes: Sequence[BaseRoute] = (),
    filters: Sequence[WebFilter] = (),
    debug: bool = False,
    lifespan: Any = None,
) -> Starlette:
    """Create a Starlette application with the Stockfly filter chain and error handling.

    The transaction-id and request-logging filters are always installed;
    *filters* are added to them and the whole chain runs in ``@order`` order.

    Includes:
    - WebFilter chain (transaction ID, request logging, + caller filters)
    - Envelope error handlers for Stockfly, routing and unexpected errors
    """
    chain: list[WebFilter] = [TransactionIdFilter(), RequestLoggingFilter()]
    chain.extend(f for f in filters if not isinstance(f, (TransactionIdFilter, RequestLoggingFilter)))

    app = Starlette(
        debug=debug,
        middleware=[Middleware(WebFilterChainMiddleware, filters=chain)],
        routes=list(routes),
        lifespan=lifespan,
    )

    # StockflyException and HTTPException are rendered inside the route
    # stack; Exception goes to the outermost server-error handler.
    app.add_exception_handler(StockflyException, global_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)

    return app
