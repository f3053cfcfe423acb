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
"""Correlates a request, its log lines and its response with one id."""

from __future__ import annotations

import re
import uuid

import structlog
from starlette.requests import Request
from starlette.responses import Response

from stockfly.core.ordering import HIGHEST_PRECEDENCE, order
from stockfly.web.filters import OncePerRequestFilter
from stockfly.web.ports.filter import CallNext

TRANSACTION_ID_HEADER = "X-Transaction-Id"

# Client-supplied ids are echoed into logs and headers.
_ACCEPTED_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")


@order(HIGHEST_PRECEDENCE + 100)
class TransactionIdFilter(OncePerRequestFilter):
    """Reuses a well-formed incoming ``X-Transaction-Id`` or mints a UUID.

    The id is stored on ``request.state.transaction_id``, bound to the
    structlog context for the rest of the request and echoed on the response.
    """

    async def do_filter(self, request: Request, call_next: CallNext) -> Response:
        incoming = request.headers.get(TRANSACTION_ID_HEADER, "")
        tx_id = incoming if _ACCEPTED_ID.fullmatch(incoming) else str(uuid.uuid4())
        request.state.transaction_id = tx_id
        with structlog.contextvars.bound_contextvars(transaction_id=tx_id):
            response: Response = await call_next(request)
        response.headers[TRANSACTION_ID_HEADER] = tx_id
        return response
