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
"""Return value handling: wraps handler results in the success envelope."""

from __future__ import annotations

from typing import Any

from starlette.responses import JSONResponse, Response

from stockfly.odata.use_case import ODataResult


def envelope(data: Any, **extra: Any) -> dict[str, Any]:
    return {"success": True, "data": data, **extra}


def handle_return_value(result: Any, status_code: int = 200) -> Response:
    """Convert a handler's return value into a Starlette Response.

    - ``None`` -> empty 204 response
    - ``Response`` -> passed through unchanged
    - ``ODataResult`` -> list envelope with ``cached``, plus ``@odata.count``
      when a count was requested, and an ``X-Cache`` header
    - anything else -> ``{"success": true, "data": ...}``
    """
    if result is None:
        return Response(status_code=204)

    if isinstance(result, Response):
        return result

    if isinstance(result, ODataResult):
        body = envelope({"items": result.items}, cached=result.cached)
        if result.total is not None:
            body["@odata.count"] = result.total
        return JSONResponse(body, status_code=status_code, headers={"X-Cache": "HIT" if result.cached else "MISS"})

    return JSONResponse(envelope(result), status_code=status_code)
