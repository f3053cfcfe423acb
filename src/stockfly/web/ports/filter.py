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
"""The filter contract shared by every HTTP adapter."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

#: Continues the chain with the next filter, or the route when none is left.
CallNext = Callable[[Any], Awaitable[Any]]


@runtime_checkable
class WebFilter(Protocol):
    """One link of the request pipeline.

    ``do_filter`` receives the request and the continuation. Returning a
    response without awaiting ``call_next`` ends the request there, which is
    how the OData, rate-limit and error paths answer early.
    """

    def should_not_filter(self, request: Any) -> bool: ...

    async def do_filter(self, request: Any, call_next: CallNext) -> Any: ...
