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
"""Base class for filters that only apply to some paths or methods."""

from __future__ import annotations

import abc
from fnmatch import fnmatchcase
from typing import Any

from stockfly.web.ports.filter import CallNext


class OncePerRequestFilter(abc.ABC):
    """A :class:`~stockfly.web.ports.filter.WebFilter` with declarative scoping.

    Subclasses narrow where they run with class attributes and implement
    :meth:`do_filter`; the chain calls :meth:`should_not_filter` first.

    Attributes:
        url_patterns: Shell-style path globs (``/api/*``); empty matches every path.
        exclude_patterns: Globs that opt a path back out after a match.
        methods: Upper-case HTTP methods to run for; empty means any.
    """

    url_patterns: list[str] = []
    exclude_patterns: list[str] = []
    methods: frozenset[str] = frozenset()

    def should_not_filter(self, request: Any) -> bool:
        if self.methods and request.method not in self.methods:
            return True
        path: str = request.url.path
        if self.url_patterns and not _matches(path, self.url_patterns):
            return True
        return _matches(path, self.exclude_patterns)

    @abc.abstractmethod
    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        """Handle *request*; await ``call_next(request)`` to continue the chain."""


def _matches(path: str, patterns: list[str]) -> bool:
    return any(fnmatchcase(path, pattern) for pattern in patterns)
