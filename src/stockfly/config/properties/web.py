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
"""Web subsystem configuration properties."""

from __future__ import annotations

from dataclasses import dataclass

from stockfly.core.config import config_properties


@config_properties(prefix="stockfly.web")
@dataclass
class WebProperties:
    """Configuration for the HTTP server (stockfly.web.*)."""

    port: int = 8000
    host: str = "0.0.0.0"
    debug: bool = False


@config_properties(prefix="stockfly.web.rate_limit")
@dataclass
class RateLimitProperties:
    """Per-client token bucket settings (stockfly.web.rate_limit.*)."""

    enabled: bool = True
    max_tokens: int = 100
    refill_rate: float = 50.0
    max_clients: int = 10000


@config_properties(prefix="stockfly.web.circuit_breaker")
@dataclass
class CircuitBreakerProperties:
    """Store circuit breaker settings (stockfly.web.circuit_breaker.*)."""

    enabled: bool = True
    failure_threshold: int = 5
    recovery_timeout: float = 30.0
