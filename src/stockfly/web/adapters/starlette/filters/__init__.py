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
"""Built-in WebFilter implementations for the Starlette adapter."""

from stockfly.web.adapters.starlette.filters.circuit_breaker_filter import CircuitBreakerFilter
from stockfly.web.adapters.starlette.filters.odata_filter import ODataRequestFilter
from stockfly.web.adapters.starlette.filters.rate_limit_filter import RateLimitFilter
from stockfly.web.adapters.starlette.filters.request_logging_filter import RequestLoggingFilter
from stockfly.web.adapters.starlette.filters.security_filter import SecurityFilter
from stockfly.web.adapters.starlette.filters.transaction_id_filter import TransactionIdFilter

__all__ = [
    "CircuitBreakerFilter",
    "ODataRequestFilter",
    "RateLimitFilter",
    "RequestLoggingFilter",
    "SecurityFilter",
    "TransactionIdFilter",
]
