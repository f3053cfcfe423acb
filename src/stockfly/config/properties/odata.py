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
"""OData query layer configuration properties."""

from __future__ import annotations

from dataclasses import dataclass

from stockfly.core.config import config_properties


@config_properties(prefix="stockfly.odata")
@dataclass
class ODataProperties:
    """Configuration for OData parsing, translation and caching (stockfly.odata.*).

    ``cache_ttl`` is in seconds. ``default_top`` applies when ``$top`` is
    absent; ``max_top`` is the ceiling ``$top`` is clamped to.
    """

    cache_enabled: bool = True
    cache_ttl: float = 300.0
    cache_max_entries: int = 1000
    complex_filter_threshold: int = 3
    complex_skip_threshold: int = 100
    complex_ttl_multiplier: float = 2.0
    count_ttl_multiplier: float = 0.5
    default_top: int = 15
    max_top: int = 100
