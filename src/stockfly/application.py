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
"""Application assembly: configuration in, Starlette app out.

Everything is wired by constructor injection. The engine, the session
factory and the single OData cache store are created here and shared by
every controller for the lifetime of the app.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator
from datetime import timedelta
from pathlib import Path

from starlette.applications import Starlette
from starlette.routing import BaseRoute

from stockfly.actuator.adapters.starlette import make_starlette_actuator_routes
from stockfly.actuator.health import (
    CircuitBreakerHealthIndicator,
    DatabaseHealthIndicator,
    HealthAggregator,
    ODataCacheHealthIndicator,
)
from stockfly.config.properties import (
    CircuitBreakerProperties,
    DatabaseProperties,
    ODataProperties,
    RateLimitProperties,
    SecurityProperties,
    WebProperties,
)
from stockfly.core.config import Config
from stockfly.data.engine import create_engine, create_schema, create_session_factory
from stockfly.logging import StructlogAdapter
from stockfly.modules import RESOURCES, dependents_of
from stockfly.modules.use_cases import (
    CreateResourceUseCase,
    DeleteResourceUseCase,
    GetResourceUseCase,
    UpdateResourceUseCase,
)
from stockfly.odata.cache import ODataCacheStore
from stockfly.odata.parser import QueryStringParser
from stockfly.odata.translator import QueryTranslator
from stockfly.odata.use_case import ListODataUseCase
from stockfly.resilience.circuit_breaker import CircuitBreaker
from stockfly.resilience.rate_limiter import KeyedRateLimiter
from stockfly.security.jwt import JWTService
from stockfly.web.adapters.starlette.app import create_app
from stockfly.web.adapters.starlette.controller import ResourceController
from stockfly.web.adapters.starlette.filters import (
    CircuitBreakerFilter,
    ODataRequestFilter,
    RateLimitFilter,
    SecurityFilter,
)
from stockfly.web.ports.filter import WebFilter

logger = logging.getLogger("stockfly.application")


def create_application(config: Config | None = None, configure_logging: bool = True) -> Starlette:
    """Build the Stockfly API from *config* (default: sources in the working directory)."""
    if config is None:
        config = Config.from_sources(Path.cwd())
    if configure_logging:
        StructlogAdapter().configure(config)

    db_props = config.bind(DatabaseProperties)
    odata_props = config.bind(ODataProperties)
    security_props = config.bind(SecurityProperties)
    web_props = config.bind(WebProperties)
    rate_props = config.bind(RateLimitProperties)
    breaker_props = config.bind(CircuitBreakerProperties)

    engine = create_engine(db_props)
    session_factory = create_session_factory(engine)
    cache = ODataCacheStore.from_properties(odata_props)
    translator = QueryTranslator(default_top=odata_props.default_top, max_top=odata_props.max_top)

    routes: list[BaseRoute] = []
    for resource in RESOURCES:
        dependents = dependents_of(resource.name)
        controller = ResourceController(
            resource,
            list_use_case=ListODataUseCase(
                resource, session_factory, cache, translator, cache_enabled=odata_props.cache_enabled
            ),
            get_use_case=GetResourceUseCase(resource, session_factory, translator),
            create_use_case=CreateResourceUseCase(resource, session_factory, cache, dependents),
            update_use_case=UpdateResourceUseCase(resource, session_factory, cache, dependents),
            delete_use_case=DeleteResourceUseCase(resource, session_factory, cache, dependents),
            require_auth=security_props.require_auth,
        )
        routes.extend(controller.routes())

    aggregator = HealthAggregator()
    aggregator.add_indicator("db", DatabaseHealthIndicator(engine))
    aggregator.add_indicator("odataCache", ODataCacheHealthIndicator(cache, enabled=odata_props.cache_enabled))
    breaker = CircuitBreaker(
        "store",
        failure_threshold=breaker_props.failure_threshold,
        recovery_timeout=timedelta(seconds=breaker_props.recovery_timeout),
    )
    if breaker_props.enabled:
        aggregator.add_indicator("circuitBreaker", CircuitBreakerHealthIndicator(breaker))
    routes.extend(make_starlette_actuator_routes(aggregator, cache, cache_enabled=odata_props.cache_enabled))

    filters: list[WebFilter] = [
        SecurityFilter(JWTService(security_props.jwt_secret, security_props.jwt_algorithm)),
        ODataRequestFilter(QueryStringParser()),
    ]
    if rate_props.enabled:
        limiter = KeyedRateLimiter(rate_props.max_tokens, rate_props.refill_rate, max_keys=rate_props.max_clients)
        filters.append(RateLimitFilter(limiter))
    if breaker_props.enabled:
        filters.append(CircuitBreakerFilter(breaker))

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        if db_props.create_schema:
            await create_schema(engine)
        logger.info(
            "Stockfly started: %d resources, OData cache %s",
            len(RESOURCES),
            "enabled" if odata_props.cache_enabled else "disabled",
        )
        try:
            yield
        finally:
            await cache.invalidate()
            await engine.dispose()
            logger.info("Stockfly stopped")

    app = create_app(routes=routes, filters=filters, debug=web_props.debug, lifespan=lifespan)
    app.state.config = config
    app.state.engine = engine
    app.state.odata_cache = cache
    app.state.circuit_breaker = breaker
    return app
