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
"""structlog-backed :class:`~stockfly.logging.port.LoggingPort`.

Both structlog loggers (``stockfly.web``) and plain ``logging`` loggers
(``stockfly.odata.cache``, SQLAlchemy, uvicorn) end up in one stdout
handler rendered by the same processor chain, so an access log line and a
cache warning for the same request share ``transaction_id`` and format.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from stockfly.core.config import Config

_FORMATS = ("console", "json")


class StructlogAdapter:
    """Configures structlog and the stdlib root logger from ``stockfly.logging``.

    ``stockfly.logging.level.root`` sets the root level; every other key
    under ``stockfly.logging.level`` is a logger name with its own level.
    ``stockfly.logging.format`` is ``console`` or ``json``.
    """

    def __init__(self) -> None:
        self._root_level = "INFO"
        self._format = "console"
        self._app_name = "stockfly"
        self._module_levels: dict[str, str] = {}

    def configure(self, config: Config) -> None:
        levels = {str(k): str(v).upper() for k, v in config.get_section("stockfly.logging.level").items()}
        self._root_level = levels.pop("root", "INFO")
        self._module_levels = levels
        fmt = str(config.get("stockfly.logging.format", "console")).lower()
        self._format = fmt if fmt in _FORMATS else "console"
        self._app_name = str(config.get("stockfly.app.name", "stockfly"))

        shared = self._shared_processors()
        structlog.configure(
            processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=shared,
                processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *self._renderers()],
            )
        )
        root = logging.getLogger()
        root.handlers[:] = [handler]
        root.setLevel(self._level(self._root_level))

        for name, level in self._module_levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(self._level(level))

    def _shared_processors(self) -> list[Any]:
        return [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            self._bind_app_name,
        ]

    def _renderers(self) -> list[Any]:
        if self._format == "json":
            return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        return [structlog.dev.ConsoleRenderer()]

    def _bind_app_name(self, _logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("app", self._app_name)
        return event_dict

    @staticmethod
    def _level(name: str) -> int:
        level = logging.getLevelName(name.upper())
        return level if isinstance(level, int) else logging.INFO
