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
"""Stockfly CLI: serve the API and manage its database."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from pathlib import Path

import click
from rich.table import Table

from stockfly.cli.console import console, print_banner
from stockfly.config.properties import DatabaseProperties, SecurityProperties, WebProperties
from stockfly.core.config import Config


class StockflyCLI(click.Group):
    """Click group that shows the banner on help."""

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        print_banner()
        super().format_help(ctx, formatter)


def _load_config(profiles: tuple[str, ...]) -> Config:
    return Config.from_sources(Path.cwd(), active_profiles=list(profiles))


@click.group(cls=StockflyCLI)
@click.version_option(package_name="stockfly")
def cli() -> None:
    """Stockfly: inventory and sales API."""


@cli.command("run")
@click.option("--host", default=None, help="Bind address (default: stockfly.web.host).")
@click.option("--port", default=None, type=int, help="Port number (default: stockfly.web.port).")
@click.option("--reload", "use_reload", is_flag=True, help="Enable auto-reload for development.")
def run_command(host: str | None, port: int | None, use_reload: bool) -> None:
    """Start the API server with uvicorn."""
    import uvicorn

    web = _load_config(()).bind(WebProperties)
    host = host or web.host
    port = port or web.port
    console.print(f"[info]Serving on[/info] http://{host}:{port}")
    uvicorn.run(
        "stockfly.application:create_application",
        factory=True,
        host=host,
        port=port,
        reload=use_reload,
        log_config=None,
    )


@cli.group("db")
def db_group() -> None:
    """Database commands."""


@db_group.command("init")
@click.option("--profile", "profiles", multiple=True, help="Config profile to activate (repeatable).")
def db_init_command(profiles: tuple[str, ...]) -> None:
    """Create every table that does not exist yet."""
    from stockfly.data.engine import create_engine, create_schema
    from stockfly.modules import RESOURCES

    props = _load_config(profiles).bind(DatabaseProperties)

    async def _init() -> None:
        engine = create_engine(props)
        try:
            await create_schema(engine)
        finally:
            await engine.dispose()

    asyncio.run(_init())
    console.print(f"[success]✓[/success] Schema ready for {len(RESOURCES)} resources at [muted]{props.url}[/muted]")


@cli.command("token")
@click.argument("subject")
@click.option("--role", "roles", multiple=True, help="Role claim (repeatable).")
@click.option("--company", "company_id", default=None, help="companyId claim.")
@click.option("--expires-in", default=3600, show_default=True, type=int, help="Lifetime in seconds.")
def token_command(subject: str, roles: tuple[str, ...], company_id: str | None, expires_in: int) -> None:
    """Issue a signed access token for SUBJECT (development helper)."""
    from stockfly.security.jwt import JWTService

    props = _load_config(()).bind(SecurityProperties)
    service = JWTService(props.jwt_secret, props.jwt_algorithm)
    click.echo(service.issue(subject, roles=roles, company_id=company_id, expires_in=timedelta(seconds=expires_in)))


@cli.command("resources")
def resources_command() -> None:
    """List the exposed resources with their queryable fields."""
    from stockfly.modules import RESOURCES

    table = Table(title="[stockfly]Resources[/stockfly]", border_style="dim", show_lines=True)
    table.add_column("Path", style="bold", no_wrap=True)
    table.add_column("Fields")
    table.add_column("$expand", style="dim")
    for resource in RESOURCES:
        table.add_row(f"/api/{resource.name}", ", ".join(resource.fields), ", ".join(resource.relations) or "-")
    console.print(table)
