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
"""Tests for the stockfly CLI."""

from __future__ import annotations

from click.testing import CliRunner

from stockfly.cli.main import cli
from stockfly.security.jwt import JWTService


class TestCLI:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "stockfly" in result.output
        assert "token" in result.output

    def test_resources_lists_every_endpoint(self):
        result = CliRunner().invoke(cli, ["resources"])
        assert result.exit_code == 0, result.output
        for path in ("/api/categories", "/api/products", "/api/inventory", "/api/sales"):
            assert path in result.output

    def test_token_is_signed_with_configured_secret(self):
        runner = CliRunner(env={"STOCKFLY_SECURITY_JWT_SECRET": "cli-test-secret-with-enough-length"})
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["token", "user-7", "--role", "ADMIN", "--company", "c-1"])
        assert result.exit_code == 0, result.output

        context = JWTService("cli-test-secret-with-enough-length").to_security_context(result.output.strip())
        assert context.user_id == "user-7"
        assert context.roles == ("ADMIN",)
        assert context.company_id == "c-1"

    def test_db_init_creates_sqlite_file(self, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path / 'stock.db'}"
        runner = CliRunner(env={"STOCKFLY_DATABASE_URL": url})
        result = runner.invoke(cli, ["db", "init"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "stock.db").exists()
