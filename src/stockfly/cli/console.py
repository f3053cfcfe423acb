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
"""Rich console and styles used by every CLI command."""

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme

STOCKFLY_THEME = Theme(
    {
        "stockfly": "bold blue",
        "info": "cyan",
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "muted": "dim",
    }
)

console = Console(theme=STOCKFLY_THEME, highlight=False)


def print_banner() -> None:
    from stockfly import __version__

    console.print(f"[stockfly]stockfly[/stockfly] [muted]{__version__} · inventory & sales API[/muted]\n")
