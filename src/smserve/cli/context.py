"""
Shared CLI state: config loading, logging setup and error reporting.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from ..core.config import RuntimeConfig, load_config, resolve_config_path
from ..core.errors import SMServeError

console = Console()


class CLIContext:
    def __init__(self, config_path: Optional[str], verbose: bool):
        self.verbose = verbose
        self.config_path: Optional[Path] = resolve_config_path(config_path)
        self.config: RuntimeConfig = load_config(self.config_path)

        logging.basicConfig(
            level=logging.DEBUG if verbose else self.config.logging_level,
            format="%(asctime)s | %(levelname)s | %(message)s",
        )


pass_context = click.make_pass_decorator(CLIContext)


def handle_error(e: SMServeError, as_json: bool = False) -> None:
    """Report a domain error and exit with its stable exit code."""
    if as_json:
        click.echo(json.dumps({"error": e.to_json()}, indent=2))
    else:
        console.print(e.format(), markup=False, style="red")
    sys.exit(int(e.exit_code))
