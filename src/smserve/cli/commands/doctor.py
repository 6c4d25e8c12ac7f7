"""
smserve Doctor Command

Checks the environment smserve runs in:
- Python version
- Required packages (tensorflow, numpy, protobuf, pyyaml)
- Execution backend availability
- Effective runtime configuration
"""

import json
import logging
import platform
import sys
from typing import List, Optional, Tuple

import click
from rich.table import Table

from ..context import CLIContext, console, pass_context
from ...backends import BackendRegistry
from ...core.config import RuntimeConfigSchema

logger = logging.getLogger("smserve.doctor")

REQUIRED_PYTHON = (3, 9)

# (import name, display name)
PACKAGES: List[Tuple[str, str]] = [
    ("tensorflow", "tensorflow"),
    ("numpy", "numpy"),
    ("google.protobuf", "protobuf"),
    ("yaml", "pyyaml"),
]


def check_import(module_name: str) -> Tuple[bool, Optional[str]]:
    """Check if a Python package is installed and return version."""
    import importlib

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        logger.debug(f"Failed to import {module_name}: {e}")
        return False, None
    return True, getattr(module, "__version__", "unknown")


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output results in JSON format")
@click.option("--soft", is_flag=True, help="Do not exit with error code when the configured backend is unavailable")
@pass_context
def doctor(ctx: CLIContext, as_json: bool, soft: bool):
    """
    Check the smserve environment.
    """
    results = {"python": {}, "packages": {}, "backends": {}, "config": {}}
    failures = []

    py = sys.version_info
    results["python"] = {
        "version": platform.python_version(),
        "ok": (py.major, py.minor) >= REQUIRED_PYTHON,
    }
    if not results["python"]["ok"]:
        failures.append(f"Python {REQUIRED_PYTHON[0]}.{REQUIRED_PYTHON[1]}+ required")

    for module_name, display in PACKAGES:
        installed, version = check_import(module_name)
        results["packages"][display] = {"installed": installed, "version": version}
        if not installed:
            failures.append(f"{display} not installed")

    for name, validation in BackendRegistry.list_backends().items():
        results["backends"][name] = {
            "valid": validation.is_valid,
            "errors": validation.errors,
            "warnings": validation.warnings,
            "info": validation.info,
        }

    config_path = ctx.config_path
    results["config"] = {
        "path": str(config_path) if config_path else None,
        **RuntimeConfigSchema.dump(ctx.config),
    }

    configured = results["backends"].get(ctx.config.backend)
    if configured is None or not configured["valid"]:
        failures.append(f"Configured backend '{ctx.config.backend}' is unavailable")

    results["ok"] = not failures
    results["failures"] = failures

    if as_json:
        click.echo(json.dumps(results, indent=2, default=str))
    else:
        console.print("\n[bold]smserve doctor[/bold]\n")

        table = Table(title="Packages", title_justify="left")
        table.add_column("Package")
        table.add_column("Status")
        table.add_column("Version")
        table.add_row("python", "[green]ok[/green]" if results["python"]["ok"] else "[red]too old[/red]", results["python"]["version"])
        for display, info in results["packages"].items():
            status = "[green]installed[/green]" if info["installed"] else "[red]missing[/red]"
            table.add_row(display, status, info["version"] or "-")
        console.print(table)

        table = Table(title="Backends", title_justify="left")
        table.add_column("Backend")
        table.add_column("Status")
        table.add_column("Notes")
        for name, info in results["backends"].items():
            status = "[green]available[/green]" if info["valid"] else "[red]unavailable[/red]"
            notes = "; ".join(info["errors"] + info["warnings"]) or "-"
            table.add_row(name, status, notes)
        console.print(table)

        console.print(f"\nConfig: {results['config']['path'] or 'defaults'}")
        console.print(f"  backend: {ctx.config.backend}")
        console.print(f"  tags: {', '.join(ctx.config.tags)}")
        console.print(f"  signature: {ctx.config.signature}\n")

        for failure in failures:
            console.print(f"[red]✗ {failure}[/red]")
        if not failures:
            console.print("[bold green]✓ Environment ready[/bold green]\n")

    if failures and not soft:
        sys.exit(1)
