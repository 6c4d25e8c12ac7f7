"""
Run command: execute a SavedModel signature on .npy inputs.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Tuple

import click
import numpy as np
from rich.table import Table

from ..context import CLIContext, console, handle_error, pass_context
from ...backends import BackendRegistry
from ...core.errors import SMServeError
from ...core.types import SignatureDefEntry
from ...model.saved_model import load_saved_model
from ...sessions.registry import SessionRegistry

logger = logging.getLogger(__name__)


def _parse_inputs(specs: Tuple[str, ...]) -> Dict[str, np.ndarray]:
    inputs = {}
    for spec in specs:
        key, sep, file_name = spec.partition("=")
        if not sep or not key or not file_name:
            raise click.BadParameter(
                f"Expected KEY=FILE.npy, got '{spec}'", param_hint="--input"
            )
        file_path = Path(file_name).expanduser()
        if not file_path.is_file():
            raise click.BadParameter(
                f"Input file does not exist: {file_path}", param_hint="--input"
            )
        inputs[key] = np.load(file_path, allow_pickle=False)
    return inputs


def _cast_inputs(inputs: Dict[str, np.ndarray], signature: SignatureDefEntry) -> Dict[str, np.ndarray]:
    """Cast each array to the numpy dtype of its signature input. Unknown keys pass through."""
    cast = {}
    for key, value in inputs.items():
        info = signature.inputs.get(key)
        if info is None:
            cast[key] = value
            continue
        cast[key] = value.astype(info.dtype.numpy_dtype, copy=False)
        if cast[key].dtype != value.dtype:
            logger.debug("Cast input %s from %s to %s", key, value.dtype, cast[key].dtype)
    return cast


@click.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--input", "-i", "input_specs", multiple=True, required=True, help="Signature input as KEY=FILE.npy")
@click.option("--tags", default=None, help="Comma-separated MetaGraph tags (default from config)")
@click.option("--signature", default=None, help="Signature name (default from config)")
@click.option("--output-dir", type=click.Path(file_okay=False), default=None, help="Save outputs as KEY.npy")
@click.option("--json", "as_json", is_flag=True, help="Machine-readable JSON output")
@pass_context
def run(ctx: CLIContext, path, input_specs, tags, signature, output_dir, as_json):
    """
    Run a signature of a SavedModel with named .npy inputs.

    Examples:
        smserve run exported/1 -i x=batch.npy
        smserve run exported/1 -i x=batch.npy --tags serve,gpu --output-dir out/
    """
    inputs = _parse_inputs(input_specs)
    tag_list = [t.strip() for t in tags.split(",") if t.strip()] if tags else list(ctx.config.tags)
    signature = signature or ctx.config.signature

    try:
        registry = SessionRegistry(BackendRegistry.get_backend(ctx.config.backend))
    except SMServeError as e:
        handle_error(e, as_json)
        return

    try:
        with load_saved_model(path, tag_list, signature, registry=registry) as model:
            outputs = model.predict(_cast_inputs(inputs, model.signature))
    except SMServeError as e:
        handle_error(e, as_json)
        return
    finally:
        registry.shutdown()

    saved = {}
    if output_dir:
        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)
        for key, value in outputs.items():
            target = out / f"{key}.npy"
            np.save(target, np.asarray(value), allow_pickle=False)
            saved[key] = str(target)

    if as_json:
        click.echo(json.dumps({
            key: {
                "shape": list(np.shape(value)),
                "dtype": str(np.asarray(value).dtype),
                "file": saved.get(key),
            }
            for key, value in outputs.items()
        }, indent=2))
        return

    table = Table(title=f"{signature} [{', '.join(tag_list)}]", title_justify="left")
    table.add_column("Output")
    table.add_column("Shape")
    table.add_column("DType")
    if saved:
        table.add_column("File", style="dim")

    for key, value in outputs.items():
        array = np.asarray(value)
        row = [key, str(list(array.shape)), str(array.dtype)]
        if saved:
            row.append(saved[key])
        table.add_row(*row)

    console.print()
    console.print(table)
    console.print()
