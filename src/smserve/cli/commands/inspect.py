"""
Inspect command: show the MetaGraphs and signatures of a SavedModel.
"""

import json

import click
from rich.table import Table

from ..context import console, handle_error
from ...core.errors import SMServeError
from ...loaders.inspector import get_meta_graphs_from_saved_model


def _format_shape(shape) -> str:
    if shape is None:
        return "unknown"
    return "[" + ", ".join(str(d) for d in shape) + "]"


@click.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Machine-readable JSON output")
def inspect(path: str, as_json: bool):
    """
    Show MetaGraph tags and signature tensors of a SavedModel.

    Examples:
        smserve inspect exported/1
        smserve inspect exported/1 --json
    """
    try:
        meta_graphs = get_meta_graphs_from_saved_model(path)
    except SMServeError as e:
        handle_error(e, as_json)
        return

    if as_json:
        click.echo(json.dumps([mg.to_dict() for mg in meta_graphs], indent=2))
        return

    console.print(f"\n[bold]SavedModel[/bold] {path}")
    console.print(f"MetaGraphs: {len(meta_graphs)}\n")

    for meta_graph in meta_graphs:
        tags = ", ".join(meta_graph.tag_list or sorted(meta_graph.tags))
        console.print(f"[bold cyan]MetaGraph[/bold cyan] tags: {tags}")

        if not meta_graph.signature_defs:
            console.print("  [dim]no signatures[/dim]\n")
            continue

        for name, entry in meta_graph.signature_defs.items():
            table = Table(title=f"signature '{name}'", title_justify="left")
            table.add_column("Kind")
            table.add_column("Key")
            table.add_column("Tensor")
            table.add_column("DType")
            table.add_column("TF DType", style="dim")
            table.add_column("Shape")

            for kind, tensors in (("input", entry.inputs), ("output", entry.outputs)):
                for key, info in tensors.items():
                    table.add_row(
                        kind,
                        key,
                        info.name,
                        info.dtype.value,
                        info.tf_dtype,
                        _format_shape(info.shape),
                    )

            console.print(table)
        console.print()
