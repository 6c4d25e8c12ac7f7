"""
smserve CLI entry point.
"""

import click

from .. import __version__
from ..core.errors import SMServeError
from .context import CLIContext, handle_error
from .commands.doctor import doctor
from .commands.inspect import inspect
from .commands.run import run


@click.group()
@click.version_option(version=__version__, prog_name="smserve")
@click.option("--config", type=click.Path(exists=True, dir_okay=False), help="Path to config file")
@click.option("--verbose", is_flag=True, help="Enable verbose debugging output")
@click.pass_context
def cli(ctx, config, verbose):
    """
    smserve - inspect and run TensorFlow SavedModel signatures.
    """
    try:
        ctx.obj = CLIContext(config, verbose)
    except SMServeError as e:
        handle_error(e)


cli.add_command(inspect)
cli.add_command(run)
cli.add_command(doctor)


if __name__ == "__main__":
    cli()
