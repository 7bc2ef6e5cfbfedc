import click
from .cli_logger import logger
from .commands import *


@click.group()
@click.option("--path", "-p", default=".", help="Path to the project directory.")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output on the console.")
@click.pass_context
def cli(ctx, path, verbose):
    """NativeBuilder: plan native library builds for every platform and architecture."""
    ctx.obj = {"path": path}
    if verbose:
        logger.verbose = True

cli.add_command(init)
cli.add_command(plan)
cli.add_command(targets)
cli.add_command(list_sdks)
cli.add_command(doctor)
cli.add_command(config)
cli.add_command(clean)
cli.add_command(log)
cli.add_command(version)

if __name__ == '__main__':
    try:
        cli()
    except Exception as e:
        click.echo(f"An unexpected error occurred: {e}", err=True)
        click.echo("Please report this issue to the NativeBuilder developers.", err=True)
