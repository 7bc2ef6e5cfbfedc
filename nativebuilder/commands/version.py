import click
import importlib.metadata
from .. import __version__
from ..cli_logger import logger

@click.command()
def version():
    """Print the version of the NativeBuilder tool."""
    try:
        ver = importlib.metadata.version("nativebuilder")
    except importlib.metadata.PackageNotFoundError:
        logger.warning("NativeBuilder is not installed as a package; reporting the source version.")
        ver = __version__
    logger.info(f"NativeBuilder version {ver}")
