import functools
import click
import sys
from .cli_logger import logger
from .errors import ManifestLookupError, NativeBuilderError

def handle_exceptions(func):
    """A decorator to handle common exceptions for CLI commands."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.Abort:
            logger.warning("\nCommand aborted by user.")
        except ManifestLookupError as e:
            logger.error(f"Manifest error: {e}")
            logger.info("Add the missing entry to the version manifest or change [toolchains] in nativebuilder.toml.")
            sys.exit(1)
        except NativeBuilderError as e:
            logger.error(f"Configuration error: {e}")
            sys.exit(1)
        except FileNotFoundError as e:
            logger.error(f"Error: File not found - {e}")
            logger.exception(*sys.exc_info())
            sys.exit(1)
        except click.ClickException as e:
            logger.error(f"CLI Error: {e}")
            logger.exception(*sys.exc_info())
            sys.exit(1)
        except Exception as e:
            logger.error(f"\nAn unexpected error occurred: {e}")
            logger.exception(*sys.exc_info())
            sys.exit(1)
    return wrapper
