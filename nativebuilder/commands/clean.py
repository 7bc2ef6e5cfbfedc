import click
import shutil
import os
import sys
from .. import config as config_module
from ..cli_logger import logger
from .plan import GRAPH_FILE


@click.command()
@click.pass_context
def clean(ctx):
    """Remove build directories, installed trees, artifacts and the planned graph."""
    logger.info("Cleaning build directories, install trees and artifacts...")
    path = ctx.obj["path"]
    settings = config_module.ProjectSettings.from_config(config_module.load_config(path=path))

    dirs = [settings.build_root, settings.install_root, settings.artifact_root]
    files = [GRAPH_FILE]

    items_removed = 0
    for name in dirs:
        target = os.path.join(path, name)
        if not os.path.isdir(target):
            continue
        logger.info(f"Attempting to remove directory {target}...")
        try:
            shutil.rmtree(target)
            logger.success(f"Removed directory {target}")
            items_removed += 1
        except OSError as e:
            logger.error(f"Error removing directory {target}: {e}")
            logger.info("Please check file permissions and ensure the directory is not in use.")

    for name in files:
        target = os.path.join(path, name)
        if not os.path.isfile(target):
            continue
        logger.info(f"Attempting to remove file {target}...")
        try:
            os.remove(target)
            logger.success(f"Removed file {target}")
            items_removed += 1
        except OSError as e:
            logger.error(f"Error removing file {target}: {e}")
            logger.exception(*sys.exc_info())

    if items_removed > 0:
        logger.success(f"Cleaning complete. Removed {items_removed} items.")
    else:
        logger.info("Project is already clean.")
