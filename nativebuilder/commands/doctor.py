import click
import os
import shutil
from .. import config as config_module
from .. import planner
from ..cli_logger import logger
from ..decorators import handle_exceptions
from ..platforms import family_for
from ..sdks import Resolution, constraint_for, host_targets, resolve

_REQUIRED_TOOLS = {
    "windows": ["make", "cmake", "robocopy.bat"],
    "posix": ["make", "cmake", "find", "cp"],
}

def check_environment(context, path="."):
    """Check that every host configuration resolves and the build tools exist."""
    all_ok = True
    settings = context.settings

    for platform, architecture in host_targets(context):
        constraint = constraint_for(context, platform)
        locator = context.catalog.locator_for(platform, architecture)
        target = f"{platform.value}/{architecture.value}"
        if constraint.is_empty:
            logger.info(f"{target}: no version constraint, the default SDK or else the newest local one is used.")
        result = resolve(locator.candidates, constraint, preferred=locator.user_default)
        if isinstance(result, Resolution):
            logger.info(f"{target}: {result.candidate}")
            continue

        all_ok = False
        if locator.user_default is not None:
            logger.warning(f"{target}: no SDK matches, the default {locator.user_default} would be used.")
        else:
            logger.warning(f"{target}: no usable SDK.")
        for line in result.summary.splitlines():
            logger.step_info(line, indent=2)

    family = family_for(context.host_platform)
    for tool in _REQUIRED_TOOLS[family.install_variant] + [settings.archiver]:
        if shutil.which(tool) is None:
            logger.warning(f"'{tool}' was not found on PATH.")
            all_ok = False

    for required in (settings.license_file, settings.configure_script):
        if not os.path.exists(os.path.join(path, required)):
            logger.warning(f"'{required}' not found in the project directory.")
            all_ok = False

    return all_ok

@click.command()
@click.pass_context
@handle_exceptions
def doctor(ctx):
    """Check that SDKs resolve and required build tools are installed."""
    logger.info("Running environment check...")
    conf = config_module.load_config(path=ctx.obj["path"])
    if not conf:
        logger.error("Error: No nativebuilder.toml found. Please run 'nativebuilder init' first.")
        return False
    context = planner.create_context(conf, path=ctx.obj["path"])
    if check_environment(context, path=ctx.obj["path"]):
        logger.success("Environment check completed successfully.")
        return True
    logger.error("Environment check found issues. Please review the warnings/errors above.")
    return False
