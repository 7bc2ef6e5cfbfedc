import click
from .. import config as config_module
from ..catalog import load_catalog
from ..cli_logger import logger
from ..decorators import handle_exceptions


def _describe(candidate, locator):
    text = f"- {candidate}"
    if candidate == locator.user_default:
        text += " [default]"
    if not candidate.supported_on_host:
        text += " [not supported on this host]"
    return text


@click.command(name="list-sdks")
@click.pass_context
@handle_exceptions
def list_sdks(ctx):
    """List every SDK candidate in the catalog, local installs first."""
    logger.info("Listing SDK candidates...")
    conf = config_module.load_config(path=ctx.obj["path"])
    if not conf:
        logger.error("Error: No nativebuilder.toml found. Please run 'nativebuilder init' first.")
        return False

    catalog = load_catalog(conf)
    if not catalog.all_candidates():
        logger.info("No SDKs described yet. Add [[sdks]] entries to nativebuilder.toml.")
        return True

    for platform, architecture in sorted(catalog.locators, key=lambda key: (key[0].value, key[1].value)):
        locator = catalog.locators[(platform, architecture)]
        logger.info(f"{platform.value} / {architecture.value}:")
        for label, candidates in (("Local", locator.local), ("Downloadable", locator.downloadable)):
            if not candidates:
                continue
            logger.step_info(f"{label}:", indent=2)
            for candidate in candidates:
                logger.step_info(_describe(candidate, locator), indent=4)
    return True
