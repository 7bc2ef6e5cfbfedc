import click
import os
import sys
import toml
from .. import config as config_module
from ..cli_logger import logger


def _get_default_config():
    return {
        "project": {
            "component": "tbb",
            "license_file": "LICENSE",
            "build_root": "build",
            "install_root": "builds",
            "artifact_root": "artifacts/for-stevedore",
            "archive_extension": "7z",
            "archiver": "7z",
            "manifest": config_module.MANIFEST_FILE,
            "sources": ["src", "include", "Makefile"],
            "headers": "include",
        },
        "configure": {
            "script": "cmake/tbb_config_installer.cmake",
            "version_header": "include/tbb/tbb_stddef.h",
            "descriptor_dir": "cmake",
            "descriptors": ["TBBConfig.cmake", "TBBConfigVersion.cmake"],
        },
        "toolchains": {
            "windows": {
                "toolset_artifact": "vs2022-toolchain",
                "secondary_artifact": "win10sdk",
                "pinned_builds": {"14.28": 29333},
            },
            "macos": {
                "sdk_version": "11.1",
            },
        },
        "catalog": {
            "index_url": "",
        },
        "sdks": [],
    }


def _prompt_for_input(prompt, default, validation_func=None, **kwargs):
    while True:
        value = click.prompt(prompt, default=default, **kwargs)
        if validation_func is None or validation_func(value):
            return value
        else:
            logger.warning(f"Invalid input for {prompt}. Please try again.")


def _prompt_for_list_input(prompt, default):
    while True:
        value_str = click.prompt(prompt, default=default)
        if not value_str.strip():
            return []
        values = [v.strip() for v in value_str.split(',') if v.strip()]
        if values:
            return values
        else:
            logger.warning(f"Invalid input for {prompt}. Please provide a comma-separated list of values.")


@click.command()
@click.option('--non-interactive', is_flag=True, help='Run in non-interactive mode using default values.')
@click.option('--config-file', type=click.Path(exists=True), help='Path to a TOML file with configuration values.')
@click.pass_context
def init(ctx, non_interactive, config_file):
    """Initialize a new NativeBuilder project."""
    logger.info("Initializing a new NativeBuilder project.")

    conf = {}
    if config_file:
        logger.info(f"Loading configuration from {config_file}")
        with open(config_file, 'r') as f:
            conf = toml.load(f)
    elif non_interactive:
        logger.info("Running in non-interactive mode with default values.")
        conf = _get_default_config()
    else:
        logger.info("Please provide the following details:")
        conf = _get_default_config()
        try:
            project = conf["project"]
            project["component"] = _prompt_for_input("Component name (e.g., tbb)", "tbb", validation_func=lambda v: bool(v.strip()))
            project["license_file"] = _prompt_for_input("License file", "LICENSE")
            project["sources"] = _prompt_for_list_input("Compile inputs (comma-separated)", "src,include,Makefile")
            project["archive_extension"] = _prompt_for_input("Archive format", "7z", type=click.Choice(['7z', 'zip']))
            conf["configure"]["script"] = _prompt_for_input("CMake descriptor script", "cmake/tbb_config_installer.cmake")

            windows = conf["toolchains"]["windows"]
            windows["toolset_artifact"] = _prompt_for_input("Manifest entry of the MSVC toolchain", "vs2022-toolchain")
            windows["secondary_artifact"] = _prompt_for_input("Manifest entry of the Windows 10 SDK", "win10sdk")
            conf["toolchains"]["macos"]["sdk_version"] = _prompt_for_input("macOS SDK version", "11.1")
            conf["catalog"]["index_url"] = _prompt_for_input("URL of a downloadable SDK index (leave empty for none)", "")
        except click.Abort:
            logger.warning("\nProject initialization aborted by user.")
            return

    if config_module.save_config(conf, path=ctx.obj["path"]):
        logger.success(f"NativeBuilder project initialized successfully! Configuration saved to {os.path.join(ctx.obj['path'], config_module.CONFIG_FILE)}")
        logger.info("Next steps: Describe your SDKs under [[sdks]] and run 'nativebuilder plan'.")
    else:
        logger.error("Project initialization failed.")
        sys.exit(1)
