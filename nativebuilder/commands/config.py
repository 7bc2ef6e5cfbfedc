import click
import dataclasses
import json
import os
from typing import Callable, Optional, Tuple
from .. import config as config_module
from ..cli_logger import logger
from ..decorators import handle_exceptions
from ..errors import UnsupportedConfigurationError
from ..platforms import parse_platform

_NO_CONFIG = "Error: No nativebuilder.toml found. Please run 'nativebuilder init' first."


def _as_list(value):
    return [v.strip() for v in value.split(",") if v.strip()]


def _positive_int(value):
    number = int(value)
    if number < 1:
        raise ValueError("must be at least 1")
    return number


def _as_pinned_builds(value):
    """``"14.28=29333,14.29=30133"`` -> ``{"14.28": 29333, "14.29": 30133}``"""
    pinned = {}
    for item in _as_list(value):
        major_minor, sep, build = item.partition("=")
        if not sep:
            raise ValueError(f"expected major.minor=build, got '{item}'")
        pinned[major_minor.strip()] = int(build)
    return pinned


# key -> (ProjectSettings attribute or None, converter)
_SECTION_KEYS = {
    "project": {
        "component": ("component", str),
        "license_file": ("license_file", str),
        "build_root": ("build_root", str),
        "install_root": ("install_root", str),
        "artifact_root": ("artifact_root", str),
        "archive_extension": ("archive_extension", str),
        "archiver": ("archiver", str),
        "jobs": ("jobs", _positive_int),
        "manifest": ("manifest", str),
        "sources": ("sources", _as_list),
        "headers": ("headers", str),
    },
    "configure": {
        "script": ("configure_script", str),
        "version_header": ("version_header", str),
        "descriptor_dir": ("descriptor_dir", str),
        "descriptors": ("descriptors", _as_list),
    },
    "catalog": {
        "index_url": (None, str),
    },
}

_TOOLCHAIN_KEYS = {
    "toolset_artifact": str,
    "secondary_artifact": str,
    "sdk_version": str,
    "pinned_builds": _as_pinned_builds,
}


@dataclasses.dataclass(frozen=True)
class _Setting:
    path: Tuple[str, ...]
    convert: Callable[[str], object]
    effective: Optional[Callable[[config_module.ProjectSettings], object]] = None


def _resolve_key(key):
    """Map a dotted key to where it lives in nativebuilder.toml and how to read it."""
    parts = key.split(".")
    if parts[0] == "toolchains" and len(parts) == 3 and parts[2] in _TOOLCHAIN_KEYS:
        platform = parse_platform(parts[1])
        field = parts[2]
        return _Setting(
            path=("toolchains", platform.value, field),
            convert=_TOOLCHAIN_KEYS[field],
            effective=lambda settings: getattr(settings.toolchain(platform), field),
        )
    if len(parts) == 2 and parts[1] in _SECTION_KEYS.get(parts[0], {}):
        attribute, convert = _SECTION_KEYS[parts[0]][parts[1]]
        effective = (lambda settings: getattr(settings, attribute)) if attribute else None
        return _Setting(path=tuple(parts), convert=convert, effective=effective)

    known = [f"{section}.{name}" for section, names in _SECTION_KEYS.items() for name in names]
    known += [f"toolchains.<platform>.{name}" for name in _TOOLCHAIN_KEYS]
    raise UnsupportedConfigurationError(f"Unsupported configuration key '{key}'. Known keys: {', '.join(known)}")


def _format(value):
    if value is None:
        return ""
    if isinstance(value, dict):
        return ",".join(f"{k}={v}" for k, v in value.items())
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def _lookup(conf, path):
    value = conf
    for part in path:
        if not isinstance(value, dict) or part not in value:
            return None, False
        value = value[part]
    return value, True


def _load(ctx):
    conf = config_module.load_config(path=ctx.obj["path"])
    if not conf:
        logger.error(_NO_CONFIG)
    return conf


@click.group()
@click.pass_context
def config(ctx):
    """Inspect or change settings in nativebuilder.toml."""
    pass

@config.command()
@click.pass_context
def view(ctx):
    """Print nativebuilder.toml as written."""
    if not _load(ctx):
        return
    with open(os.path.join(ctx.obj["path"], config_module.CONFIG_FILE), "r") as f:
        click.echo(f.read())

@config.command(name="list")
@click.option("--effective", is_flag=True, help="Show the project settings after defaults are applied.")
@click.pass_context
@handle_exceptions
def list_config(ctx, effective):
    """List configuration values as JSON."""
    conf = _load(ctx)
    if not conf:
        return False
    if effective:
        settings = config_module.ProjectSettings.from_config(conf)
        click.echo(json.dumps(dataclasses.asdict(settings), indent=4))
    else:
        click.echo(json.dumps(conf, indent=4))
    return True

@config.command()
@click.argument("key")
@click.pass_context
@handle_exceptions
def get(ctx, key):
    """Print a value, e.g. 'project.jobs'. Unset known keys print their default."""
    conf = _load(ctx)
    if not conf:
        return False

    value, found = _lookup(conf, key.split("."))
    if found:
        click.echo(json.dumps(value, indent=4) if isinstance(value, dict) else _format(value))
        return True

    setting = _resolve_key(key)
    value, found = _lookup(conf, setting.path)
    if found:
        click.echo(_format(value))
    elif setting.effective is not None:
        click.echo(_format(setting.effective(config_module.ProjectSettings.from_config(conf))))
    else:
        logger.error(f"Error: Key '{key}' is not set in nativebuilder.toml")
        return False
    return True

@config.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_context
@handle_exceptions
def set_value(ctx, key, value):
    """Set a known key, converting VALUE to the key's type.

    Lists are comma separated; pinned builds are written as
    '14.28=29333,14.29=30133'.
    """
    conf = _load(ctx)
    if not conf:
        return False

    setting = _resolve_key(key)
    try:
        converted = setting.convert(value)
    except ValueError as e:
        raise UnsupportedConfigurationError(f"Unsupported value '{value}' for {key}: {e}") from None

    table = conf
    for part in setting.path[:-1]:
        table = table.setdefault(part, {})
    table[setting.path[-1]] = converted

    try:
        config_module.ProjectSettings.from_config(conf)
    except ValueError as e:
        raise UnsupportedConfigurationError(f"Unsupported value '{value}' for {key}: {e}") from None

    if config_module.save_config(conf, path=ctx.obj["path"]):
        logger.info(f"Set '{'.'.join(setting.path)}' to {converted!r}")
        return True
    return False

@config.command()
@click.argument("key")
@click.pass_context
@handle_exceptions
def unset(ctx, key):
    """Remove a key; known keys fall back to their default."""
    conf = _load(ctx)
    if not conf:
        return False

    path = key.split(".")
    if path[0] == "toolchains" and len(path) > 1:
        path[1] = parse_platform(path[1]).value
    parents = [conf]
    for part in path[:-1]:
        child = parents[-1].get(part) if isinstance(parents[-1], dict) else None
        if not isinstance(child, dict):
            logger.error(f"Error: Key '{key}' not found in nativebuilder.toml")
            return False
        parents.append(child)
    if path[-1] not in parents[-1]:
        logger.error(f"Error: Key '{key}' not found in nativebuilder.toml")
        return False
    del parents[-1][path[-1]]

    # Drop tables the removal left empty.
    for depth in range(len(parents) - 1, 0, -1):
        if parents[depth]:
            break
        del parents[depth - 1][path[depth - 1]]

    if config_module.save_config(conf, path=ctx.obj["path"]):
        logger.info(f"Unset '{key}'")
        return True
    return False
