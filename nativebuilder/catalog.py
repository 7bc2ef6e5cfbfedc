"""Toolchain/SDK candidates known to a planning run.

A catalog is a snapshot: it is built once from ``[[sdks]]`` entries in
nativebuilder.toml (plus an optional remote index of downloadable SDKs) and
is never modified afterwards. Candidates are grouped into one locator per
(platform, architecture) pair, in enumeration order.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import requests
from packaging.version import InvalidVersion, Version

from .cli_logger import logger
from .errors import CatalogError, NativeBuilderError
from .platforms import Architecture, Platform, parse_architecture, parse_platform


class Origin(enum.IntEnum):
    # Sort order: local installs rank before downloadable ones.
    LOCAL = 0
    DOWNLOADABLE = 1

    @property
    def label(self):
        return "local" if self is Origin.LOCAL else "online"


@dataclass(frozen=True)
class WindowsSdkLayout:
    bin_paths: Tuple[str, ...] = ()
    include_paths: Tuple[str, ...] = ()
    library_paths: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MacSdkLayout:
    bin_path: str = ""
    sysroot: str = ""


@dataclass(frozen=True)
class LinuxSdkLayout:
    sysroot: str = ""
    gcc_toolchain: str = ""
    tools_path: str = ""
    target_triple: str = "x86_64-glibc2.17-linux-gnu"


SdkLayout = Union[WindowsSdkLayout, MacSdkLayout, LinuxSdkLayout]

_LAYOUT_PLATFORMS = {
    WindowsSdkLayout: Platform.WINDOWS,
    MacSdkLayout: Platform.MACOS,
    LinuxSdkLayout: Platform.LINUX,
}


@dataclass(frozen=True)
class Candidate:
    name: str
    toolset_version: Version
    architecture: Architecture
    origin: Origin
    layout: SdkLayout
    secondary_version: Optional[Version] = None
    supported_on_host: bool = True
    is_placeholder: bool = False

    @property
    def platform(self) -> Platform:
        return _LAYOUT_PLATFORMS[type(self.layout)]

    @property
    def is_downloadable(self) -> bool:
        return self.origin is Origin.DOWNLOADABLE

    def __str__(self):
        text = f"{self.name} {self.toolset_version}"
        if self.secondary_version is not None:
            text += f" / {self.secondary_version}"
        return f"{text} ({self.origin.label})"


def make_placeholder(platform: Platform, architecture: Architecture) -> Candidate:
    """Inert candidate: safe to plan with, unusable at execution time."""
    layouts = {
        Platform.WINDOWS: WindowsSdkLayout,
        Platform.MACOS: MacSdkLayout,
        Platform.LINUX: LinuxSdkLayout,
    }
    return Candidate(
        name=f"no-sdk-{platform.value}-{architecture.value}",
        toolset_version=Version("0"),
        architecture=architecture,
        origin=Origin.LOCAL,
        layout=layouts[platform](),
        is_placeholder=True,
    )


@dataclass(frozen=True)
class SdkLocator:
    platform: Platform
    architecture: Architecture
    candidates: Tuple[Candidate, ...] = ()
    user_default: Optional[Candidate] = None
    placeholder: Candidate = None

    def __post_init__(self):
        if self.placeholder is None:
            object.__setattr__(self, "placeholder", make_placeholder(self.platform, self.architecture))

    @property
    def key(self) -> Tuple[str, str]:
        return (self.platform.value, self.architecture.value)

    @property
    def downloadable(self) -> Tuple[Candidate, ...]:
        return tuple(c for c in self.candidates if c.is_downloadable)

    @property
    def local(self) -> Tuple[Candidate, ...]:
        return tuple(c for c in self.candidates if not c.is_downloadable)

    def user_default_or_placeholder(self) -> Candidate:
        return self.user_default or self.placeholder


@dataclass(frozen=True)
class Catalog:
    locators: Dict[Tuple[Platform, Architecture], SdkLocator] = field(default_factory=dict)

    def locator_for(self, platform: Platform, architecture: Architecture) -> SdkLocator:
        locator = self.locators.get((platform, architecture))
        if locator is None:
            # Nothing enumerated for this target: resolution falls back.
            return SdkLocator(platform=platform, architecture=architecture)
        return locator

    def all_candidates(self) -> List[Candidate]:
        result = []
        for locator in self.locators.values():
            result.extend(locator.candidates)
        return result


def _parse_version(value, entry_name, field_name) -> Optional[Version]:
    if value is None or str(value).strip() == "":
        return None
    try:
        return Version(str(value).strip())
    except InvalidVersion:
        raise CatalogError(f"SDK '{entry_name}' has an invalid {field_name} '{value}'") from None


def _as_paths(value) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value)


def _layout_from_entry(platform: Platform, entry: Mapping) -> SdkLayout:
    if platform is Platform.WINDOWS:
        return WindowsSdkLayout(
            bin_paths=_as_paths(entry.get("bin_paths")),
            include_paths=_as_paths(entry.get("include_paths")),
            library_paths=_as_paths(entry.get("library_paths")),
        )
    if platform is Platform.MACOS:
        return MacSdkLayout(
            bin_path=str(entry.get("bin_path", "")),
            sysroot=str(entry.get("sysroot", "")),
        )
    if platform is Platform.LINUX:
        return LinuxSdkLayout(
            sysroot=str(entry.get("sysroot", "")),
            gcc_toolchain=str(entry.get("gcc_toolchain", "")),
            tools_path=str(entry.get("tools_path", "")),
            target_triple=str(entry.get("target_triple", LinuxSdkLayout.target_triple)),
        )
    raise CatalogError(f"Unsupported platform {platform} for an SDK layout")


def candidate_from_entry(entry: Mapping, origin: Optional[Origin] = None) -> Candidate:
    """Build a Candidate from one ``[[sdks]]`` table."""
    if not isinstance(entry, Mapping):
        raise CatalogError(f"SDK entry must be a table, got {type(entry).__name__}")
    name = str(entry.get("name", "")).strip()
    if not name:
        raise CatalogError("SDK entry is missing a 'name'")
    for required in ("platform", "architecture", "toolset_version"):
        if required not in entry:
            raise CatalogError(f"SDK '{name}' is missing '{required}'")

    platform = parse_platform(entry["platform"])
    architecture = parse_architecture(entry["architecture"])
    if origin is None:
        raw_origin = str(entry.get("origin", "local")).strip().lower()
        if raw_origin == "local":
            origin = Origin.LOCAL
        elif raw_origin in ("downloadable", "online"):
            origin = Origin.DOWNLOADABLE
        else:
            raise CatalogError(f"SDK '{name}' has an unknown origin '{raw_origin}'")

    return Candidate(
        name=name,
        toolset_version=_parse_version(entry["toolset_version"], name, "toolset_version"),
        secondary_version=_parse_version(entry.get("secondary_version"), name, "secondary_version"),
        architecture=architecture,
        origin=origin,
        layout=_layout_from_entry(platform, entry),
        supported_on_host=bool(entry.get("supported_on_host", True)),
    )


def build_catalog(entries: Iterable[Mapping], downloadable_entries: Iterable[Mapping] = ()) -> Catalog:
    """Group candidates per (platform, architecture), keeping enumeration order."""
    grouped: Dict[Tuple[Platform, Architecture], List[Candidate]] = {}
    defaults: Dict[Tuple[Platform, Architecture], Candidate] = {}

    def _add(entry, origin=None):
        candidate = candidate_from_entry(entry, origin=origin)
        key = (candidate.platform, candidate.architecture)
        if entry.get("default"):
            if key in defaults:
                raise CatalogError(
                    f"More than one default SDK for {key[0].value}/{key[1].value}: "
                    f"'{defaults[key].name}' and '{candidate.name}'"
                )
            defaults[key] = candidate
        grouped.setdefault(key, []).append(candidate)

    for entry in entries:
        _add(entry)
    # A bad remote entry only loses that entry; local entries stay fatal.
    for entry in downloadable_entries:
        try:
            _add(entry, origin=Origin.DOWNLOADABLE)
        except NativeBuilderError as e:
            logger.error(f"Skipping downloadable SDK '{entry.get('name', '<unnamed>')}': {e}")

    locators = {
        key: SdkLocator(
            platform=key[0],
            architecture=key[1],
            candidates=tuple(candidates),
            user_default=defaults.get(key),
        )
        for key, candidates in grouped.items()
    }
    return Catalog(locators=locators)


def fetch_downloadable_index(url, timeout=30):
    """Fetch the list of downloadable SDK descriptions from a JSON index."""
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
        index = resp.json()
    except requests.exceptions.RequestException as e:
        logger.error(f"Error fetching downloadable SDK index from {url}: {e}")
        return []
    except ValueError:
        logger.error(f"Error parsing downloadable SDK index from {url}.")
        return []

    if isinstance(index, Mapping):
        index = index.get("sdks", [])
    if not isinstance(index, list):
        logger.error(f"Downloadable SDK index at {url} does not contain a list of SDKs.")
        return []
    return [entry for entry in index if isinstance(entry, Mapping)]


def load_catalog(conf) -> Catalog:
    """Build the catalog described by a loaded nativebuilder.toml."""
    entries = conf.get("sdks", [])
    downloadable = []
    index_url = conf.get("catalog", {}).get("index_url")
    if index_url:
        logger.info(f"Fetching downloadable SDK index from {index_url}")
        downloadable = fetch_downloadable_index(index_url)
    return build_catalog(entries, downloadable)
