"""Per-platform-family tables: naming, separators, flags and host targets."""
from __future__ import annotations

import enum
import platform as host
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .errors import UnsupportedConfigurationError


class Platform(enum.Enum):
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"


class Architecture(enum.Enum):
    X64 = "x64"
    ARM64 = "arm64"


_PLATFORM_ALIASES = {
    "windows": Platform.WINDOWS,
    "win": Platform.WINDOWS,
    "win32": Platform.WINDOWS,
    "macos": Platform.MACOS,
    "mac": Platform.MACOS,
    "osx": Platform.MACOS,
    "darwin": Platform.MACOS,
    "linux": Platform.LINUX,
}

_ARCHITECTURE_ALIASES = {
    "x64": Architecture.X64,
    "x86_64": Architecture.X64,
    "amd64": Architecture.X64,
    "intel64": Architecture.X64,
    "arm64": Architecture.ARM64,
    "aarch64": Architecture.ARM64,
}

# Names the external build driver (make) understands for arch=
_DRIVER_ARCH_NAMES = {
    Architecture.X64: "intel64",
    Architecture.ARM64: "arm64",
}


@dataclass(frozen=True)
class PlatformFamily:
    platform: Platform
    system_name: str
    path_separator: str
    compiler: str
    install_variant: str
    host_architectures: Tuple[Architecture, ...]
    min_os_versions: Dict[Architecture, str] = field(default_factory=dict)
    min_os_flag: Optional[str] = None
    compile_flags: Tuple[str, ...] = ()
    link_flags: Tuple[str, ...] = ()
    sdk_label: str = "SDK"
    toolset_label: str = "toolset"
    secondary_label: str = "secondary SDK"

    @property
    def installs_bin(self):
        return self.install_variant == "windows"

    def min_os_version(self, architecture):
        return self.min_os_versions.get(architecture)


PLATFORM_FAMILIES: Dict[Platform, PlatformFamily] = {
    Platform.WINDOWS: PlatformFamily(
        platform=Platform.WINDOWS,
        system_name="Windows",
        path_separator=";",
        compiler="cl",
        install_variant="windows",
        host_architectures=(Architecture.X64, Architecture.ARM64),
        # Windows 10 1909 is build 18363, which has no API target of its own.
        min_os_versions={Architecture.X64: "10.0.18362", Architecture.ARM64: "10.0.18362"},
        compile_flags=("/D_ITERATOR_DEBUG_LEVEL=0",),
        sdk_label="Visual Studio SDK",
        toolset_label="MSVC toolset",
        secondary_label="Win10 SDK",
    ),
    Platform.MACOS: PlatformFamily(
        platform=Platform.MACOS,
        system_name="Darwin",
        path_separator=":",
        compiler="clang",
        install_variant="posix",
        host_architectures=(Architecture.X64, Architecture.ARM64),
        min_os_versions={Architecture.X64: "10.14", Architecture.ARM64: "11.0"},
        min_os_flag="-mmacosx-version-min={version}",
        sdk_label="Mac SDK",
        toolset_label="macOS SDK",
        secondary_label="Xcode",
    ),
    Platform.LINUX: PlatformFamily(
        platform=Platform.LINUX,
        system_name="Linux",
        path_separator=":",
        compiler="clang",
        install_variant="posix",
        host_architectures=(Architecture.X64,),
        compile_flags=("-D_GLIBCXX_USE_CXX11_ABI=0",),
        link_flags=("-fuse-ld=lld", "-static-libstdc++"),
        sdk_label="Linux Clang SDK",
        toolset_label="Clang",
        secondary_label="sysroot",
    ),
}


def family_for(platform):
    try:
        return PLATFORM_FAMILIES[platform]
    except KeyError:
        raise UnsupportedConfigurationError(f"Unsupported platform {platform}") from None


def parse_platform(value):
    if isinstance(value, Platform):
        return value
    try:
        return _PLATFORM_ALIASES[str(value).strip().lower()]
    except KeyError:
        raise UnsupportedConfigurationError(f"Unsupported platform '{value}'") from None


def parse_architecture(value):
    if isinstance(value, Architecture):
        return value
    try:
        return _ARCHITECTURE_ALIASES[str(value).strip().lower()]
    except KeyError:
        raise UnsupportedConfigurationError(f"Unsupported architecture '{value}'") from None


def arch_name_for(architecture):
    """Return the build driver's name for an architecture (``arch=`` argument)."""
    try:
        return _DRIVER_ARCH_NAMES[architecture]
    except KeyError:
        raise UnsupportedConfigurationError(f"Unsupported architecture {architecture} for arch_name_for") from None


def compiler_for(platform):
    return family_for(platform).compiler


def system_name_for(platform):
    return family_for(platform).system_name


def detect_host_platform(system_name=None):
    """Map ``platform.system()`` (or the given name) to a Platform."""
    name = system_name if system_name is not None else host.system()
    try:
        return parse_platform(name)
    except UnsupportedConfigurationError:
        raise UnsupportedConfigurationError(f"Unsupported host platform '{name}'") from None
