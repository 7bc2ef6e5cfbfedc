"""Compiler flags, process environment and SDK inputs for one configuration."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from .catalog import Candidate, LinuxSdkLayout, MacSdkLayout, WindowsSdkLayout
from .errors import UnsupportedConfigurationError
from .matrix import ConfigurationKey
from .platforms import Platform, PlatformFamily, family_for


@dataclass(frozen=True)
class PlatformEnvironment:
    inputs: Tuple[str, ...] = ()
    compile_flags: Tuple[str, ...] = ()
    link_flags: Tuple[str, ...] = ()
    min_os_flags: Tuple[str, ...] = ()
    environment: Dict[str, str] = field(default_factory=dict)

    def flag_arguments(self) -> List[str]:
        """``CXXFLAGS=...`` / ``LDFLAGS=...`` arguments for the build driver."""
        arguments = [f"CXXFLAGS={' '.join(self.compile_flags)}"]
        if self.link_flags:
            arguments.append(f"LDFLAGS={' '.join(self.link_flags)}")
        return arguments


def native_path(path):
    if not path:
        return ""
    return os.path.normpath(os.path.abspath(path))


def in_quotes(path):
    return f'"{native_path(path)}"'


def _join(family, paths):
    return family.path_separator.join(p for p in paths if p)


def _windows(layout: WindowsSdkLayout, family, host_path):
    bin_paths = [native_path(p) for p in layout.bin_paths]
    include_paths = [native_path(p) for p in layout.include_paths]
    library_paths = [native_path(p) for p in layout.library_paths]
    environment = {
        "PATH": _join(family, bin_paths + list(host_path)),
        "INCLUDE": _join(family, include_paths),
        "LIB": _join(family, library_paths),
    }
    return bin_paths + include_paths + library_paths, [], environment


def _macos(layout: MacSdkLayout, family, host_path):
    bin_path = native_path(layout.bin_path)
    sysroot = native_path(layout.sysroot)
    environment = {
        "PATH": _join(family, [bin_path] + list(host_path)),
        "SDKROOT": sysroot,
    }
    return [bin_path, sysroot], [], environment


def _linux(layout: LinuxSdkLayout, family, host_path):
    sysroot = native_path(layout.sysroot)
    gcc_toolchain = native_path(layout.gcc_toolchain)
    tools_path = native_path(layout.tools_path)
    flags = [
        f"--sysroot={in_quotes(layout.sysroot)}",
        f"--gcc-toolchain={in_quotes(layout.gcc_toolchain)}",
        f"-target {layout.target_triple}",
    ]
    environment = {
        "PATH": _join(family, [tools_path] + list(host_path)),
    }
    return [sysroot, gcc_toolchain, tools_path], flags, environment


_SDK_ENVIRONMENTS = {
    Platform.WINDOWS: (WindowsSdkLayout, _windows),
    Platform.MACOS: (MacSdkLayout, _macos),
    Platform.LINUX: (LinuxSdkLayout, _linux),
}


def min_os_flags(family: PlatformFamily, architecture) -> List[str]:
    version = family.min_os_version(architecture)
    if not family.min_os_flag or not version:
        return []
    return [family.min_os_flag.format(version=version)]


def build_environment(candidate: Candidate, key: ConfigurationKey, host_path: Sequence[str] = ()) -> PlatformEnvironment:
    family = family_for(key.platform)
    try:
        layout_type, builder = _SDK_ENVIRONMENTS[key.platform]
    except KeyError:
        raise UnsupportedConfigurationError(f"Unsupported platform {key.platform} for build_environment") from None
    if not isinstance(candidate.layout, layout_type):
        raise UnsupportedConfigurationError(
            f"Unsupported SDK {candidate.name} for {key.platform.value}: expected a {layout_type.__name__}"
        )

    inputs, sdk_flags, environment = builder(candidate.layout, family, host_path)
    os_flags = min_os_flags(family, key.architecture)
    compile_flags = list(sdk_flags) + os_flags + list(family.compile_flags)
    link_flags = compile_flags + list(family.link_flags) if family.link_flags else []

    return PlatformEnvironment(
        inputs=tuple(p for p in inputs if p),
        compile_flags=tuple(compile_flags),
        link_flags=tuple(link_flags),
        min_os_flags=tuple(os_flags),
        environment=environment,
    )
