"""Declare the compile -> install -> configure -> package stages of a configuration.

Nothing here runs a command. Every stage is a list of Actions with explicit
inputs and outputs; the external backend derives ordering and up-to-date
checks from those declarations alone, so each Action must name everything it
reads. Paths are relative to the project root and use the host separator.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .catalog import Candidate
from .config import ProjectSettings
from .environment import PlatformEnvironment
from .errors import UnsupportedConfigurationError
from .matrix import ConfigurationKey
from .platforms import compiler_for, family_for, system_name_for

STAGE_NAMES = ("compile", "install", "configure", "package")


@dataclass(frozen=True)
class Action:
    name: str
    executable: str
    arguments: Tuple[str, ...] = ()
    inputs: Tuple[str, ...] = ()
    target_files: Tuple[str, ...] = ()
    target_directories: Tuple[str, ...] = ()
    environment: Mapping[str, str] = field(default_factory=dict)
    working_directory: Optional[str] = None

    @property
    def outputs(self) -> Tuple[str, ...]:
        return self.target_files + self.target_directories

    @property
    def command_line(self) -> List[str]:
        return [self.executable, *self.arguments]

    def to_dict(self):
        data = {
            "name": self.name,
            "command": self.command_line,
            "inputs": list(self.inputs),
            "target_files": list(self.target_files),
            "target_directories": list(self.target_directories),
            "environment": dict(self.environment),
        }
        if self.working_directory is not None:
            data["working_directory"] = self.working_directory
        return data


@dataclass(frozen=True)
class Stage:
    name: str
    actions: Tuple[Action, ...]

    @property
    def outputs(self) -> Tuple[str, ...]:
        result = []
        for action in self.actions:
            result.extend(action.outputs)
        return tuple(result)


@dataclass(frozen=True)
class Artifact:
    path: str
    # (path inside the archive, source path on disk), in archive order
    contents: Tuple[Tuple[str, str], ...]

    @property
    def entries(self) -> Tuple[str, ...]:
        return tuple(entry for entry, _ in self.contents)

    def to_dict(self):
        return {
            "path": self.path,
            "contents": [{"entry": entry, "source": source} for entry, source in self.contents],
        }


@dataclass(frozen=True)
class ConfigurationPipeline:
    key: ConfigurationKey
    candidate: Candidate
    stages: Tuple[Stage, ...]
    artifact: Artifact
    install_alias: str
    package_alias: str

    def stage(self, name) -> Stage:
        for stage in self.stages:
            if stage.name == name:
                return stage
        raise KeyError(name)


class ActionGraph:
    """All actions of one planning run plus the named alias targets."""

    def __init__(self):
        self.actions: List[Action] = []
        self.aliases: Dict[str, List[str]] = {}
        self.artifacts: List[Artifact] = []

    def add_action(self, action: Action) -> Action:
        self.actions.append(action)
        return action

    def add_alias_dependency(self, alias: str, paths: Sequence[str]):
        targets = self.aliases.setdefault(alias, [])
        for path in paths:
            if path not in targets:
                targets.append(path)

    def producers_of(self, path: str) -> List[Action]:
        return [action for action in self.actions if path in action.outputs]

    def to_dict(self):
        return {
            "actions": [action.to_dict() for action in self.actions],
            "aliases": {name: list(paths) for name, paths in self.aliases.items()},
            "artifacts": [artifact.to_dict() for artifact in self.artifacts],
        }


@dataclass(frozen=True)
class InstallLayout:
    root: str
    bin: Optional[str]
    lib: str
    include: str
    descriptors: Tuple[str, str]

    @property
    def directories(self) -> Tuple[str, ...]:
        if self.bin is None:
            return (self.lib, self.include)
        return (self.bin, self.lib, self.include)


def build_directory(key: ConfigurationKey, settings: ProjectSettings) -> str:
    return os.path.join(settings.build_root, f"{key.target_name()}_{key.variant.cfg}")


def install_layout(key: ConfigurationKey, settings: ProjectSettings) -> InstallLayout:
    root = os.path.join(settings.install_root, key.config_id)
    descriptor_dir = os.path.join(root, settings.descriptor_dir)
    return InstallLayout(
        root=root,
        bin=os.path.join(root, "bin") if family_for(key.platform).installs_bin else None,
        lib=os.path.join(root, "lib"),
        include=os.path.join(root, "include"),
        descriptors=tuple(os.path.join(descriptor_dir, name) for name in settings.descriptors),
    )


def artifact_path(key: ConfigurationKey, settings: ProjectSettings) -> str:
    return os.path.join(settings.artifact_root, f"{key.artifact_name(settings.component)}.{settings.archive_extension}")


def compile_stage(key, env: PlatformEnvironment, settings: ProjectSettings) -> Stage:
    target = key.target_name()
    arguments = [
        f"arch={key.arch_name}",
        f"compiler={compiler_for(key.platform)}",
        f"cfg={key.variant.cfg}",
        f"{settings.component}_build_prefix={target}",
        "-j", str(settings.jobs),
    ]
    arguments.extend(env.flag_arguments())
    action = Action(
        name="make",
        executable="make",
        arguments=tuple(arguments),
        inputs=tuple(env.inputs) + tuple(settings.sources),
        target_directories=(build_directory(key, settings),),
        environment=dict(env.environment),
    )
    return Stage("compile", (action,))


def _install_windows(build_dir, layout: InstallLayout, settings: ProjectSettings):
    component = settings.component
    # robocopy exit codes 0-7 mean success; the .bat wrapper maps them to 0.
    return (
        Action(
            name="install",
            executable="robocopy.bat",
            arguments=(build_dir, layout.bin, "/s", f"{component}*.dll", f"{component}*.pdb"),
            inputs=(build_dir,),
            target_directories=(layout.bin,),
        ),
        Action(
            name="install",
            executable="robocopy.bat",
            arguments=(build_dir, layout.lib, "/s", f"{component}*.lib"),
            inputs=(build_dir,),
            target_directories=(layout.lib,),
        ),
        Action(
            name="install",
            executable="robocopy.bat",
            arguments=(settings.headers, layout.include, "/s"),
            inputs=(build_dir, settings.headers),
            target_directories=(layout.include,),
        ),
    )


def _install_posix(build_dir, layout: InstallLayout, settings: ProjectSettings):
    return (
        Action(
            name="install",
            executable="find",
            arguments=(build_dir, "-name", f"lib{settings.component}*.*", "-exec", "cp", "{}", layout.lib, ";"),
            inputs=(build_dir,),
            target_directories=(layout.lib,),
        ),
        Action(
            name="install",
            executable="cp",
            arguments=("-r", settings.headers, layout.root),
            inputs=(build_dir, settings.headers),
            target_directories=(layout.include,),
        ),
    )


_INSTALL_VARIANTS = {
    "windows": _install_windows,
    "posix": _install_posix,
}


def install_stage(key, settings: ProjectSettings) -> Stage:
    family = family_for(key.platform)
    try:
        installer = _INSTALL_VARIANTS[family.install_variant]
    except KeyError:
        raise UnsupportedConfigurationError(
            f"Unsupported install variant {family.install_variant} for {key.platform.value}"
        ) from None
    layout = install_layout(key, settings)
    return Stage("install", installer(build_directory(key, settings), layout, settings))


def configure_stage(key, env: PlatformEnvironment, settings: ProjectSettings) -> Stage:
    layout = install_layout(key, settings)
    version_header = os.path.join(layout.root, settings.version_header)
    descriptor_dir = os.path.join(layout.root, settings.descriptor_dir)
    action = Action(
        name="cmake",
        executable="cmake",
        arguments=(
            f"-DINSTALL_DIR={descriptor_dir}",
            f"-DSYSTEM_NAME={system_name_for(key.platform)}",
            f"-D{settings.component.upper()}_VERSION_FILE={version_header}",
            "-DINC_REL_PATH=../include",
            "-DLIB_REL_PATH=../lib",
            "-DBIN_REL_PATH=../bin",
            "-P", settings.configure_script,
        ),
        inputs=(build_directory(key, settings),) + layout.directories + (version_header, settings.configure_script),
        target_files=layout.descriptors,
        environment=dict(env.environment),
    )
    return Stage("configure", (action,))


def package_stage(key, settings: ProjectSettings) -> Tuple[Stage, Artifact]:
    layout = install_layout(key, settings)
    archive = artifact_path(key, settings)

    contents = [("LICENSE", settings.license_file)]
    if layout.bin is not None:
        contents.append(("bin", layout.bin))
    contents.append(("lib", layout.lib))
    contents.append(("include", layout.include))
    for descriptor in layout.descriptors:
        contents.append((os.path.join(settings.descriptor_dir, os.path.basename(descriptor)), descriptor))
    artifact = Artifact(path=archive, contents=tuple(contents))

    # Run from the install root so entries land at the archive root.
    entries = [os.path.relpath(settings.license_file, layout.root)]
    entries.extend(entry for entry, _ in contents[1:])
    action = Action(
        name="zip",
        executable=settings.archiver,
        arguments=("a", f"-t{settings.archive_extension}", os.path.relpath(archive, layout.root), *entries),
        inputs=tuple(source for _, source in contents),
        target_files=(archive,),
        working_directory=layout.root,
    )
    return Stage("package", (action,)), artifact


def add_configuration(graph: ActionGraph, key: ConfigurationKey, candidate: Candidate,
                      env: PlatformEnvironment, settings: ProjectSettings) -> ConfigurationPipeline:
    """Register the four stages of one configuration and its two aliases."""
    target = key.target_name()
    compile_ = compile_stage(key, env, settings)
    install = install_stage(key, settings)
    configure = configure_stage(key, env, settings)
    package, artifact = package_stage(key, settings)
    stages = (compile_, install, configure, package)

    for stage in stages:
        for action in stage.actions:
            graph.add_action(action)
    graph.artifacts.append(artifact)

    install_alias = f"lib::{target}"
    package_alias = f"buildzip::{target}"
    graph.add_alias_dependency(install_alias, install.outputs)
    graph.add_alias_dependency(package_alias, [artifact.path])

    return ConfigurationPipeline(
        key=key,
        candidate=candidate,
        stages=stages,
        artifact=artifact,
        install_alias=install_alias,
        package_alias=package_alias,
    )
