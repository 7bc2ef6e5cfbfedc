import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import toml

from .cli_logger import logger
from .errors import ManifestLookupError

CONFIG_FILE = "nativebuilder.toml"
MANIFEST_FILE = "manifest.toml"

def load_config(path="."):
    config_path = os.path.join(path, CONFIG_FILE)
    logger.info(f"Loading configuration from {config_path}")
    if os.path.exists(config_path):
        try:
            with open(config_path, "r") as f:
                return toml.load(f)
        except toml.TomlDecodeError as e:
            logger.error(f"Error decoding TOML file at {config_path}: {e}")
            logger.info("Please check the file's format for syntax errors.")
        except IOError as e:
            logger.error(f"Error reading configuration file at {config_path}: {e}")
            logger.info("Please check file permissions.")
    return {}

def save_config(config, path="."):
    config_path = os.path.join(path, CONFIG_FILE)
    logger.info(f"Saving configuration to {config_path}")
    try:
        with open(config_path, "w") as f:
            toml.dump(config, f)
        return True
    except IOError as e:
        logger.error(f"Error saving configuration to {config_path}: {e}")
        logger.info("Please check file permissions and ensure the directory is writable.")
        return False

def load_manifest(manifest_path):
    """Load the version manifest: a TOML file with an ``[artifacts]`` table of name -> version."""
    logger.info(f"Loading version manifest from {manifest_path}")
    if not os.path.exists(manifest_path):
        logger.warning(f"Version manifest {manifest_path} not found; every manifest lookup will fail.")
        return {}
    with open(manifest_path, "r") as f:
        data = toml.load(f)
    artifacts = data.get("artifacts", {})
    return {str(name): str(version) for name, version in artifacts.items()}

def get_version_from_manifest(manifest, artifact_name):
    if artifact_name not in manifest:
        raise ManifestLookupError(artifact_name)
    return manifest[artifact_name]


@dataclass(frozen=True)
class ToolchainSettings:
    """Where a platform family's version constraint comes from."""
    toolset_artifact: Optional[str] = None
    secondary_artifact: Optional[str] = None
    sdk_version: Optional[str] = None
    pinned_builds: Dict[str, int] = field(default_factory=dict)


DEFAULT_TOOLCHAINS = {
    "windows": {
        "toolset_artifact": "vs2022-toolchain",
        "secondary_artifact": "win10sdk",
        # 14.28 shipped incompatible sub-minor releases, its build must be pinned.
        "pinned_builds": {"14.28": 29333},
    },
    "macos": {
        "sdk_version": "11.1",
    },
    "linux": {},
}


@dataclass(frozen=True)
class ProjectSettings:
    component: str = "tbb"
    license_file: str = "LICENSE"
    build_root: str = "build"
    install_root: str = "builds"
    artifact_root: str = os.path.join("artifacts", "for-stevedore")
    archive_extension: str = "7z"
    archiver: str = "7z"
    jobs: int = 1
    manifest: str = MANIFEST_FILE
    sources: Tuple[str, ...] = ("src", "include", "Makefile")
    headers: str = "include"
    configure_script: str = os.path.join("cmake", "tbb_config_installer.cmake")
    version_header: str = os.path.join("include", "tbb", "tbb_stddef.h")
    descriptor_dir: str = "cmake"
    descriptors: Tuple[str, str] = ("TBBConfig.cmake", "TBBConfigVersion.cmake")
    toolchains: Dict[str, ToolchainSettings] = field(default_factory=dict)

    @classmethod
    def from_config(cls, conf):
        project = conf.get("project", {})
        configure = conf.get("configure", {})

        toolchains = {}
        raw_toolchains = conf.get("toolchains", {})
        for name, defaults in DEFAULT_TOOLCHAINS.items():
            merged = dict(defaults)
            merged.update(raw_toolchains.get(name, {}))
            toolchains[name] = ToolchainSettings(
                toolset_artifact=merged.get("toolset_artifact"),
                secondary_artifact=merged.get("secondary_artifact"),
                sdk_version=str(merged["sdk_version"]) if merged.get("sdk_version") else None,
                pinned_builds={str(k): int(v) for k, v in merged.get("pinned_builds", {}).items()},
            )

        descriptors = tuple(configure.get("descriptors", cls.descriptors))
        if len(descriptors) != 2:
            raise ValueError("configure.descriptors must name exactly two descriptor files")

        return cls(
            component=str(project.get("component", cls.component)),
            license_file=str(project.get("license_file", cls.license_file)),
            build_root=str(project.get("build_root", cls.build_root)),
            install_root=str(project.get("install_root", cls.install_root)),
            artifact_root=str(project.get("artifact_root", cls.artifact_root)),
            archive_extension=str(project.get("archive_extension", cls.archive_extension)),
            archiver=str(project.get("archiver", cls.archiver)),
            jobs=int(project.get("jobs", os.cpu_count() or 1)),
            manifest=str(project.get("manifest", cls.manifest)),
            sources=tuple(str(s) for s in project.get("sources", cls.sources)),
            headers=str(project.get("headers", cls.headers)),
            configure_script=str(configure.get("script", cls.configure_script)),
            version_header=str(configure.get("version_header", cls.version_header)),
            descriptor_dir=str(configure.get("descriptor_dir", cls.descriptor_dir)),
            descriptors=descriptors,
            toolchains=toolchains,
        )

    def toolchain(self, platform):
        return self.toolchains.get(platform.value, ToolchainSettings())
