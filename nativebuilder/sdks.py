"""Pick the toolchain/SDK to build with for a platform and architecture.

Selection runs in three steps. Candidates are filtered against a version
constraint, the survivors are ranked (local before downloadable, then newest
toolset, then newest secondary SDK) and the first one wins. Without any
version constraint the user default is taken when it is eligible. When nothing
survives the filter the locator's user default is used, or failing that an
inert placeholder, and a warning listing every available version is printed
once per (locator, constraint) for the whole planning run.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from packaging.version import InvalidVersion, Version

from .catalog import Candidate, SdkLocator
from .cli_logger import logger
from .config import get_version_from_manifest
from .errors import UnsupportedConfigurationError
from .platforms import family_for

# Toolchain artifacts are named major.minor.<build> or major.minor.<short hash>.
_TOOLCHAIN_VERSION_RE = re.compile(r"^(?P<major>\d+)\.(?P<minor>\d+)\.(?:(?P<build>\d{5})|[a-f0-9]{6})$")
_MAJOR_MINOR_RE = re.compile(r"^(?P<major>\d+)\.(?P<minor>\d+)(?:\..+)?$")


@dataclass(frozen=True)
class Constraint:
    """Partial version requirement; a field left as None matches anything.

    ``build`` only narrows ``toolset``: when it is None any build of the
    requested major.minor is accepted, when it is set only that exact build is.
    """

    toolset: Optional[Version] = None
    build: Optional[int] = None
    secondary: Optional[Version] = None

    def __post_init__(self):
        if self.build is not None and self.toolset is None:
            raise ValueError("A build requirement needs a toolset major.minor requirement")
        if self.toolset is not None and len(self.toolset.release) != 2:
            raise ValueError(f"Toolset requirement must be major.minor, got {self.toolset}")

    @classmethod
    def from_strings(cls, toolset=None, secondary=None, pinned_builds=None):
        toolset_version, build = (None, None)
        if toolset:
            toolset_version, build = parse_toolset_version(toolset, pinned_builds)
        secondary_version = None
        if secondary:
            try:
                secondary_version = Version(str(secondary))
            except InvalidVersion:
                raise UnsupportedConfigurationError(f"Unsupported SDK version '{secondary}'") from None
        return cls(toolset=toolset_version, build=build, secondary=secondary_version)

    @property
    def is_empty(self):
        return self.toolset is None and self.secondary is None

    def describe_toolset(self):
        if self.toolset is None:
            return None
        if self.build is None:
            return str(self.toolset)
        return f"{self.toolset}.{self.build}"


@dataclass(frozen=True)
class Resolution:
    candidate: Candidate


@dataclass(frozen=True)
class Fallback:
    """No candidate matched; carries what was available for the diagnostic."""

    constraint: Constraint
    available_toolsets: Tuple[Tuple[str, str], ...] = ()
    available_secondaries: Tuple[Tuple[str, str], ...] = ()

    @property
    def summary(self):
        lines = ["The following toolset versions are available:"]
        lines.extend(f"\t{version} ({origin})" for version, origin in self.available_toolsets)
        lines.append("")
        lines.append("and the following secondary SDK versions are available:")
        lines.extend(f"\t{version} ({origin})" for version, origin in self.available_secondaries)
        return "\n".join(lines)


ResolutionResult = Union[Resolution, Fallback]


def parse_toolset_version(version_string, pinned_builds=None):
    """Split a manifest toolchain version into (major.minor, build or None)."""
    text = str(version_string).strip()
    match = _TOOLCHAIN_VERSION_RE.match(text)
    if match is None:
        match = _MAJOR_MINOR_RE.match(text)
    if match is None:
        raise UnsupportedConfigurationError(f"Unsupported toolchain version '{version_string}'")

    major_minor = f"{int(match.group('major'))}.{int(match.group('minor'))}"
    build = match.groupdict().get("build")
    build = int(build) if build else None
    if build is None and pinned_builds:
        build = pinned_builds.get(major_minor)
    return Version(major_minor), build


def _candidate_build(candidate):
    release = candidate.toolset_version.release
    return release[2] if len(release) > 2 else None


def matches(candidate: Candidate, constraint: Constraint) -> bool:
    if candidate.is_placeholder or not candidate.supported_on_host:
        return False
    if constraint.secondary is not None and candidate.secondary_version != constraint.secondary:
        return False
    if constraint.toolset is not None:
        wanted = constraint.toolset
        have = candidate.toolset_version
        if have.major != wanted.major or have.minor != wanted.minor:
            return False
        if constraint.build is not None and _candidate_build(candidate) != constraint.build:
            return False
    return True


def filter_candidates(candidates: Iterable[Candidate], constraint: Constraint) -> List[Candidate]:
    return [candidate for candidate in candidates if matches(candidate, constraint)]


def _secondary_sort_key(candidate):
    version = candidate.secondary_version
    return (version is not None, version if version is not None else Version("0"))


def rank_candidates(candidates: Sequence[Candidate]) -> List[Candidate]:
    """Order candidates best first; equal candidates keep catalog order.

    Sorting is stable, so sorting by the least significant key first gives
    origin ascending, then toolset descending, then secondary descending.
    """
    ranked = sorted(candidates, key=_secondary_sort_key, reverse=True)
    ranked = sorted(ranked, key=lambda candidate: candidate.toolset_version, reverse=True)
    return sorted(ranked, key=lambda candidate: candidate.origin)


def _distinct(pairs):
    return tuple(dict.fromkeys(pairs))


def resolve(candidates: Sequence[Candidate], constraint: Constraint,
            preferred: Optional[Candidate] = None) -> ResolutionResult:
    """Filter and rank ``candidates``.

    With an empty constraint an eligible ``preferred`` candidate (the user
    default) wins over the ranking.
    """
    eligible = filter_candidates(candidates, constraint)
    if eligible:
        if preferred is not None and constraint.is_empty and preferred in eligible:
            return Resolution(preferred)
        return Resolution(rank_candidates(eligible)[0])

    real = [candidate for candidate in candidates if not candidate.is_placeholder]
    return Fallback(
        constraint=constraint,
        available_toolsets=_distinct((str(c.toolset_version), c.origin.label) for c in real),
        available_secondaries=_distinct(
            (str(c.secondary_version), c.origin.label) for c in real if c.secondary_version is not None
        ),
    )


def describe_missing_sdk(family, fallback: Fallback, default: Optional[Candidate]) -> str:
    constraint = fallback.constraint
    requirements = []
    if constraint.toolset is not None:
        requirements.append(f"{family.toolset_label} version {constraint.describe_toolset()}")
    if constraint.secondary is not None:
        requirements.append(f"{family.secondary_label} version {constraint.secondary}")

    message = f"No {family.sdk_label} "
    if requirements:
        message += "with " + " and ".join(requirements) + " "
    message += "could be found.\n"

    if default is not None:
        message += f"The default SDK with {family.toolset_label} version {default.toolset_version}"
        if default.secondary_version is not None:
            message += f" and {family.secondary_label} version {default.secondary_version}"
        message += " will be used; be aware that this may cause build issues.\n"
    else:
        message += f"No default {family.sdk_label} was found on this machine.\n"

    message += f"\nFor reference, the following {family.toolset_label} versions are available:\n"
    message += "\n".join(f"\t{version} ({origin})" for version, origin in fallback.available_toolsets)
    message += f"\n\nand the following {family.secondary_label} versions are available:\n"
    message += "\n".join(f"\t{version} ({origin})" for version, origin in fallback.available_secondaries)
    message += "\n"
    return message


def resolve_with_fallback(context, locator: SdkLocator, constraint: Constraint) -> Candidate:
    """Resolve against a locator, never failing.

    Returns the best matching candidate, else the locator's user default,
    else its placeholder.
    """
    result = resolve(locator.candidates, constraint, preferred=locator.user_default)
    if isinstance(result, Resolution):
        return result.candidate

    def _warn():
        logger.warning(describe_missing_sdk(family_for(locator.platform), result, locator.user_default))
        return True

    context.execute_once((locator.key, constraint), _warn)
    return locator.user_default_or_placeholder()


def constraint_for(context, platform) -> Constraint:
    """Read the version constraint for a platform family from manifest and config.

    Manifest lookups happen here, before any candidate is looked at, so a
    missing entry fails the run with ManifestLookupError.
    """
    settings = context.settings.toolchain(platform)
    toolset = None
    if settings.toolset_artifact:
        toolset = get_version_from_manifest(context.manifest, settings.toolset_artifact)
    elif settings.sdk_version:
        toolset = settings.sdk_version
    secondary = None
    if settings.secondary_artifact:
        secondary = get_version_from_manifest(context.manifest, settings.secondary_artifact)
    return Constraint.from_strings(toolset=toolset, secondary=secondary, pinned_builds=settings.pinned_builds)


def locate_sdk(context, platform, architecture) -> Candidate:
    family = family_for(platform)
    if architecture not in family.host_architectures:
        raise UnsupportedConfigurationError(
            f"Unsupported architecture {architecture.value} for {family.sdk_label}"
        )
    constraint = constraint_for(context, platform)
    locator = context.catalog.locator_for(platform, architecture)
    logger.debug(
        f"{platform.value}/{architecture.value}: {len(locator.candidates)} candidates, "
        f"toolset {constraint.describe_toolset() or 'any'}, secondary {constraint.secondary or 'any'}"
    )
    return resolve_with_fallback(context, locator, constraint)


def host_targets(context):
    """(platform, architecture) pairs the host can build, in planning order."""
    family = family_for(context.host_platform)
    return [(family.platform, architecture) for architecture in family.host_architectures]
