"""Build matrix: every resolvable (platform, architecture) crossed with every variant."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from .platforms import Architecture, Platform, arch_name_for


class Variant(enum.Enum):
    DEBUG = "debug"
    RELEASE = "release"

    @property
    def cfg(self):
        """Value passed to the build driver as ``cfg=``."""
        return self.value


ALL_VARIANTS: Tuple[Variant, ...] = (Variant.DEBUG, Variant.RELEASE)


@dataclass(frozen=True)
class ConfigurationKey:
    platform: Platform
    architecture: Architecture
    variant: Variant

    @property
    def arch_name(self):
        return arch_name_for(self.architecture)

    def target_name(self, separator="_"):
        parts = [self.platform.value, self.arch_name]
        if self.variant is Variant.DEBUG:
            parts.append("dbg")
        return separator.join(parts)

    @property
    def config_id(self):
        return self.target_name()

    def artifact_name(self, component):
        name = f"{component}-{self.platform.value}_{self.arch_name}"
        if self.variant is Variant.DEBUG:
            name += "-dbg"
        return name

    def __str__(self):
        return f"{self.platform.value}/{self.architecture.value}/{self.variant.value}"


def expand_matrix(
    targets: Iterable[Tuple[Platform, Architecture]],
    variants: Sequence[Variant] = ALL_VARIANTS,
) -> List[ConfigurationKey]:
    keys = []
    seen = set()
    for platform, architecture in targets:
        for variant in variants:
            key = ConfigurationKey(platform, architecture, variant)
            if key in seen:
                continue
            seen.add(key)
            keys.append(key)
    return keys
