class NativeBuilderError(Exception):
    """Base class for planning errors."""


class UnsupportedConfigurationError(NativeBuilderError, ValueError):
    """A platform, architecture or toolchain value has no mapping."""


class ManifestLookupError(NativeBuilderError, KeyError):
    """A required artifact version is missing from the version manifest."""

    def __init__(self, artifact_name):
        self.artifact_name = artifact_name
        super().__init__(
            f"Artifact \"{artifact_name}\" doesn't appear to be described in any of the manifest files."
        )

    def __str__(self):
        # KeyError would repr() the message otherwise
        return self.args[0]


class CatalogError(NativeBuilderError, ValueError):
    """A candidate entry in the catalog could not be parsed."""
