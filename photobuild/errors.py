"""
Exceptions raised by the build pipeline.
"""


class PhotoBuildError(Exception):
    """Base class for all build errors."""


class ConfigError(PhotoBuildError):
    """Build configuration is missing or invalid."""


class DescriptorError(PhotoBuildError):
    """A source descriptor (photos.json, events.json) could not be read."""


class CornerExtractionError(PhotoBuildError):
    """Corner swatches could not be computed for a photo."""

    def __init__(self, path):
        super().__init__(f"could not extract corners for {path}")
        self.path = path


class VariantWriteError(PhotoBuildError):
    """A variant file could not be written."""

    def __init__(self, path, cause: Exception, result=None):
        super().__init__(f"can not transform {path}: {cause}")
        self.path = path
        # Outcome of the formats handled before the failing one
        self.result = result
