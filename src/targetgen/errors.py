"""
Exception hierarchy for target generation.

Configuration errors abort a run before any generation starts. Asset errors
skip a single file. Sampling and placement errors are contained to one
target image, geometry errors to one object.
"""


class TargetGenError(Exception):
    """Base class for every error raised by targetgen."""
    pass


class ConfigurationError(TargetGenError):
    """Invalid configuration, directories or metadata. Fatal for the run."""
    pass


class NotADirectory(ConfigurationError):
    """A path that must be a directory is not one."""

    def __init__(self, path):
        super().__init__(f"Path provided is not a directory: {path}")
        self.path = path


class MissingObjectMetadata(ConfigurationError):
    """The objects directory has no metadata file."""

    def __init__(self, path):
        super().__init__(f"Missing object metadata file: {path}")
        self.path = path


class AssetError(TargetGenError):
    """A single background or object file could not be used."""
    pass


class SamplingError(TargetGenError):
    """Objects for a target image could not be drawn."""
    pass


class NoObjects(SamplingError):
    def __init__(self):
        super().__init__("No objects were requested for the target")


class NotEnoughAssets(SamplingError):
    def __init__(self, requested, available):
        super().__init__(
            f"Requested {requested} distinct objects but only {available} are available"
        )
        self.requested = requested
        self.available = available


class PlacementError(TargetGenError):
    """An object could not be placed on the background."""
    pass


class TooManyCollisions(PlacementError):
    def __init__(self, attempts):
        super().__init__(f"No collision-free location found after {attempts} attempts")
        self.attempts = attempts


class GeometryError(TargetGenError):
    """Sizes or coordinates computed for an object are unusable."""
    pass


class DegenerateSize(GeometryError):
    def __init__(self, width, height):
        super().__init__(f"Calculated new sizes are invalid: {width}x{height}")
        self.width = width
        self.height = height
