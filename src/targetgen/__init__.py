"""
targetgen - synthetic target images for object detection training.

Composites object cutouts onto background photographs at real-world scale
and writes matching COCO annotations.
"""

from .config import TargetGeneratorConfig, STANDARD_PPM, load_config, parse_color
from .errors import (TargetGenError, ConfigurationError, NotADirectory, MissingObjectMetadata,
                     AssetError, SamplingError, NoObjects, NotEnoughAssets, PlacementError,
                     TooManyCollisions, GeometryError, DegenerateSize)
from .export import CocoLedger, CocoCategory
from .generation import BoundingBox, ResizeCache, new_sizes
from .generation.target_generator import TargetGenerator, TargetImage, PlacedObject, GenerationReport

__version__ = "0.1.0"

__all__ = [
    'TargetGeneratorConfig',
    'STANDARD_PPM',
    'load_config',
    'parse_color',
    'TargetGenError',
    'ConfigurationError',
    'NotADirectory',
    'MissingObjectMetadata',
    'AssetError',
    'SamplingError',
    'NoObjects',
    'NotEnoughAssets',
    'PlacementError',
    'TooManyCollisions',
    'GeometryError',
    'DegenerateSize',
    'CocoLedger',
    'CocoCategory',
    'BoundingBox',
    'ResizeCache',
    'new_sizes',
    'TargetGenerator',
    'TargetImage',
    'PlacedObject',
    'GenerationReport'
]
