"""
Configuration for the target generator.

Values can come from defaults, a YAML file (see ``configs/config.yaml``) or
command line overrides applied on top of either.
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Pixels per meter used to bring objects to scale. In practice it depends on
# the capture altitude and the camera.
STANDARD_PPM = 45.0

COLLISION_POLICIES = ('skip', 'abort')

Color = Tuple[int, int, int, int]

_BOOL_FIELDS = ('visualize_bboxes', 'permit_duplicates', 'permit_collisions', 'compress', 'do_random_rotation')
_INT_FIELDS = ('cache_size', 'worker_threads')


@dataclass
class TargetGeneratorConfig:
    """Settings for generating target images."""
    visualize_bboxes: bool = False
    maskover_color: Optional[Color] = None  # RGBA, filled over each object's box
    permit_duplicates: bool = False
    permit_collisions: bool = False
    collision_policy: str = 'skip'  # what to do when an object cannot be placed
    cache_size: int = 10  # MB of resized objects kept in memory
    worker_threads: int = 15
    compress: bool = True
    do_random_rotation: bool = True  # 90 degree steps only
    pixels_per_meter: float = STANDARD_PPM
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate configuration."""
        self._check_types()
        if self.collision_policy not in COLLISION_POLICIES:
            raise ConfigurationError(
                f"collision_policy must be one of {COLLISION_POLICIES}, got '{self.collision_policy}'"
            )
        if self.cache_size < 0:
            raise ConfigurationError("cache_size must be >= 0")
        if self.worker_threads < 1:
            raise ConfigurationError("worker_threads must be >= 1")
        if self.pixels_per_meter <= 0:
            raise ConfigurationError("pixels_per_meter must be > 0")
        if self.maskover_color is not None:
            self.maskover_color = _validate_color(self.maskover_color)

    def _check_types(self):
        for name in _BOOL_FIELDS:
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"{name} must be true or false, got {getattr(self, name)!r}")
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise ConfigurationError(f"seed must be an integer or null, got {self.seed!r}")
        if isinstance(self.pixels_per_meter, bool) or not isinstance(self.pixels_per_meter, (int, float)):
            raise ConfigurationError(f"pixels_per_meter must be a number, got {self.pixels_per_meter!r}")
        self.pixels_per_meter = float(self.pixels_per_meter)
        if not isinstance(self.collision_policy, str):
            raise ConfigurationError(f"collision_policy must be a string, got {self.collision_policy!r}")

    @property
    def cache_size_bytes(self) -> int:
        return self.cache_size * 1024 * 1024

    def with_overrides(self, **overrides) -> 'TargetGeneratorConfig':
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


def _validate_color(color) -> Color:
    if isinstance(color, str):
        return parse_color(color)
    try:
        values = tuple(int(c) for c in color)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid RGBA color: {color!r}")
    if len(values) == 3:
        values = values + (255,)
    if len(values) != 4 or any(not 0 <= c <= 255 for c in values):
        raise ConfigurationError(f"Invalid RGBA color: {color}")
    return values


def parse_color(text: str) -> Color:
    """
    Parse a color given as ``#RRGGBB``, ``#RRGGBBAA`` or ``r,g,b[,a]``.

    Returns:
        RGBA tuple of ints in 0..255 (alpha defaults to 255)
    """
    text = text.strip()
    try:
        if text.startswith('#'):
            digits = text[1:]
            if len(digits) not in (6, 8):
                raise ValueError(text)
            values = [int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)]
        else:
            values = [int(part) for part in text.split(',')]
    except ValueError:
        raise ConfigurationError(f"Could not parse color '{text}'")

    return _validate_color(values)


def load_config(config_path) -> TargetGeneratorConfig:
    """
    Load a generator configuration from a YAML file.

    The file may hold the settings at top level or under a ``generator`` key.

    Args:
        config_path: Path to the YAML file

    Returns:
        TargetGeneratorConfig with file values over the defaults
    """
    path = Path(config_path)
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    section: Dict[str, Any] = data.get('generator', data)
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'generator' in {path} must be a mapping")
    known = {f.name for f in fields(TargetGeneratorConfig)}
    unknown = set(section) - known
    if unknown:
        raise ConfigurationError(f"Unknown config keys in {path}: {sorted(unknown)}")

    logger.debug(f"Loaded configuration from {path}: {section}")
    return TargetGeneratorConfig(**section)
