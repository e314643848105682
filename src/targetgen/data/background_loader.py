"""
Background photographs that target images are composited on.
"""

import logging
import os
import random
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import numpy as np

from .dataset_loader import load_images_from_folder
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class BackgroundImage:
    """A decoded background and the metadata copied into image records."""
    image: np.ndarray  # BGRA
    filename: str
    date_captured: str
    id: int

    @property
    def width(self) -> int:
        return self.image.shape[1]

    @property
    def height(self) -> int:
        return self.image.shape[0]


def file_timestamp(path) -> str:
    """Creation time of a file where the platform reports it, otherwise its modification time."""
    stat = os.stat(path)
    timestamp = getattr(stat, 'st_birthtime', None) or stat.st_mtime
    return datetime.fromtimestamp(timestamp).strftime('%Y-%m-%d %H:%M:%S')


class BackgroundLoader:
    """Loads every decodable image of a directory as a background."""

    def __init__(self, path, max_workers: int = 4):
        """
        Args:
            path: Directory of background images
            max_workers: Threads used for decoding

        Raises:
            NotADirectory: If the path is not a directory
            ConfigurationError: If no background could be loaded
        """
        self.path = path
        self.backgrounds: List[BackgroundImage] = []

        loaded = load_images_from_folder(path, max_workers=max_workers, desc="Loading backgrounds")
        for path_name, img in loaded:
            self.backgrounds.append(BackgroundImage(
                image=img,
                filename=path_name.replace("\\", "/"),
                date_captured=file_timestamp(path_name),
                id=len(self.backgrounds),
            ))

        if not self.backgrounds:
            raise ConfigurationError(f"No usable background images found in {path}")

        logger.info(f"Loaded {len(self.backgrounds)} backgrounds from {path}")

    def __len__(self) -> int:
        return len(self.backgrounds)

    def random(self, rng=random) -> Optional[BackgroundImage]:
        """A uniformly chosen background, or None if there are none."""
        if not self.backgrounds:
            return None
        return rng.choice(self.backgrounds)
