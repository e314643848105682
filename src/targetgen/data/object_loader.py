"""
Object cutouts, their real-world widths and categories.

The objects directory holds the cutout images plus an ``objects.json`` file::

    {
      "categories": [{"id": 0, "name": "bicycle", "supercategory": "vehicle"}],
      "objects": [
        {"file_name": "bicycle_1.png", "object_width_meters": 1.73, "category_id": 0}
      ]
    }
"""

import json
import logging
import os
import random
from collections import Counter
from typing import Dict, List, Optional

import numpy as np

from .dataset_loader import list_image_files, load_images
from ..errors import ConfigurationError, MissingObjectMetadata, NotEnoughAssets
from ..export.coco_ledger import CocoCategory

logger = logging.getLogger(__name__)

METADATA_FILE = "objects.json"


class ObjectAsset:
    """A decoded cutout with its metadata. Identity is (category_id, id)."""

    def __init__(self, id: int, file_name: str, category_id: int,
                 image: np.ndarray, object_width_meters: float):
        self.id = id
        self.file_name = file_name
        self.category_id = category_id
        self.image = image  # BGRA
        self.object_width_meters = object_width_meters

    @property
    def width(self) -> int:
        return self.image.shape[1]

    @property
    def height(self) -> int:
        return self.image.shape[0]

    def __eq__(self, other):
        if not isinstance(other, ObjectAsset):
            return NotImplemented
        return (self.category_id, self.id) == (other.category_id, other.id)

    def __hash__(self):
        return hash((self.category_id, self.id))

    def __repr__(self):
        return (f"ObjectAsset(id={self.id}, file_name='{self.file_name}', "
                f"category_id={self.category_id}, size={self.width}x{self.height}, "
                f"width_m={self.object_width_meters})")


def parse_categories(raw_categories) -> List[CocoCategory]:
    """
    Build categories from metadata and check that ids and names map one to one.

    Raises:
        ConfigurationError: On malformed entries, duplicate ids or duplicate names
    """
    if not isinstance(raw_categories, list):
        raise ConfigurationError("'categories' must be a list")

    categories = []
    for i, cat in enumerate(raw_categories):
        if not isinstance(cat, dict) or 'id' not in cat or 'name' not in cat:
            raise ConfigurationError(f"Category #{i} needs 'id' and 'name': {cat}")
        try:
            cat_id = int(cat['id'])
        except (TypeError, ValueError):
            raise ConfigurationError(f"Category #{i} has a non-integer id: {cat['id']}")
        categories.append(CocoCategory(cat_id, str(cat['name']), cat.get('supercategory')))

    duplicate_ids = [k for k, n in Counter(c.id for c in categories).items() if n > 1]
    if duplicate_ids:
        raise ConfigurationError(f"Duplicate category ids: {duplicate_ids}")
    duplicate_names = [k for k, n in Counter(c.name for c in categories).items() if n > 1]
    if duplicate_names:
        raise ConfigurationError(f"Duplicate category names: {duplicate_names}")

    return sorted(categories, key=lambda c: c.id)


class ObjectManager:
    """Loads object cutouts and draws the objects placed on each target."""

    def __init__(self, path, max_workers: int = 4):
        self.path = path
        self.max_workers = max_workers
        self.objects: List[ObjectAsset] = []
        self._categories: List[CocoCategory] = []

    def __len__(self) -> int:
        return len(self.objects)

    def categories(self) -> List[CocoCategory]:
        return list(self._categories)

    def category_names(self) -> Dict[int, str]:
        return {cat.id: cat.name for cat in self._categories}

    def _read_metadata(self) -> dict:
        metadata_path = os.path.join(self.path, METADATA_FILE)
        if not os.path.isfile(metadata_path):
            raise MissingObjectMetadata(metadata_path)

        with open(metadata_path, 'r', encoding='utf-8') as f:
            try:
                metadata = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in {metadata_path}: {e}")

        if not isinstance(metadata, dict) or 'categories' not in metadata or 'objects' not in metadata:
            raise ConfigurationError(f"{metadata_path} must contain 'categories' and 'objects'")
        if not isinstance(metadata['objects'], list):
            raise ConfigurationError("'objects' must be a list")
        return metadata

    def _entry_for(self, file_name: str, entries: List[dict], known_categories) -> Optional[dict]:
        """The single valid metadata entry of a file, or None (with a warning) when unusable."""
        if not entries:
            logger.warning(f"No metadata for object '{file_name}', skipping")
            return None
        if len(entries) > 1:
            logger.warning(f"Duplicate metadata for object '{file_name}', skipping")
            return None

        entry = entries[0]
        try:
            width = float(entry['object_width_meters'])
            category_id = int(entry['category_id'])
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Malformed metadata for object '{file_name}': {entry}, skipping")
            return None

        if category_id not in known_categories:
            logger.warning(f"Object '{file_name}' has unknown category {category_id}, skipping")
            return None
        if width <= 0:
            logger.warning(f"Object '{file_name}' has non-positive width {width}, skipping")
            return None

        return {'object_width_meters': width, 'category_id': category_id}

    def load_objects(self) -> List[ObjectAsset]:
        """
        Load metadata and decode every object that has a usable entry.

        Raises:
            NotADirectory: If the objects path is not a directory
            MissingObjectMetadata: If objects.json is missing
            ConfigurationError: On invalid metadata or if no object is usable
        """
        image_paths = list_image_files(self.path)
        metadata = self._read_metadata()
        self._categories = parse_categories(metadata['categories'])
        known_categories = {cat.id for cat in self._categories}

        entries_by_file: Dict[str, List[dict]] = {}
        for entry in metadata['objects']:
            name = entry.get('file_name') if isinstance(entry, dict) else None
            if not name:
                logger.warning(f"Metadata entry without 'file_name': {entry}")
                continue
            entries_by_file.setdefault(name, []).append(entry)

        selected = {}
        for img_path in image_paths:
            file_name = os.path.basename(img_path)
            entry = self._entry_for(file_name, entries_by_file.get(file_name, []), known_categories)
            if entry is not None:
                selected[img_path] = entry

        found = {os.path.basename(p) for p in image_paths}
        for name in entries_by_file:
            if name not in found:
                logger.warning(f"Metadata references missing object file '{name}'")

        self.objects = []
        for img_path, img in load_images(list(selected), max_workers=self.max_workers, desc="Loading objects"):
            entry = selected[img_path]
            self.objects.append(ObjectAsset(
                id=len(self.objects),
                file_name=os.path.basename(img_path),
                category_id=entry['category_id'],
                image=img,
                object_width_meters=entry['object_width_meters'],
            ))

        if not self.objects:
            raise ConfigurationError(f"No usable objects found in {self.path}")

        logger.info(f"Loaded {len(self.objects)} objects in {len(self._categories)} categories from {self.path}")
        return self.objects

    def generate_set(self, amount: int, permit_duplicates: bool = False, rng=random) -> List[ObjectAsset]:
        """
        Draw the objects for one target image.

        Args:
            amount: Number of objects
            permit_duplicates: Draw with replacement instead of distinct objects
            rng: Random source

        Raises:
            NotEnoughAssets: If distinct objects are required and there are fewer than amount
        """
        if amount < 0:
            raise ValueError("amount must be >= 0")
        if amount == 0:
            return []

        if permit_duplicates and self.objects:
            return rng.choices(self.objects, k=amount)

        if amount > len(self.objects):
            raise NotEnoughAssets(amount, len(self.objects))
        return rng.sample(self.objects, amount)
