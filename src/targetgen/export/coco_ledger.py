"""
COCO annotation ledger shared by all generation workers.

Reference: https://cocodataset.org/#format-data
"""

import copy
import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from ..generation.geometry import BoundingBox

logger = logging.getLogger(__name__)


@dataclass
class CocoCategory:
    """A category as written to the annotation file."""
    id: int
    name: str
    supercategory: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        record = {'id': self.id, 'name': self.name}
        if self.supercategory is not None:
            record['supercategory'] = self.supercategory
        return record


@dataclass
class CocoInfo:
    """Dataset level metadata of the annotation file."""
    description: str = 'Auto Generated Dataset in COCO format'
    url: str = ''
    version: str = '1.0'
    year: int = field(default_factory=lambda: datetime.now().year)
    contributor: str = ''
    date_created: str = field(default_factory=lambda: datetime.now().strftime('%Y-%m-%d %H:%M:%S'))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'description': self.description,
            'url': self.url,
            'version': self.version,
            'year': self.year,
            'contributor': self.contributor,
            'date_created': self.date_created
        }


class CocoLedger:
    """
    Accumulates images, annotations and categories for one generation run.

    Every mutating call holds a single lock for its own duration only, so
    ids are unique and strictly increasing whatever the number of concurrent
    callers. Image ids start at 0 and annotation ids at 1.

    The ledger does not check that an annotation's image id was added before;
    the generator always adds an image before its annotations.
    """

    FIRST_IMAGE_ID = 0
    FIRST_ANNOTATION_ID = 1

    def __init__(self, file_path: Union[str, Path], categories: Iterable[CocoCategory],
                 info: Optional[CocoInfo] = None):
        """
        Args:
            file_path: Destination of the annotation file
            categories: Categories discovered while loading objects
            info: Dataset metadata (defaults to an auto-generated description)
        """
        self.file_path = Path(file_path)
        self.info = info or CocoInfo()
        self.categories: List[CocoCategory] = list(categories)
        self.images: List[Dict[str, Any]] = []
        self.annotations: List[Dict[str, Any]] = []
        self._next_image_id = self.FIRST_IMAGE_ID
        self._next_annotation_id = self.FIRST_ANNOTATION_ID
        self._lock = threading.Lock()

    def add_image(self, width: int, height: int, file_name: str, date_captured: str,
                  license: Optional[int] = None, coco_url: Optional[str] = None,
                  flickr_url: Optional[str] = None) -> int:
        """Add an image record and return its id."""
        record = {
            'id': None,
            'width': int(width),
            'height': int(height),
            'file_name': file_name,
            'date_captured': date_captured
        }
        for key, value in (('license', license), ('coco_url', coco_url), ('flickr_url', flickr_url)):
            if value is not None:
                record[key] = value

        with self._lock:
            image_id = self._next_image_id
            record['id'] = image_id
            self.images.append(record)
            self._next_image_id += 1

        return image_id

    def add_annotation(self, image_id: int, category_id: int, iscrowd: int,
                       segmentation: List[List[float]], area: float,
                       bbox: Union[BoundingBox, Sequence[int]]) -> int:
        """Add an annotation record and return its id."""
        if not isinstance(bbox, BoundingBox):
            bbox = BoundingBox.from_sequence(bbox)

        record = {
            'id': None,
            'image_id': image_id,
            'category_id': category_id,
            'iscrowd': int(iscrowd),
            'segmentation': segmentation,
            'area': float(area),
            'bbox': bbox.to_list()
        }

        with self._lock:
            annotation_id = self._next_annotation_id
            record['id'] = annotation_id
            self.annotations.append(record)
            self._next_annotation_id += 1

        return annotation_id

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot of the full annotation document."""
        with self._lock:
            images = copy.deepcopy(self.images)
            annotations = copy.deepcopy(self.annotations)

        return {
            'info': self.info.to_dict(),
            'licenses': [],
            'images': images,
            'annotations': annotations,
            'categories': [cat.to_dict() for cat in self.categories]
        }

    def save(self) -> Path:
        """
        Write the annotation file, replacing any previous content.

        Safe to call at any point; a partial run produces a valid document.

        Returns:
            Path of the written file
        """
        document = self.to_dict()
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.file_path, 'w', encoding='utf-8') as f:
            json.dump(document, f, indent=2, ensure_ascii=False)

        logger.info(f"COCO JSON saved to {self.file_path} "
                    f"({len(document['images'])} images, {len(document['annotations'])} annotations)")
        return self.file_path
