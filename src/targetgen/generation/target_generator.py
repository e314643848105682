"""
Generation of labeled target images.

A target is one background with a random set of objects pasted on it at
scale, recorded in the shared COCO ledger. Targets are generated in parallel
on a fixed-size thread pool; the ledger and the resize cache are the only
state shared between workers.
"""

import logging
import os
import random
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import cv2
import numpy as np
from tqdm import tqdm

from .compositor import draw_bbox, draw_maskover, overlay
from .geometry import BoundingBox, new_sizes
from .placement import generate_new_location
from .resize_cache import ResizeCache
from .transformations import post_rotate_dimensions, random_quarter_turns, resize_image, rotate_90s
from ..config import TargetGeneratorConfig
from ..data.background_loader import BackgroundImage, BackgroundLoader
from ..data.object_loader import ObjectAsset, ObjectManager
from ..errors import (ConfigurationError, GeometryError, NoObjects, PlacementError,
                      SamplingError)
from ..export.coco_ledger import CocoLedger
from ..utils.helpers import ensure_dir

logger = logging.getLogger(__name__)


@dataclass
class PlacedObject:
    """An object's final box on the current target."""
    bbox: BoundingBox
    obj: ObjectAsset


@dataclass
class TargetImage:
    """A generated raster and the objects recorded for it."""
    image: np.ndarray  # BGRA
    background: BackgroundImage
    placed_objects: List[PlacedObject]
    image_id: int
    file_name: str


@dataclass
class GenerationReport:
    """Outcome of a batch of target generations."""
    requested: int
    generated: int = 0
    failed: int = 0
    failures: Dict[str, int] = field(default_factory=dict)
    elapsed_seconds: float = 0.0

    def record_failure(self, error: Exception) -> None:
        self.failed += 1
        name = type(error).__name__
        self.failures[name] = self.failures.get(name, 0) + 1

    def get_summary(self) -> str:
        """Get human-readable summary."""
        average_ms = (self.elapsed_seconds * 1000 / self.requested) if self.requested else 0.0
        lines = [
            f"Generated {self.generated}/{self.requested} targets ({self.failed} failed)",
            f"Average {average_ms:.0f}ms per target"
        ]
        if self.failures:
            lines.append("Failures: " + ", ".join(f"{k}={v}" for k, v in sorted(self.failures.items())))
        return "\n".join(lines)


class TargetGenerator:
    def __init__(self, background_path, objects_path, annotations_path,
                 config: Optional[TargetGeneratorConfig] = None):
        """
        Load all assets and prepare the shared ledger and resize cache.

        Args:
            background_path: Directory of background images
            objects_path: Directory of object cutouts with objects.json
            annotations_path: Destination of the COCO annotation file
            config: Generator settings (defaults if None)

        Raises:
            ConfigurationError: On missing directories, metadata or assets
        """
        self.config = config or TargetGeneratorConfig()
        self.rng = random.Random(self.config.seed)

        self.object_manager = ObjectManager(objects_path)
        self.object_manager.load_objects()
        self.background_loader = BackgroundLoader(background_path)

        self.ledger = CocoLedger(annotations_path, self.object_manager.categories())
        self.resized_cache = ResizeCache(self.config.cache_size_bytes)

        logger.info(f"Target generator ready: {len(self.object_manager)} objects, "
                    f"{len(self.background_loader)} backgrounds, cache {self.config.cache_size}MB")
        if self.config.visualize_bboxes:
            logger.info("Bounding box visualization enabled")
        if self.config.maskover_color is not None:
            logger.info(f"Maskover enabled with color {self.config.maskover_color}")

    def _resized(self, obj: ObjectAsset, size) -> np.ndarray:
        width, height = size
        return self.resized_cache.get_or_insert(
            (width, height, obj.category_id),
            lambda: resize_image(obj.image, (width, height))
        )

    def _place_object(self, image: np.ndarray, obj: ObjectAsset, pixels_per_meter: float,
                      placed_objects: List[PlacedObject]) -> PlacedObject:
        """Scale, place, rotate and paste a single object on the image."""
        bg_h, bg_w = image.shape[:2]

        obj_w, obj_h = new_sizes(obj.width, obj.height, pixels_per_meter, obj.object_width_meters)
        quarter_turns = random_quarter_turns(self.rng) if self.config.do_random_rotation else 0
        final_w, final_h = post_rotate_dimensions(obj_w, obj_h, quarter_turns)

        x, y = generate_new_location(
            (bg_w, bg_h), (final_w, final_h),
            [placed.bbox for placed in placed_objects],
            permit_collisions=self.config.permit_collisions,
            rng=self.rng
        )
        logger.debug(f"Placing {obj.file_name} at {x}, {y} as {obj_w}x{obj_h}, {quarter_turns * 90} degrees")

        patch = rotate_90s(self._resized(obj, (obj_w, obj_h)), quarter_turns)
        bbox = BoundingBox(x, y, patch.shape[1], patch.shape[0])

        # alpha blend, transparent pixels keep the background
        overlay(image, patch, x, y)

        if self.config.visualize_bboxes:
            draw_bbox(image, bbox)
        if self.config.maskover_color is not None:
            draw_maskover(image, bbox, self.config.maskover_color)

        return PlacedObject(bbox, obj)

    def generate_target(self, pixels_per_meter: Optional[float], number_of_objects: int,
                        file_name: Optional[str] = None) -> TargetImage:
        """
        Generate one target image and record it in the ledger.

        Objects whose size degenerates at this scale are skipped. Objects that
        cannot be placed without collision are skipped or abort the image,
        depending on ``config.collision_policy``. The ledger is only written
        once every object has been handled, so an aborted image leaves no trace.

        Args:
            pixels_per_meter: Scale (config value if None)
            number_of_objects: Objects to draw for this image
            file_name: Name recorded for the image (background file name if None)

        Raises:
            NoObjects: If number_of_objects is 0
            NotEnoughAssets: If distinct objects are required and too few exist
            TooManyCollisions: With the "abort" policy, if an object cannot be placed
        """
        logger.debug("Beginning to generate a target...")
        if number_of_objects == 0:
            raise NoObjects()

        ppm = self.config.pixels_per_meter if pixels_per_meter is None else pixels_per_meter
        background = self.background_loader.random(self.rng)
        image = background.image.copy()
        objects = self.object_manager.generate_set(
            number_of_objects, permit_duplicates=self.config.permit_duplicates, rng=self.rng
        )

        placed_objects: List[PlacedObject] = []
        for obj in objects:
            try:
                placed_objects.append(self._place_object(image, obj, ppm, placed_objects))
            except GeometryError as e:
                logger.warning(f"Skipping {obj.file_name}: {e}")
            except PlacementError as e:
                if self.config.collision_policy == 'abort':
                    raise
                logger.debug(f"Skipping {obj.file_name}: {e}")

        file_name = file_name or background.filename
        image_id = self.ledger.add_image(background.width, background.height, file_name, background.date_captured)
        for placed in placed_objects:
            self.ledger.add_annotation(image_id, placed.obj.category_id, 0, [], float(placed.bbox.area), placed.bbox)

        return TargetImage(image, background, placed_objects, image_id, file_name)

    def save_target(self, image: np.ndarray, path) -> None:
        """
        Encode a target as PNG, compressed or not per the configuration.

        Raises:
            OSError: If the file cannot be written
        """
        level = 9 if self.config.compress else 0
        try:
            written = cv2.imwrite(str(path), image, [cv2.IMWRITE_PNG_COMPRESSION, level])
        except cv2.error as e:
            raise OSError(f"Failed to encode target {path}: {e}")
        if not written:
            raise OSError(f"Failed to write target {path}")

    def _generate_and_save(self, index: int, max_objects: int, output_dir) -> TargetImage:
        number_of_objects = self.rng.randrange(1, max_objects)
        file_name = f"{index}.png"
        target = self.generate_target(self.config.pixels_per_meter, number_of_objects, file_name=file_name)

        path = os.path.join(output_dir, file_name)
        self.save_target(target.image, path)
        logger.debug(f"Saved generated target to {path.replace(os.sep, '/')}")
        return target

    def generate_targets(self, amount: int, max_objects, output_dir) -> GenerationReport:
        """
        Generate and write ``amount`` targets on the worker pool.

        Each target gets a number of objects drawn uniformly from
        [1, max_objects) and is written as ``<index>.png``. Sampling and
        placement failures only cost their own target; a write failure stops
        the run.

        Args:
            amount: Number of targets
            max_objects: Exclusive upper bound of objects per target (>= 2)
            output_dir: Directory for the rasters

        Returns:
            GenerationReport with generated and failed counts

        Raises:
            ConfigurationError: If max_objects < 2
            OSError: If a raster cannot be written
        """
        if max_objects < 2:
            raise ConfigurationError(f"max_objects must be at least 2, got {max_objects}")

        ensure_dir(output_dir)
        report = GenerationReport(requested=amount)
        start = time.perf_counter()
        logger.info(f"Generating {amount} targets with {self.config.worker_threads} workers...")

        with ThreadPoolExecutor(max_workers=self.config.worker_threads) as executor:
            futures = {
                executor.submit(self._generate_and_save, i, max_objects, output_dir): i
                for i in range(amount)
            }
            for future in tqdm(as_completed(futures), total=amount, desc="Generating targets", disable=None):
                index = futures[future]
                try:
                    future.result()
                    report.generated += 1
                except (SamplingError, PlacementError) as e:
                    logger.warning(f"Target {index} failed: {e}")
                    report.record_failure(e)
                except OSError:
                    for pending in futures:
                        pending.cancel()
                    raise

        report.elapsed_seconds = time.perf_counter() - start
        logger.info(report.get_summary())
        return report

    def close(self):
        """Write the annotation file."""
        return self.ledger.save()
