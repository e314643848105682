# src/targetgen/data/dataset_loader.py
import os
import logging
from concurrent.futures import ThreadPoolExecutor

import cv2
import numpy as np
from tqdm import tqdm

from ..errors import AssetError, NotADirectory
from ..generation.compositor import to_bgra
from ..utils.helpers import is_image_type

logger = logging.getLogger(__name__)


def read_image(img_path):
    """
    Decode an image file into an 8-bit BGRA array.

    16-bit images are reduced to their 8 most significant bits.

    Raises:
      - AssetError: if the file cannot be decoded or has an unsupported bit depth.
    """
    img = cv2.imread(str(img_path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise AssetError(f"Failed to load image: {img_path}")
    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        raise AssetError(f"Unsupported bit depth {img.dtype} in image: {img_path}")
    try:
        return to_bgra(img)
    except ValueError as e:
        raise AssetError(f"Unsupported image {img_path}: {e}")


def list_image_files(folder_path):
    """
    Sorted paths of the image files directly inside a directory.

    Raises:
      - NotADirectory: if the path is not a directory.
    """
    if not os.path.isdir(folder_path):
        raise NotADirectory(folder_path)
    return sorted(
        os.path.join(folder_path, name)
        for name in os.listdir(folder_path)
        if os.path.isfile(os.path.join(folder_path, name)) and is_image_type(name)
    )


def load_images_from_folder(folder_path, max_workers=4, desc="Loading images"):
    """
    Load every image of a directory.

    Files that cannot be decoded are logged and skipped.

    Parameters:
      - folder_path: Path to the directory.
      - max_workers: Threads used for decoding.
      - desc: Progress bar label.

    Returns:
      - List of (path, BGRA image) tuples, in file name order.
    """
    paths = list_image_files(folder_path)
    logger.debug(f"Loading {len(paths)} images from {folder_path}")
    return load_images(paths, max_workers=max_workers, desc=desc)


def load_images(paths, max_workers=4, desc="Loading images"):
    """
    Decode the given image files in parallel, skipping the ones that fail.

    Returns:
      - List of (path, BGRA image) tuples, in input order.
    """
    def _load(path):
        try:
            return path, read_image(path)
        except AssetError as e:
            logger.warning(str(e))
            return path, None

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        results = list(tqdm(executor.map(_load, paths), total=len(paths), desc=desc, disable=None))

    return [(path, img) for path, img in results if img is not None]
