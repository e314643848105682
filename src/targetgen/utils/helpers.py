# src/targetgen/utils/helpers.py
import os
import logging

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg")


def ensure_dir(directory):
    """
    Create the directory if it does not exist.

    Parameters:
      - directory: Path of the directory to create.
    """
    if not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def is_image_type(path):
    """Whether the path has one of the supported raster extensions."""
    return str(path).lower().endswith(IMAGE_EXTENSIONS)


def cleanup_output(folder_path):
    """
    Remove generated images and annotation files left in an output folder.

    Only regular files directly inside the folder are touched; subfolders
    and other file types are kept.

    Returns:
      - Number of removed files.
    """
    removed = 0
    for entry in os.scandir(folder_path):
        if entry.is_file() and (is_image_type(entry.path) or entry.name.lower().endswith(".json")):
            os.remove(entry.path)
            removed += 1
    logger.debug(f"Removed {removed} files from {folder_path}")
    return removed
