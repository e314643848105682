"""
Asset loading: backgrounds and object cutouts with their metadata.
"""

from .dataset_loader import read_image, list_image_files, load_images, load_images_from_folder
from .background_loader import BackgroundImage, BackgroundLoader
from .object_loader import ObjectAsset, ObjectManager, METADATA_FILE

__all__ = [
    'read_image',
    'list_image_files',
    'load_images',
    'load_images_from_folder',
    'BackgroundImage',
    'BackgroundLoader',
    'ObjectAsset',
    'ObjectManager',
    'METADATA_FILE'
]
