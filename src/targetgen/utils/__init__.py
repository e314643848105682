"""
Filesystem helpers shared by the loaders, the generator and the CLI.
"""

from .helpers import ensure_dir, is_image_type, cleanup_output, IMAGE_EXTENSIONS

__all__ = [
    'ensure_dir',
    'is_image_type',
    'cleanup_output',
    'IMAGE_EXTENSIONS'
]
