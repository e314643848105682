"""
Shared fixtures for all tests.

This module builds background and object directories on disk so unit and
e2e tests can run the loaders and the generator against real files.
"""
import pytest
import json
import sys
from pathlib import Path

import cv2
import numpy as np

# Add src to path for imports when the package is not installed
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single module")
    config.addinivalue_line("markers", "e2e: end-to-end generation runs on temporary directories")


# =============================================================================
# Image Helpers
# =============================================================================

def make_cutout(width, height, color=(0, 0, 255), border=2):
    """BGRA cutout: opaque colored body with a fully transparent border."""
    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[border:height - border, border:width - border] = (*color, 255)
    return img


def write_background(folder, name="background.png", width=800, height=600, seed=42):
    rng = np.random.RandomState(seed)
    img = rng.randint(0, 255, (height, width, 3), dtype=np.uint8)
    path = Path(folder) / name
    cv2.imwrite(str(path), img)
    return path


# =============================================================================
# Directory Fixtures
# =============================================================================

DEFAULT_CATEGORIES = [
    {"id": 0, "name": "bicycle", "supercategory": "vehicle"},
    {"id": 1, "name": "person"},
]

DEFAULT_OBJECTS = [
    # (file_name, native width, native height, object_width_meters, category_id)
    ("bicycle_1.png", 200, 100, 1.73, 0),
    ("person_1.png", 100, 200, 0.5, 1),
    ("person_2.png", 120, 200, 0.6, 1),
]


@pytest.fixture
def make_objects_dir(tmp_path):
    """
    Factory writing an objects directory.

    Call with a list of (file_name, width, height, width_meters, category_id)
    tuples; ``metadata`` replaces the generated objects.json content and
    ``extra_entries`` are appended to its objects list.
    """
    def _make(objects=DEFAULT_OBJECTS, categories=DEFAULT_CATEGORIES,
              metadata=None, extra_entries=(), name="objects", write_metadata=True):
        folder = tmp_path / name
        folder.mkdir(parents=True, exist_ok=True)

        entries = []
        for file_name, width, height, meters, category_id in objects:
            cv2.imwrite(str(folder / file_name), make_cutout(width, height))
            entries.append({
                "file_name": file_name,
                "object_width_meters": meters,
                "category_id": category_id
            })
        entries.extend(extra_entries)

        if write_metadata:
            content = metadata if metadata is not None else {"categories": categories, "objects": entries}
            with open(folder / "objects.json", "w") as f:
                json.dump(content, f)
        return folder

    return _make


@pytest.fixture
def objects_dir(make_objects_dir):
    """Objects directory with one bicycle and two persons."""
    return make_objects_dir()


@pytest.fixture
def single_object_dir(make_objects_dir):
    """Objects directory holding only a 1.73m wide bicycle."""
    return make_objects_dir(objects=[DEFAULT_OBJECTS[0]], name="single_object")


@pytest.fixture
def backgrounds_dir(tmp_path):
    """Directory with a single 800x600 background."""
    folder = tmp_path / "backgrounds"
    folder.mkdir()
    write_background(folder)
    return folder


@pytest.fixture
def temp_output_dir(tmp_path):
    """Create a temporary output directory."""
    output_dir = tmp_path / "output"
    output_dir.mkdir()
    return output_dir


@pytest.fixture
def annotations_path(tmp_path):
    return tmp_path / "annotations" / "annotations.json"
