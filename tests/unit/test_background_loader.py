"""
Unit tests for background loading.
"""
import logging
import random

import pytest

from targetgen.data.background_loader import BackgroundLoader
from targetgen.errors import ConfigurationError, NotADirectory


@pytest.mark.unit
class TestBackgroundLoader:
    """Tests for loading and drawing backgrounds."""

    def test_loads_background(self, backgrounds_dir):
        loader = BackgroundLoader(backgrounds_dir)

        assert len(loader) == 1
        background = loader.backgrounds[0]
        assert (background.width, background.height) == (800, 600)
        assert background.image.shape == (600, 800, 4)
        assert background.filename.endswith("background.png")
        assert "\\" not in background.filename
        assert background.date_captured

    def test_skips_undecodable_files(self, backgrounds_dir, caplog):
        (backgrounds_dir / "broken.png").write_bytes(b"not an image")
        (backgrounds_dir / "notes.txt").write_text("ignored")

        with caplog.at_level(logging.WARNING):
            loader = BackgroundLoader(backgrounds_dir)

        assert len(loader) == 1
        assert "broken.png" in caplog.text

    def test_empty_directory(self, tmp_path):
        with pytest.raises(ConfigurationError):
            BackgroundLoader(tmp_path)

    def test_not_a_directory(self, tmp_path):
        with pytest.raises(NotADirectory):
            BackgroundLoader(tmp_path / "missing")

    def test_random_background(self, backgrounds_dir):
        loader = BackgroundLoader(backgrounds_dir)

        assert loader.random(random.Random(0)) is loader.backgrounds[0]
