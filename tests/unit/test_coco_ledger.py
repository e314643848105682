"""
Unit tests for the COCO annotation ledger.
"""
import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from targetgen.export.coco_ledger import CocoCategory, CocoInfo, CocoLedger
from targetgen.generation.geometry import BoundingBox


@pytest.fixture
def categories():
    return [CocoCategory(0, "bicycle", "vehicle"), CocoCategory(1, "person")]


@pytest.fixture
def ledger(tmp_path, categories):
    return CocoLedger(tmp_path / "out" / "annotations.json", categories)


@pytest.mark.unit
class TestCocoLedgerIds:
    """Tests for id assignment."""

    def test_first_ids(self, ledger):
        image_id = ledger.add_image(800, 600, "0.png", "2024-01-01 00:00:00")
        annotation_id = ledger.add_annotation(image_id, 0, 0, [], 100.0, BoundingBox(1, 2, 10, 10))

        assert image_id == 0
        assert annotation_id == 1

    def test_ids_increase(self, ledger):
        image_ids = [ledger.add_image(10, 10, f"{i}.png", "") for i in range(5)]
        annotation_ids = [ledger.add_annotation(0, 1, 0, [], 1.0, [0, 0, 1, 1]) for _ in range(5)]

        assert image_ids == [0, 1, 2, 3, 4]
        assert annotation_ids == [1, 2, 3, 4, 5]

    def test_returned_id_matches_record(self, ledger):
        image_id = ledger.add_image(10, 10, "a.png", "")
        annotation_id = ledger.add_annotation(image_id, 0, 0, [], 1.0, [0, 0, 1, 1])

        assert ledger.images[-1]['id'] == image_id
        assert ledger.annotations[-1]['id'] == annotation_id
        assert ledger.annotations[-1]['image_id'] == image_id

    def test_concurrent_appends_get_unique_ids(self, ledger):
        def add(i):
            image_id = ledger.add_image(10, 10, f"{i}.png", "")
            annotation_ids = [ledger.add_annotation(image_id, 0, 0, [], 1.0, [0, 0, 1, 1]) for _ in range(3)]
            return image_id, annotation_ids

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(add, range(200)))

        image_ids = [image_id for image_id, _ in results]
        annotation_ids = [a for _, ids in results for a in ids]
        assert sorted(image_ids) == list(range(200))
        assert sorted(annotation_ids) == list(range(1, 601))
        assert len(ledger.images) == 200
        assert len(ledger.annotations) == 600


@pytest.mark.unit
class TestCocoLedgerRecords:
    """Tests for record content and the written document."""

    def test_image_record(self, ledger):
        ledger.add_image(800, 600, "0.png", "2024-01-01 10:00:00")

        assert ledger.images[0] == {
            'id': 0,
            'width': 800,
            'height': 600,
            'file_name': "0.png",
            'date_captured': "2024-01-01 10:00:00"
        }

    def test_optional_image_fields(self, ledger):
        ledger.add_image(8, 6, "0.png", "", license=2, coco_url="http://example.com/0.png")

        record = ledger.images[0]
        assert record['license'] == 2
        assert record['coco_url'] == "http://example.com/0.png"
        assert 'flickr_url' not in record

    def test_annotation_record(self, ledger):
        ledger.add_annotation(0, 1, 0, [], 390.0, BoundingBox(5, 6, 30, 13))

        assert ledger.annotations[0] == {
            'id': 1,
            'image_id': 0,
            'category_id': 1,
            'iscrowd': 0,
            'segmentation': [],
            'area': 390.0,
            'bbox': [5, 6, 30, 13]
        }

    def test_to_dict_is_a_snapshot(self, ledger):
        ledger.add_image(10, 10, "a.png", "")
        document = ledger.to_dict()
        document['images'][0]['file_name'] = "changed.png"

        assert ledger.images[0]['file_name'] == "a.png"

    def test_save_writes_coco_document(self, ledger):
        image_id = ledger.add_image(800, 600, "0.png", "")
        ledger.add_annotation(image_id, 0, 0, [], 100.0, [1, 2, 10, 10])

        path = ledger.save()

        assert path.exists()
        with open(path) as f:
            data = json.load(f)
        assert set(data) == {'info', 'licenses', 'images', 'annotations', 'categories'}
        assert data['licenses'] == []
        assert data['categories'] == [
            {'id': 0, 'name': "bicycle", 'supercategory': "vehicle"},
            {'id': 1, 'name': "person"}
        ]
        assert data['info']['description'] == 'Auto Generated Dataset in COCO format'
        assert data['annotations'][0]['bbox'] == [1, 2, 10, 10]

    def test_save_empty_ledger(self, ledger):
        with open(ledger.save()) as f:
            data = json.load(f)

        assert data['images'] == []
        assert data['annotations'] == []

    def test_custom_info(self, tmp_path, categories):
        info = CocoInfo(description="Field targets", year=2023)
        ledger = CocoLedger(tmp_path / "a.json", categories, info=info)

        document = ledger.to_dict()

        assert document['info']['description'] == "Field targets"
        assert document['info']['year'] == 2023
