"""Tests for loading reference datasets from YAML."""

from __future__ import annotations

from pathlib import Path

import pytest

from steady.core.reference.loader import load_dataset_directory, load_dataset_file
from steady.core.reference.models import ValueRange
from steady.core.reference.registry import (
    DatasetLoadError,
    ReferenceDatasetError,
    ReferenceDatasetStore,
)

_BUNDLED = (
    Path(__file__).resolve().parents[4] / "src" / "steady" / "domains" / "health" / "datasets"
)

_MINIMAL = """\
id: {id}
version: "1.0"
display_name: {id}
description: test dataset
patterns:
  stable:
    - label: Normal
      description: normal readings
      vitals:
        heartRate: {{min: 60, max: 90}}
        weight: 150
        mood: good
"""


def _write_all(directory: Path, ids=("hypertension", "diabetes", "heartrisk")) -> None:
    for dataset_id in ids:
        (directory / f"{dataset_id}.yaml").write_text(_MINIMAL.format(id=dataset_id))


class TestBundledDatasets:
    def test_bundled_datasets_load(self):
        store = ReferenceDatasetStore()
        count = load_dataset_directory(_BUNDLED, store)
        assert count == 3
        assert {d.id for d in store.all()} == {"hypertension", "diabetes", "heartrisk"}

    def test_every_bundled_dataset_has_all_categories(self, dataset_store):
        for dataset in dataset_store.all():
            for category in ("stable", "at_risk", "critical"):
                assert dataset.exemplars(category), f"{dataset.id} has no {category} patterns"

    def test_prompt_dict_is_json_ready(self, dataset_store):
        prompt = dataset_store.get("hypertension").as_prompt_dict()
        assert prompt["dataset"] == "Hypertension"
        stable = prompt["patterns"]["stable"][0]["vitals"]
        assert stable["bloodPressureSystolic"] == {"min": 90, "max": 129}


class TestLoadDatasetFile:
    def test_scalars_become_point_ranges_and_strings_stay(self, tmp_path):
        path = tmp_path / "hypertension.yaml"
        path.write_text(_MINIMAL.format(id="hypertension"))
        dataset = load_dataset_file(path)
        vitals = dataset.exemplars("stable")[0].vitals
        assert vitals["heartRate"] == ValueRange(60.0, 90.0)
        assert vitals["weight"] == ValueRange(150.0, 150.0)
        assert vitals["mood"] == "good"
        assert dataset.exemplars("critical") == ()

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("id: [unclosed\n")
        with pytest.raises(DatasetLoadError):
            load_dataset_file(path)

    def test_missing_required_key_raises(self, tmp_path):
        path = tmp_path / "noid.yaml"
        path.write_text("version: '1'\ndisplay_name: x\npatterns: {}\n")
        with pytest.raises(DatasetLoadError, match="Malformed"):
            load_dataset_file(path)

    def test_no_patterns_raises(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("id: x\nversion: '1'\ndisplay_name: x\npatterns: {}\n")
        with pytest.raises(DatasetLoadError, match="no patterns"):
            load_dataset_file(path)


class TestLoadDatasetDirectory:
    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(DatasetLoadError, match="does not exist"):
            load_dataset_directory(tmp_path / "nope", ReferenceDatasetStore())

    def test_missing_required_dataset_raises(self, tmp_path):
        _write_all(tmp_path, ids=("hypertension", "diabetes"))
        with pytest.raises(DatasetLoadError, match="heartrisk"):
            load_dataset_directory(tmp_path, ReferenceDatasetStore())

    def test_underscore_files_are_skipped(self, tmp_path):
        _write_all(tmp_path)
        (tmp_path / "_draft.yaml").write_text("not: [valid")
        assert load_dataset_directory(tmp_path, ReferenceDatasetStore()) == 3

    def test_duplicate_id_raises(self, tmp_path):
        _write_all(tmp_path)
        (tmp_path / "zz_copy.yaml").write_text(_MINIMAL.format(id="diabetes"))
        with pytest.raises(DatasetLoadError, match="Duplicate"):
            load_dataset_directory(tmp_path, ReferenceDatasetStore())


class TestReferenceDatasetStore:
    def test_frozen_store_rejects_registration(self, dataset_store, tmp_path):
        path = tmp_path / "extra.yaml"
        path.write_text(_MINIMAL.format(id="extra"))
        assert dataset_store.frozen
        with pytest.raises(ReferenceDatasetError, match="frozen"):
            dataset_store.register(load_dataset_file(path))

    def test_contains_and_len(self, dataset_store):
        assert "diabetes" in dataset_store
        assert "asthma" not in dataset_store
        assert len(dataset_store) == 3
