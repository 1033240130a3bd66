"""Reference dataset loader: reads YAML definitions from disk."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from steady.core.reference.models import (
    PATTERN_CATEGORIES,
    DatasetKey,
    PatternExemplar,
    ReferenceDataset,
    ValueRange,
)
from steady.core.reference.registry import DatasetLoadError, ReferenceDatasetStore

logger = logging.getLogger(__name__)

REQUIRED_DATASETS = tuple(key.value for key in DatasetKey)


def load_dataset_directory(
    directory: str | Path,
    store: ReferenceDatasetStore,
    *,
    required: tuple[str, ...] = REQUIRED_DATASETS,
) -> int:
    """Load all YAML dataset definitions from a directory into ``store``.

    Skips files starting with underscore. Any unreadable file, or a missing
    required dataset, raises DatasetLoadError: datasets are a startup
    dependency, not a per-request one.

    Returns the number of datasets loaded.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise DatasetLoadError(f"Reference dataset directory does not exist: {directory}")

    count = 0
    for path in sorted(directory.glob("*.yaml")):
        if path.name.startswith("_"):
            continue
        dataset = load_dataset_file(path)
        try:
            store.register(dataset)
        except Exception as exc:
            raise DatasetLoadError(f"Failed to register dataset from {path}: {exc}") from exc
        count += 1
        logger.info("Loaded reference dataset: %s (v%s)", dataset.id, dataset.version)

    missing = [key for key in required if key not in store]
    if missing:
        raise DatasetLoadError(
            f"Required reference datasets missing from {directory}: {', '.join(missing)}"
        )
    return count


def load_dataset_file(path: Path) -> ReferenceDataset:
    """Parse a YAML file into a ReferenceDataset."""
    try:
        with open(path, encoding="utf-8") as f:
            data: dict[str, Any] = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise DatasetLoadError(f"Failed to read dataset {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise DatasetLoadError(f"Dataset {path} is not a mapping")

    try:
        patterns_data = data["patterns"]
        patterns = {
            category: tuple(_parse_exemplar(item) for item in patterns_data.get(category) or [])
            for category in PATTERN_CATEGORIES
        }
        dataset = ReferenceDataset(
            id=str(data["id"]),
            version=str(data["version"]),
            display_name=data["display_name"],
            description=data.get("description", "").strip(),
            patterns=patterns,
            units=data.get("units", {}),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise DatasetLoadError(f"Malformed dataset {path}: {exc!r}") from exc

    if not any(dataset.patterns.values()):
        raise DatasetLoadError(f"Dataset {path} defines no patterns")
    return dataset


def _parse_exemplar(item: dict[str, Any]) -> PatternExemplar:
    vitals: dict[str, ValueRange | str] = {}
    for name, value in (item.get("vitals") or {}).items():
        if isinstance(value, dict):
            vitals[name] = ValueRange(
                min=_as_float(value.get("min")),
                max=_as_float(value.get("max")),
            )
        elif isinstance(value, (int, float)):
            vitals[name] = ValueRange(min=float(value), max=float(value))
        else:
            vitals[name] = str(value)
    return PatternExemplar(
        label=item["label"],
        description=item.get("description", "").strip(),
        vitals=vitals,
    )


def _as_float(value: Any) -> float | None:
    return None if value is None else float(value)
