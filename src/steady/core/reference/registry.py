"""Reference dataset store: in-memory index of loaded datasets."""

from __future__ import annotations

import logging

from steady.core.reference.models import ReferenceDataset

logger = logging.getLogger(__name__)


class ReferenceDatasetError(Exception):
    """Base exception for reference dataset problems."""


class DatasetLoadError(ReferenceDatasetError):
    """A dataset document could not be read, parsed, or registered."""


class ReferenceDatasetStore:
    """Immutable-after-startup registry of reference datasets.

    Datasets are registered while the process starts, then ``freeze()`` makes
    the store read-only so it can be shared by concurrent requests.
    """

    def __init__(self) -> None:
        self._datasets: dict[str, ReferenceDataset] = {}
        self._frozen = False

    def register(self, dataset: ReferenceDataset) -> None:
        """Add a dataset; duplicate ids and post-freeze registration are errors."""
        if self._frozen:
            raise ReferenceDatasetError(
                f"Cannot register dataset {dataset.id!r}: store is frozen"
            )
        if dataset.id in self._datasets:
            raise ReferenceDatasetError(f"Duplicate dataset id registered: {dataset.id!r}")
        self._datasets[dataset.id] = dataset

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, dataset_id: str) -> ReferenceDataset | None:
        """Look up a dataset by id."""
        return self._datasets.get(dataset_id)

    def all(self) -> list[ReferenceDataset]:
        """Return all registered datasets."""
        return list(self._datasets.values())

    def __contains__(self, dataset_id: object) -> bool:
        return dataset_id in self._datasets

    def __len__(self) -> int:
        return len(self._datasets)
