"""MCP resources for reference dataset discovery."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from fastmcp import FastMCP

if TYPE_CHECKING:
    from steady.core.reference.registry import ReferenceDatasetStore

from steady.core.reference.matcher import CONDITION_DATASETS, DEFAULT_DATASET_KEY


def register_dataset_resources(mcp: FastMCP, store: ReferenceDatasetStore) -> None:
    """Register reference dataset discovery resources on the MCP server."""

    @mcp.resource("dataset://health/registry")
    def health_dataset_registry_resource() -> str:
        """Discover the loaded reference datasets and the conditions they cover."""
        datasets = store.all()
        return json.dumps(
            {
                "dataset_count": len(datasets),
                "default_dataset": DEFAULT_DATASET_KEY.value,
                "datasets": [
                    {
                        "id": d.id,
                        "version": d.version,
                        "display_name": d.display_name,
                        "description": d.description,
                        "conditions": [
                            label.value
                            for label, key in CONDITION_DATASETS.items()
                            if key.value == d.id
                        ],
                        "pattern_counts": {
                            category: len(exemplars)
                            for category, exemplars in d.patterns.items()
                        },
                        "units": d.units,
                    }
                    for d in datasets
                ],
            },
            indent=2,
        )
