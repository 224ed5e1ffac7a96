"""Loaders package for statistical sector datasets."""

from .shapefile_loader import (
    SectorFeature,
    SectorFeatureReader,
    clean_value,
    read_dataset,
)

__all__ = [
    "SectorFeature",
    "SectorFeatureReader",
    "clean_value",
    "read_dataset",
]
