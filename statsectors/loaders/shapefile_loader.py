"""
Sector Loader - Reads statistical sector polygons from a vector dataset.

This module provides:
- SectorFeature, the typed record handed to the feature mapper
- SectorFeatureReader, a scoped, forward-only reader built on geopandas
- Attribute value coercion (NaN / blank -> absent, everything else -> str)
"""

import logging
import math
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import geopandas as gpd
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from statsectors.config.settings import AttributesConfig
from statsectors.errors import InputOpenError, MissingAttributeError

logger = logging.getLogger(__name__)


# =============================================================================
# VALUE COERCION
# =============================================================================


def clean_value(value: Any) -> str | None:
    """
    Turn a raw attribute value into a string, or None when absent.

    Numbers are not reformatted: a code stored as a float column comes out
    as "12345.0" and is left to the sector code normalizer.
    """
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


# =============================================================================
# FEATURE RECORD
# =============================================================================


class SectorFeature(BaseModel):
    """
    One statistical sector as read from the dataset.

    Only attributes named in the configuration are kept; absent values are
    simply missing from the mappings.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    index: int = Field(description="Row position in the dataset")
    sector_code: str | None = Field(default=None, description="Raw sector code")
    labels: dict[str, str] = Field(default_factory=dict, description="language -> name")
    containment: dict[str, str] = Field(
        default_factory=dict, description="attribute -> raw containment code"
    )
    geometry: Any = Field(default=None, description="Default geometry (shapely)")

    @classmethod
    def from_record(
        cls,
        index: int,
        record: Mapping[str, Any],
        geometry: Any,
        attributes: AttributesConfig,
    ) -> "SectorFeature":
        """Build a feature from a row-shaped mapping of attribute values."""
        labels = {}
        for lang, name in attributes.labels.items():
            value = clean_value(record.get(name))
            if value is not None:
                labels[lang] = value

        containment = {}
        for link in attributes.containment:
            value = clean_value(record.get(link.attribute))
            if value is not None:
                containment[link.attribute] = value

        return cls(
            index=index,
            sector_code=clean_value(record.get(attributes.sector_code)),
            labels=labels,
            containment=containment,
            geometry=geometry,
        )

    def require_sector_code(self, attribute: str = "sector code") -> str:
        """Return the sector code or raise MissingAttributeError."""
        if self.sector_code is None:
            raise MissingAttributeError(attribute, self.index)
        return self.sector_code


# =============================================================================
# READER
# =============================================================================


def read_dataset(
    path: Path | str, encoding: str = "UTF-8", layer: str | None = None
) -> gpd.GeoDataFrame:
    """
    Read a vector dataset into a GeoDataFrame.

    Raises:
        InputOpenError: if the file is missing, unreadable, or has no geometry
    """
    path = Path(path)
    if not path.exists():
        raise InputOpenError(path, "file not found")

    kwargs: dict[str, Any] = {"encoding": encoding}
    if layer:
        kwargs["layer"] = layer

    try:
        frame = gpd.read_file(path, **kwargs)
    except Exception as e:
        raise InputOpenError(path, str(e)) from e

    if not isinstance(frame, gpd.GeoDataFrame) or frame.active_geometry_name is None:
        raise InputOpenError(path, "dataset has no geometry column")

    attribute_columns = [c for c in frame.columns if c != frame.active_geometry_name]
    if not attribute_columns:
        raise InputOpenError(path, "dataset has no attribute table")

    return frame


class SectorFeatureReader:
    """
    Forward-only reader over the sectors of a vector dataset.

    Use as a context manager; the dataset is released on exit, whatever the
    exit path:

        with SectorFeatureReader(path, settings.attributes) as reader:
            for feature in reader:
                ...
    """

    def __init__(
        self,
        path: Path | str,
        attributes: AttributesConfig,
        encoding: str = "UTF-8",
        layer: str | None = None,
    ):
        self.path = Path(path)
        self.attributes = attributes
        self.encoding = encoding
        self.layer = layer
        self._frame: gpd.GeoDataFrame | None = None

    def open(self) -> None:
        """Read the dataset and check the configured attributes."""
        self._frame = read_dataset(self.path, encoding=self.encoding, layer=self.layer)
        logger.info("Opened %s: %d features", self.path, len(self._frame))

        columns = set(self._frame.columns)
        wanted = [self.attributes.sector_code, *self.attributes.labels.values()]
        wanted += [link.attribute for link in self.attributes.containment]
        for name in wanted:
            if name not in columns:
                logger.warning("Attribute '%s' not found in %s", name, self.path.name)

    def close(self) -> None:
        """Release the dataset."""
        if self._frame is not None:
            logger.debug("Closing %s", self.path)
        self._frame = None

    def __enter__(self) -> "SectorFeatureReader":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __len__(self) -> int:
        return 0 if self._frame is None else len(self._frame)

    def __iter__(self) -> Iterator[SectorFeature]:
        if self._frame is None:
            raise RuntimeError("Reader is not open")

        geometry_name = self._frame.active_geometry_name
        for position, (_, row) in enumerate(self._frame.iterrows()):
            geometry = row[geometry_name]
            yield SectorFeature.from_record(position, row, geometry, self.attributes)
