"""
WKT serialization of sector geometries, delegated to shapely.
"""

from collections.abc import Mapping
from typing import Any

from shapely.geometry import MultiPolygon, Polygon, shape
from shapely.geometry.base import BaseGeometry

from statsectors.errors import GeometrySerializationError

SUPPORTED_TYPES = (Polygon, MultiPolygon)


def to_wkt(geometry: Any) -> str:
    """
    Return the Well-Known-Text of a polygon or multi-polygon.

    Accepts shapely geometries and GeoJSON-like mappings. The text is
    shapely's own WKT output, unchanged.

    Raises:
        GeometrySerializationError: for missing, empty, non-polygonal or
            unreadable geometries
    """
    if geometry is None:
        raise GeometrySerializationError("feature has no geometry")

    if isinstance(geometry, Mapping):
        try:
            geometry = shape(geometry)
        except Exception as e:
            raise GeometrySerializationError(f"cannot read geometry: {e}") from e

    if not isinstance(geometry, BaseGeometry):
        raise GeometrySerializationError(f"not a geometry: {type(geometry).__name__}")
    if not isinstance(geometry, SUPPORTED_TYPES):
        raise GeometrySerializationError(f"unsupported geometry type {geometry.geom_type}")
    if geometry.is_empty:
        raise GeometrySerializationError("geometry is empty")

    try:
        return geometry.wkt
    except Exception as e:
        raise GeometrySerializationError(f"cannot write WKT: {e}") from e
