"""
statsectors - Statistical sector polygons as linked open data.

Reads a vector dataset of statistical sectors and publishes each sector as
a ramon:LAURegion with containment links, Dutch/French labels and a
GeoSPARQL WKT geometry.
"""

__version__ = "0.1.0"
