import logging
from pathlib import Path

import geopandas as gpd
import pytest
from rdflib import Graph
from shapely.geometry import Polygon

from statsectors.config.settings import Settings
from statsectors.loaders import SectorFeature
from statsectors.triples import FeatureMapper, create_graph

SQUARE = Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])

SECTOR_ROWS = [
    {
        "Cs012011": "12345",
        "Nis_012011": "21004",
        "Nuts3_new": "BE100",
        "Sector_nl": "Centrum",
        "Sector_fr": "Centre",
    },
    {
        "Cs012011": "21004A00-",
        "Nis_012011": "21004",
        "Nuts3_new": "BE100",
        "Sector_nl": "Zavel",
        "Sector_fr": "Sablon",
    },
    {
        "Cs012011": None,
        "Nis_012011": "21004",
        "Nuts3_new": "BE100",
        "Sector_nl": "Nergens",
        "Sector_fr": "Nulle part",
    },
]


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI replaces root handlers; put pytest's back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.disable(logging.NOTSET)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def mapper(settings) -> FeatureMapper:
    return FeatureMapper(settings)


@pytest.fixture
def graph(settings) -> Graph:
    return create_graph(settings.namespaces)


@pytest.fixture
def make_feature():
    """Build a SectorFeature with sensible defaults."""

    def _make(
        sector_code="12345",
        labels=None,
        containment=None,
        geometry=SQUARE,
        index=0,
    ) -> SectorFeature:
        return SectorFeature(
            index=index,
            sector_code=sector_code,
            labels={"nl": "Centrum", "fr": "Centre"} if labels is None else labels,
            containment=(
                {"Nuts3_new": "BE100", "Nis_012011": "21004"} if containment is None else containment
            ),
            geometry=geometry,
        )

    return _make


def write_sectors(path: Path, rows: list[dict], geometries: list, driver: str | None = None) -> Path:
    """Write rows and geometries as a vector dataset."""
    frame = gpd.GeoDataFrame(rows, geometry=geometries, crs="EPSG:31370")
    if driver:
        frame.to_file(path, driver=driver)
    else:
        frame.to_file(path)
    return path


@pytest.fixture
def sectors_shapefile(tmp_path) -> Path:
    """Shapefile with two valid sectors and one without a sector code."""
    geometries = [
        SQUARE,
        Polygon([(1, 0), (2, 0), (2, 1), (1, 1)]),
        Polygon([(2, 0), (3, 0), (3, 1), (2, 1)]),
    ]
    return write_sectors(tmp_path / "sectors.shp", SECTOR_ROWS, geometries)
