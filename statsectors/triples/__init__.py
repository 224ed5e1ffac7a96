"""
Triples Module - RDF triple generation and serialization.

This module converts statistical sector features to RDF triples.

Components:
- identifiers.py: IRI construction and sector code normalization
- geometry.py: WKT serialization of sector polygons
- mapper.py: Maps features to triples in a run-scoped graph
- serializer.py: Writes graphs to N-Triples/Turtle/RDF-XML/JSON-LD
- validator.py: Validates the graph (structure + SHACL)
"""

from .geometry import to_wkt
from .identifiers import IdentifierBuilder, check_iri, normalize_sector_code
from .mapper import (
    RAMON,
    SPATIAL,
    FeatureMapper,
    MappingOutcome,
    MappingStats,
    create_graph,
)
from .serializer import FORMATS, TripleSerializer, serialize_to_file
from .validator import TripleValidator, ValidationResult, validate_graph

__all__ = [
    # Identifiers
    "IdentifierBuilder",
    "check_iri",
    "normalize_sector_code",
    # Geometry
    "to_wkt",
    # Mapper
    "FeatureMapper",
    "MappingOutcome",
    "MappingStats",
    "create_graph",
    # Namespaces
    "RAMON",
    "SPATIAL",
    # Serializer
    "FORMATS",
    "TripleSerializer",
    "serialize_to_file",
    # Validator
    "TripleValidator",
    "ValidationResult",
    "validate_graph",
]
