"""
Feature Mapper - Converts statistical sector features to RDF triples.

Each feature yields at most one ramon:LAURegion entity:

    <nis/{sector}#id> a ramon:LAURegion ;
        spatial:PP <nuts/{nuts3}>, <nis/{municipality}> ;
        rdfs:label "..."@nl, "..."@fr ;
        geo:asWKT "POLYGON ((...))"^^geo:wktLiteral .
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from rdflib import Graph, Literal, Namespace, URIRef
from rdflib.namespace import GEO, RDF, RDFS

from statsectors.config.settings import NamespacesConfig, Settings
from statsectors.errors import (
    GeometrySerializationError,
    InvalidIdentifierError,
    MissingAttributeError,
)
from statsectors.loaders.shapefile_loader import SectorFeature
from statsectors.triples.geometry import to_wkt
from statsectors.triples.identifiers import IdentifierBuilder, normalize_sector_code

logger = logging.getLogger(__name__)


# =============================================================================
# NAMESPACE DEFINITIONS
# =============================================================================

# Eurostat RAMON geographic ontology (LAURegion, NUTSRegion)
RAMON = Namespace("http://ec.europa.eu/eurostat/ramon/ontologies/geographic.rdf#")

# NeoGeo spatial relations (PP = proper part of)
SPATIAL = Namespace("http://geovocab.org/spatial#")


def create_graph(namespaces: NamespacesConfig | None = None) -> Graph:
    """
    Create an empty graph for one conversion run, with prefixes bound.

    Args:
        namespaces: Namespace settings (defaults if None)
    """
    namespaces = namespaces or NamespacesConfig()
    graph = Graph()
    graph.bind("rdf", RDF)
    graph.bind("rdfs", RDFS)
    graph.bind("geo", GEO)
    graph.bind("spatial", Namespace(namespaces.spatial))
    graph.bind("ramon", Namespace(namespaces.ramon))
    graph.bind("nis", Namespace(namespaces.nis))
    graph.bind("nuts", Namespace(namespaces.nuts))
    return graph


# =============================================================================
# MAPPING RESULTS
# =============================================================================

SKIP_MISSING_CODE = "missing_sector_code"
SKIP_INVALID_IDENTIFIER = "invalid_identifier"


@dataclass
class MappingOutcome:
    """What happened to a single feature."""

    index: int
    subject: URIRef | None = None
    triples: int = 0
    skipped: str | None = None
    missing_links: list[str] = field(default_factory=list)
    invalid_links: list[str] = field(default_factory=list)
    missing_labels: list[str] = field(default_factory=list)

    @property
    def emitted(self) -> bool:
        return self.subject is not None


@dataclass
class MappingStats:
    """Counters over a whole run."""

    features_read: int = 0
    entities_emitted: int = 0
    triples_emitted: int = 0
    skipped: dict[str, int] = field(default_factory=dict)
    missing_links: int = 0
    invalid_links: int = 0
    missing_labels: int = 0

    def record(self, outcome: MappingOutcome) -> None:
        """Add one feature's outcome to the counters."""
        self.features_read += 1
        self.triples_emitted += outcome.triples
        if outcome.emitted:
            self.entities_emitted += 1
        if outcome.skipped:
            self.skipped[outcome.skipped] = self.skipped.get(outcome.skipped, 0) + 1
        self.missing_links += len(outcome.missing_links)
        self.invalid_links += len(outcome.invalid_links)
        self.missing_labels += len(outcome.missing_labels)

    @property
    def features_skipped(self) -> int:
        return sum(self.skipped.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "features_read": self.features_read,
            "entities_emitted": self.entities_emitted,
            "triples_emitted": self.triples_emitted,
            "features_skipped": self.features_skipped,
            "skipped_by_reason": dict(self.skipped),
            "missing_links": self.missing_links,
            "invalid_links": self.invalid_links,
            "missing_labels": self.missing_labels,
        }


# =============================================================================
# FEATURE MAPPER
# =============================================================================


class FeatureMapper:
    """
    Maps SectorFeature records to triples in a caller-owned graph.

    The mapper keeps no state between features; everything it needs comes
    from the settings it was built with.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize the mapper.

        Args:
            settings: Configuration (namespaces, attribute names, identifier rules)
        """
        settings = settings or Settings()
        self.attributes = settings.attributes
        self.sector_prefix = settings.namespaces.nis
        self.region_class = URIRef(settings.namespaces.ramon + "LAURegion")
        self.part_of = URIRef(settings.namespaces.spatial + "PP")
        self.identifiers = IdentifierBuilder(
            suffix=settings.identifiers.suffix,
            percent_encode=settings.identifiers.percent_encode,
        )

    def subject_for(self, sector_code: str) -> URIRef | None:
        """Build the entity IRI for a raw sector code."""
        return self.identifiers.build(self.sector_prefix, normalize_sector_code(sector_code))

    def map_feature(self, feature: SectorFeature, graph: Graph) -> MappingOutcome:
        """
        Add the triples for one feature to the graph.

        Returns:
            MappingOutcome describing emitted and skipped parts

        Raises:
            GeometrySerializationError: if the geometry cannot be written as WKT
        """
        outcome = MappingOutcome(index=feature.index)

        try:
            code = feature.require_sector_code(self.attributes.sector_code)
            subject = self.subject_for(code)
        except MissingAttributeError as e:
            logger.debug("Skipping feature: %s", e)
            outcome.skipped = SKIP_MISSING_CODE
            return outcome
        except InvalidIdentifierError as e:
            logger.warning("Skipping feature %d: %s", feature.index, e)
            outcome.skipped = SKIP_INVALID_IDENTIFIER
            return outcome

        if subject is None:
            logger.debug("Skipping feature %d: empty sector code", feature.index)
            outcome.skipped = SKIP_MISSING_CODE
            return outcome

        # Serialize first so a corrupt geometry leaves no partial entity behind
        try:
            wkt = to_wkt(feature.geometry)
        except GeometrySerializationError as e:
            raise GeometrySerializationError(str(e), feature_index=feature.index) from e

        statements: list[tuple[URIRef, Any]] = [(RDF.type, self.region_class)]
        statements += self._containment(feature, outcome)
        statements += self._labels(feature, outcome)
        statements.append((GEO.asWKT, Literal(wkt, datatype=GEO.wktLiteral)))

        for predicate, obj in statements:
            graph.add((subject, predicate, obj))

        outcome.subject = subject
        outcome.triples = len(statements)
        return outcome

    def _containment(
        self, feature: SectorFeature, outcome: MappingOutcome
    ) -> list[tuple[URIRef, URIRef]]:
        """spatial:PP links, each built or skipped on its own."""
        links = []
        for link in self.attributes.containment:
            value = feature.containment.get(link.attribute)
            if link.normalize:
                value = normalize_sector_code(value)
            try:
                target = self.identifiers.build(link.namespace, value, suffix=link.suffix)
            except InvalidIdentifierError as e:
                logger.warning("Feature %d: dropping %s link: %s", feature.index, link.attribute, e)
                outcome.invalid_links.append(link.attribute)
                continue
            if target is None:
                outcome.missing_links.append(link.attribute)
                continue
            links.append((self.part_of, target))
        return links

    def _labels(self, feature: SectorFeature, outcome: MappingOutcome) -> list[tuple[URIRef, Literal]]:
        """One rdfs:label per configured language that has a name."""
        labels = []
        for lang in self.attributes.labels:
            name = feature.labels.get(lang)
            if name is None:
                outcome.missing_labels.append(lang)
                continue
            labels.append((RDFS.label, Literal(name, lang=lang)))
        return labels

    def map_features(self, features: Iterable[SectorFeature], graph: Graph) -> MappingStats:
        """
        Map every feature of an iterable, in order.

        Per-feature problems are counted; a geometry error stops the run.
        """
        stats = MappingStats()
        for feature in features:
            stats.record(self.map_feature(feature, graph))

        logger.info(
            "Mapped %d features: %d entities, %d skipped, %d triples",
            stats.features_read,
            stats.entities_emitted,
            stats.features_skipped,
            stats.triples_emitted,
        )
        return stats
