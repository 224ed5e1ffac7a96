"""
Triple Validator - Checks the generated sector graph before it is written.

Performs structural checks on every ramon:LAURegion entity and, when a
shapes file is available, SHACL validation with pyshacl.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pyshacl
from rdflib import BNode, Graph, Literal, Namespace, URIRef
from rdflib.collection import Collection
from rdflib.namespace import GEO, RDF, RDFS

from statsectors.triples.mapper import RAMON, SPATIAL

logger = logging.getLogger(__name__)

SH = Namespace("http://www.w3.org/ns/shacl#")


# =============================================================================
# VALIDATION RESULT
# =============================================================================


@dataclass
class ValidationResult:
    """Result of triple validation."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    info: dict[str, Any] = field(default_factory=dict)

    def add_error(self, message: str) -> None:
        """Add an error message."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def summary(self) -> str:
        """Get a summary of the validation result."""
        status = "VALID" if self.is_valid else "INVALID"
        return f"Validation {status}: {len(self.errors)} errors, {len(self.warnings)} warnings"


# =============================================================================
# TRIPLE VALIDATOR
# =============================================================================


class TripleValidator:
    """
    Validates a sector graph.

    Performs:
    - Non-empty check
    - Namespace binding check (spatial, geo)
    - Per-entity cardinalities: one rdf:type, one geo:asWKT, at most one
      label per language, at least one spatial:PP link
    - Literal well-formedness (no empty literals, WKT typed as wktLiteral)
    - SHACL validation against a shapes file (optional)
    """

    REQUIRED_PREFIXES = ("spatial", "geo")

    def __init__(
        self,
        shapes_path: Path | str | None = None,
        region_class: URIRef = RAMON.LAURegion,
        part_of: URIRef = SPATIAL.PP,
        languages: list[str] | None = None,
    ):
        """
        Initialize the validator.

        Args:
            shapes_path: Optional path to SHACL shapes file (.ttl)
            region_class: Class of the sector entities
            part_of: Containment predicate
            languages: Label languages the shapes should allow (as written
                in the shapes file if None)
        """
        self.region_class = region_class
        self.part_of = part_of
        self.shacl_graph = None
        if shapes_path:
            self._load_shacl_shapes(shapes_path)
        if self.shacl_graph is not None:
            self._align_shapes(languages)

    def _align_shapes(self, languages: list[str] | None) -> None:
        """
        Point the loaded shapes at the configured schema.

        The bundled shapes are written for ramon:LAURegion, spatial:PP and
        nl/fr labels; target class, containment path and label language
        constraints are rewritten to the values this validator was built with.
        """
        shapes = self.shacl_graph

        if self.region_class != RAMON.LAURegion:
            for shape in list(shapes.subjects(SH.targetClass, RAMON.LAURegion)):
                shapes.set((shape, SH.targetClass, self.region_class))

        if self.part_of != SPATIAL.PP:
            for prop in list(shapes.subjects(SH.path, SPATIAL.PP)):
                shapes.set((prop, SH.path, self.part_of))

        if languages is None:
            return
        for prop in list(shapes.subjects(SH.path, RDFS.label)):
            for head in list(shapes.objects(prop, SH.languageIn)):
                Collection(shapes, head).clear()
                shapes.remove((prop, SH.languageIn, head))
                new_head = BNode() if languages else RDF.nil
                if languages:
                    Collection(shapes, new_head, [Literal(lang) for lang in languages])
                shapes.add((prop, SH.languageIn, new_head))
            if (prop, SH.maxCount, None) in shapes:
                shapes.set((prop, SH.maxCount, Literal(len(languages))))
        logger.debug("SHACL label languages set to %s", languages)

    def _load_shacl_shapes(self, path: Path | str) -> None:
        """Load SHACL shapes from a Turtle file."""
        path = Path(path)
        if path.exists():
            self.shacl_graph = Graph()
            self.shacl_graph.parse(path, format="turtle")
            logger.info("Loaded SHACL shapes from %s (%d triples)", path, len(self.shacl_graph))
        else:
            logger.warning("SHACL shapes file not found: %s", path)

    def validate(self, graph: Graph) -> ValidationResult:
        """
        Validate an RDF graph.

        Args:
            graph: RDF graph to validate

        Returns:
            ValidationResult with errors and warnings
        """
        result = ValidationResult(is_valid=True)

        logger.info("TripleValidator: Checking graph size...")
        self._check_not_empty(graph, result)

        logger.info("TripleValidator: Validating namespace bindings...")
        self._check_namespaces(graph, result)

        logger.info("TripleValidator: Validating sector entities...")
        self._check_entities(graph, result)

        logger.info("TripleValidator: Validating literal well-formedness...")
        self._check_literals(graph, result)

        if self.shacl_graph is not None:
            logger.info("TripleValidator: Running SHACL validation...")
            self._check_shacl(graph, result)

        result.info["triple_count"] = len(graph)
        result.info["entity_count"] = len(set(graph.subjects(RDF.type, self.region_class)))

        logger.info("Validation complete: %s", result.summary())
        return result

    def _check_not_empty(self, graph: Graph, result: ValidationResult) -> None:
        """Check that graph is not empty."""
        if len(graph) == 0:
            result.add_warning("Graph is empty")

    def _check_namespaces(self, graph: Graph, result: ValidationResult) -> None:
        """Check that the output prefixes are bound."""
        bound_prefixes = {prefix for prefix, _ in graph.namespaces()}
        for prefix in self.REQUIRED_PREFIXES:
            if prefix not in bound_prefixes:
                result.add_warning(f"{prefix} namespace not bound")

    def _check_entities(self, graph: Graph, result: ValidationResult) -> None:
        """Check the cardinalities of every sector entity."""
        for entity in set(graph.subjects(RDF.type, self.region_class)):
            types = list(graph.objects(entity, RDF.type))
            if len(types) != 1:
                result.add_error(f"{entity} has {len(types)} rdf:type statements")

            geometries = list(graph.objects(entity, GEO.asWKT))
            if len(geometries) != 1:
                result.add_error(f"{entity} has {len(geometries)} geo:asWKT literals")

            if not any(True for _ in graph.objects(entity, self.part_of)):
                result.add_warning(f"{entity} has no spatial:PP link")

            languages: dict[str | None, int] = {}
            for label in graph.objects(entity, RDFS.label):
                lang = label.language if isinstance(label, Literal) else None
                languages[lang] = languages.get(lang, 0) + 1
            for lang, count in languages.items():
                if count > 1:
                    result.add_error(f"{entity} has {count} labels in language {lang!r}")

    def _check_literals(self, graph: Graph, result: ValidationResult) -> None:
        """Check that literals are well-formed."""
        for s, p, o in graph:
            if not isinstance(o, Literal):
                continue
            if str(o) == "":
                result.add_warning(f"Empty literal for {p} on {s}")
            if p == GEO.asWKT and o.datatype != GEO.wktLiteral:
                result.add_error(f"WKT literal on {s} is not typed geo:wktLiteral")

    def _check_shacl(self, graph: Graph, result: ValidationResult) -> None:
        """Run SHACL validation using pyshacl."""
        try:
            conforms, results_graph, _ = pyshacl.validate(
                data_graph=graph,
                shacl_graph=self.shacl_graph,
                inference="none",
                abort_on_first=False,
                allow_infos=True,
                allow_warnings=True,
            )
        except Exception as e:
            logger.error("SHACL validation failed with exception: %s", e)
            result.add_warning(f"SHACL validation could not be completed: {e}")
            return

        violations = 0
        warnings_count = 0

        for report in results_graph.subjects(RDF.type, SH.ValidationResult):
            severity = results_graph.value(report, SH.resultSeverity)
            message = results_graph.value(report, SH.resultMessage)
            focus = results_graph.value(report, SH.focusNode)
            path = results_graph.value(report, SH.resultPath)

            detail = f"SHACL: {message}"
            if focus:
                detail += f" (node: {focus})"
            if path:
                detail += f" (path: {path})"

            if severity == SH.Violation:
                result.add_error(detail)
                violations += 1
            elif severity == SH.Warning:
                result.add_warning(detail)
                warnings_count += 1

        result.info["shacl_conforms"] = conforms
        result.info["shacl_violations"] = violations
        result.info["shacl_warnings"] = warnings_count

        if conforms:
            logger.info("SHACL validation: CONFORMS")
        else:
            logger.warning(
                "SHACL validation: %d violations, %d warnings", violations, warnings_count
            )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_graph(graph: Graph, shapes_path: Path | str | None = None) -> ValidationResult:
    """Quick function to validate a graph."""
    return TripleValidator(shapes_path=shapes_path).validate(graph)
