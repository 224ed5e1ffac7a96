"""
Conversion Pipeline - Statistical sectors dataset to RDF.

Orchestrates the entire flow: open dataset → map features → validate →
serialize. One Pipeline.execute() call is one run with its own graph.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from rdflib import Graph, URIRef

from statsectors.config.settings import Settings, get_settings
from statsectors.errors import GraphValidationError
from statsectors.loaders import SectorFeatureReader
from statsectors.triples import (
    FeatureMapper,
    MappingStats,
    TripleSerializer,
    TripleValidator,
    ValidationResult,
    create_graph,
)
from statsectors.utils.logging import add_file_handler, remove_file_handler

logger = logging.getLogger(__name__)


# =============================================================================
# PIPELINE RESULT
# =============================================================================


@dataclass
class PipelineResult:
    """Result from a complete conversion run."""

    input_path: str = ""
    output_path: str | None = None
    output_format: str = "nt"

    # Timing
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None
    duration_seconds: float = 0.0

    # Mapping
    mapping: MappingStats = field(default_factory=MappingStats)
    triples_in_graph: int = 0
    graph_statistics: dict[str, Any] | None = None

    # Validation
    validated: bool = False
    validation_errors: list[str] = field(default_factory=list)
    validation_warnings: list[str] = field(default_factory=list)

    # Failure (fatal error message, if any)
    error: str | None = None

    def finalize(self) -> None:
        """Mark the run as complete and calculate duration."""
        self.completed_at = datetime.now()
        self.duration_seconds = (self.completed_at - self.started_at).total_seconds()

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.output_path is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "timing": {
                "started_at": self.started_at.isoformat(),
                "completed_at": self.completed_at.isoformat() if self.completed_at else None,
                "duration_seconds": round(self.duration_seconds, 2),
            },
            "input": self.input_path,
            "output": {
                "path": self.output_path,
                "format": self.output_format,
            },
            "mapping": self.mapping.to_dict(),
            "triples": {
                "in_graph": self.triples_in_graph,
                "statistics": self.graph_statistics,
            },
            "validation": {
                "performed": self.validated,
                "errors": len(self.validation_errors),
                "warnings": len(self.validation_warnings),
                "error_details": self.validation_errors[:10],
                "warning_details": self.validation_warnings[:10],
            },
            "error": self.error,
        }

    def print_summary(self) -> None:
        """Print a summary of the run."""
        print("\n" + "=" * 60)
        print("📊 CONVERSION SUMMARY")
        print("=" * 60)

        print(f"\n⏱️  Duration: {self.duration_seconds:.2f}s")
        print(f"📂 Input: {self.input_path}")
        print(
            f"📁 Features: {self.mapping.features_read} read, "
            f"{self.mapping.entities_emitted} sectors emitted"
        )

        if self.mapping.skipped:
            print(f"   ⏭️  Skipped: {self.mapping.features_skipped}")
            for reason, count in sorted(self.mapping.skipped.items()):
                print(f"      • {reason}: {count}")
        if self.mapping.missing_links or self.mapping.invalid_links:
            print(
                f"   🔗 Links dropped: {self.mapping.missing_links} missing, "
                f"{self.mapping.invalid_links} invalid"
            )
        if self.mapping.missing_labels:
            print(f"   🏷️  Labels missing: {self.mapping.missing_labels}")

        print(f"\n🔗 Triples: {self.triples_in_graph} in graph")

        if self.validated:
            if self.validation_errors:
                print(f"\n❌ Validation Errors: {len(self.validation_errors)}")
                for err in self.validation_errors[:5]:
                    print(f"   • {err}")
            if self.validation_warnings:
                print(f"\n⚠️  Validation Warnings: {len(self.validation_warnings)}")
            if not self.validation_errors and not self.validation_warnings:
                print("\n✅ Validation: passed")

        if self.output_path:
            print(f"\n💾 Output: {self.output_path} ({self.output_format})")
        if self.error:
            print(f"\n❌ Failed: {self.error}")

        print("=" * 60)


# =============================================================================
# PIPELINE
# =============================================================================


class Pipeline:
    """
    Statistical sectors conversion pipeline.

    Orchestrates:
    1. Opening the vector dataset
    2. Mapping each feature to triples
    3. Validating the graph
    4. Serializing it to the output file

    Usage:
        pipeline = Pipeline(settings)
        result = pipeline.execute("sectors.shp", "sectors.nt")
        result.print_summary()
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize the pipeline.

        Args:
            settings: Configuration settings (uses default if None)
        """
        self.settings = settings or get_settings()

        # Components (lazy initialization)
        self._mapper: FeatureMapper | None = None
        self._serializer: TripleSerializer | None = None
        self._validator: TripleValidator | None = None

    # =========================================================================
    # COMPONENT INITIALIZATION
    # =========================================================================

    @property
    def mapper(self) -> FeatureMapper:
        """Get or create the feature mapper."""
        if self._mapper is None:
            self._mapper = FeatureMapper(self.settings)
        return self._mapper

    @property
    def serializer(self) -> TripleSerializer:
        """Get or create serializer."""
        if self._serializer is None:
            self._serializer = TripleSerializer()
        return self._serializer

    @property
    def validator(self) -> TripleValidator:
        """Get or create validator."""
        if self._validator is None:
            ns = self.settings.namespaces
            self._validator = TripleValidator(
                shapes_path=self.settings.paths.shapes_file,
                region_class=URIRef(ns.ramon + "LAURegion"),
                part_of=URIRef(ns.spatial + "PP"),
                languages=list(self.settings.attributes.labels),
            )
        return self._validator

    # =========================================================================
    # PIPELINE STAGES
    # =========================================================================

    def convert(self, input_path: str | Path) -> tuple[Graph, MappingStats]:
        """
        Read the dataset and map every feature into a new graph.

        Raises:
            InputOpenError: if the dataset cannot be opened
            GeometrySerializationError: on a corrupt geometry
        """
        graph = create_graph(self.settings.namespaces)
        reader = SectorFeatureReader(
            input_path,
            self.settings.attributes,
            encoding=self.settings.input.encoding,
            layer=self.settings.input.layer,
        )
        with reader:
            stats = self.mapper.map_features(reader, graph)
        return graph, stats

    def validate(self, graph: Graph) -> ValidationResult:
        """Validate the generated graph."""
        logger.info("Validating graph with %d triples", len(graph))
        return self.validator.validate(graph)

    def serialize(self, graph: Graph, output_path: str | Path, output_format: str | None = None) -> Path:
        """
        Serialize graph to file.

        Args:
            graph: Graph to serialize
            output_path: Output file path
            output_format: Output format (default from settings)

        Returns:
            Path to output file
        """
        fmt = output_format or self.settings.output.format
        logger.info("Serializing to %s (format: %s)", output_path, fmt)
        return self.serializer.to_file(graph, output_path, format=fmt)

    def _save_report(self, report_path: Path, result: PipelineResult) -> None:
        """Save the run report as JSON."""
        report = result.to_dict()
        try:
            report_path.parent.mkdir(parents=True, exist_ok=True)
            with open(report_path, "w", encoding="utf-8") as f:
                json.dump(report, f, indent=2, ensure_ascii=False, default=str)
        except OSError as e:
            logger.error("Could not write report %s: %s", report_path, e)
            return
        logger.info("Saved report to %s", report_path)

    # =========================================================================
    # MAIN EXECUTION
    # =========================================================================

    def execute(
        self,
        input_path: str | Path,
        output_path: str | Path,
        output_format: str | None = None,
        skip_validation: bool = False,
        strict: bool | None = None,
        report_path: str | Path | None = None,
        log_file: str | Path | None = None,
    ) -> PipelineResult:
        """
        Execute one complete conversion run.

        Args:
            input_path: Vector dataset to read
            output_path: RDF file to write
            output_format: Override output format
            skip_validation: Skip the validation step
            strict: Refuse to write output when validation finds errors
            report_path: Optional JSON report file
            log_file: Optional plain-text log file for this run

        Returns:
            PipelineResult with run summary

        Raises:
            InputOpenError, GeometrySerializationError, OutputWriteError,
            GraphValidationError (strict mode only)
        """
        fmt = output_format or self.settings.output.format
        strict = self.settings.output.strict if strict is None else strict
        log_file = log_file or self.settings.paths.log_file
        result = PipelineResult(input_path=str(input_path), output_format=fmt)

        if log_file:
            add_file_handler(log_file)

        try:
            logger.info("--- STAGE 1: Mapping features from %s ---", input_path)
            graph, stats = self.convert(input_path)
            result.mapping = stats
            result.triples_in_graph = len(graph)

            if not skip_validation and self.settings.output.validate_graph:
                logger.info("--- STAGE 2: Validating graph ---")
                validation = self.validate(graph)
                result.validated = True
                result.validation_errors = validation.errors
                result.validation_warnings = validation.warnings
                if strict and validation.errors:
                    raise GraphValidationError(validation.errors)

            logger.info("--- STAGE 3: Serializing output ---")
            written = self.serialize(graph, output_path, fmt)
            result.output_path = str(written)
            if report_path:
                result.graph_statistics = self.serializer.get_statistics(graph)

        except Exception as e:
            logger.error("Conversion failed: %s", e)
            result.error = str(e)
            raise

        finally:
            result.finalize()

            if report_path:
                self._save_report(Path(report_path), result)

            if log_file:
                remove_file_handler()

        return result


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def run_pipeline(
    input_path: str | Path,
    output_path: str | Path,
    output_format: str = "nt",
    settings: Settings | None = None,
) -> PipelineResult:
    """
    Convenience function to run a complete conversion.

    Args:
        input_path: Vector dataset to read
        output_path: RDF file to write
        output_format: Output format (nt, turtle, xml, json-ld, n3)
        settings: Configuration (defaults if None)

    Returns:
        PipelineResult with run summary
    """
    pipeline = Pipeline(settings or Settings())
    return pipeline.execute(input_path, output_path, output_format=output_format)
