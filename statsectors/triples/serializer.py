"""
Triple Serializer - Serializes RDF graphs to text encodings.

Supports N-Triples, Turtle, N3, RDF/XML and JSON-LD output. Files are
written to a temporary file next to the target and renamed only once the
whole graph has been written, so a failed run leaves no output behind.
"""

import logging
import os
import stat
import tempfile
from collections import Counter
from pathlib import Path
from typing import Any

from rdflib import Graph, URIRef

from statsectors.errors import OutputWriteError

logger = logging.getLogger(__name__)


# =============================================================================
# SUPPORTED FORMATS
# =============================================================================

# name -> (rdflib format, extension, mime)
FORMATS = {
    "nt": ("nt", ".nt", "application/n-triples"),
    "ntriples": ("nt", ".nt", "application/n-triples"),
    "turtle": ("turtle", ".ttl", "text/turtle"),
    "ttl": ("turtle", ".ttl", "text/turtle"),
    "n3": ("n3", ".n3", "text/n3"),
    "xml": ("xml", ".rdf", "application/rdf+xml"),
    "rdf": ("xml", ".rdf", "application/rdf+xml"),
    "json-ld": ("json-ld", ".jsonld", "application/ld+json"),
    "jsonld": ("json-ld", ".jsonld", "application/ld+json"),
}


def resolve_format(format: str) -> str:
    """Map a format name or alias to the rdflib plugin name."""
    try:
        return FORMATS[format.lower()][0]
    except KeyError:
        raise ValueError(f"Unsupported format: {format}. Supported: {list(FORMATS.keys())}") from None


def _output_mode(path: Path) -> int:
    """Permissions for a new output file: the existing target's, else 0o666 minus umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        pass
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


# =============================================================================
# TRIPLE SERIALIZER
# =============================================================================


class TripleSerializer:
    """
    Serializes RDF graphs to the supported output formats.
    """

    def to_bytes(self, graph: Graph, format: str = "nt") -> bytes:
        """
        Serialize graph to UTF-8 encoded bytes.

        N-Triples lines are sorted, so the same graph always gives the same
        file and the triples of one subject stay together.

        Args:
            graph: RDF graph to serialize
            format: Output format name (nt, turtle, n3, xml, json-ld)
        """
        rdf_format = resolve_format(format)
        content = graph.serialize(format=rdf_format, encoding="utf-8")
        if rdf_format == "nt":
            lines = [line for line in content.splitlines(keepends=True) if line.strip()]
            content = b"".join(sorted(lines))
        return content

    def to_file(self, graph: Graph, path: Path | str, format: str = "nt") -> Path:
        """
        Serialize graph to a file, atomically.

        Args:
            graph: RDF graph to serialize
            path: Output file path
            format: Output format (nt, turtle, n3, xml, json-ld)

        Returns:
            The output path

        Raises:
            ValueError: for an unknown format
            OutputWriteError: if the file cannot be written
        """
        path = Path(path)
        content = self.to_bytes(graph, format)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        except OSError as e:
            raise OutputWriteError(path, str(e)) from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.chmod(tmp_name, _output_mode(path))
            os.replace(tmp_name, path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise OutputWriteError(path, str(e)) from e

        logger.info("Serialized %d triples to %s (%s)", len(graph), path, format)
        return path

    def get_statistics(self, graph: Graph) -> dict[str, Any]:
        """
        Get statistics about the graph.

        Args:
            graph: RDF graph to analyze

        Returns:
            Dictionary with graph statistics
        """
        predicates = Counter()
        subjects = set()
        object_uris = set()

        for s, p, o in graph:
            predicates[str(p)] += 1
            subjects.add(str(s))
            if isinstance(o, URIRef):
                object_uris.add(str(o))

        namespaces = {prefix: str(uri) for prefix, uri in graph.namespaces()}

        return {
            "total_triples": len(graph),
            "unique_subjects": len(subjects),
            "unique_predicates": len(predicates),
            "unique_object_uris": len(object_uris),
            "predicates": dict(predicates.most_common(20)),
            "namespaces": namespaces,
        }


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def serialize_to_file(graph: Graph, path: Path | str, format: str = "nt") -> Path:
    """Quick function to serialize a graph to a file."""
    return TripleSerializer().to_file(graph, path, format)
