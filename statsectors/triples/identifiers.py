"""
Identifier construction for sector resources.

Identifiers are a namespace prefix, an attribute value and an optional
fixed suffix ("#id"), checked to form an absolute IRI before they reach
the graph.
"""

import logging
import re
from urllib.parse import quote

from rdflib import URIRef

from statsectors.errors import InvalidIdentifierError

logger = logging.getLogger(__name__)

FLOAT_SUFFIX = ".0"

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_FORBIDDEN = re.compile(r"[\x00-\x20<>\"{}|\\^`\x7f]")
_BAD_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")


def normalize_sector_code(raw: str | None) -> str | None:
    """
    Strip the ".0" left behind when a code column was read as a float.

    Exact suffix match, applied once: "12345.0" -> "12345". A value that
    would still end in ".0" after stripping ("1.0.0") is not a float
    artifact and is returned unchanged, so the function is idempotent.
    """
    if raw is None or not raw.endswith(FLOAT_SUFFIX):
        return raw
    stripped = raw[: -len(FLOAT_SUFFIX)]
    if stripped.endswith(FLOAT_SUFFIX):
        return raw
    return stripped


def check_iri(candidate: str) -> None:
    """
    Raise InvalidIdentifierError unless candidate is a usable absolute IRI.
    """
    if not _SCHEME.match(candidate):
        raise InvalidIdentifierError(candidate, "no scheme")
    match = _FORBIDDEN.search(candidate)
    if match:
        raise InvalidIdentifierError(candidate, f"forbidden character {match.group()!r}")
    if candidate.count("#") > 1:
        raise InvalidIdentifierError(candidate, "more than one '#'")
    if _BAD_PERCENT.search(candidate):
        raise InvalidIdentifierError(candidate, "malformed percent-encoding")


class IdentifierBuilder:
    """
    Builds resource IRIs from a namespace prefix and an attribute value.

    Values are embedded as-is and rejected when they break the IRI, unless
    percent_encode is set, in which case every reserved character of the
    value is percent-encoded first.
    """

    def __init__(self, suffix: str = "", percent_encode: bool = False):
        self.suffix = suffix
        self.percent_encode = percent_encode

    def build(self, prefix: str, raw_value: str | None, suffix: str | None = None) -> URIRef | None:
        """
        Build an IRI, or return None when there is no value.

        Args:
            prefix: Namespace prefix (e.g. "http://geo.belgif.org/nis2011/")
            raw_value: Attribute value to embed
            suffix: Override the builder's default suffix

        Raises:
            InvalidIdentifierError: if the result is not a valid absolute IRI
        """
        if raw_value is None:
            return None
        value = raw_value.strip()
        if not value:
            return None

        if self.percent_encode:
            encoded = quote(value, safe="")
            if encoded != value:
                logger.debug("Percent-encoded %r as %r", value, encoded)
            value = encoded

        candidate = f"{prefix}{value}{self.suffix if suffix is None else suffix}"
        check_iri(candidate)
        return URIRef(candidate)
