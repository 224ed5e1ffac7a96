#!/usr/bin/env python3
"""
statsectors CLI - Convert statistical sector polygons to RDF.

Usage:
    python -m statsectors.main --help
    python -m statsectors.main sectors.shp sectors.nt
    python -m statsectors.main sectors.shp sectors.ttl --format turtle --report run.json
"""

import argparse
import logging
import sys
from pathlib import Path

import pyfiglet
from dotenv import load_dotenv

from statsectors import __version__
from statsectors.config.settings import load_config
from statsectors.errors import (
    GeometrySerializationError,
    GraphValidationError,
    InputOpenError,
    OutputWriteError,
    StatSectorsError,
)
from statsectors.pipeline import Pipeline, PipelineResult
from statsectors.utils.logging import setup_colored_logging

logger = logging.getLogger(__name__)

# Exit codes (2 is argparse's usage error)
EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_INPUT_OPEN = 3
EXIT_IO_ERROR = 4
EXIT_CORRUPT_GEOMETRY = 5
EXIT_VALIDATION_FAILED = 6
EXIT_INTERNAL_ERROR = 7
EXIT_INTERRUPTED = 130


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    setup_colored_logging(level=level)


def print_banner() -> None:
    """Print the application banner."""
    print(pyfiglet.figlet_format("statsectors", font="slant", width=100))
    print("Statistical sectors to linked data".center(60, "*"))


def print_config_summary(settings, args: argparse.Namespace) -> None:
    """Print configuration summary."""
    print("\n📋 Configuration:")
    print("─" * 40)
    print(f"  Input: {args.input}")
    print(f"  Output: {args.output}")
    print(f"  Output format: {settings.output.format}")
    print(f"  Sector code attribute: {settings.attributes.sector_code}")
    print(f"  Sector namespace: {settings.namespaces.nis}")
    links = ", ".join(link.attribute for link in settings.attributes.containment) or "none"
    print(f"  Containment links: {links}")
    if args.skip_validation or not settings.output.validate_graph:
        print("  Validation: skipped")
    else:
        print(f"  Validation: {'strict' if settings.output.strict else 'report only'}")
    print("─" * 40)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="statsectors",
        description="Convert a statistical sectors shapefile to RDF (N-Triples by default)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shapefile to N-Triples
  statsectors scbel01012011_gen13.shp sectors.nt

  # Turtle output with a JSON run report
  statsectors scbel01012011_gen13.shp sectors.ttl --format turtle --report run.json

  # Custom attribute names / namespaces
  statsectors sectors.gpkg sectors.nt --config my-config.yaml

Exit codes:
  0 success, 1 configuration error, 2 usage error, 3 input cannot be opened,
  4 I/O error, 5 corrupt geometry, 6 validation failed (--strict),
  7 unexpected internal error
        """,
    )

    parser.add_argument("input", type=str, help="Input vector dataset (e.g. .shp)")
    parser.add_argument("output", type=str, help="Output RDF file")

    parser.add_argument(
        "--format",
        "-f",
        type=str,
        choices=["nt", "turtle", "xml", "json-ld", "n3"],
        default=None,
        help="Output format (default: from config, nt)",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="YAML configuration file (default: bundled config.yaml)",
    )

    parser.add_argument(
        "--report",
        type=str,
        default=None,
        help="Write a JSON run report to this file",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write the log to this file",
    )

    parser.add_argument(
        "--skip-validation",
        action="store_true",
        help="Skip RDF validation step",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Do not write output if validation finds errors",
    )

    # Logging
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output (very verbose)",
    )

    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress all output except errors",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def apply_cli_overrides(settings, args: argparse.Namespace) -> None:
    """Apply CLI arguments to settings."""
    if args.format:
        settings.output.format = args.format

    if args.strict:
        settings.output.strict = True

    if args.skip_validation:
        settings.output.validate_graph = False

    if args.log_file:
        settings.paths.log_file = Path(args.log_file)


def run(pipeline: Pipeline, args: argparse.Namespace) -> PipelineResult:
    """Run the conversion for the CLI arguments."""
    return pipeline.execute(
        input_path=args.input,
        output_path=args.output,
        skip_validation=args.skip_validation,
        report_path=args.report,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    load_dotenv()

    if args.quiet:
        setup_logging(verbose=False, debug=False)
        logging.disable(logging.CRITICAL)
    else:
        setup_logging(verbose=args.verbose, debug=args.debug)

    if not args.quiet:
        print_banner()

    if args.config and not Path(args.config).exists():
        print(f"❌ Configuration error: {args.config} not found", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        settings = load_config(args.config) if args.config else load_config()
        apply_cli_overrides(settings, args)
    except Exception as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if not args.quiet:
        print_config_summary(settings, args)

    pipeline = Pipeline(settings=settings)

    try:
        result = run(pipeline, args)

    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED

    except InputOpenError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_INPUT_OPEN

    except GeometrySerializationError as e:
        print(f"❌ Corrupt geometry: {e}", file=sys.stderr)
        return EXIT_CORRUPT_GEOMETRY

    except GraphValidationError as e:
        print(f"❌ {e}", file=sys.stderr)
        for err in e.errors[:5]:
            print(f"   • {err}", file=sys.stderr)
        return EXIT_VALIDATION_FAILED

    except (OutputWriteError, OSError) as e:
        print(f"❌ I/O error: {e}", file=sys.stderr)
        return EXIT_IO_ERROR

    except StatSectorsError as e:
        logger.error("Conversion failed: %s", e)
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_INTERNAL_ERROR

    except Exception as e:
        logger.exception("Unexpected error")
        print(f"❌ Unexpected error: {type(e).__name__}: {e}", file=sys.stderr)
        return EXIT_INTERNAL_ERROR

    finally:
        if args.quiet:
            logging.disable(logging.NOTSET)

    if not args.quiet:
        result.print_summary()

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
