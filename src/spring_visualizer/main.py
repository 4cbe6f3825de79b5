import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from spring_visualizer.errors import ConfigurationError, ProjectPathError
from spring_visualizer.factory.analyzer_factory import AnalyzerFactory
from spring_visualizer.factory.config_builder import AnalyzerConfigBuilder
from spring_visualizer.models.analyzer_config import ALL_FEATURES, DEFAULT_FEATURES

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "SPRING_VISUALIZER_LOG"


def configure_logging(verbose: bool = False) -> None:
    """Set the root log level from the environment, or DEBUG when verbose."""
    level_name = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spring-visualizer",
        description="Render the Spring component graph of a Java source tree as Graphviz DOT",
    )
    parser.add_argument("path", help="Directory to scan for Java files")
    parser.add_argument(
        "-f", "--features",
        default=",".join(sorted(DEFAULT_FEATURES)),
        help=f"Comma separated relations to include, any of: {', '.join(sorted(ALL_FEATURES))}",
    )
    parser.add_argument("-o", "--output", help="Write DOT, JSON graph and statistics into this directory")
    parser.add_argument("--html", help="Also write an interactive HTML graph to this file")
    parser.add_argument("-w", "--workers", type=int, default=1, help="Files analyzed in parallel")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = (
            AnalyzerConfigBuilder()
            .with_features(args.features.split(","))
            .with_max_workers(args.workers)
            .build()
        )
    except ConfigurationError as e:
        logger.error(str(e))
        print(f"error: {e}", file=sys.stderr)
        return 2

    project_path = Path(args.path)
    analyzer = AnalyzerFactory.create_analyzer("java", config)
    try:
        dependency_graph = analyzer.parse_project(project_path)
    except ProjectPathError as e:
        logger.error(str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(analyzer.render(dependency_graph))

    try:
        if args.output:
            analyzer.export_results(dependency_graph, Path(args.output))
        if args.html:
            analyzer.export_html(dependency_graph, Path(args.html))
    except OSError as e:
        print(f"error: cannot write results: {e}", file=sys.stderr)
        return 1

    stats = analyzer.generate_statistics(dependency_graph)
    logger.info(f"Components: {stats['node_tags']}")
    logger.info(f"Relations: {stats['edge_kinds']}")
    if stats['unresolved']:
        logger.info(f"Unresolved classes: {', '.join(stats['unresolved'])}")
    if stats['uncovered_components']:
        logger.info(f"Components outside every component scan: {', '.join(stats['uncovered_components'])}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
