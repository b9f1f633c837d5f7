"""CLI entrypoint for converting legacy MSBuild projects to SDK style."""

import argparse
import logging
import sys
from pathlib import Path

from sdk_convert.core.converter import Converter
from sdk_convert.core.evaluation import evaluate_project
from sdk_convert.core.project import ConversionError
from sdk_convert.core.serialization import load_project
from sdk_convert.core.snapshot import SnapshotEvaluator, load_snapshot

log = logging.getLogger("sdk_convert.cli")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the converter.

    Args:
        argv (list[str] | None): Arguments to parse; defaults to `sys.argv`.

    Returns:
        argparse.Namespace: Parsed CLI arguments.
    """
    parser = argparse.ArgumentParser(
        description="Convert a legacy MSBuild project file to an SDK-style project."
    )
    parser.add_argument("project", type=Path, help="Path to the legacy project file")
    parser.add_argument(
        "--snapshot",
        type=Path,
        required=True,
        help="YAML file with the legacy and baseline evaluations per configuration",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Destination for the converted project (default: overwrite the input)",
    )
    parser.add_argument(
        "--diff-only",
        action="store_true",
        help="Only write a report of the differences against the SDK baseline.",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Destination for the --diff-only report (default: <project>.diff.txt)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR). (default: INFO)",
    )
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    """Configure basic logging output using the desired severity level.

    Args:
        level (str): Logging level name.
    """
    value = getattr(logging, level.upper(), None)
    if not isinstance(value, int):
        raise ValueError(f"Invalid log level: {level}")
    logging.basicConfig(
        level=value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def write_report(path: Path, converter: Converter) -> None:
    """Write the per-configuration diff report to `path`.

    Args:
        path (Path): Destination file.
        converter (Converter): Converter whose differs are reported.
    """
    lines: list[str] = []
    for configuration, differ in converter.differs.items():
        lines.append(f"Configuration: {configuration or '(default)'}")
        lines.extend(differ.generate_report())
        lines.append("")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines), encoding="utf-8")


def run(args: argparse.Namespace) -> None:
    """Load the inputs and either convert the project or report its diff.

    Args:
        args (argparse.Namespace): Parsed CLI arguments.
    """
    root = load_project(args.project)
    snapshot = load_snapshot(args.snapshot)
    project = evaluate_project(
        SnapshotEvaluator(snapshot), root, snapshot.configurations
    )
    converter = Converter(project, snapshot.baseline_project(root), root)

    if args.diff_only:
        report_path = args.report or args.project.with_name(
            f"{args.project.name}.diff.txt"
        )
        write_report(report_path, converter)
        log.info("Wrote %s", report_path)
        return

    converter.convert(args.out or args.project)


def main(argv: list[str] | None = None) -> None:
    """Entry point for the CLI application."""
    args = parse_args(argv)
    try:
        configure_logging(args.log_level)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(2)

    try:
        run(args)
    except ConversionError as exc:
        log.error("Conversion failed: %s", exc)
        sys.exit(1)
    except KeyboardInterrupt:
        log.warning("Conversion interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
