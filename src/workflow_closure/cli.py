"""CLI entrypoint: compute a closure from a universe file and inspect or serialize it."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from workflow_closure import __version__
from workflow_closure.config import ClosureSettings
from workflow_closure.errors import SerializationError, UniverseError, UnresolvedReferenceError
from workflow_closure.logging import configure_logging
from workflow_closure.model import WorkflowIdentifier
from workflow_closure.project import build_project_closure
from workflow_closure.resolution import IdentifierDefaults
from workflow_closure.serializer import iter_artifacts
from workflow_closure.sinks import DirectorySink
from workflow_closure.universe import load_universe

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_UNRESOLVED = 3
EXIT_SERIALIZATION = 4
EXIT_BAD_UNIVERSE = 5


def parse_root_identifier(text: str, defaults: IdentifierDefaults) -> WorkflowIdentifier:
    """Parse `project:domain:name:version` or a bare `name`.

    Empty parts, and the parts a bare name leaves out, come from `defaults`.
    """

    parts = text.split(":")
    if len(parts) == 1:
        parts = ["", "", parts[0], ""]
    if len(parts) != 4:
        raise ValueError(f"Expected project:domain:name:version or a bare name, got {text!r}")

    project, domain, name, version = (part.strip() or None for part in parts)
    project = project or defaults.project
    domain = domain or defaults.domain
    version = version or defaults.version

    missing = [
        label
        for label, value in (
            ("project", project),
            ("domain", domain),
            ("name", name),
            ("version", version),
        )
        if not value
    ]
    if missing:
        raise ValueError(f"Root {text!r} is missing {', '.join(missing)} and no default is set")

    return WorkflowIdentifier(project=project, domain=domain, name=name, version=version)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-closure",
        description="Compute the deployable closure of workflows and serialize it as artifacts",
    )
    parser.add_argument("--version", action="version", version=f"workflow-closure {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--universe",
            required=True,
            type=Path,
            help="JSON file describing every known workflow, task and launch plan",
        )
        sub.add_argument(
            "--root",
            dest="roots",
            action="append",
            required=True,
            help="Root workflow as project:domain:name:version (repeatable)",
        )
        sub.add_argument(
            "--lenient",
            action="store_true",
            help="Log and skip unresolved references instead of failing",
        )

    show = subparsers.add_parser("show", help="Print the artifacts the closure would produce")
    add_common(show)

    serialize = subparsers.add_parser(
        "serialize", help="Write one artifact per closure entity into a directory"
    )
    add_common(serialize)
    serialize.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Artifact directory (defaults to CLOSURE_OUTPUT_DIR or ./artifacts)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = ClosureSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_USAGE

    configure_logging(settings.log_level)

    try:
        roots = [parse_root_identifier(r, settings.identifier_defaults) for r in args.roots]
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return EXIT_USAGE

    strict = settings.strict_references and not args.lenient

    try:
        universe = load_universe(args.universe)
        closure = build_project_closure(roots, universe, strict=strict)

        if args.command == "show":
            for filename, identifier, _entity in iter_artifacts(closure):
                print(f"{filename}\t{identifier}")
            return EXIT_OK

        if args.command == "serialize":
            sink = DirectorySink(args.output_dir or settings.output_dir)
            count = closure.serialize(sink, max_payload_bytes=settings.max_payload_bytes)
            print(f"Wrote {count} artifacts to {sink.directory}")
            return EXIT_OK

        logger.error("Unknown command", extra={"command": args.command})
        return EXIT_USAGE

    except UniverseError as e:
        logger.error(str(e), extra={"path": str(args.universe)})
        print(str(e), file=sys.stderr)
        return EXIT_BAD_UNIVERSE

    except UnresolvedReferenceError as e:
        logger.error(str(e), extra={"node_id": e.node_id, "reference": str(e.reference)})
        print(str(e), file=sys.stderr)
        return EXIT_UNRESOLVED

    except SerializationError as e:
        logger.error(str(e), extra={"artifact": e.filename})
        print(str(e), file=sys.stderr)
        return EXIT_SERIALIZATION

    except Exception:
        logger.exception("Command failed")
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
