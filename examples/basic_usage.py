#!/usr/bin/env python3
"""Programmatic closure example.

This demonstrates using the closure components directly:

* load settings from `.env`
* load a universe document
* compute the closure of one root workflow
* write one artifact per entity into a directory

The root workflow is passed as an argument (not read from `.env`).
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from workflow_closure.config import ClosureSettings
from workflow_closure.errors import UnresolvedReferenceError
from workflow_closure.logging import configure_logging
from workflow_closure.model import WorkflowIdentifier
from workflow_closure.project import build_project_closure
from workflow_closure.sinks import DirectorySink
from workflow_closure.universe import load_universe


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serialize a workflow closure (example).")
    parser.add_argument("--universe", required=True, type=Path, help="Universe JSON file")
    parser.add_argument("--project", required=True)
    parser.add_argument("--domain", required=True)
    parser.add_argument("--name", required=True, help="Root workflow name")
    parser.add_argument("--version", required=True)
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = ClosureSettings()
    configure_logging(settings.log_level)

    root = WorkflowIdentifier(
        project=args.project, domain=args.domain, name=args.name, version=args.version
    )
    universe = load_universe(args.universe)

    try:
        closure = build_project_closure([root], universe, strict=settings.strict_references)
    except UnresolvedReferenceError as exc:
        print(str(exc))
        return 1

    sink = DirectorySink(settings.output_dir)
    count = closure.serialize(sink, max_payload_bytes=settings.max_payload_bytes)

    print(f"Workflows: {len(closure.workflow_specs)}")
    print(f"Tasks: {len(closure.task_specs)}")
    print(f"Launch plans: {len(closure.launch_plans)}")
    print(f"Wrote {count} artifacts to: {sink.directory}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
