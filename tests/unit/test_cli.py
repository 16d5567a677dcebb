"""Unit tests for the command-line entrypoint."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from builders import wf_id

from workflow_closure.cli import (
    EXIT_BAD_UNIVERSE,
    EXIT_FAILURE,
    EXIT_OK,
    EXIT_SERIALIZATION,
    EXIT_UNRESOLVED,
    EXIT_USAGE,
    main,
    parse_root_identifier,
)
from workflow_closure.resolution import IdentifierDefaults

_ID = {"project": "project", "domain": "domain", "version": "v1"}


@pytest.fixture
def universe_file(clean_env: Path) -> Path:
    document = {
        "workflows": [
            {
                "id": {**_ID, "name": "root"},
                "template": {
                    "nodes": [
                        {
                            "id": "call-sub",
                            "workflow_node": {
                                "reference": {
                                    "kind": "sub_workflow",
                                    "workflow_id": {"name": "sub"},
                                }
                            },
                        }
                    ]
                },
            },
            {"id": {**_ID, "name": "sub"}, "template": {}},
            {
                "id": {**_ID, "name": "broken"},
                "template": {
                    "nodes": [
                        {
                            "id": "dangling",
                            "workflow_node": {
                                "reference": {
                                    "kind": "sub_workflow",
                                    "workflow_id": {"name": "gone"},
                                }
                            },
                        }
                    ]
                },
            },
        ],
    }
    path = clean_env / "universe.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def test_parse_full_root_identifier() -> None:
    parsed = parse_root_identifier("project:domain:root:v1", IdentifierDefaults())

    assert parsed == wf_id("root")


def test_parse_bare_name_uses_defaults() -> None:
    defaults = IdentifierDefaults(project="project", domain="domain", version="v1")

    assert parse_root_identifier("root", defaults) == wf_id("root")
    assert parse_root_identifier("::root:", defaults) == wf_id("root")


@pytest.mark.parametrize("text", ["root", "a:b:c", "project:domain::v1"])
def test_parse_rejects_incomplete_roots(text: str) -> None:
    with pytest.raises(ValueError):
        parse_root_identifier(text, IdentifierDefaults())


def test_show_lists_artifacts(universe_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["show", "--universe", str(universe_file), "--root", "project:domain:root:v1"])

    assert code == EXIT_OK
    assert capsys.readouterr().out.splitlines() == [
        "0_root_2.pb\tproject:domain:root:v1",
        "1_sub_2.pb\tproject:domain:sub:v1",
    ]


def test_serialize_writes_artifacts(
    universe_file: Path, clean_env: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    out_dir = clean_env / "out"

    code = main(
        [
            "serialize",
            "--universe",
            str(universe_file),
            "--root",
            "project:domain:root:v1",
            "--output-dir",
            str(out_dir),
        ]
    )

    assert code == EXIT_OK
    assert sorted(p.name for p in out_dir.iterdir()) == ["0_root_2.pb", "1_sub_2.pb"]
    assert json.loads((out_dir / "1_sub_2.pb").read_bytes())["nodes"] == []
    assert "Wrote 2 artifacts" in capsys.readouterr().out


def test_root_defaults_come_from_environment(
    universe_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("CLOSURE_DEFAULT_PROJECT", "project")
    monkeypatch.setenv("CLOSURE_DEFAULT_DOMAIN", "domain")
    monkeypatch.setenv("CLOSURE_DEFAULT_VERSION", "v1")

    code = main(["show", "--universe", str(universe_file), "--root", "sub"])

    assert code == EXIT_OK
    assert capsys.readouterr().out.splitlines() == ["0_sub_2.pb\tproject:domain:sub:v1"]


def test_unresolved_reference_exit_code(universe_file: Path) -> None:
    argv = ["show", "--universe", str(universe_file), "--root", "project:domain:broken:v1"]

    assert main(argv) == EXIT_UNRESOLVED
    assert main([*argv, "--lenient"]) == EXIT_OK


def test_bad_universe_exit_code(clean_env: Path) -> None:
    (clean_env / "bad.json").write_text("[", encoding="utf-8")

    code = main(["show", "--universe", str(clean_env / "bad.json"), "--root", "a:b:c:d"])

    assert code == EXIT_BAD_UNIVERSE


def test_incomplete_root_is_a_usage_error(universe_file: Path) -> None:
    assert main(["show", "--universe", str(universe_file), "--root", "root"]) == EXIT_USAGE


def test_invalid_settings_are_a_usage_error(
    universe_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("CLOSURE_MAX_PAYLOAD_BYTES", "-5")

    assert main(["show", "--universe", str(universe_file), "--root", "a:b:c:d"]) == EXIT_USAGE


def test_oversized_payload_is_a_serialization_error(
    universe_file: Path, clean_env: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("CLOSURE_MAX_PAYLOAD_BYTES", "1")
    out_dir = clean_env / "out"

    code = main(
        [
            "serialize",
            "--universe",
            str(universe_file),
            "--root",
            "project:domain:root:v1",
            "--output-dir",
            str(out_dir),
        ]
    )

    assert code == EXIT_SERIALIZATION
    # The first artifact is already over the limit, so nothing reaches the sink.
    assert not out_dir.exists()


def test_unwritable_output_is_a_failure(universe_file: Path, clean_env: Path) -> None:
    blocker = clean_env / "occupied"
    blocker.write_text("not a directory", encoding="utf-8")

    code = main(
        [
            "serialize",
            "--universe",
            str(universe_file),
            "--root",
            "project:domain:root:v1",
            "--output-dir",
            str(blocker),
        ]
    )

    assert code == EXIT_FAILURE
    assert blocker.read_text(encoding="utf-8") == "not a directory"
