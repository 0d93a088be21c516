"""Tests for the kn-local command line tool."""

from pathlib import Path

import pytest

from pytest_golden.plugin import GoldenTestFixture

from kn_local.config import TARGET_ENV
from kn_local.tool.kn_local import main

TESTDATA = "tests/testdata/store"


@pytest.mark.golden_test("testdata/*.yaml")
def test_kn_local_golden(
    golden: GoldenTestFixture, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test commands in golden files."""
    main(golden["args"])
    if golden.get("stdout"):
        assert capsys.readouterr().out == golden.out["stdout"]


def test_target_from_environment(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test that the target directory may come from the environment."""
    monkeypatch.setenv(TARGET_ENV, TESTDATA)
    main(["service", "list", "-n", "team-a"])
    assert "ghcr.io/example/api:2.0" in capsys.readouterr().out


def test_missing_target(capsys: pytest.CaptureFixture[str]) -> None:
    """Test that commands fail without a target directory."""
    with pytest.raises(SystemExit) as exc_info:
        main(["service", "list"])
    assert exc_info.value.code == 1
    assert "use --target" in capsys.readouterr().err


def test_not_found(capsys: pytest.CaptureFixture[str]) -> None:
    """Test describing a service that does not exist."""
    with pytest.raises(SystemExit) as exc_info:
        main(["service", "describe", "missing", "--target", TESTDATA])
    assert exc_info.value.code == 1
    assert 'service "missing" not found' in capsys.readouterr().err


def test_invalid_file(capsys: pytest.CaptureFixture[str]) -> None:
    """Test that list reports invalid files."""
    with pytest.raises(SystemExit):
        main(["service", "list", "--target", "tests/testdata/broken"])
    assert "bad.yaml" in capsys.readouterr().err


@pytest.mark.parametrize(
    "args",
    [
        ["revision", "list"],
        ["revision", "list", "-A"],
        ["revision", "describe", "rev1"],
        ["route", "list"],
    ],
)
def test_unsupported_commands(
    args: list[str], capsys: pytest.CaptureFixture[str]
) -> None:
    """Test commands for kinds that are not stored locally."""
    with pytest.raises(SystemExit) as exc_info:
        main(args + ["--target", TESTDATA])
    assert exc_info.value.code == 1
    assert (
        "this operation is not supported in gitops mode" in capsys.readouterr().err
    )


def test_revision_delete_collects_errors(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test that every failed delete is reported."""
    with pytest.raises(SystemExit):
        main(["revision", "delete", "rev1", "rev2", "--target", str(tmp_path)])
    err = capsys.readouterr().err
    assert err.count("Error: this operation is not supported in gitops mode") == 2


def test_invalid_key_value_flag(tmp_path: Path) -> None:
    """Test that malformed key=value flags are rejected by the parser."""
    with pytest.raises(SystemExit) as exc_info:
        main(
            [
                "service",
                "create",
                "hello",
                "--image",
                "app",
                "--env",
                "NOVALUE",
                "--target",
                str(tmp_path),
            ]
        )
    assert exc_info.value.code == 2


def test_describe_json_with_timestamp(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test structured output of a service with an unquoted timestamp."""
    path = tmp_path / "default/ksvc/hello.yaml"
    path.parent.mkdir(parents=True)
    path.write_text(
        "apiVersion: serving.knative.dev/v1\n"
        "kind: Service\n"
        "metadata:\n"
        "  name: hello\n"
        "  creationTimestamp: 2024-01-01T00:00:00Z\n"
        "spec: {}\n"
    )
    main(["service", "describe", "hello", "-o", "json", "--target", str(tmp_path)])
    assert '"creationTimestamp": "2024-01-01T00:00:00Z"' in capsys.readouterr().out
