"""CLI parser and command tests."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from wasmjsgen.cli import _build_parser, main
from wasmjsgen.logging import reset_logging

DESCRIPTORS = """\
files:
  - path: library/v1/library.proto
    package: library.v1
    services:
      - name: LibraryService
        methods:
          - {name: FindBooks, input: FindBooksRequest, output: FindBooksResponse}
    messages:
      - name: FindBooksRequest
        fields: [{name: query, number: 1, type: string}]
      - name: FindBooksResponse
        fields: [{name: count, number: 1, type: int32}]
"""


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    reset_logging()


def _descriptors(tmp_path: Path) -> str:
    path = tmp_path / "schemas.yaml"
    path.write_text(DESCRIPTORS, encoding="utf-8")
    return str(path)


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "plan", "schemas.yaml"])
    assert args.verbose is True
    assert args.command == "plan"


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["plan", "schemas.yaml", "--verbose"])
    assert args.verbose is True


def test_cli_accepts_quiet_after_command() -> None:
    args = _build_parser().parse_args(["generate", "schemas.yaml", "--out", "gen", "-q"])
    assert args.quiet is True
    assert args.verbose is False


def test_cli_collects_repeated_overrides() -> None:
    args = _build_parser().parse_args(
        ["generate", "schemas.yaml", "--out", "gen", "--opt", "js_structure=flat", "--opt", "generate_wasm=false"]
    )
    assert args.opt == ["js_structure=flat", "generate_wasm=false"]
    assert args.out == "gen"


def test_generate_requires_out() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["generate", "schemas.yaml"])


def test_plan_prints_output_paths(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["plan", _descriptors(tmp_path), "--config", str(tmp_path)])

    lines = capsys.readouterr().out.splitlines()
    assert "library/v1/libraryServiceClient.ts" in lines
    assert "index.ts" in lines
    assert "library/v1/library_v1.wasm.go" in lines


def test_plan_applies_overrides(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["plan", _descriptors(tmp_path), "--config", str(tmp_path), "--opt", "generate_wasm=false"])

    lines = capsys.readouterr().out.splitlines()
    assert not [line for line in lines if line.endswith(".go")]


def test_generate_writes_files(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out = tmp_path / "gen"

    main(["generate", _descriptors(tmp_path), "--config", str(tmp_path), "--out", str(out)])

    assert (out / "index.ts").is_file()
    assert (out / "library" / "v1" / "interfaces.ts").is_file()
    assert f"files in {out}" in capsys.readouterr().out


def test_generate_with_nothing_to_emit(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    descriptors = tmp_path / "empty.yaml"
    descriptors.write_text("files: []\n", encoding="utf-8")

    main(["generate", str(descriptors), "--config", str(tmp_path), "--out", str(tmp_path / "gen")])

    assert "Nothing to generate" in capsys.readouterr().out


def test_missing_descriptor_set_exits(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["plan", str(tmp_path / "missing.yaml"), "--config", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "wasmjsgen plan failed: cannot read descriptor set" in capsys.readouterr().err


def test_malformed_override_exits(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["plan", _descriptors(tmp_path), "--config", str(tmp_path), "--opt", "flat"])

    assert excinfo.value.code == 1
    assert "invalid --opt value: flat" in capsys.readouterr().err


def test_generation_errors_exit(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    descriptors = tmp_path / "broken.yaml"
    descriptors.write_text(
        DESCRIPTORS.replace("output: FindBooksResponse", "output: missing.v1.Pong"),
        encoding="utf-8",
    )

    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(descriptors), "--config", str(tmp_path), "--out", str(tmp_path / "gen")])

    assert excinfo.value.code == 1
    assert "references unknown type missing.v1.Pong" in capsys.readouterr().err
