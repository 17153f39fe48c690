"""Tests for wasmjsgen.fileset."""

from __future__ import annotations

from pathlib import Path

import pytest

from wasmjsgen.fileset import DirectoryHost, FileSetError, GeneratedFileSet, MemoryHost
from wasmjsgen.planning import FilePlan, FileSpec


def _plan() -> FilePlan:
    return FilePlan(
        specs=[
            FileSpec(name="bundle", path="index.ts", type="bundle", required=True),
            FileSpec(name="interfaces:a:a", path="a/interfaces.ts", type="interfaces", required=True),
            FileSpec(name="models:a:a", path="a/models.ts", type="models"),
        ]
    )


class _FailingHost:
    def __init__(self, fail_on: str) -> None:
        self.fail_on = fail_on
        self.created = []

    def new_generated_file(self, path: str):
        if path == self.fail_on:
            raise OSError("disk full")
        self.created.append(path)
        return MemoryHost().new_generated_file(path)


def test_create_and_lookup() -> None:
    file_set = GeneratedFileSet(_plan())
    host = MemoryHost()
    file_set.create_files(host)
    file_set.validate_file_set()

    assert file_set.has_file("bundle")
    assert file_set.get_file("bundle").path == "index.ts"
    assert file_set.get_file_spec("models:a:a").type == "models"
    assert list(file_set.get_files_by_type("interfaces")) == ["interfaces:a:a"]
    assert sorted(file_set.get_required_files()) == ["bundle", "interfaces:a:a"]
    assert file_set.all_paths() == ["index.ts", "a/interfaces.ts", "a/models.ts"]
    assert sorted(host.files) == ["a/interfaces.ts", "a/models.ts", "index.ts"]


def test_host_failure_leaves_set_empty() -> None:
    file_set = GeneratedFileSet(_plan())
    with pytest.raises(FileSetError, match="failed to create 'models:a:a'"):
        file_set.create_files(_FailingHost(fail_on="a/models.ts"))
    assert file_set.files == {}


def test_missing_required_file_is_reported() -> None:
    file_set = GeneratedFileSet(_plan())
    with pytest.raises(FileSetError, match="required file 'bundle' \\(index.ts\\) was not created"):
        file_set.validate_file_set()


def test_unknown_type_is_reported() -> None:
    plan = FilePlan(specs=[FileSpec(name="x", path="x.txt", type="readme")])
    file_set = GeneratedFileSet(plan)
    file_set.create_files(MemoryHost())
    with pytest.raises(FileSetError, match="unrecognized type 'readme'"):
        file_set.validate_file_set(known_types=["bundle"])


def test_duplicate_paths_are_reported() -> None:
    plan = FilePlan(
        specs=[
            FileSpec(name="a", path="same.ts", type="bundle"),
            FileSpec(name="b", path="same.ts", type="bundle"),
        ]
    )
    file_set = GeneratedFileSet(plan)
    with pytest.raises(FileSetError, match="already created"):
        file_set.create_files(MemoryHost())
    with pytest.raises(FileSetError, match="output path same.ts is planned 2 times"):
        file_set.validate_file_set()


def test_directory_host_writes_on_commit(tmp_path: Path) -> None:
    host = DirectoryHost(tmp_path)
    handle = host.new_generated_file("library/v1/index.ts")
    handle.write("export {};\n")

    assert not (tmp_path / "library/v1/index.ts").exists()
    written = host.commit()

    assert written == [tmp_path / "library/v1/index.ts"]
    assert (tmp_path / "library/v1/index.ts").read_text(encoding="utf-8") == "export {};\n"


def test_directory_host_rejects_escaping_paths(tmp_path: Path) -> None:
    host = DirectoryHost(tmp_path)
    with pytest.raises(FileSetError, match="escapes"):
        host.new_generated_file("../outside.ts")
