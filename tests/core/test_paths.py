"""Tests for wasmjsgen.core.paths."""

from __future__ import annotations

import pytest

from wasmjsgen.core.paths import PathCalculator


@pytest.fixture
def paths() -> PathCalculator:
    return PathCalculator()


def test_relative_path_between_directories(paths: PathCalculator) -> None:
    assert paths.relative_path("library/v1", "library/v1") == "."
    assert paths.relative_path("library/v1", "library/common") == "../common"
    assert paths.relative_path("library", "library/v1") == "./v1"
    assert paths.relative_path("", "library") == "./library"


def test_cross_package_import_counts_depth(paths: PathCalculator) -> None:
    assert paths.cross_package_import_path("library.v1", "library.common") == "../../library_common"
    assert paths.cross_package_import_path("utils", "library.v1") == "../library_v1"
    assert paths.cross_package_import_path("library.v1", "library.v1") == "."


def test_factory_import_path(paths: PathCalculator) -> None:
    assert paths.factory_import_path("library.v1", "library.v1") == "./factory"
    assert paths.factory_import_path("library.common", "library.v1") == "../../library_common/factory"


def test_directory_import(paths: PathCalculator) -> None:
    assert paths.directory_import("a/b", "a/b", "interfaces") == "./interfaces"
    assert paths.directory_import("a/b", "a/c", "interfaces") == "../c/interfaces"


def test_join_and_normalize(paths: PathCalculator) -> None:
    assert paths.join(".", "library/v1", "index.ts") == "library/v1/index.ts"
    assert paths.join("./gen", "library", "x.ts") == "./gen/library/x.ts"
    assert paths.join("gen/", "", "x.ts") == "gen/x.ts"
    assert paths.join() == ""
    assert paths.normalize("./a//b/../c") == "./a/c"
    assert paths.output_file_path("gen", "library.v1", "x.ts") == "gen/library/v1/x.ts"


def test_go_package_alias(paths: PathCalculator) -> None:
    assert paths.go_package_alias("example.com/gen/library/v1") == "libraryv1"
    assert paths.go_package_alias("library") == "library"
