"""Tests for path-based directory classification."""

import pytest

from tf_affected.classifier import (
    classify,
    directory_of,
    is_module_path,
    normalize_path,
    path_segments,
)


@pytest.mark.parametrize(
    "path",
    [
        "modules/database",
        "infra/modules/vpc",
        "_modules/project",
        "shared-modules/networking",
        "modules/network/module",
    ],
)
def test_shared_module_paths(path: str):
    """A modules segment anywhere wins over every other rule."""
    assert classify(path) == "shared-module"


@pytest.mark.parametrize("path", ["service-a/module", "services/api-gateway/module", "module"])
def test_project_module_paths(path: str):
    assert classify(path) == "project-module"


@pytest.mark.parametrize(
    "path",
    [
        "service-a/production",
        "global",
        ".",
        "service-a/module/templates",
        "services/modulex",
        "module-registry/prod",
    ],
)
def test_project_paths(path: str):
    """Anything that is not a module boundary is a terminal project."""
    assert classify(path) == "project"


def test_classify_ignores_separator_style():
    assert classify("service-a\\module") == "project-module"
    assert classify("service-a/module/") == "project-module"
    assert classify("./modules/database") == "shared-module"


def test_normalize_path():
    assert normalize_path("service-a/production/") == "service-a/production"
    assert normalize_path("./service-a/../service-b") == "service-b"
    assert normalize_path("service-a\\module") == "service-a/module"
    assert normalize_path("") == ""


def test_path_segments_skip_root_marker():
    assert path_segments(".") == []
    assert path_segments("./a/b") == ["a", "b"]


def test_directory_of_root_file():
    assert directory_of("README.md") == "."
    assert directory_of("service-a/production/main.tf") == "service-a/production"
    assert directory_of("./modules/vpc/main.tf") == "modules/vpc"


def test_is_module_path():
    assert is_module_path("service-a/module")
    assert is_module_path("modules/database")
    assert is_module_path("service-a/module/nested")
    assert not is_module_path("service-a/production")
    assert not is_module_path(".")
