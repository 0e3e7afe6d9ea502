"""Tests for configuration sources."""

import json

import pytest
from plumpkin.module_resolution.errors import ConfigurationError
from plumpkin.module_resolution.errors import ConfigurationNotFound
from plumpkin.module_resolution.sources import FileConfigSource
from plumpkin.module_resolution.sources import MappingConfigSource

IMPORTMAP = {"imports": {"logger": "./src/logger.py"}, "scopes": {}}


def test_mapping_source_returns_copy(tmp_path):
    data = {"importmap": {"imports": {"a": "./a.py"}}}
    source = MappingConfigSource(data, tmp_path)

    blob = source.read()
    blob["importmap"]["imports"]["b"] = "./b.py"

    assert "b" not in data["importmap"]["imports"]
    assert source.base_location == str(tmp_path.resolve())


def test_json_file(tmp_path):
    path = tmp_path / "package.json"
    path.write_text(json.dumps({"name": "demo", "importmap": IMPORTMAP}))

    source = FileConfigSource(path)

    assert source.read()["importmap"] == IMPORTMAP
    assert source.base_location == str(tmp_path.resolve())


def test_yaml_file(tmp_path):
    path = tmp_path / "importmap.yaml"
    path.write_text(
        "importmapRemote: true\n"
        "importmap:\n"
        "  imports:\n"
        "    logger: ./src/logger.py\n"
    )

    data = FileConfigSource(path).read()

    assert data["importmapRemote"] is True
    assert data["importmap"]["imports"]["logger"] == "./src/logger.py"


def test_empty_yaml_file(tmp_path):
    path = tmp_path / "importmap.yml"
    path.write_text("")

    assert FileConfigSource(path).read() == {}


def test_toml_file_with_section(tmp_path):
    path = tmp_path / "pyproject.toml"
    path.write_text(
        '[project]\nname = "demo"\n\n'
        "[tool.plumpkin]\nimportmapRemote = false\n\n"
        '[tool.plumpkin.importmap.imports]\nlogger = "./src/logger.py"\n'
    )

    data = FileConfigSource(path, section="tool.plumpkin").read()

    assert data["importmapRemote"] is False
    assert data["importmap"]["imports"] == {"logger": "./src/logger.py"}


def test_toml_missing_section_is_empty(tmp_path):
    path = tmp_path / "pyproject.toml"
    path.write_text('[project]\nname = "demo"\n')

    assert FileConfigSource(path, section="tool.plumpkin").read() == {}


def test_missing_file(tmp_path):
    source = FileConfigSource(tmp_path / "package.json")

    with pytest.raises(ConfigurationNotFound) as exc_info:
        source.read()

    assert exc_info.value.location == str((tmp_path / "package.json").resolve())


def test_unparsable_file(tmp_path):
    path = tmp_path / "package.json"
    path.write_text("{not json")

    with pytest.raises(ConfigurationError, match="Failed to parse"):
        FileConfigSource(path).read()


def test_non_mapping_document(tmp_path):
    path = tmp_path / "package.json"
    path.write_text("[1, 2, 3]")

    with pytest.raises(ConfigurationError, match="must be a mapping"):
        FileConfigSource(path).read()
