"""Tests for the plumpkin CLI."""

import json

import pytest
from click.testing import CliRunner
from plumpkin.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(project, sample_config):
    path = project / "package.json"
    path.write_text(json.dumps(sample_config))
    return path


def test_resolve_prints_location(runner, config_file, project):
    result = runner.invoke(cli, ["--config", str(config_file), "resolve", "lib/special/x.py"])

    assert result.exit_code == 0, result.output
    assert str((project / "src" / "special_lib" / "x.py").resolve()) in result.output


def test_resolve_with_referrer_uses_scope(runner, config_file):
    result = runner.invoke(
        cli, ["--config", str(config_file), "resolve", "logger", "--referrer", "./src/legacy/app.py"]
    )

    assert result.exit_code == 0, result.output
    assert "old_logger.py" in result.output


def test_resolve_load_lists_exports(runner, config_file):
    result = runner.invoke(cli, ["--config", str(config_file), "resolve", "utils/helper.py", "--load"])

    assert result.exit_code == 0, result.output
    assert "capitalize" in result.output


def test_resolve_unknown_specifier_exits_1(runner, config_file):
    result = runner.invoke(cli, ["--config", str(config_file), "resolve", "missing"])

    assert result.exit_code == 1


def test_missing_config_exits_1(runner, tmp_path):
    result = runner.invoke(cli, ["--config", str(tmp_path / "nope.json"), "resolve", "logger"])

    assert result.exit_code == 1


def test_config_from_env(runner, config_file):
    result = runner.invoke(cli, ["resolve", "logger"], env={"PLUMPKIN_CONFIG": str(config_file)})

    assert result.exit_code == 0, result.output
    assert "logger.py" in result.output


def test_check_clean_map(runner, config_file):
    result = runner.invoke(cli, ["--config", str(config_file), "check"])

    assert result.exit_code == 0, result.output
    assert "Import map OK" in result.output


def test_check_reports_warnings(runner, tmp_path):
    path = tmp_path / "package.json"
    path.write_text(
        json.dumps({"importmap": {"imports": {"utils/": "./src/utils", "cdn": "https://cdn.example/x.py"}}})
    )

    result = runner.invoke(cli, ["--config", str(path), "check"])

    assert result.exit_code == 1
    assert "2 warning(s)" in result.output


def test_show_lists_tables(runner, config_file):
    result = runner.invoke(cli, ["--config", str(config_file), "show"])

    assert result.exit_code == 0, result.output
    assert "Imports" in result.output
    assert "Scope: ./src/legacy/" in result.output
    assert "disabled" in result.output


def test_show_toml_section(runner, tmp_path):
    path = tmp_path / "pyproject.toml"
    path.write_text(
        "[tool.plumpkin]\nimportmapRemote = true\n\n" '[tool.plumpkin.importmap.imports]\nlogger = "./logger.py"\n'
    )

    result = runner.invoke(cli, ["--config", str(path), "--section", "tool.plumpkin", "show"])

    assert result.exit_code == 0, result.output
    assert "logger" in result.output
    assert "enabled" in result.output


def test_log_file_written(runner, config_file, tmp_path, restore_root_logger):
    log_path = tmp_path / "logs" / "plumpkin.jsonl"

    result = runner.invoke(
        cli, ["--config", str(config_file), "--log-file", str(log_path), "--log-level", "DEBUG", "resolve", "logger"]
    )

    assert result.exit_code == 0, result.output
    lines = [json.loads(line) for line in log_path.read_text().splitlines()]
    assert any("[importmap:resolve]" in line["message"] for line in lines)


@pytest.mark.parametrize(
    "body", ["raise ValueError('bad module')\n", "def broken(:\n"], ids=["raises", "syntax-error"]
)
def test_resolve_load_reports_module_errors(runner, project, body):
    (project / "src" / "broken.py").write_text(body)
    config = project / "package.json"
    config.write_text(json.dumps({"importmap": {"imports": {"broken": "./src/broken.py"}}}))

    result = runner.invoke(cli, ["--config", str(config), "resolve", "broken", "--load"])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)


def test_resolve_without_load_ignores_broken_module(runner, project):
    (project / "src" / "broken.py").write_text("raise ValueError('bad module')\n")
    config = project / "package.json"
    config.write_text(json.dumps({"importmap": {"imports": {"broken": "./src/broken.py"}}}))

    result = runner.invoke(cli, ["--config", str(config), "resolve", "broken"])

    assert result.exit_code == 0, result.output
    assert "broken.py" in result.output
