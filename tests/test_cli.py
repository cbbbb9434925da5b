"""Tests for the command line interface"""

import json
import logging

import click
import pytest
import yaml
from click.testing import CliRunner

from release_tool.cli.main import cli
from release_tool.cli.utils.values import build_config_values, parse_set_option

from conftest import LOGGER_TEMPLATE


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    # -q disables logging for the whole process
    logging.disable(logging.NOTSET)


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Filesystem packages, filesystem state and a config file pointing at both"""
    for name in ("RELEASE_TOOL_CONFIG", "RELEASE_TOOL_STATE_DIR", "RELEASE_TOOL_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    package_dir = tmp_path / "packages" / "logger" / "1.0.0"
    (package_dir / "templates").mkdir(parents=True)
    (package_dir / "package.yml").write_text("name: logger\nversion: 1.0.0\n", encoding="utf-8")
    (package_dir / "values.yml").write_text(
        "version: 1.0.0\nlog:\n  level: INFO\ncount: 1\n", encoding="utf-8")
    (package_dir / "templates" / "logger.yml").write_text(LOGGER_TEMPLATE, encoding="utf-8")

    config_path = tmp_path / "release-tool.yaml"
    config_path.write_text(yaml.safe_dump({
        "health_check": {"interval_seconds": 0.01, "timeout_seconds": 1},
        "repository": {"type": "filesystem", "path": str(tmp_path / "state")},
        "packages": {"type": "filesystem", "path": str(tmp_path / "packages")},
    }), encoding="utf-8")
    return config_path


def invoke(config_path, *args):
    return CliRunner().invoke(cli, ["-q", "-c", str(config_path), *args])


class TestReleaseCommands:

    def test_install_status_history(self, workspace):
        result = invoke(workspace, "release", "install", "logger", "--name", "logger")
        assert result.exit_code == 0, result.output
        assert "DEPLOYED" in result.output

        result = invoke(workspace, "release", "status", "logger", "--output", "json")
        assert result.exit_code == 0, result.output
        info = json.loads(result.output)
        assert info["version"] == 1
        assert info["status"]["status_code"] == "deployed"

        result = invoke(workspace, "release", "history", "logger", "--output", "json")
        assert result.exit_code == 0, result.output
        assert [entry["version"] for entry in json.loads(result.output)] == [1]

    def test_upgrade_rollback_delete(self, workspace):
        assert invoke(workspace, "release", "install", "logger", "-n", "logger").exit_code == 0

        result = invoke(workspace, "release", "upgrade", "logger", "--set", "log.level=DEBUG")
        assert result.exit_code == 0, result.output

        result = invoke(workspace, "release", "manifest", "logger")
        assert result.exit_code == 0, result.output
        assert "DEBUG" in result.output

        result = invoke(workspace, "release", "rollback", "logger", "--version", "1")
        assert result.exit_code == 0, result.output

        result = invoke(workspace, "release", "history", "logger", "--output", "json")
        history = json.loads(result.output)
        assert [entry["version"] for entry in history] == [3, 2, 1]
        assert history[0]["status"]["status_code"] == "deployed"

        result = invoke(workspace, "release", "delete", "logger", "--yes")
        assert result.exit_code == 0, result.output

        result = invoke(workspace, "release", "list", "--output", "json")
        assert result.exit_code == 0, result.output
        assert "No releases found" in result.output

    def test_errors_exit_with_code(self, workspace):
        result = invoke(workspace, "release", "status", "missing")
        assert result.exit_code == 1
        assert "RT004" in result.output

        assert invoke(workspace, "release", "install", "logger", "-n", "logger").exit_code == 0
        result = invoke(workspace, "release", "install", "logger", "-n", "logger")
        assert result.exit_code == 1
        assert "RT005" in result.output

        result = invoke(workspace, "release", "upgrade", "logger")
        assert result.exit_code == 1
        assert "RT013" in result.output

    def test_failed_rollout_exits_non_zero(self, workspace):
        config = yaml.safe_load(workspace.read_text(encoding="utf-8"))
        config["platforms"] = {
            "default": {"options": {"fail_on": ["logger-app"]}}
        }
        workspace.write_text(yaml.safe_dump(config), encoding="utf-8")

        result = invoke(workspace, "release", "install", "logger", "-n", "logger")
        assert result.exit_code == 1
        assert "FAILED" in result.output


class TestConfigCommands:

    def test_init_and_show(self, tmp_path, monkeypatch):
        monkeypatch.delenv("RELEASE_TOOL_CONFIG", raising=False)
        config_path = tmp_path / "release-tool.yaml"

        result = invoke(config_path, "config", "init", "--packages", str(tmp_path / "packages"))
        assert result.exit_code == 0, result.output
        saved = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        assert saved["repository"]["type"] == "filesystem"
        assert saved["packages"]["path"] == str(tmp_path / "packages")

        result = invoke(config_path, "config", "init")
        assert result.exit_code == 1

        result = invoke(config_path, "config", "show")
        assert result.exit_code == 0, result.output
        assert "default" in result.output

    def test_show_invalid_config(self, tmp_path):
        config_path = tmp_path / "release-tool.yaml"
        config_path.write_text("repository:\n  type: postgres\n", encoding="utf-8")

        result = invoke(config_path, "config", "show")
        assert result.exit_code == 1
        assert "RT001" in result.output


class TestValueOptions:

    def test_parse_set_option(self):
        assert parse_set_option("log.level=DEBUG") == {"log": {"level": "DEBUG"}}
        assert parse_set_option("count=3") == {"count": "3"}
        assert parse_set_option("version=1.10") == {"version": "1.10"}
        assert parse_set_option("empty=") == {"empty": ""}

    def test_invalid_set_option(self):
        with pytest.raises(click.BadParameter, match="KEY=VALUE"):
            parse_set_option("no-equals-sign")
        with pytest.raises(click.BadParameter, match="Invalid YAML"):
            parse_set_option("a=[")

    def test_build_config_values(self, tmp_path):
        values_file = tmp_path / "values.yml"
        values_file.write_text("log:\n  level: INFO\nversion: 1.10\n", encoding="utf-8")

        raw = build_config_values(str(values_file), ["log.level=DEBUG"])
        assert yaml.safe_load(raw) == {"log": {"level": "DEBUG"}, "version": "1.10"}

        assert build_config_values(None, []) is None

    def test_invalid_values_file(self, tmp_path):
        values_file = tmp_path / "values.yml"
        values_file.write_text("log: [unclosed\n", encoding="utf-8")

        with pytest.raises(click.BadParameter, match="not valid YAML"):
            build_config_values(str(values_file), [])

    def test_invalid_set_option_reported_without_traceback(self, workspace):
        assert invoke(workspace, "release", "install", "logger", "-n", "logger").exit_code == 0

        result = invoke(workspace, "release", "upgrade", "logger", "--set", "a=[")
        assert result.exit_code == 2
        assert "Invalid YAML value" in result.output
        assert "Traceback" not in result.output
