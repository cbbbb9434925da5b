"""Tests for configuration loading"""

import pytest
import yaml

from release_tool.api.exceptions import ConfigError
from release_tool.deployer import DeployerRegistry, InMemoryAppDeployer, load_deployer_class
from release_tool.models import HealthCheckConfig, PackageSourceConfig, ReleaseToolConfig
from release_tool.services.config_service import ConfigService


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    for name in ("RELEASE_TOOL_CONFIG", "RELEASE_TOOL_STATE_DIR", "RELEASE_TOOL_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestConfigModels:

    def test_defaults(self):
        config = ReleaseToolConfig()

        assert config.platform_names == ["default"]
        assert config.get_platform("default").deployer == "release_tool.deployer.memory:InMemoryAppDeployer"
        assert config.repository.type == "memory"
        assert config.health_check.interval_seconds == 1.0
        assert config.get_platform("missing") is None

    def test_round_trip(self):
        data = {
            "health_check": {"interval_seconds": 0.5, "timeout_seconds": 30},
            "repository": {"type": "filesystem", "path": "/var/lib/releases"},
            "packages": {"type": "filesystem", "path": "/srv/packages"},
            "platforms": {
                "local": {"deployer": "release_tool.deployer.memory:InMemoryAppDeployer",
                          "options": {"initial_state": "deploying"}}
            }
        }

        config = ReleaseToolConfig.from_dict(data)
        assert config.platform_names == ["local"]
        assert config.get_platform("local").options == {"initial_state": "deploying"}
        assert ReleaseToolConfig.from_dict(config.to_dict()) == config

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            HealthCheckConfig(interval_seconds=0)
        with pytest.raises(ValueError):
            PackageSourceConfig(type="filesystem")
        with pytest.raises(ValueError):
            ReleaseToolConfig.from_dict({"platforms": {"local": {"deployer": "no-colon"}}})


class TestConfigService:

    def test_missing_default_file(self):
        config = ConfigService().load_config()
        assert config.platform_names == ["default"]

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            ConfigService(tmp_path / "missing.yaml").load_config()

    def test_missing_file_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("RELEASE_TOOL_CONFIG", str(tmp_path / "missing.yaml"))
        with pytest.raises(ConfigError):
            ConfigService().load_config()

    def test_load_with_environment_expansion(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PACKAGES_HOME", "/srv/packages")
        (tmp_path / "release-tool.yaml").write_text(
            "packages:\n"
            "  type: filesystem\n"
            "  path: ${PACKAGES_HOME}/stable\n",
            encoding="utf-8"
        )

        config = ConfigService().config
        assert config.packages.path == "/srv/packages/stable"

    def test_state_dir_and_log_level_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("RELEASE_TOOL_STATE_DIR", str(tmp_path / "state"))
        monkeypatch.setenv("RELEASE_TOOL_LOG_LEVEL", "debug")
        (tmp_path / "release-tool.yaml").write_text("repository:\n  type: filesystem\n", encoding="utf-8")

        config = ConfigService().load_config()
        assert config.repository.path == str(tmp_path / "state")
        assert config.log_level == "DEBUG"

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "release-tool.yaml"

        path.write_text("repository: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            ConfigService(path).load_config()

        path.write_text("- a\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="must be a YAML map"):
            ConfigService(path).load_config()

        path.write_text("repository:\n  type: postgres\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="postgres"):
            ConfigService(path).load_config()

    def test_save_config(self, tmp_path):
        path = tmp_path / "saved.yaml"
        service = ConfigService(path)
        service.save_config(ReleaseToolConfig.from_dict({"repository": {"type": "filesystem"}}))

        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data["repository"] == {"type": "filesystem", "path": ".release-tool"}
        assert ConfigService(path).load_config().repository.type == "filesystem"


class TestDeployerRegistry:

    def test_from_config(self):
        registry = DeployerRegistry.from_config(ReleaseToolConfig().platforms)

        assert registry.platforms() == ["default"]
        assert "default" in registry
        assert isinstance(registry.get("default"), InMemoryAppDeployer)

    def test_load_deployer_class_errors(self):
        with pytest.raises(ConfigError, match="module:Class"):
            load_deployer_class("release_tool.deployer.memory")
        with pytest.raises(ConfigError, match="import"):
            load_deployer_class("release_tool.no_such_module:Deployer")
        with pytest.raises(ConfigError, match="not a concrete AppDeployer"):
            load_deployer_class("release_tool.deployer.base:AppDeployer")

    def test_invalid_deployer_options(self):
        config = ReleaseToolConfig.from_dict({
            "platforms": {"local": {"options": {"initial_state": "sleeping"}}}
        })
        with pytest.raises(ConfigError, match="local"):
            DeployerRegistry.from_config(config.platforms)
