"""Tests for configuration loading"""

import pytest
import yaml

from pages_deploy.api.exceptions import ConfigError
from pages_deploy.constants import DEFAULT_IGNORE_PATTERNS
from pages_deploy.models import Config
from pages_deploy.services import ConfigService

CONFIG_YAML = """
version: "1.0"
cloudflare:
  account_id: ${PAGES_ACCOUNT}
  request_timeout: 10
manifest:
  ignore:
    - "*.map"
upload:
  concurrency: 5
  check_batch_size: 500
retry:
  max_attempts: 2
polling:
  initial_delay: 1
  timeout: 120
logging:
  level: info
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / ".pages-deploy.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return path


class TestConfigService:
    def test_loads_sections(self, config_file, monkeypatch):
        monkeypatch.setenv("PAGES_ACCOUNT", "acc-1")

        config = ConfigService(config_file, environ={}).load_config()

        assert config.cloudflare.account_id == "acc-1"
        assert config.cloudflare.request_timeout == 10
        assert config.upload.concurrency == 5
        assert config.upload.check_batch_size == 500
        assert config.retry.max_attempts == 2
        assert config.polling.initial_delay == 1
        assert config.polling.timeout == 120
        assert config.logging == {"level": "info"}

    def test_variable_expansion_uses_process_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PAGES_ACCOUNT", "acc-7")
        monkeypatch.setenv("PAGES_TOKEN", "file-token")
        monkeypatch.delenv("PAGES_UNSET", raising=False)
        path = tmp_path / "vars.yaml"
        path.write_text(
            "cloudflare:\n"
            "  account_id: ${PAGES_ACCOUNT}\n"
            "  api_token: $PAGES_TOKEN\n"
            "  email: ${PAGES_UNSET}\n",
            encoding="utf-8",
        )

        config = ConfigService(path, environ={}).load_config()

        assert config.cloudflare.account_id == "acc-7"
        assert config.cloudflare.api_token == "file-token"
        assert config.cloudflare.email == "${PAGES_UNSET}"

    def test_extra_ignore_patterns_extend_defaults(self, config_file):
        config = ConfigService(config_file, environ={}).load_config()

        assert config.manifest.ignore[:len(DEFAULT_IGNORE_PATTERNS)] == DEFAULT_IGNORE_PATTERNS
        assert "*.map" in config.manifest.ignore

    def test_environment_overrides_credentials(self, config_file):
        environ = {
            "CLOUDFLARE_API_TOKEN": "token-from-env",
            "CLOUDFLARE_ACCOUNT_ID": "acc-env",
        }
        config = ConfigService(config_file, environ=environ).load_config()

        assert config.cloudflare.api_token == "token-from-env"
        assert config.cloudflare.account_id == "acc-env"
        assert config.cloudflare.has_credentials

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = ConfigService(environ={}).load_config()

        assert config.upload.check_batch_size == 1000
        assert config.upload.concurrency == 3
        assert config.cloudflare.base_url == "https://api.cloudflare.com/client/v4"
        assert not config.cloudflare.has_credentials

    def test_file_in_working_directory_is_found(self, config_file, monkeypatch):
        monkeypatch.chdir(config_file.parent)
        monkeypatch.setenv("PAGES_ACCOUNT", "acc-1")

        service = ConfigService(environ={})

        assert service.config.cloudflare.account_id == "acc-1"

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            ConfigService(tmp_path / "nope.yaml", environ={}).load_config()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("cloudflare: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            ConfigService(path, environ={}).load_config()

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="must be a mapping"):
            ConfigService(path, environ={}).load_config()

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "zero.yaml"
        path.write_text("upload:\n  concurrency: 0\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="concurrency"):
            ConfigService(path, environ={}).load_config()

    def test_save_omits_secrets(self, tmp_path):
        service = ConfigService(environ={"CLOUDFLARE_API_TOKEN": "secret-token"})
        config = Config()
        config.cloudflare.api_token = "secret-token"

        path = service.save_config(tmp_path / "out.yaml", config)

        text = path.read_text(encoding="utf-8")
        assert "secret-token" not in text
        assert yaml.safe_load(text)["upload"]["concurrency"] == 3


class TestPolicies:
    def test_retry_delay_backoff_is_capped(self):
        config = Config.from_dict({"retry": {"delay": 1, "backoff_multiplier": 2, "max_delay": 5}})

        assert [config.retry.get_retry_delay(n) for n in range(1, 5)] == [1, 2, 4, 5]

    def test_polling_interval(self):
        config = Config.from_dict({"polling": {"interval": 2, "backoff_multiplier": 1.5, "max_interval": 4}})

        assert [config.polling.get_interval(n) for n in range(1, 4)] == [2, 3, 4]

    def test_round_trip_through_dict(self):
        config = Config.from_dict({"upload": {"max_batch_files": 10}})

        assert Config.from_dict(config.to_dict()).upload.max_batch_files == 10
