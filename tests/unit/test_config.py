"""
Tests for configuration loading.

Precedence: environment > config.json > defaults.
"""

import json

import pytest

from config import Config, ConfigError, load_local_config


@pytest.fixture
def no_file(tmp_path):
    return tmp_path / "absent.json"


class TestLayering:
    def test_defaults(self, no_file):
        config = Config.from_env(environ={}, config_path=no_file)

        assert config.port == 3000
        assert config.tag_property == "Tags"
        assert config.content_property == "Content"
        assert config.notion_version == "2022-06-28"
        assert config.default_limit == 50
        assert config.block_fetch_concurrency == 1
        assert config.memo_backend == "notion"

    def test_config_file_overrides_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "notionApiKey": "file-key",
            "databaseId": "file-db",
            "tagProperty": "Labels",
            "port": 4000,
        }))

        config = Config.from_env(environ={}, config_path=path)
        assert config.notion_api_key == "file-key"
        assert config.database_id == "file-db"
        assert config.tag_property == "Labels"
        assert config.port == 4000

    def test_environment_overrides_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"notionApiKey": "file-key", "databaseId": "file-db"}))

        config = Config.from_env(
            environ={"NOTION_API_KEY": "env-key", "PORT": "8080"},
            config_path=path,
        )
        assert config.notion_api_key == "env-key"
        assert config.database_id == "file-db"
        assert config.port == 8080

    def test_empty_env_value_does_not_override(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"databaseId": "file-db"}))

        config = Config.from_env(environ={"NOTION_DATABASE_ID": ""}, config_path=path)
        assert config.database_id == "file-db"

    def test_backend_and_level_normalised(self, no_file):
        config = Config.from_env(
            environ={"MEMO_BACKEND": "STUB", "LOG_LEVEL": "debug"},
            config_path=no_file,
        )
        assert config.memo_backend == "stub"
        assert config.log_level == "DEBUG"

    def test_non_numeric_value_rejected(self, no_file):
        with pytest.raises(ConfigError):
            Config.from_env(environ={"PORT": "eighty"}, config_path=no_file)


class TestLocalFile:
    def test_missing_file(self, no_file):
        assert load_local_config(no_file) == {}

    def test_unparseable_file_ignored(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert load_local_config(path) == {}

    def test_non_object_file_ignored(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2, 3]")
        assert load_local_config(path) == {}


class TestValidate:
    def test_missing_credentials(self):
        config = Config()
        assert config.missing() == ["NOTION_API_KEY", "NOTION_DATABASE_ID"]
        with pytest.raises(ConfigError) as exc_info:
            config.validate()
        assert "NOTION_API_KEY" in str(exc_info.value)

    def test_complete_notion_config_passes(self):
        Config(notion_api_key="k", database_id="db").validate()

    def test_stub_backend_needs_no_credentials(self):
        Config(memo_backend="stub").validate()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"memo_backend": "sqlite"},
            {"default_limit": 0},
            {"default_limit": 101},
            {"block_fetch_concurrency": 0},
            {"log_level": "LOUD"},
        ],
    )
    def test_invalid_values(self, overrides):
        config = Config(notion_api_key="k", database_id="db", **overrides)
        with pytest.raises(ConfigError):
            config.validate()
