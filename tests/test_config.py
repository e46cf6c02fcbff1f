"""Tests for configuration loading."""

import json

import pytest

from freighter_cmd.core.config import load_config, parse_option_pairs


class TestLoadConfig:
    """Tests for load_config()."""

    def test_yaml_with_option_keys(self, tmp_path):
        """Test YAML files may use CamelCase option keys."""
        path = tmp_path / "config.yaml"
        path.write_text("CommandsDir: /opt/commands\nContainerTag: v3\n", encoding="utf-8")
        config = load_config(path)
        assert config.commands_dir == "/opt/commands"
        assert config.container_tag == "v3"
        assert config.container_repository == "freighterio/cmd"

    def test_json(self, tmp_path):
        """Test JSON files are supported."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"container_repository": "acme/cmd"}), encoding="utf-8")
        assert load_config(path).image == "acme/cmd:latest"

    def test_empty_yaml(self, tmp_path):
        """Test an empty file yields the defaults."""
        path = tmp_path / "config.yml"
        path.write_text("", encoding="utf-8")
        assert load_config(path).container_tag == "latest"

    def test_overrides_win(self, tmp_path):
        """Test overrides are applied on top of the file contents."""
        path = tmp_path / "config.yaml"
        path.write_text("container_tag: v1\n", encoding="utf-8")
        assert load_config(path, overrides={"ContainerTag": "v2"}).container_tag == "v2"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("x = 1\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Unsupported config format"):
            load_config(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)


class TestParseOptionPairs:
    """Tests for parse_option_pairs()."""

    def test_pairs(self):
        assert parse_option_pairs(["ContainerTag=v2", "CommandsDir=/a=b"]) == {
            "ContainerTag": "v2",
            "CommandsDir": "/a=b",
        }

    @pytest.mark.parametrize("pair", ["novalue", "=x"])
    def test_invalid(self, pair):
        with pytest.raises(ValueError):
            parse_option_pairs([pair])
