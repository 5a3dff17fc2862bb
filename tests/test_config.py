"""
Configuration tests.

Run with: pytest tests/test_config.py -v
"""

import logging

import pytest

from epub_core.config.settings import (
    PipelineConfig,
    configure_logging,
    get_default_config,
    load_config,
    save_config,
)
from epub_core.errors import ConfigurationError


class TestDefaults:
    """Default values."""

    def test_defaults(self):
        config = get_default_config()
        assert config.resource.default_encoding == "UTF-8"
        assert config.resource.encoding_prefix_size == 4096
        assert config.transform.serialize_transforms is True
        assert config.transform.allow_network is False
        assert config.log_level == "INFO"


class TestRoundTrip:
    """Saving and loading files."""

    @pytest.mark.parametrize("name", ["config.yaml", "config.json"])
    def test_save_and_load(self, tmp_path, name):
        config = PipelineConfig()
        config.resource.default_encoding = "ISO-8859-1"
        config.transform.xslt_path = "xslt/cleanup.xsl"
        config.custom = {"publisher": "Acme"}
        path = tmp_path / "nested" / name

        save_config(config, path)
        loaded = load_config(path)

        assert loaded.resource.default_encoding == "ISO-8859-1"
        assert loaded.transform.xslt_path == "xslt/cleanup.xsl"
        assert loaded.custom == {"publisher": "Acme"}

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("transform:\n  pretty_print: true\n", encoding="utf-8")
        config = load_config(path)
        assert config.transform.pretty_print is True
        assert config.resource.title_scan_chunk_size == 8192


class TestErrors:
    """Invalid configuration files."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[resource]\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)
        with pytest.raises(ValueError):
            save_config(PipelineConfig(), path)

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError):
            PipelineConfig.from_dict({"resource": {"no_such_option": 1}})

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_unparsable_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{broken", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(path)


class TestLogging:
    """Root logger setup."""

    @pytest.fixture(autouse=True)
    def restore_root_level(self):
        root = logging.getLogger()
        level = root.level
        yield
        root.setLevel(level)

    def test_level_names(self):
        configure_logging("debug")
        assert logging.getLogger().level == logging.DEBUG
        configure_logging("not-a-level")
        assert logging.getLogger().level == logging.INFO

    def test_level_from_loaded_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("log_level: WARNING\n", encoding="utf-8")
        configure_logging(load_config(path))
        assert logging.getLogger().level == logging.WARNING
