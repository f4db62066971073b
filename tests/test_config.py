"""Tests for cmdpool configuration."""

from pathlib import Path

import pytest

from cmdpool.config import (
    CmdpoolConfig,
    ConfigError,
    PoolConfig,
    load_config,
    write_config_template,
)
from cmdpool.constants import CONFIG_FILE, DEFAULT_LIMIT, POLL_INTERVAL


def test_defaults():
    """Defaults match the scheduler defaults."""
    config = CmdpoolConfig()
    assert config.pool.limit == DEFAULT_LIMIT
    assert config.pool.continue_on_error is True
    assert config.pool.poll_interval == POLL_INTERVAL
    assert config.pool.wait_on_abort is False
    assert config.rewrite.raw is True
    assert config.rewrite.binary is None
    assert config.lock.name is None
    assert config.lock.suffix == ""


def test_missing_file_gives_defaults(in_tmp_dir: Path):
    """No config file in the cwd means default settings."""
    assert load_config() == CmdpoolConfig()


def test_missing_explicit_path_raises(tmp_path: Path):
    """A config path given explicitly must exist."""
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "nope.toml")


def test_load_from_file(tmp_path: Path):
    """Values in the TOML file are applied."""
    path = tmp_path / CONFIG_FILE
    path.write_text(
        """[pool]
limit = 2
continue_on_error = false

[rewrite]
raw = false
binary = "/usr/bin/php"
sub_path = "bin/console"

[lock]
name = "nightly"
"""
    )
    config = load_config(path)
    assert config.pool.limit == 2
    assert config.pool.continue_on_error is False
    assert config.rewrite.raw is False
    assert config.rewrite.binary == "/usr/bin/php"
    assert config.rewrite.sub_path == "bin/console"
    assert config.lock.name == "nightly"


def test_load_defaults_to_cwd(in_tmp_dir: Path):
    """Without a path the config is read from the cwd."""
    (in_tmp_dir / CONFIG_FILE).write_text("[pool]\nlimit = 7\n")
    assert load_config().pool.limit == 7


def test_invalid_toml_raises(tmp_path: Path):
    """Broken TOML is reported as ConfigError."""
    path = tmp_path / CONFIG_FILE
    path.write_text("[pool\nlimit = ")
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(path)


def test_invalid_limit_raises(tmp_path: Path):
    """Limits below one are rejected."""
    path = tmp_path / CONFIG_FILE
    path.write_text("[pool]\nlimit = 0\n")
    with pytest.raises(ConfigError, match="Invalid config"):
        load_config(path)


def test_pool_config_rejects_non_positive_interval():
    """Poll interval must be positive."""
    with pytest.raises(ValueError):
        PoolConfig(poll_interval=0)


def test_template_loads_back(tmp_path: Path):
    """The written template is a valid config."""
    path = write_config_template(tmp_path)
    assert path == tmp_path / CONFIG_FILE
    config = load_config(path)
    assert config.pool.limit == DEFAULT_LIMIT
    assert config.rewrite.raw is True
