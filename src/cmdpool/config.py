"""Configuration management for cmdpool."""

import tomllib
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field, ValidationError

from .constants import CONFIG_FILE, DEFAULT_LIMIT, POLL_INTERVAL


class ConfigError(Exception):
    """Configuration file could not be read or is invalid."""


class PoolConfig(BaseModel):
    """Scheduling settings."""

    limit: int = Field(default=DEFAULT_LIMIT, ge=1, description="Max concurrent processes")
    continue_on_error: bool = Field(
        default=True, description="Keep scheduling after a process fails"
    )
    poll_interval: float = Field(
        default=POLL_INTERVAL, gt=0, description="Seconds between poll ticks"
    )
    wait_on_abort: bool = Field(
        default=False, description="Wait for active processes when stopping on failure"
    )


class RewriteConfig(BaseModel):
    """How submitted commands are turned into command lines.

    With ``raw`` set (the default), commands run exactly as given. Otherwise
    each command is prefixed with ``binary`` and ``sub_path`` (defaulting to
    the current interpreter and entry point).
    """

    raw: bool = True
    binary: str | None = None  # Override executable path
    sub_path: str | None = None  # Override entry point


class LockConfig(BaseModel):
    """Single-instance lock settings."""

    name: str | None = None  # Lock name; no lock when unset
    suffix: str = ""
    dir: Path | None = None  # Lock file directory (defaults to temp dir)


class CmdpoolConfig(BaseModel):
    """Root configuration for cmdpool."""

    pool: PoolConfig = Field(default_factory=PoolConfig)
    rewrite: RewriteConfig = Field(default_factory=RewriteConfig)
    lock: LockConfig = Field(default_factory=LockConfig)


def load_config(path: Path | None = None) -> CmdpoolConfig:
    """Load config from a TOML file.

    Args:
        path: Config file path (defaults to .cmdpool.toml in the cwd)

    Returns:
        Loaded configuration, or defaults if no path was given and the cwd
        has no config file

    Raises:
        ConfigError: If an explicit path does not exist, or the file is not
            valid TOML or fails validation
    """
    if path is not None and not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    config_path = path if path is not None else Path.cwd() / CONFIG_FILE
    if not config_path.exists():
        return CmdpoolConfig()
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        return CmdpoolConfig.model_validate(data)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {config_path}: {e}") from e


def write_config_template(directory: Path) -> Path:
    """Write default config template.

    Args:
        directory: Directory to write .cmdpool.toml into

    Returns:
        Path to the written config file
    """
    config_path = directory / CONFIG_FILE
    template = {
        "pool": {
            "limit": DEFAULT_LIMIT,
            "continue_on_error": True,
            "poll_interval": POLL_INTERVAL,
            "wait_on_abort": False,
        },
        # Set raw = false to re-invoke the current program for every command
        "rewrite": {"raw": True},
        "lock": {"suffix": ""},
    }
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
