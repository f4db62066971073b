"""Init command implementation."""

from pathlib import Path
from typing import Annotated

import typer

from ..config import write_config_template
from ..constants import CONFIG_FILE
from ..output import get_output_context


def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file"),
    ] = False,
) -> None:
    """Write a .cmdpool.toml template in the current directory."""
    ctx = get_output_context()
    config_path = Path.cwd() / CONFIG_FILE

    if config_path.exists() and not force:
        ctx.print(f"[yellow]Config already exists:[/yellow] {config_path}")
        ctx.result({"config": str(config_path), "created": False})
        return

    write_config_template(Path.cwd())
    ctx.success(
        f"Created config template: {config_path}",
        {"config": str(config_path), "created": True},
    )
