"""
Check command implementation.
"""
import sys
from typing import Optional

import typer

from recipeflow.cli.commands.options import ConfigOption, ServerUrlOption, SlugOption, TokenOption
from recipeflow.core.uploader import UploadService


def check_command(
    kind: str = typer.Argument(..., help="Upload kind (recipes, icons, items)"),
    version: str = typer.Option(..., "--version", help="Modpack version"),
    server_url: Optional[str] = ServerUrlOption,
    token: Optional[str] = TokenOption,
    slug: Optional[str] = SlugOption,
    config_path: Optional[str] = ConfigOption
):
    """Check whether an upload already exists on the server."""

    upload_service = UploadService()
    exit_code = upload_service.execute_check(
        kind=kind,
        version=version,
        server_url=server_url,
        token=token,
        slug=slug,
        config_path=config_path
    )

    if exit_code != 0:
        sys.exit(exit_code)
