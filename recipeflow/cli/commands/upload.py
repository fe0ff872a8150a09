"""
Upload command implementation.

Thin wrapper around UploadService that handles CLI argument parsing
and delegates business logic to the service layer.
"""
import sys
from typing import Optional

import typer

from recipeflow.cli.commands.options import (
    AttemptsOption,
    ConfigOption,
    GameDirOption,
    ServerUrlOption,
    SkipExistingOption,
    SlugOption,
    TokenOption,
    optional_str,
)
from recipeflow.core.uploader import UploadService


def upload_command(
    payload: str = typer.Argument(..., help="Path to the exported payload file"),
    kind: str = typer.Option("recipes", "-k", "--kind", help="Upload kind (recipes, items)"),
    version: Optional[str] = typer.Option(None, "--version", help="Modpack version (detected from the game directory if omitted)"),
    game_dir: Optional[str] = GameDirOption,
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", min=1, help="Chunk size in bytes"),
    skip_existing: bool = SkipExistingOption,
    attempts: int = AttemptsOption,
    server_url: Optional[str] = ServerUrlOption,
    token: Optional[str] = TokenOption,
    slug: Optional[str] = SlugOption,
    config_path: Optional[str] = ConfigOption
):
    """Upload an exported payload to the RecipeFlow server."""

    # Delegate to service layer
    upload_service = UploadService()
    exit_code = upload_service.execute_upload(
        payload_path=payload,
        kind=kind,
        version=optional_str(version),
        game_dir=game_dir,
        chunk_size=chunk_size,
        skip_existing=skip_existing,
        attempts=attempts,
        server_url=server_url,
        token=token,
        slug=slug,
        config_path=config_path
    )

    # Exit with appropriate code
    if exit_code != 0:
        sys.exit(exit_code)
