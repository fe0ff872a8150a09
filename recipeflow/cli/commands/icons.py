"""
Icon upload command implementation.
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


def upload_icons_command(
    icon_dir: str = typer.Argument(..., help="Directory holding exported icon files"),
    metadata: Optional[str] = typer.Option(None, "-m", "--metadata", help="Icon metadata JSON (default: ICON_DIR/icon-metadata.json)"),
    version: Optional[str] = typer.Option(None, "--version", help="Modpack version (detected from the game directory if omitted)"),
    game_dir: Optional[str] = GameDirOption,
    skip_existing: bool = SkipExistingOption,
    attempts: int = AttemptsOption,
    server_url: Optional[str] = ServerUrlOption,
    token: Optional[str] = TokenOption,
    slug: Optional[str] = SlugOption,
    config_path: Optional[str] = ConfigOption
):
    """Archive exported icons and upload them to the RecipeFlow server."""

    upload_service = UploadService()
    exit_code = upload_service.execute_icon_upload(
        icon_dir=icon_dir,
        metadata_path=metadata,
        version=optional_str(version),
        game_dir=game_dir,
        skip_existing=skip_existing,
        attempts=attempts,
        server_url=server_url,
        token=token,
        slug=slug,
        config_path=config_path
    )

    if exit_code != 0:
        sys.exit(exit_code)
