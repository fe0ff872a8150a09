"""
Main CLI application for the RecipeFlow uploader.

Defines the Typer application structure and command routing; commands are
thin wrappers around UploadService.
"""
import logging

import typer

from recipeflow.cli.commands.check import check_command
from recipeflow.cli.commands.icons import upload_icons_command
from recipeflow.cli.commands.upload import upload_command


# Initialize Typer app
app = typer.Typer(help="RecipeFlow uploader - send exported modpack data to a RecipeFlow server", no_args_is_help=True)

# Register commands
app.command("upload", help="Upload an exported payload (recipes, items) to the server.")(upload_command)
app.command("upload-icons", help="Archive an exported icon directory and upload it.")(upload_icons_command)
app.command("check", help="Check whether an upload already exists on the server.")(check_command)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging")
):
    """RecipeFlow uploader.

    Run 'recipeflow-upload upload recipes.json --version 1.0.0' to upload recipes.
    Run 'recipeflow-upload upload-icons ./icons --version 1.0.0' to upload icons.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
