"""
CLI module for RecipeFlow uploader.

Provides the command-line interface for uploading exported modpack data.
"""
from recipeflow.cli.app import app as _app

# Export app function for pyproject.toml entry point
def app():
    """Entry point function for pyproject.toml scripts."""
    _app()

__all__ = ['app']
