"""RecipeFlow uploader: resumable chunked uploads of exported modpack data."""

__version__ = "1.0.0"
