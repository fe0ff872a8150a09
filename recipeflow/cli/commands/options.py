"""Options shared by every command that talks to the server."""
from typing import Optional

import typer

ServerUrlOption = typer.Option(None, "--server-url", help="RecipeFlow server URL (overrides RECIPEFLOW_SERVER_URL)")
TokenOption = typer.Option(None, "--token", help="Auth token (overrides RECIPEFLOW_AUTH_TOKEN)")
SlugOption = typer.Option(None, "--slug", help="Modpack slug (overrides RECIPEFLOW_MODPACK_SLUG)")
ConfigOption = typer.Option(None, "-c", "--config", help="Path to config YAML")
AttemptsOption = typer.Option(1, "--attempts", min=1, help="Re-run a failed upload up to this many times; each run resumes")
SkipExistingOption = typer.Option(False, "--skip-existing", help="Skip the upload if the server already has it")
GameDirOption = typer.Option(None, "--game-dir", help="Game directory holding manifest.json or pack.toml")


def optional_str(value: Optional[str]) -> Optional[str]:
    return value.strip() if value and value.strip() else None
