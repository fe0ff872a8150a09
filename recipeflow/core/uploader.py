"""
Upload service for RecipeFlow.

Drives uploads of exported modpack data to the RecipeFlow server on behalf
of the CLI: resolves configuration and version, shows progress, and maps
results to exit codes.
"""
import logging
import os
from pathlib import Path
from typing import Callable, Optional

import backoff

from recipeflow.core.config_manager import ConfigManager
from recipeflow.core.version_detector import get_effective_version
from recipeflow.rich_utils.ui_helpers import create_upload_progress, get_console
from recipeflow.upload import (
    EnvironmentValidationError,
    IconMetadata,
    RecipeFlowUploadManager,
    UploadKind,
)
from recipeflow.upload.icon_uploader import METADATA_ENTRY_NAME
from recipeflow.upload.models import ProgressCallback, UploadResult

logger = logging.getLogger(__name__)

UploadRunner = Callable[[ProgressCallback], UploadResult]


class UploadService:
    """Service for uploading exported data to a RecipeFlow server."""

    def __init__(self):
        self.config_manager = ConfigManager()
        self.console = get_console()

    def configure_environment_variables(
        self,
        server_url: Optional[str],
        token: Optional[str],
        slug: Optional[str]
    ) -> None:
        """Override environment variables if CLI parameters are provided."""
        if server_url:
            os.environ["RECIPEFLOW_SERVER_URL"] = server_url
        if token:
            os.environ["RECIPEFLOW_AUTH_TOKEN"] = token
        if slug:
            os.environ["RECIPEFLOW_MODPACK_SLUG"] = slug

    def create_upload_manager(self, config_path: Optional[str]) -> Optional[RecipeFlowUploadManager]:
        """Load config and build a manager, or print what is missing."""
        file_config = self.config_manager.discover_and_load_config(config_path)
        upload_manager = RecipeFlowUploadManager(file_config)

        validation = upload_manager.detector.validate_environment(file_config)
        if not validation.is_valid:
            self.console.print(f"❌ Upload not configured: {validation.error_message}", style="bold red")
            self.console.print("   Required: RECIPEFLOW_SERVER_URL, RECIPEFLOW_AUTH_TOKEN, RECIPEFLOW_MODPACK_SLUG", style="dim")
            self.console.print("\n💡 Set environment variables or use CLI parameters:", style="dim")
            self.console.print("   recipeflow-upload upload recipes.json --server-url 'https://recipes.example.com' "
                               "--token '...' --slug 'my-pack' --version 1.0.0", style="dim")
            return None
        return upload_manager

    def resolve_version(
        self,
        upload_manager: RecipeFlowUploadManager,
        version: Optional[str],
        game_dir: Optional[str]
    ) -> Optional[str]:
        """CLI --version, then the configured override, then manifest detection."""
        override = version or upload_manager.config.version_override
        resolved = get_effective_version(game_dir or os.getcwd(), override)
        if not resolved:
            self.console.print("❌ Could not determine modpack version", style="bold red")
            self.console.print("   Pass --version or --game-dir pointing at a manifest.json / pack.toml", style="dim")
        return resolved

    def run_with_progress(self, description: str, runner: UploadRunner, attempts: int = 1) -> UploadResult:
        """Run an upload under a progress bar, re-running it while it fails."""

        def _on_retry(details):
            self.console.print(
                f"⚠️ Upload attempt {details['tries']} failed, retrying in {details['wait']:.1f}s...",
                style="yellow"
            )

        with create_upload_progress(self.console) as progress:
            task = progress.add_task(description, total=100)

            def callback(current: int, total: int, message: str) -> None:
                progress.update(task, completed=current, total=total, description=message)

            @backoff.on_predicate(
                backoff.expo,
                lambda result: not result.success,
                max_tries=max(1, attempts),
                max_value=60,
                on_backoff=_on_retry,
            )
            def _attempt() -> UploadResult:
                return runner(callback)

            return _attempt()

    def report_result(self, result: UploadResult) -> int:
        if result.success:
            self.console.print(f"✅ {result.summary()}", style="bold green")
            return 0
        self.console.print(f"❌ {result.summary()}", style="bold red")
        return 1

    def _already_uploaded(self, upload_manager: RecipeFlowUploadManager, version: str, kind) -> bool:
        if upload_manager.check_upload_exists(version, kind):
            self.console.print(f"ℹ️ Upload skipped: {kind} for version {version} already on server", style="blue")
            return True
        return False

    def execute_upload(
        self,
        payload_path: str,
        kind: str = UploadKind.RECIPES.value,
        version: Optional[str] = None,
        game_dir: Optional[str] = None,
        chunk_size: Optional[int] = None,
        skip_existing: bool = False,
        attempts: int = 1,
        server_url: Optional[str] = None,
        token: Optional[str] = None,
        slug: Optional[str] = None,
        config_path: Optional[str] = None
    ) -> int:
        """Execute payload upload workflow and return exit code."""

        self.configure_environment_variables(server_url, token, slug)

        try:
            upload_manager = self.create_upload_manager(config_path)
            if upload_manager is None:
                return 1

            resolved_version = self.resolve_version(upload_manager, version, game_dir)
            if not resolved_version:
                return 1

            try:
                data = Path(payload_path).read_bytes()
            except OSError as e:
                self.console.print(f"❌ Could not read payload: {e}", style="bold red")
                return 1

            if skip_existing and self._already_uploaded(upload_manager, resolved_version, kind):
                return 0

            self.console.print(f"🚀 Uploading {kind} for version {resolved_version}...", style="bold blue")
            result = self.run_with_progress(
                f"Uploading {kind}...",
                lambda callback: upload_manager.upload_payload(data, resolved_version, kind, callback, chunk_size),
                attempts
            )
            return self.report_result(result)

        except (EnvironmentValidationError, FileNotFoundError) as e:
            self.console.print(f"❌ {e}", style="bold red")
            return 1
        except Exception as e:
            logger.debug("Upload command failed", exc_info=True)
            self.console.print(f"❌ Upload failed: {str(e)}", style="bold red")
            return 1

    def execute_icon_upload(
        self,
        icon_dir: str,
        metadata_path: Optional[str] = None,
        version: Optional[str] = None,
        game_dir: Optional[str] = None,
        skip_existing: bool = False,
        attempts: int = 1,
        server_url: Optional[str] = None,
        token: Optional[str] = None,
        slug: Optional[str] = None,
        config_path: Optional[str] = None
    ) -> int:
        """Execute icon archive upload workflow and return exit code."""

        self.configure_environment_variables(server_url, token, slug)

        try:
            upload_manager = self.create_upload_manager(config_path)
            if upload_manager is None:
                return 1

            resolved_version = self.resolve_version(upload_manager, version, game_dir)
            if not resolved_version:
                return 1

            metadata_file = Path(metadata_path) if metadata_path else Path(icon_dir) / METADATA_ENTRY_NAME
            try:
                metadata = IconMetadata.load(metadata_file)
            except (OSError, ValueError) as e:
                self.console.print(f"❌ Could not read icon metadata {metadata_file}: {e}", style="bold red")
                return 1

            if skip_existing and self._already_uploaded(upload_manager, resolved_version, UploadKind.ICONS.value):
                return 0

            self.console.print(f"🚀 Uploading {len(metadata)} icons for version {resolved_version}...", style="bold blue")
            result = self.run_with_progress(
                "Uploading icons...",
                lambda callback: upload_manager.upload_icons(icon_dir, metadata, resolved_version, callback),
                attempts
            )
            return self.report_result(result)

        except (EnvironmentValidationError, FileNotFoundError) as e:
            self.console.print(f"❌ {e}", style="bold red")
            return 1
        except Exception as e:
            logger.debug("Icon upload command failed", exc_info=True)
            self.console.print(f"❌ Upload failed: {str(e)}", style="bold red")
            return 1

    def execute_check(
        self,
        kind: str,
        version: str,
        server_url: Optional[str] = None,
        token: Optional[str] = None,
        slug: Optional[str] = None,
        config_path: Optional[str] = None
    ) -> int:
        """Report whether an upload is already stored on the server."""

        self.configure_environment_variables(server_url, token, slug)

        try:
            upload_manager = self.create_upload_manager(config_path)
            if upload_manager is None:
                return 1

            if upload_manager.check_upload_exists(version, kind):
                self.console.print(f"✅ {kind} for version {version} exists on server", style="green")
            else:
                self.console.print(f"ℹ️ {kind} for version {version} not found on server", style="blue")
            return 0

        except (EnvironmentValidationError, FileNotFoundError) as e:
            self.console.print(f"❌ {e}", style="bold red")
            return 1
