"""
RecipeFlow Environment Detector

Detects and validates the environment variables that configure uploads and
merges them over settings loaded from the YAML config file.
"""

import os
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from .exceptions import EnvironmentValidationError
from .models import DEFAULT_CHUNK_SIZE, ICON_CHUNK_SIZE, ITEMS_CHUNK_SIZE, UploadConfig, ValidationResult


def _parse_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Not a boolean: {value}")


class RecipeFlowEnvironmentDetector:
    """Detects and validates RecipeFlow upload environment"""

    REQUIRED_VARS = {
        "RECIPEFLOW_SERVER_URL": "server_url",
        "RECIPEFLOW_AUTH_TOKEN": "auth_token",
        "RECIPEFLOW_MODPACK_SLUG": "modpack_slug",
    }

    OPTIONAL_VARS: Dict[str, Tuple[Any, Callable[[str], Any]]] = {
        "RECIPEFLOW_TIMEOUT": (300, float),
        "RECIPEFLOW_COMPRESSION": (True, _parse_bool),
        "RECIPEFLOW_DEBUG": (False, _parse_bool),
        "RECIPEFLOW_CHUNK_SIZE": (DEFAULT_CHUNK_SIZE, int),
        "RECIPEFLOW_ICON_CHUNK_SIZE": (ICON_CHUNK_SIZE, int),
        "RECIPEFLOW_ITEMS_CHUNK_SIZE": (ITEMS_CHUNK_SIZE, int),
        "RECIPEFLOW_VERSION_OVERRIDE": ("", str),
    }

    # env var -> config file key under the "upload" section
    _FILE_KEYS = {
        "RECIPEFLOW_TIMEOUT": "timeout",
        "RECIPEFLOW_COMPRESSION": "compression",
        "RECIPEFLOW_DEBUG": "debug_logging",
        "RECIPEFLOW_CHUNK_SIZE": "chunk_size",
        "RECIPEFLOW_ICON_CHUNK_SIZE": "icon_chunk_size",
        "RECIPEFLOW_ITEMS_CHUNK_SIZE": "items_chunk_size",
        "RECIPEFLOW_VERSION_OVERRIDE": "version_override",
    }

    _PARAM_NAMES = {
        "RECIPEFLOW_COMPRESSION": "compression_enabled",
        "RECIPEFLOW_DEBUG": "debug_logging",
    }

    def is_upload_enabled(self, file_config: Optional[dict] = None) -> bool:
        """Check if all required settings are present"""
        return not self.get_missing_variables(file_config)

    def get_missing_variables(self, file_config: Optional[dict] = None) -> List[str]:
        """Get list of missing required environment variables"""
        required = self._required_values(file_config)
        return [var for var in self.REQUIRED_VARS if not required[var]]

    def validate_environment(self, file_config: Optional[dict] = None) -> ValidationResult:
        """Comprehensive environment validation"""
        missing_vars = self.get_missing_variables(file_config)

        if missing_vars:
            return ValidationResult(
                is_valid=False,
                error_message=f"Missing required environment variables: {', '.join(missing_vars)}",
                validation_type="environment"
            )

        server_url = self._required_values(file_config)["RECIPEFLOW_SERVER_URL"]
        if not self._validate_server_url(server_url):
            return ValidationResult(
                is_valid=False,
                error_message=f"Invalid server URL format: {server_url}",
                validation_type="environment"
            )

        return ValidationResult(is_valid=True)

    def get_upload_config(self, file_config: Optional[dict] = None) -> UploadConfig:
        """Build the upload configuration; environment values win over the file"""
        validation = self.validate_environment(file_config)
        if not validation.is_valid:
            raise EnvironmentValidationError(
                validation.error_message,
                missing_vars=self.get_missing_variables(file_config)
            )

        required = self._required_values(file_config)
        config_kwargs = {param: required[var] for var, param in self.REQUIRED_VARS.items()}

        upload_section = (file_config or {}).get("upload") or {}
        for var_name, (default_value, var_type) in self.OPTIONAL_VARS.items():
            param = self._env_var_to_param(var_name)
            raw = os.getenv(var_name)
            if raw is None:
                raw = upload_section.get(self._FILE_KEYS[var_name])
            if raw is None or raw == "":
                config_kwargs[param] = default_value
                continue
            try:
                config_kwargs[param] = self._convert(raw, default_value, var_type)
            except ValueError:
                # Use default if conversion fails
                config_kwargs[param] = default_value

        return UploadConfig(**config_kwargs)

    @staticmethod
    def _convert(raw: Any, default_value: Any, var_type: Callable[[str], Any]) -> Any:
        """Convert an env string or a native YAML value to the setting type"""
        if isinstance(default_value, bool) and isinstance(raw, bool):
            return raw
        value = var_type(raw) if isinstance(raw, str) else var_type(str(raw))
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value <= 0:
            raise ValueError(f"Must be positive: {raw}")
        return value

    def _required_values(self, file_config: Optional[dict]) -> Dict[str, str]:
        server_section = (file_config or {}).get("server") or {}
        file_values = {
            "RECIPEFLOW_SERVER_URL": server_section.get("url"),
            "RECIPEFLOW_AUTH_TOKEN": None,  # never read from files
            "RECIPEFLOW_MODPACK_SLUG": server_section.get("modpack_slug"),
        }
        return {
            var: (os.getenv(var) or file_values[var] or "").strip()
            for var in self.REQUIRED_VARS
        }

    def _validate_server_url(self, url: Optional[str]) -> bool:
        """Validate server URL format"""
        if not url:
            return False

        try:
            parsed = urlparse(url)
            return parsed.scheme in ['http', 'https'] and bool(parsed.netloc)
        except Exception:
            return False

    def _env_var_to_param(self, env_var: str) -> str:
        """Convert environment variable name to parameter name"""
        # RECIPEFLOW_ICON_CHUNK_SIZE -> icon_chunk_size
        return self._PARAM_NAMES.get(env_var, env_var.replace("RECIPEFLOW_", "").lower())

    def get_environment_summary(self) -> dict:
        """Get summary of environment configuration for debugging"""
        summary = {
            "upload_enabled": self.is_upload_enabled(),
            "missing_variables": self.get_missing_variables(),
            "detected_variables": {}
        }

        # Show which variables are set (but mask the token)
        for var in self.REQUIRED_VARS:
            value = os.getenv(var)
            if value and "TOKEN" in var:
                summary["detected_variables"][var] = f"{value[:4]}...{value[-4:]}" if len(value) > 8 else "****"
            else:
                summary["detected_variables"][var] = value

        for var in self.OPTIONAL_VARS:
            value = os.getenv(var)
            if value:
                summary["detected_variables"][var] = value

        return summary
