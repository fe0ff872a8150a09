"""
Tests for RecipeFlow Environment Detector

Tests environment variable detection, validation, and configuration extraction
for the upload functionality.
"""

import os
import pytest
from unittest.mock import patch

from recipeflow.upload import RecipeFlowUploadManager
from recipeflow.upload.environment_detector import RecipeFlowEnvironmentDetector
from recipeflow.upload.exceptions import EnvironmentValidationError
from recipeflow.upload.models import DEFAULT_CHUNK_SIZE

REQUIRED_ENV = {
    'RECIPEFLOW_SERVER_URL': 'https://recipes.example.com',
    'RECIPEFLOW_AUTH_TOKEN': 'rf_0123456789abcdef',
    'RECIPEFLOW_MODPACK_SLUG': 'all-the-mods',
}


class TestRecipeFlowEnvironmentDetector:
    """Test cases for environment detection and validation"""

    def setup_method(self):
        """Setup for each test"""
        self.detector = RecipeFlowEnvironmentDetector()

    def test_is_upload_enabled_with_all_vars(self):
        """Test upload enabled when all required vars are present"""
        with patch.dict(os.environ, REQUIRED_ENV, clear=True):
            assert self.detector.is_upload_enabled() == True

    def test_is_upload_enabled_missing_vars(self):
        """Test upload disabled when required vars are missing"""
        with patch.dict(os.environ, {}, clear=True):
            assert self.detector.is_upload_enabled() == False

    def test_get_missing_variables(self):
        """Test identification of missing variables"""
        with patch.dict(os.environ, {
            'RECIPEFLOW_SERVER_URL': 'https://recipes.example.com'
        }, clear=True):
            missing = self.detector.get_missing_variables()
            assert missing == ['RECIPEFLOW_AUTH_TOKEN', 'RECIPEFLOW_MODPACK_SLUG']

    def test_blank_values_count_as_missing(self):
        with patch.dict(os.environ, {**REQUIRED_ENV, 'RECIPEFLOW_MODPACK_SLUG': '   '}, clear=True):
            assert self.detector.get_missing_variables() == ['RECIPEFLOW_MODPACK_SLUG']

    def test_validate_environment_success(self):
        """Test successful environment validation"""
        with patch.dict(os.environ, REQUIRED_ENV, clear=True):
            result = self.detector.validate_environment()
            assert result.is_valid == True
            assert result.error_message is None

    def test_validate_environment_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            result = self.detector.validate_environment()
            assert result.is_valid == False
            assert "Missing required environment variables" in result.error_message

    @pytest.mark.parametrize("url", ["recipes.example.com", "ftp://recipes.example.com", "https://"])
    def test_validate_environment_invalid_url(self, url):
        with patch.dict(os.environ, {**REQUIRED_ENV, 'RECIPEFLOW_SERVER_URL': url}, clear=True):
            result = self.detector.validate_environment()
            assert result.is_valid == False
            assert "Invalid server URL format" in result.error_message

    def test_get_upload_config_defaults(self):
        with patch.dict(os.environ, REQUIRED_ENV, clear=True):
            config = self.detector.get_upload_config()

        assert config.server_url == 'https://recipes.example.com'
        assert config.auth_token == 'rf_0123456789abcdef'
        assert config.modpack_slug == 'all-the-mods'
        assert config.timeout == 300
        assert config.compression_enabled is True
        assert config.debug_logging is False
        assert config.chunk_size == DEFAULT_CHUNK_SIZE
        assert config.version_override == ""

    def test_get_upload_config_optional_vars(self):
        with patch.dict(os.environ, {
            **REQUIRED_ENV,
            'RECIPEFLOW_TIMEOUT': '30',
            'RECIPEFLOW_COMPRESSION': 'false',
            'RECIPEFLOW_DEBUG': 'yes',
            'RECIPEFLOW_CHUNK_SIZE': '4096',
            'RECIPEFLOW_VERSION_OVERRIDE': '2.1.0',
        }, clear=True):
            config = self.detector.get_upload_config()

        assert config.timeout == 30.0
        assert config.compression_enabled is False
        assert config.debug_logging is True
        assert config.chunk_size == 4096
        assert config.version_override == '2.1.0'

    def test_invalid_optional_values_use_defaults(self):
        with patch.dict(os.environ, {
            **REQUIRED_ENV,
            'RECIPEFLOW_TIMEOUT': 'soon',
            'RECIPEFLOW_COMPRESSION': 'maybe',
            'RECIPEFLOW_CHUNK_SIZE': '-5',
        }, clear=True):
            config = self.detector.get_upload_config()

        assert config.timeout == 300
        assert config.compression_enabled is True
        assert config.chunk_size == DEFAULT_CHUNK_SIZE

    def test_get_upload_config_raises(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(EnvironmentValidationError) as exc_info:
                self.detector.get_upload_config()
        assert 'RECIPEFLOW_AUTH_TOKEN' in exc_info.value.missing_vars

    def test_file_config_fills_gaps(self):
        file_config = {
            'server': {'url': 'https://file.example.com', 'modpack_slug': 'file-pack'},
            'upload': {'timeout': 60, 'compression': False, 'chunk_size': 2048},
        }
        with patch.dict(os.environ, {'RECIPEFLOW_AUTH_TOKEN': 'tok'}, clear=True):
            config = self.detector.get_upload_config(file_config)

        assert config.server_url == 'https://file.example.com'
        assert config.modpack_slug == 'file-pack'
        assert config.timeout == 60.0
        assert config.compression_enabled is False
        assert config.chunk_size == 2048

    def test_environment_wins_over_file(self):
        file_config = {
            'server': {'url': 'https://file.example.com', 'modpack_slug': 'file-pack'},
            'upload': {'chunk_size': 2048},
        }
        with patch.dict(os.environ, {**REQUIRED_ENV, 'RECIPEFLOW_CHUNK_SIZE': '8192'}, clear=True):
            config = self.detector.get_upload_config(file_config)

        assert config.server_url == 'https://recipes.example.com'
        assert config.chunk_size == 8192

    def test_token_never_read_from_file(self):
        file_config = {'server': {'url': 'https://x.example.com', 'modpack_slug': 'p', 'auth_token': 'leak'}}
        with patch.dict(os.environ, {}, clear=True):
            assert self.detector.get_missing_variables(file_config) == ['RECIPEFLOW_AUTH_TOKEN']

    def test_environment_summary_masks_token(self):
        with patch.dict(os.environ, {**REQUIRED_ENV, 'RECIPEFLOW_DEBUG': 'true'}, clear=True):
            summary = self.detector.get_environment_summary()

        assert summary['upload_enabled'] == True
        assert summary['detected_variables']['RECIPEFLOW_AUTH_TOKEN'] == 'rf_0...cdef'
        assert summary['detected_variables']['RECIPEFLOW_DEBUG'] == 'true'


class TestRecipeFlowUploadManager:

    def test_config_raises_when_not_configured(self):
        with patch.dict(os.environ, {}, clear=True):
            manager = RecipeFlowUploadManager()
            assert manager.is_upload_enabled() == False
            with pytest.raises(EnvironmentValidationError):
                manager.config

    def test_chunk_size_per_kind(self):
        with patch.dict(os.environ, {
            **REQUIRED_ENV,
            'RECIPEFLOW_CHUNK_SIZE': '1000',
            'RECIPEFLOW_ICON_CHUNK_SIZE': '5000',
        }, clear=True):
            manager = RecipeFlowUploadManager()
            assert manager._chunk_size_for('recipes') == 1000
            assert manager._chunk_size_for('icons') == 5000

    def test_items_chunk_size(self):
        with patch.dict(os.environ, REQUIRED_ENV, clear=True):
            manager = RecipeFlowUploadManager()
            assert manager._chunk_size_for('items') == 2 * 1024 * 1024
            assert manager._chunk_size_for('recipes') == 1024 * 1024

        with patch.dict(os.environ, {**REQUIRED_ENV, 'RECIPEFLOW_ITEMS_CHUNK_SIZE': '3000'}, clear=True):
            assert RecipeFlowUploadManager()._chunk_size_for('items') == 3000
