"""
Environment configuration for the luxexport pipeline.

Usage:
    from luxexport.config.settings import Config
    config = Config()
    client = config.create_vocabulary_client()

Environment Variables:
    LUXEXPORT_VOCABULARY_API_URL: Base URL of the vocabulary REST API
    LUXEXPORT_VOCABULARY_TIMEOUT: Request timeout in seconds (default 30)
    LUXEXPORT_METADATA_FOLDER: Folder holding one descriptor folder per document
    LUXEXPORT_RULESET: Path to the ruleset YAML file
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from ..vocabulary import HttpVocabularyClient

logger = logging.getLogger(__name__)


@dataclass
class VocabularyServiceConfig:
    """Vocabulary REST API configuration."""
    api_url: Optional[str]
    timeout: float = 30.0

    def __post_init__(self):
        """Validate vocabulary service configuration."""
        if self.api_url and not self.api_url.startswith(('http://', 'https://')):
            raise ValueError("Vocabulary API URL must include protocol (https://)")

        if self.timeout <= 0:
            raise ValueError("Vocabulary timeout must be positive")


@dataclass
class StorageConfig:
    """Document and ruleset locations."""
    metadata_folder: Optional[str] = None
    ruleset_path: Optional[str] = None

    def __post_init__(self):
        """Validate storage configuration."""
        if self.ruleset_path and Path(self.ruleset_path).suffix.lower() not in ('.yml', '.yaml'):
            raise ValueError("Ruleset must be a YAML file (.yml or .yaml)")


class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete."""
    pass


class Config:
    """
    Environment configuration for the export pipeline.

    Environment variables loaded (in order of preference):
    1. Explicit environment file passed to constructor
    2. .env.{ENVIRONMENT} (where ENVIRONMENT=development|production|staging)
    3. .env file in project root
    4. System environment variables

    Export behaviour (flags and rules) is configured separately through the
    export YAML file, see luxexport.config_loader.
    """

    def __init__(self,
                 environment: Optional[str] = None,
                 env_file: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            environment: Target environment (development|staging|production)
            env_file: Explicit path to environment file
        """
        self.environment = environment or os.getenv("ENVIRONMENT", "development")
        self.project_root = self._find_project_root()

        self._load_environment_variables(env_file)

        self._load_vocabulary_config()
        self._load_storage_config()

    def _find_project_root(self) -> Path:
        """Find project root directory containing pyproject.toml or .git."""
        current = Path(__file__).resolve()

        for parent in current.parents:
            if any((parent / marker).exists() for marker in ['pyproject.toml', '.git']):
                return parent

        # Fallback to current working directory
        return Path.cwd()

    def _load_environment_variables(self, env_file: Path | None) -> None:
        """Load environment variables from appropriate source."""
        loaded_files = []

        if env_file:
            if env_file.exists():
                load_dotenv(env_file)
                loaded_files.append(str(env_file))
                logger.info(f"Loaded configuration from {env_file}")
            else:
                raise ConfigurationError(f"Specified env file not found: {env_file}")

        else:
            env_specific_file = self.project_root / f".env.{self.environment}"
            if env_specific_file.exists():
                load_dotenv(env_specific_file)
                loaded_files.append(str(env_specific_file))
                logger.info(f"Loaded environment-specific config: {env_specific_file}")

            generic_env_file = self.project_root / ".env"
            if generic_env_file.exists():
                load_dotenv(generic_env_file)
                loaded_files.append(str(generic_env_file))
                logger.info(f"Loaded generic config: {generic_env_file}")

        if not loaded_files:
            logger.debug("No .env files found, using system environment variables only")

        self._loaded_env_files = loaded_files
        logger.debug(f"Project root: {self.project_root}")
        logger.debug(f"Environment: {self.environment}")

    def _load_vocabulary_config(self) -> None:
        """Load vocabulary service configuration."""
        api_url = os.getenv("LUXEXPORT_VOCABULARY_API_URL")
        try:
            timeout = float(os.getenv("LUXEXPORT_VOCABULARY_TIMEOUT", "30"))
            self.vocabulary = VocabularyServiceConfig(api_url=api_url, timeout=timeout)
        except ValueError as e:
            raise ConfigurationError(f"Invalid vocabulary configuration: {e}")

    def _load_storage_config(self) -> None:
        """Load document and ruleset locations."""
        try:
            self.storage = StorageConfig(
                metadata_folder=os.getenv("LUXEXPORT_METADATA_FOLDER"),
                ruleset_path=os.getenv("LUXEXPORT_RULESET"),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid storage configuration: {e}")

    def create_vocabulary_client(self) -> HttpVocabularyClient:
        """
        Create the vocabulary service client.

        Raises:
            ConfigurationError: If no vocabulary API URL is configured
        """
        if not self.vocabulary.api_url:
            raise ConfigurationError(
                "Missing LUXEXPORT_VOCABULARY_API_URL.\n"
                "Please set it in your .env file:\n"
                "  LUXEXPORT_VOCABULARY_API_URL=https://vocabulary.example.org/api/v1"
            )
        return HttpVocabularyClient(self.vocabulary.api_url, timeout=self.vocabulary.timeout)

    def get_summary(self) -> dict[str, Any]:
        """Configuration summary for logging (no secrets are stored here)."""
        return {
            'environment': self.environment,
            'loaded_env_files': self._loaded_env_files,
            'vocabulary_api_url': self.vocabulary.api_url,
            'vocabulary_timeout': self.vocabulary.timeout,
            'metadata_folder': self.storage.metadata_folder,
            'ruleset': self.storage.ruleset_path,
        }

    def __repr__(self) -> str:
        return (
            f"Config(environment={self.environment}, "
            f"vocabulary={self.vocabulary.api_url})"
        )
