"""
Configuration module for the luxexport pipeline.
Environment settings (vocabulary service, storage locations) loaded with python-dotenv.
"""

from .settings import (
    Config,
    ConfigurationError,
    StorageConfig,
    VocabularyServiceConfig,
)

__all__ = [
    'Config',
    'ConfigurationError',
    'StorageConfig',
    'VocabularyServiceConfig'
]
