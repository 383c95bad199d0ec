"""
IdeaForge Configuration Module
Gemini, Firestore, pipeline and server settings.
"""

from .settings import (
    # Model Definitions
    GEMINI_MODELS,
    # Configuration Models
    AppSettings,
    FirestoreConfig,
    GeminiConfig,
    PipelineConfig,
    ServerConfig,
    # Enums
    StoreBackend,
    # Helper Functions
    configure_logging,
    create_default_config_from_env,
)

__all__ = [
    "StoreBackend",
    "GEMINI_MODELS",
    "GeminiConfig",
    "FirestoreConfig",
    "PipelineConfig",
    "ServerConfig",
    "AppSettings",
    "configure_logging",
    "create_default_config_from_env",
]
