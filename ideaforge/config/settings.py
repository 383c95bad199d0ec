"""
Service Configuration - Gemini, Firestore and pipeline behavior
All settings are read from the environment (optionally via a .env file).
"""

import logging
import os
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, SecretStr


class StoreBackend(str, Enum):
    """Supported project store backends."""
    FIRESTORE = "firestore"
    MEMORY = "memory"


# ============================================================================
# Model Definitions
# ============================================================================

GEMINI_MODELS: Dict[str, Dict[str, Any]] = {
    "gemini-2.5-flash": {
        "name": "Gemini 2.5 Flash",
        "description": "Fast default for interview turns and structured stages",
        "context_window": 1000000,
        "max_output": 65536,
        "supports_json_schema": True,
    },
    "gemini-2.5-pro": {
        "name": "Gemini 2.5 Pro",
        "description": "Slower, deeper reasoning for research and branding",
        "context_window": 1000000,
        "max_output": 65536,
        "supports_json_schema": True,
    },
    "gemini-2.5-flash-lite": {
        "name": "Gemini 2.5 Flash Lite",
        "description": "Cheapest option, fine for short interviews",
        "context_window": 1000000,
        "max_output": 65536,
        "supports_json_schema": True,
    },
}


# ============================================================================
# Configuration Models
# ============================================================================

class GeminiConfig(BaseModel):
    """Google Gemini configuration."""
    api_key: SecretStr
    model: str = "gemini-2.5-flash"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=120, gt=0, le=600)

    @property
    def available_models(self) -> Dict[str, Dict[str, Any]]:
        return GEMINI_MODELS


class FirestoreConfig(BaseModel):
    """Firestore document store configuration."""
    project_id: Optional[str] = None
    database_id: str = "(default)"
    credentials_path: Optional[str] = None
    collection: str = "projects"


class PipelineConfig(BaseModel):
    """Behavior of the chat flow and stage runs."""
    summary_threshold_turns: int = Field(default=4, ge=1)
    rolling_brief: bool = Field(
        default=False,
        description="Regenerate the idea brief on every turn even after research has run"
    )
    serialize_project_runs: bool = True
    strict_schema_validation: bool = False
    recent_runs_limit: int = Field(default=10, ge=1, le=100)


class ServerConfig(BaseModel):
    """HTTP server settings."""
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = "/api"
    allowed_origins: List[str] = Field(default_factory=lambda: [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ])
    chat_rate_limit: str = "30/minute"
    stage_rate_limit: str = "10/minute"
    rate_limits_enabled: bool = True
    log_level: str = "INFO"


class AppSettings(BaseModel):
    """Master configuration."""

    gemini: Optional[GeminiConfig] = None
    firestore: FirestoreConfig = Field(default_factory=FirestoreConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    store_backend: StoreBackend = StoreBackend.MEMORY

    def validate_settings(self) -> List[str]:
        """Collect configuration problems that must stop startup."""
        errors = []
        if not self.gemini:
            errors.append("GEMINI_API_KEY is not set")
        elif not self.gemini.api_key.get_secret_value().strip():
            errors.append("GEMINI_API_KEY is empty")
        elif self.gemini.model not in self.gemini.available_models:
            errors.append(f"GEMINI_MODEL {self.gemini.model} is not a supported model")

        if self.store_backend == StoreBackend.FIRESTORE and not self.firestore.project_id:
            errors.append("GCP_PROJECT_ID is required for the firestore store backend")
        return errors


# ============================================================================
# Helper Functions
# ============================================================================

def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def create_default_config_from_env() -> AppSettings:
    """Create configuration from environment variables."""
    config = AppSettings()

    # Gemini
    if os.getenv("GEMINI_API_KEY"):
        config.gemini = GeminiConfig(
            api_key=SecretStr(os.getenv("GEMINI_API_KEY")),
            model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
            temperature=float(os.getenv("GENERATION_TEMPERATURE", "0.7")),
            timeout_seconds=float(os.getenv("GENERATION_TIMEOUT_SECONDS", "120")),
        )

    # Firestore
    config.firestore = FirestoreConfig(
        project_id=os.getenv("GCP_PROJECT_ID") or None,
        database_id=os.getenv("FIRESTORE_DATABASE_ID", "(default)"),
        credentials_path=os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or None,
    )
    backend = os.getenv("STORE_BACKEND")
    if backend:
        config.store_backend = StoreBackend(backend.strip().lower())
    elif config.firestore.project_id:
        config.store_backend = StoreBackend.FIRESTORE

    # Pipeline
    config.pipeline = PipelineConfig(
        summary_threshold_turns=int(os.getenv("SUMMARY_THRESHOLD_TURNS", "4")),
        rolling_brief=_env_bool("ROLLING_BRIEF", False),
        serialize_project_runs=_env_bool("SERIALIZE_PROJECT_RUNS", True),
        strict_schema_validation=_env_bool("STRICT_SCHEMA_VALIDATION", False),
        recent_runs_limit=int(os.getenv("RECENT_RUNS_LIMIT", "10")),
    )

    # Server
    server = ServerConfig(
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
        api_prefix=os.getenv("API_PREFIX", "/api"),
        chat_rate_limit=os.getenv("CHAT_RATE_LIMIT", "30/minute"),
        stage_rate_limit=os.getenv("STAGE_RATE_LIMIT", "10/minute"),
        rate_limits_enabled=_env_bool("RATE_LIMITS_ENABLED", True),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
    if os.getenv("ALLOWED_ORIGINS"):
        server.allowed_origins = [
            origin.strip() for origin in os.getenv("ALLOWED_ORIGINS").split(",") if origin.strip()
        ]
    config.server = server

    return config


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stream handler to the package logger once."""
    logger = logging.getLogger("ideaforge")
    logger.setLevel(level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        logger.addHandler(handler)
    return logger
