from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, PrivateAttr
from typing import Optional


def _settings_config(prefix: str) -> SettingsConfigDict:
    return SettingsConfigDict(
        env_prefix=prefix,
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )


class DatabaseConfig(BaseSettings):
    """Relational store configuration (any async SQLAlchemy URL)."""

    url: str = Field(default="sqlite+aiosqlite:///./scriptsync.db")
    echo: bool = Field(default=False)
    create_schema: bool = Field(default=False)

    model_config = _settings_config("DATABASE_")


class StorageConfig(BaseSettings):
    """Object store configuration."""

    provider: str = Field(default="local")
    base_path: str = Field(default="./local_storage")
    connection_string: Optional[str] = Field(default=None)
    account_url: Optional[str] = Field(default=None)
    use_managed_identity: bool = Field(default=True)
    clips_bucket: str = Field(default="clips")
    frames_bucket: str = Field(default="frames")

    model_config = _settings_config("STORAGE_")


class VisionConfig(BaseSettings):
    """Vision-language model configuration used for clip tagging."""

    provider: str = Field(default="openai")
    api_key: Optional[str] = Field(default=None)
    endpoint: Optional[str] = Field(default=None)
    model_name: str = Field(default="gpt-4o")
    deployment_name: Optional[str] = Field(default=None)
    api_version: str = Field(default="2024-08-01-preview")
    use_managed_identity: bool = Field(default=False)
    timeout: int = Field(default=200)
    # SDK-level transport retries; tagging has its own backoff loop.
    max_retries: int = Field(default=0)
    max_tokens: int = Field(default=1024)
    temperature: float = Field(default=0.0)

    model_config = _settings_config("VISION_")


class EmbeddingConfig(BaseSettings):
    """Text-embedding model configuration."""

    provider: str = Field(default="openai")
    api_key: Optional[str] = Field(default=None)
    endpoint: Optional[str] = Field(default=None)
    embedding_model: str = Field(default="text-embedding-3-small")
    deployment_name: Optional[str] = Field(default=None)
    api_version: str = Field(default="2024-08-01-preview")
    use_managed_identity: bool = Field(default=False)
    dimensions: int = Field(default=1536, ge=1)
    timeout: int = Field(default=200)
    max_retries: int = Field(default=2)

    model_config = _settings_config("EMBEDDING_")


class WorkerConfig(BaseSettings):
    """Poll loop, ingestion and matching parameters."""

    poll_interval_ms: int = Field(default=5000, ge=1, validation_alias="POLL_INTERVAL_MS")
    batch_size: int = Field(default=5, ge=1)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001, validation_alias="PORT")
    api_key: Optional[str] = Field(default=None, validation_alias="WORKER_API_KEY")

    duration_cap_seconds: float = Field(default=5 * 60 * 60)
    frame_interval_seconds: float = Field(default=2.0, gt=0)
    frame_count_slack: int = Field(default=10, ge=0)
    thumbnail_offset_ratio: float = Field(default=0.1, ge=0)
    max_frames_per_call: int = Field(default=20, ge=1)
    tagging_max_attempts: int = Field(default=3, ge=1)
    retry_base_delay_ms: int = Field(default=2000, ge=0)
    top_k: int = Field(default=5, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="WORKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)
    enable_json: bool = Field(default=False)
    enable_file_logging: bool = Field(default=False)
    max_file_size: str = Field(default="10 MB")
    retention_days: int = Field(default=7)

    model_config = _settings_config("LOG_")


class ScriptSyncConfig(BaseSettings):
    """Main configuration class."""

    app_name: str = Field(default="ScriptSync Worker", validation_alias="APP_NAME")
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # Sub-configurations are loaded lazily on first access
    _database: Optional[DatabaseConfig] = PrivateAttr(default=None)
    _storage: Optional[StorageConfig] = PrivateAttr(default=None)
    _vision: Optional[VisionConfig] = PrivateAttr(default=None)
    _embedding: Optional[EmbeddingConfig] = PrivateAttr(default=None)
    _worker: Optional[WorkerConfig] = PrivateAttr(default=None)
    _logging: Optional[LoggingConfig] = PrivateAttr(default=None)

    @property
    def database(self) -> DatabaseConfig:
        if self._database is None:
            self._database = DatabaseConfig()
        return self._database

    @property
    def storage(self) -> StorageConfig:
        if self._storage is None:
            self._storage = StorageConfig()
        return self._storage

    @property
    def vision(self) -> VisionConfig:
        if self._vision is None:
            self._vision = VisionConfig()
        return self._vision

    @property
    def embedding(self) -> EmbeddingConfig:
        if self._embedding is None:
            self._embedding = EmbeddingConfig()
        return self._embedding

    @property
    def worker(self) -> WorkerConfig:
        if self._worker is None:
            self._worker = WorkerConfig()
        return self._worker

    @property
    def logging(self) -> LoggingConfig:
        if self._logging is None:
            self._logging = LoggingConfig()
        return self._logging
