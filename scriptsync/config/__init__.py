from .settings import (
    ScriptSyncConfig,
    DatabaseConfig,
    StorageConfig,
    VisionConfig,
    EmbeddingConfig,
    WorkerConfig,
    LoggingConfig,
)

__all__ = [
    "ScriptSyncConfig",
    "DatabaseConfig",
    "StorageConfig",
    "VisionConfig",
    "EmbeddingConfig",
    "WorkerConfig",
    "LoggingConfig",
]
