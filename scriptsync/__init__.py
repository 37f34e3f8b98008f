"""ScriptSync: clip ingestion and script-to-clip matching."""

__version__ = "0.1.0"
