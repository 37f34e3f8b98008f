import sys
from loguru import logger


class LoggerManager:
    def __init__(self):
        self.console_sink_id = None
        self.file_sink_id = None

        # Always remove the default handler
        logger.remove()

    def enable_console(self, level: str = "INFO", serialize: bool = False):
        if self.console_sink_id is None:
            self.console_sink_id = logger.add(
                sys.stdout, level=level, colorize=not serialize, serialize=serialize
            )

    def disable_console(self):
        if self.console_sink_id is not None:
            logger.remove(self.console_sink_id)
            self.console_sink_id = None

    def enable_file(self, path: str, level: str = "INFO", rotation: str = "10 MB",
                    retention_days: int = 7, serialize: bool = False):
        if self.file_sink_id is None:
            self.file_sink_id = logger.add(
                path,
                level=level,
                rotation=rotation,
                retention=f"{retention_days} days",
                serialize=serialize,
                enqueue=True,
            )

    def configure(self, config) -> None:
        """Apply a LoggingConfig: console sink always, file sink when enabled."""
        self.disable_console()
        self.enable_console(level=config.level.upper(), serialize=config.enable_json)
        if config.enable_file_logging and config.log_file:
            self.enable_file(
                config.log_file,
                level=config.level.upper(),
                rotation=config.max_file_size,
                retention_days=config.retention_days,
                serialize=config.enable_json,
            )


log_manager = LoggerManager()


def configure_logging(config) -> LoggerManager:
    """Configure the shared loguru sinks from a LoggingConfig."""
    log_manager.configure(config)
    return log_manager
