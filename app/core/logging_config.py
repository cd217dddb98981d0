import logging
from logging.config import dictConfig
from pathlib import Path
from typing import Optional

from app.core.config import Settings


class LoggingConfig:
    """Logging configuration for the application."""

    @staticmethod
    def setup_logging(settings: Settings, log_dir: Optional[str] = None) -> logging.Logger:
        """Setup logging configuration.

        Args:
            settings (Settings): Application settings (level, file, JSON output).
            log_dir (str, optional): Directory to store log files. Defaults to current directory.

        Returns:
            Logger: Configured logger instance.
        """
        log_level = settings.log_level.upper()
        handler_names = ["console"]

        # Configure log format based on environment
        is_development = settings.environment.lower() == "development"
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s" if is_development else "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        formatter = "json" if settings.json_logging else "default"

        handlers = {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": formatter,
            },
        }

        # El archivo rotativo solo se activa si LOG_FILE está definido
        if settings.log_file:
            if log_dir:
                log_path = Path(log_dir)
                log_path.mkdir(parents=True, exist_ok=True)
                log_file = str(log_path / settings.log_file)
            else:
                log_file = settings.log_file
            handlers["file"] = {
                "class": "logging.handlers.RotatingFileHandler",
                "level": log_level,
                "formatter": formatter,
                "filename": log_file,
                "maxBytes": settings.log_max_bytes,
                "backupCount": settings.log_backup_count,
                "encoding": "utf8",
            }
            handler_names.append("file")

        log_config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": log_format,
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "json": {
                    "()": "pythonjsonlogger.json.JsonFormatter",
                    "format": "%(asctime)s %(name)s %(levelname)s %(module)s %(lineno)d %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": handlers,
            "loggers": {
                "app": {
                    "level": log_level,
                    "handlers": handler_names,
                    "propagate": False,
                },
                "uvicorn": {
                    "level": log_level,
                    "handlers": handler_names,
                    "propagate": False,
                },
                "httpx": {
                    "level": "WARNING",
                    "handlers": handler_names,
                    "propagate": False,
                },
            },
            "root": {
                "level": log_level,
                "handlers": handler_names,
            },
        }

        dictConfig(log_config)
        return logging.getLogger("app")
