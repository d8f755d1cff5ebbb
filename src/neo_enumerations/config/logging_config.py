"""Centralized logging configuration for neo-enumerations.

Provides consistent, configurable logging driven by EnumerationSettings
(NEO_ENUM_LOG_LEVEL, NEO_ENUM_LOG_FORMAT, NEO_ENUM_ENABLE_STORE_LOGGING).
"""

import logging
import logging.config
from typing import Dict, Any, Optional
from enum import Enum

from .settings import EnumerationSettings, get_settings


class LogLevel(str, Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log format options."""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


FORMAT_STRINGS: Dict[str, str] = {
    LogFormat.SIMPLE.value: "%(asctime)s - %(levelname)s - %(message)s",
    LogFormat.DETAILED.value: "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
    LogFormat.JSON.value: '{"time":"%(asctime)s","level":"%(levelname)s","module":"%(name)s","message":"%(message)s"}',
}


class LoggingConfig:
    """Centralized logging configuration manager."""
    
    # Modules that should only log errors
    ERROR_ONLY_MODULES = [
        "asyncio",
    ]
    
    STORE_MODULES = [
        "neo_enumerations.features.enumerations.repositories",
        "asyncpg",
    ]
    
    @classmethod
    def build_config(cls, settings: Optional[EnumerationSettings] = None) -> Dict[str, Any]:
        """Build a dictConfig mapping from the logging settings."""
        settings = settings or get_settings()
        log_level = settings.log_level.upper()
        log_format = settings.log_format.lower()
        enable_store_logging = settings.enable_store_logging
        
        if log_level not in LogLevel.__members__:
            log_level = LogLevel.INFO.value
        format_string = FORMAT_STRINGS.get(log_format, FORMAT_STRINGS[LogFormat.SIMPLE.value])
        
        logging_config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": format_string,
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": {
                "neo_enumerations": {
                    "level": log_level,
                    "handlers": ["console"],
                    "propagate": False,
                },
            }
        }
        
        for module in cls.ERROR_ONLY_MODULES:
            logging_config["loggers"][module] = {
                "level": "ERROR",
                "handlers": ["console"],
                "propagate": False,
            }
        
        if not enable_store_logging:
            for module in cls.STORE_MODULES:
                logging_config["loggers"][module] = {
                    "level": "WARNING" if log_level != "DEBUG" else "DEBUG",
                    "handlers": ["console"],
                    "propagate": False,
                }
        
        return logging_config
    
    @classmethod
    def configure(cls, settings: Optional[EnumerationSettings] = None) -> None:
        """Configure logging from the logging settings."""
        logging_config = cls.build_config(settings)
        logging.config.dictConfig(logging_config)
        
        logger = logging.getLogger(__name__)
        logger.debug(f"Logging configured: level={logging_config['handlers']['console']['level']}")
    
    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a configured logger for the given module name."""
        return logging.getLogger(name)
    
    @classmethod
    def set_module_level(cls, module_name: str, level: str) -> None:
        """Set log level for a specific module.
        
        Args:
            module_name: Name of the module
            level: Log level to set
        """
        logger = logging.getLogger(module_name)
        logger.setLevel(getattr(logging, level.upper()))


def setup_logging(settings: Optional[EnumerationSettings] = None) -> None:
    """Setup logging configuration from EnumerationSettings.
    
    Call once at application startup; the library itself never configures
    handlers on import.
    """
    LoggingConfig.configure(settings)


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger.
    
    Args:
        name: Module name (usually __name__)
        
    Returns:
        Configured logger instance
    """
    return LoggingConfig.get_logger(name)
