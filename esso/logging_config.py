"""
Custom logging configuration that keeps tokens out of access logs
"""

import logging
import re
from typing import Any, Dict


class TokenQueryFilter(logging.Filter):
    """Mask the token query parameter in uvicorn access logs."""

    def __init__(self, field_name: str = "authorization"):
        super().__init__()
        self._pattern = re.compile(rf"([?&]{re.escape(field_name)}=)[^&\s\"]*")

    def mask(self, text: str) -> str:
        return self._pattern.sub(r"\1***", text)

    def filter(self, record: logging.LogRecord) -> bool:
        """Rewrite uvicorn access records in place; never drops a record."""
        if record.name == "uvicorn.access":
            if isinstance(record.args, tuple):
                record.args = tuple(
                    self.mask(arg) if isinstance(arg, str) else arg for arg in record.args
                )
            if isinstance(record.msg, str):
                record.msg = self.mask(record.msg)
        return True


def get_logging_config(field_name: str = "authorization", log_level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with token masking on access logs."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "token_query_filter": {
                "()": TokenQueryFilter,
                "field_name": field_name
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "access": {
                "format": "%(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout"
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["token_query_filter"]  # Apply filter to access logs
            }
        },
        "loggers": {
            "esso": {
                "handlers": ["default"],
                "level": log_level,
                "propagate": False
            },
            "uvicorn": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False
            },
            "uvicorn.error": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False
            },
            "uvicorn.access": {
                "handlers": ["access"],
                "level": "INFO",
                "propagate": False
            }
        },
        "root": {
            "level": "INFO",
            "handlers": ["default"]
        }
    }
