"""Core types shared by every release stage."""

from .config import ConfigError, RunConfig, Settings, load_settings
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "ConfigError",
    "RunConfig",
    "Settings",
    "load_settings",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
