"""Core domain types and logic."""

from .config import Config, ConfigError, load_config, load_config_or_default
from .errors import ErrorCode
from .resolution import Resolution, resolve
from .result import Err, Ok, Result
from .sync_type import SyncType, parse_sync_type

__all__ = [
    # config
    "Config",
    "ConfigError",
    "load_config",
    "load_config_or_default",
    # errors
    "ErrorCode",
    # resolution
    "Resolution",
    "resolve",
    # result
    "Err",
    "Ok",
    "Result",
    # sync type
    "SyncType",
    "parse_sync_type",
]
