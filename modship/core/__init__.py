"""Core domain types and logic."""

from .capability import Available, Capability, Unavailable
from .config import Config, ConfigError, load_config, load_config_or_default
from .errors import ErrorCode
from .result import Err, Escalate, Ok, Result, TierResult, is_err, is_ok

__all__ = [
    # capability
    "Available",
    "Capability",
    "Unavailable",
    # config
    "Config",
    "ConfigError",
    "load_config",
    "load_config_or_default",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Escalate",
    "Ok",
    "Result",
    "TierResult",
    "is_err",
    "is_ok",
]
