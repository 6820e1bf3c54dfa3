"""Core domain types and logic."""

from .config import Config, load_config
from .descriptor import BuildDescriptor, resolve, to_manifest_placeholders
from .errors import ConfigError, ErrorCode
from .result import Err, Ok, Result
from .variants import BuildVariant, LanguageLevel, ToolchainConfig, get_variant

__all__ = [
    # config
    "Config",
    "load_config",
    # descriptor
    "BuildDescriptor",
    "resolve",
    "to_manifest_placeholders",
    # errors
    "ConfigError",
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    # variants
    "BuildVariant",
    "LanguageLevel",
    "ToolchainConfig",
    "get_variant",
]
