"""Business profile and keyword targets."""

from .config import (
    DEFAULT_KEYWORDS,
    BusinessConfig,
    ConfigurationError,
    TargetKeywords,
    require_config,
)

__all__ = [
    "DEFAULT_KEYWORDS",
    "BusinessConfig",
    "ConfigurationError",
    "TargetKeywords",
    "require_config",
]
