"""
Configuration for target platform resolution.

Loads configuration from environment variables.
"""
import os
from enum import Enum

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ReferencedRepositoryMode(str, Enum):
    """Whether references declared by a repository are followed."""
    INCLUDE = "include"
    IGNORE = "ignore"


def _env_bool(name: str, default: str) -> bool:
    value = os.getenv(name, default).strip().lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no", ""):
        return False
    raise ValueError(f"{name} must be true or false, got: {value}")


class ResolverConfig:
    """Configuration for the resolver and its repository transport."""
    
    def __init__(self):
        """Load configuration from environment."""
        # Default for target locations that don't say whether to follow references
        mode = os.getenv("TARGETPLATFORM_REFERENCED_REPOSITORIES", "include").strip().lower()
        try:
            self.referenced_mode = ReferencedRepositoryMode(mode)
        except ValueError:
            raise ValueError(
                f"TARGETPLATFORM_REFERENCED_REPOSITORIES must be include or ignore, got: {mode}"
            )
        
        # HTTP transport timeout in seconds
        timeout = os.getenv("TARGETPLATFORM_HTTP_TIMEOUT", "30")
        try:
            self.http_timeout = float(timeout)
        except ValueError:
            raise ValueError(f"TARGETPLATFORM_HTTP_TIMEOUT must be a number, got: {timeout}")
        if self.http_timeout <= 0:
            raise ValueError(f"TARGETPLATFORM_HTTP_TIMEOUT must be positive, got: {timeout}")
        
        # Re-raise the first failure instead of retrying on the next call
        self.cache_failures = _env_bool("TARGETPLATFORM_CACHE_FAILURES", "false")
        
        self.log_level = os.getenv("TARGETPLATFORM_LOG_LEVEL", "WARNING").strip().upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"TARGETPLATFORM_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got: {self.log_level}"
            )


def get_config() -> ResolverConfig:
    """Get resolver configuration."""
    return ResolverConfig()
