"""flyrepo core — configuration."""

from flyrepo.core.config import Config, config_properties

__all__ = ["Config", "config_properties"]
