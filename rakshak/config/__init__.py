# Config Package
"""
Environment-driven configuration for the decision service.

Usage:
    from rakshak.config import get_config

    config = get_config()
    config.reasoning.provider
"""

from rakshak.config.settings import Config, get_config, reload_config

__all__ = ["Config", "get_config", "reload_config"]
