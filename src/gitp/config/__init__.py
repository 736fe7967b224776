"""
Configuration handling for gitp.

The user-level configuration file is read once per invocation and
passed explicitly to the components that need it. See
:mod:`gitp.config.loader` for implementation details.
"""

from .loader import Config, ConfigError, load_config, save_config  # noqa: F401
