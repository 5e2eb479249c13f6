"""
Core module initialization.
Exports configuration, logging utilities and the error taxonomy.
"""

from kebab_builder.core.config import get_settings, Settings, EnvironmentMode
from kebab_builder.core.exceptions import KebabBuilderError

__all__ = ["get_settings", "Settings", "EnvironmentMode", "KebabBuilderError"]
