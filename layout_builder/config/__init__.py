"""Configuration files (YAML) and the helper that loads them.

Packaged defaults live in this folder; :class:`ConfigManager` merges them
with optional user overrides.
"""

from .manager import ConfigManager

__all__ = [
    "ConfigManager",
]
