"""
Configuration package for platform-specific settings.

Provides the shared configuration and the Raspberry Pi implementation.
"""
from .base import BaseConfiguration, ConfigurationError
from .pi import PiConfiguration

__all__ = [
    'BaseConfiguration',
    'ConfigurationError',
    'PiConfiguration'
]
