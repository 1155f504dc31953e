"""
Configuration loading.
"""

from .settings import DatabaseSettings, PipelineSettings

__all__ = ["DatabaseSettings", "PipelineSettings"]
